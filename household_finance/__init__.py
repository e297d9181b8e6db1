"""Top-level package for the household finance engine.

The primary modules are:

* ``models`` – immutable records for the ledger, profile and derived views
* ``aggregation`` – totals, groupings and monthly series over the ledger
* ``salary_cycle``, ``budget``, ``insights`` and ``forecasting`` – the
  analytics built on top of the aggregations
* ``engine`` – :func:`derive`, which rebuilds every series from a snapshot
* ``stores`` – JSON-backed repositories for the ledger, profile and goals
* ``visualization`` – functions that generate Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run household_finance/dashboard.py
```
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .engine import ai_payload, derive
from .models import DerivedView, Snapshot
from .stores import load_snapshot

__version__ = "0.1.0"

__all__ = [
    "aggregation",
    "visualization",
    "derive",
    "ai_payload",
    "load_snapshot",
    "DerivedView",
    "Snapshot",
]
