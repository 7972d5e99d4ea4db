"""Top-level package for Bucks2Bar, a local income & expense tracker.

The primary modules are:

* ``store`` – the session's transaction collection and view state
* ``analytics`` – summary totals, monthly series, category and budget aggregations
* ``ingestion`` / ``export`` – CSV and JSON import and export
* ``storage`` – persistence of transactions, budgets and preferences
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run bucks2bar/dashboard.py
```
"""

from . import analytics  # noqa: F401  # re-exported for convenience
from . import export  # noqa: F401  # re-exported for convenience
from . import ingestion  # noqa: F401  # re-exported for convenience
from . import storage  # noqa: F401  # re-exported for convenience
from . import store  # noqa: F401  # re-exported for convenience

__version__ = "1.0.0"

__all__ = ["analytics", "export", "ingestion", "storage", "store"]
