"""StateSaver: capture and restore named snapshots of an object's fields.

The public entry points live on :class:`statesaver.saver.StateSaver`:
``capture``, ``apply`` and ``list_names``. Everything under
``statesaver.core`` is the engine those calls are built on.
"""

from __future__ import annotations

from statesaver.saver import ApplyReport, StateSaver

__all__ = ["ApplyReport", "StateSaver", "__version__"]
__version__ = "0.1.0"
