"""Core package initializer for StateSaver.

Submodules are imported explicitly by callers, e.g.:
    from statesaver.core.settings import settings, load_settings, Settings, get_logger
    from statesaver.core.store import SnapshotStore
"""

from __future__ import annotations

__all__ = ["__doc__"]
