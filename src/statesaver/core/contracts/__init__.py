"""Pydantic contracts for everything StateSaver writes to disk.

- `encoded`  : fixed-shape records for composite field values.
- `snapshot` : snapshots, snapshot groups and the store document.
"""

from __future__ import annotations

__all__ = ["__doc__"]
