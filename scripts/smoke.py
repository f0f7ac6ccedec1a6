# scripts/smoke.py
"""
Smoke script for the StateSaver capture/apply cycle.

Usage
-----
1. Use a throwaway store in the system temp dir:
    $ uv run python scripts/smoke.py

2. Use a specific store file (kept afterwards for `statesaver show`):
    $ uv run python scripts/smoke.py --store StateData.json
"""

import argparse
import logging
import sys
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from statesaver import StateSaver
from statesaver.core.store import SnapshotStore
from statesaver.core.values import Color, Transform, Vector3

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)


class Mode(Enum):
    IDLE = 0
    RUN = 1
    JUMP = 2


@dataclass
class Player:
    speed: float = 0.0
    label: str = ""
    count: int = 0
    mode: Mode = Mode.IDLE
    tint: Color = field(default_factory=Color)
    spawn: Vector3 = field(default_factory=Vector3)
    transform: Transform = field(default_factory=Transform)


def main() -> int:
    parser = argparse.ArgumentParser(description="Capture and apply one snapshot.")
    parser.add_argument("--store", type=Path, default=None, help="Store file to use.")
    args = parser.parse_args()

    store_path = args.store or Path(tempfile.mkdtemp()) / "StateData.json"
    saver = StateSaver(SnapshotStore(store_path))

    player = Player(
        speed=5.0,
        label="idle",
        mode=Mode.JUMP,
        tint=Color(1.0, 0.5, 0.0, 1.0),
        spawn=Vector3(1.0, 2.0, 3.0),
    )
    snap = saver.capture(player, "checkpoint", identity="smoke.player")
    print(f"Captured {snap.name!r}: {sorted(snap.variables)}")

    player.speed, player.label, player.count = 9.0, "run", 3
    player.mode = Mode.RUN
    report = saver.apply(player, "checkpoint", identity="smoke.player")
    print(f"Applied: {report.applied} | failed: {report.failed}")
    print(f"Player now: {player}")
    print(f"Store: {store_path}")

    expected = (5.0, "idle", 3, Mode.JUMP)
    actual = (player.speed, player.label, player.count, player.mode)
    if actual != expected:
        print(f"❌ Unexpected state {actual}, wanted {expected}")
        return 1
    print("✅ Round trip OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
