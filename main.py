"""Run the motionlink sender from a source checkout without installing it.

Set ``MOTIONLINK_PROFILE=1`` to print the hottest call paths on exit, or
``MOTIONLINK_PROFILE=<path>`` to dump raw cProfile data there instead.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from motionlink.cli import main as cli_main


def _profiled(argv: Sequence[str], target: str) -> int:
    import cProfile
    import pstats

    profiler = cProfile.Profile()
    try:
        return profiler.runcall(cli_main, list(argv))
    finally:
        if target.lower() in {"1", "true", "yes", "on"}:
            pstats.Stats(profiler, stream=sys.stderr).sort_stats("cumulative").print_stats(40)
        else:
            profiler.dump_stats(target)
            print(f"profile written to {target}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    profile_target = os.getenv("MOTIONLINK_PROFILE", "")
    if profile_target:
        return _profiled(args, profile_target)
    return cli_main(args)


if __name__ == "__main__":
    raise SystemExit(main())
