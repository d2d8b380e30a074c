#!/usr/bin/env python3
"""tic-tac-go puzzle tools.

Usage::

    python main.py generate -d medium -s 42   # random board shape
    python main.py generate --rows 4 --cols 5 --crosses 2
    python main.py solve board.txt             # solve an ASCII board
    python main.py motifs                      # list trap motifs
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent  # python/

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tictacgo.cli import app  # noqa: E402

if __name__ == "__main__":
    app()
