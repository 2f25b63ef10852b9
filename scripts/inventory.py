#!/usr/bin/env python3
"""
Apparel inventory CLI.

Usage:
    python3 scripts/inventory.py init
    python3 scripts/inventory.py import orders.xlsx
    python3 scripts/inventory.py list --status ordered
    python3 scripts/inventory.py status JRS-1A2B3C4D received --location Warehouse
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from scripts.cli.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
