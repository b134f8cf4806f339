#!/usr/bin/env python
"""
Run the two-cylinder rod simulator from a source checkout.

Usage:
    python scripts/run_simulator.py [--config rod.json] [--t-end 0.04] [--out data/raw/rod]
    python -m hydrorod.run  # Alternative (if installed as package)
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hydrorod.run import main


if __name__ == "__main__":
    sys.exit(main())
