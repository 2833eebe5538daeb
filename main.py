#!/usr/bin/env python3
"""
HMD optics simulator (wrapper)

Wrapper script so the simulator can be run from the project root.
Uses scripts.run internally.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from scripts.run import main


if __name__ == '__main__':
    sys.exit(main())
