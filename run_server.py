#!/usr/bin/env python
"""
Server Entry Point

Thin wrapper around ``marketplace_analytics.server`` for running from a
checkout without installing the package.

Usage:
    python run_server.py --dev
    python run_server.py --port 9000
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from marketplace_analytics.server import main  # noqa: E402

if __name__ == "__main__":
    main()
