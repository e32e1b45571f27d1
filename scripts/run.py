"""Main entry point for running shellgoal from a source checkout."""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shellgoal.cli import app

if __name__ == "__main__":
    app()
