"""Pytest configuration for the ILOC front end test suite."""

import sys
from pathlib import Path

# Add project root to path for iloc imports
sys.path.insert(0, str(Path(__file__).parent.parent))
