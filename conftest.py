"""Global pytest configuration."""

import os
from pathlib import Path

# Point settings at the bundled checklists before any imports
os.environ.setdefault("CHECKLISTS_DIR", str(Path(__file__).parent / "checklists"))
