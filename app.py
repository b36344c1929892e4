"""ASGI entry point.

Usage:
    uvicorn app:app --host 0.0.0.0 --port 8000
    uvicorn app:app --reload
"""

import sys
from pathlib import Path

# Add src to Python path for imports (MUST be before importing hive_api)
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from hive_api.main import create_app

app = create_app()
