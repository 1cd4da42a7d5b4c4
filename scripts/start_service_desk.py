#!/usr/bin/env python3
"""
Startup script for the auto service desk API.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv(project_root / ".env")

from service_desk.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
