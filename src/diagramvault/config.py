"""Configuration loaded from environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


# Paths
DATA_DIR: Path = Path(os.getenv("DATA_DIR", "./data"))

# Storage keys, one namespace per record type
DIAGRAMS_KEY: str = os.getenv("DIAGRAMS_KEY", "mermaid-diagrams")
COLLECTIONS_KEY: str = os.getenv("COLLECTIONS_KEY", "mermaid-collections")

# Sharing
PUBLIC_URL: str = os.getenv("PUBLIC_URL", "http://localhost:8000/")

# Server
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Imports
MAX_IMPORT_BYTES: int = int(os.getenv("MAX_IMPORT_BYTES", str(5 * 1024 * 1024)))

# Derived paths
SQLITE_PATH: Path = DATA_DIR / "diagramvault.db"
