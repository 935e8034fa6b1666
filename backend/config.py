"""Application configuration via environment variables."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# Grid / units
GRID_SIZE = float(os.getenv("GRID_SIZE", "1.0"))  # physical units per grid unit
DISPLAY_UNIT = os.getenv("DISPLAY_UNIT", "m")

# Editing
ALIGNMENT_THRESHOLD = float(os.getenv("ALIGNMENT_THRESHOLD", "5"))
SNAP_THRESHOLD = float(os.getenv("SNAP_THRESHOLD", "15"))
MAX_HISTORY = int(os.getenv("MAX_HISTORY", "50"))

# Allen Curve distance bands (physical units)
OPTIMAL_DISTANCE = float(os.getenv("OPTIMAL_DISTANCE", "10"))
WARNING_DISTANCE = float(os.getenv("WARNING_DISTANCE", "30"))

# Multiverse
MAX_COMPARISON = int(os.getenv("MAX_COMPARISON", "3"))

# Export
WALL_HEIGHT = float(os.getenv("WALL_HEIGHT", "3.0"))
EXPORT_DIR = Path(os.getenv("EXPORT_DIR", str(BASE_DIR / "exports")))
EXPORT_DIR.mkdir(parents=True, exist_ok=True)

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
