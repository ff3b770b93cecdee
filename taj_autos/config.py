import os
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = Path.home() / DATA_DIR
DB_PATH = Path(os.environ.get("TAJ_AUTOS_DB") or DATA_PATH / DB_FILE_NAME)

LOG_LEVEL = os.environ.get("TAJ_AUTOS_LOG_LEVEL", "INFO").upper()
LOG_FILE = os.environ.get("TAJ_AUTOS_LOG_FILE") or None

TEMPLATES_DIR = BASE_DIR / "resources" / "templates"
