# utils/common.py
"""Path and file-name helpers shared by config, ingestion and the API"""
from pathlib import Path

# ⚠️ DO NOT import settings here - config.py imports this module

PROJECT_ROOT = Path(__file__).resolve().parent.parent
LOG_DIR_NAME = "log"
LOG_FILE_NAME = "qna_retrieval.log"


def get_project_root() -> str:
    """Absolute path of the repository root (parent of utils/)."""
    return str(PROJECT_ROOT)


def get_log_file_path(file_name: str = LOG_FILE_NAME) -> str:
    """Path of the rotating log file; the directory is created by setup_logging()."""
    return str(PROJECT_ROOT / LOG_DIR_NAME / file_name)


def get_file_extension(filename: str) -> str:
    """'Guide.MD' -> 'md'; '' when there is no suffix."""
    return Path(filename).suffix[1:].lower()
