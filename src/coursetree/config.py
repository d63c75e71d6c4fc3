"""Configuration and path helpers for coursetree.

Provides canonical paths for:
- Persisted collections (programs, curriculum progress)
- Bundled JSON schemas
- Exported documents and last-import records
"""

import os
from pathlib import Path

# Directory holding the bundled JSON schemas, inside the package
_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"


def get_data_dir() -> Path:
    """Get the coursetree data directory.

    Uses COURSETREE_DATA_DIR if set, otherwise falls back to ./.coursetree
    """
    env_dir = os.environ.get("COURSETREE_DATA_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.cwd() / ".coursetree"


def get_programs_json_path() -> Path:
    """Get the path to programs.json."""
    return get_data_dir() / "programs.json"


def get_progress_json_path() -> Path:
    """Get the path to curriculum_progress.json."""
    return get_data_dir() / "curriculum_progress.json"


def get_last_import_path() -> Path:
    """Get the path to the last-import record."""
    return get_data_dir() / "import.last_update.json"


def get_exports_dir() -> Path:
    """Get the default directory for exported documents."""
    return get_data_dir() / "exports"


def get_schema_dir() -> Path:
    """Get the directory of bundled JSON schemas."""
    return _SCHEMA_DIR


def get_program_schema_path() -> Path:
    """Get the path to the programs collection schema."""
    return get_schema_dir() / "programs.schema.json"


def get_progress_schema_path() -> Path:
    """Get the path to the curriculum progress collection schema."""
    return get_schema_dir() / "progress.schema.json"


def ensure_data_dirs() -> None:
    """Ensure all coursetree directories exist."""
    for d in (get_data_dir(), get_exports_dir()):
        d.mkdir(parents=True, exist_ok=True)
