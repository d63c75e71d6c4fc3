"""coursetree: curriculum hierarchies for education programs.

This package provides:
- Chapter, Topic and Sub-Topic trees with resource and assignment attachments
- CSV export and import of curricula
- Per-enrollment progress tracking with cascade and aggregation
"""

__version__ = "0.1.0"

# Re-export commonly used utilities
from coursetree.errors import CoursetreeError
from coursetree.io import (
    ensure_parent_dir,
    read_file,
    read_json,
    write_file,
    write_json,
)
from coursetree.logging import get_logger

__all__ = [
    "CoursetreeError",
    "ensure_parent_dir",
    "get_logger",
    "read_file",
    "read_json",
    "write_file",
    "write_json",
]
