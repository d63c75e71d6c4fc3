"""JSON Schema validation for coursetree using the jsonschema library.

Validation never raises in normal operation; it returns a result tuple
so repositories can decide what a failure means for them.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator, ValidationError

from coursetree.io import read_json
from coursetree.logging import get_logger

_logger = get_logger("jsonschema")

# Report at most this many errors for one document
MAX_REPORTED_ERRORS = 20


@lru_cache(maxsize=8)
def _load_schema_file(path: str) -> dict[str, Any] | None:
    return read_json(path)


def validate(data: Any, schema: dict[str, Any] | Path | str) -> tuple[bool, list[str]]:
    """Validate data against a JSON Schema.

    Args:
        data: The data to validate.
        schema: Schema dict, or path to a JSON schema file.

    Returns:
        Tuple of (is_valid, list of error messages).
        Never raises - returns (False, [error]) on any failure.
    """
    try:
        if isinstance(schema, (Path, str)):
            loaded = _load_schema_file(str(schema))
            if loaded is None:
                return False, [f"Could not load schema from {schema}"]
            schema = loaded

        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))

        if errors:
            messages = [_format_error(e) for e in errors[:MAX_REPORTED_ERRORS]]
            if len(errors) > MAX_REPORTED_ERRORS:
                messages.append(f"... and {len(errors) - MAX_REPORTED_ERRORS} more")
            for msg in messages:
                _logger.debug("Validation error: %s", msg)
            return False, messages

        return True, []

    except Exception as e:
        msg = f"Validation failed unexpectedly: {e}"
        _logger.warning(msg)
        return False, [msg]


def _format_error(error: ValidationError) -> str:
    """Format a validation error as `path: message`."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        elif parts:
            parts.append(f".{p}")
        else:
            parts.append(str(p))
    path = "".join(parts) or "$"
    return f"{path}: {error.message}"
