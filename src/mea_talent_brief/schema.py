"""Helpers to load and validate the JSON schemas for model payloads."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

DISCOVERY_SCHEMA = "discovery_items"
NEWSLETTER_SCHEMA = "newsletter"


def schemas_dir() -> Path:
    """Return the directory holding the bundled schema files."""
    return Path(__file__).resolve().parent / "schemas"


@lru_cache(maxsize=None)
def load_schema(name: str, path: Optional[Path | str] = None) -> Dict[str, Any]:
    """Load and cache a schema by name (``discovery_items`` or ``newsletter``)."""
    schema_path = Path(path) if path else schemas_dir() / f"{name}.json"
    return json.loads(schema_path.read_text(encoding="utf-8"))


def format_errors(errors: Iterable[ValidationError]) -> str:
    """Turn jsonschema errors into a concise human-readable string."""
    parts = []
    for err in errors:
        location = ".".join(str(piece) for piece in err.absolute_path) or "<root>"
        parts.append(f"{location}: {err.message}")
    return "; ".join(parts)


def validate_payload(
    payload: Any, name: str, schema: Optional[Dict[str, Any]] = None
) -> Any:
    """
    Validate a parsed model payload against the named schema.

    Raises ValueError with a readable message if validation fails.
    """
    schema_dict = schema or load_schema(name)
    validator = Draft202012Validator(schema_dict)
    errors = list(validator.iter_errors(payload))
    if errors:
        raise ValueError(f"Schema validation failed: {format_errors(errors)}")
    return payload


def response_format(name: str) -> Dict[str, Any]:
    """Return a Responses API ``text.format`` block enforcing the named schema."""
    schema = {
        key: value
        for key, value in load_schema(name).items()
        if key not in ("$schema", "title")
    }
    return {"type": "json_schema", "name": name, "schema": schema, "strict": True}
