"""Load ingest JSON files into typed collections.

Validation errors name the exact field that failed, e.g.
"[12].steps[3].capability.settings[1].value", so a malformed export can be
fixed without bisecting the file.
"""

import logging
from pathlib import Path
from typing import Any, Union

from pydantic import TypeAdapter, ValidationError

from ..errors import LoadError

logger = logging.getLogger("cookbook.loader")


def format_loc(loc: tuple) -> str:
    """Render a pydantic error location as a JSON path."""
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        elif out:
            out += f".{part}"
        else:
            out += str(part)
    return out or "<root>"


def describe_validation_error(err: ValidationError) -> str:
    """First error of a ValidationError as "<path>: <message>"."""
    first = err.errors()[0]
    return f"{format_loc(tuple(first['loc']))}: {first['msg']}"


def load_bytes(data: Union[bytes, str], model_type: Any, name: str) -> Any:
    """Validate a JSON payload against `model_type` (e.g. list[IngestUnit])."""
    try:
        return TypeAdapter(model_type).validate_json(data)
    except ValidationError as e:
        raise LoadError(f"Parsing {name}: {describe_validation_error(e)}") from e


def load(path: Union[str, Path], model_type: Any) -> Any:
    """Read and validate a JSON file. Any failure raises LoadError."""
    p = Path(path).expanduser()
    try:
        data = p.read_bytes()
    except OSError as e:
        raise LoadError(f"Opening file {str(p)!r}") from e

    result = load_bytes(data, model_type, repr(str(p)))
    logger.info(f"Loaded {len(result) if hasattr(result, '__len__') else 1} record(s) from {p}")
    return result
