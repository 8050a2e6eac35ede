"""Dump Loader - Read a per-block storage dump file into domain objects."""

import json
from typing import Any, Dict

import jsonschema
import jsonschema.validators
from jsonschema.exceptions import best_match

from compare_dumps.comparison.exceptions import DumpIOError, FormatError
from compare_dumps.domain.dump import BlockDump, Dump
from compare_dumps.utils.logger import get_logger

logger = get_logger(__name__)

DUMP_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["block", "size"],
        "properties": {
            "block": {"type": "integer", "minimum": 0, "maximum": 2**32 - 1},
            "size": {"type": "integer"},
            "storage": {
                "type": ["array", "null"],
                "items": {
                    "type": "object",
                    "required": ["state", "key"],
                    "properties": {
                        "state": {"type": "string"},
                        "key": {"type": "string"},
                        "value": {"type": ["string", "null"]},
                    },
                },
            },
        },
    },
}

# Block numbers and sizes must be JSON integers; draft-07 would also accept 1.0
_STRICT_TYPES = jsonschema.Draft7Validator.TYPE_CHECKER.redefine(
    "integer", lambda checker, instance: isinstance(instance, int) and not isinstance(instance, bool)
)
_DumpValidator = jsonschema.validators.extend(jsonschema.Draft7Validator, type_checker=_STRICT_TYPES)
_VALIDATOR = _DumpValidator(DUMP_SCHEMA)


def load_dump(path: str) -> Dump:
    """
    Read a dump file and decode it into block records.

    Base64 keys and values are kept as text; decoding happens in the normalizer.

    Args:
        path: Path to a JSON dump file

    Returns:
        Block records in file order

    Raises:
        DumpIOError: If the file cannot be opened or read
        FormatError: If the content is not a JSON array of block records
    """
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise DumpIOError(str(path), e.strerror or str(e)) from e

    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FormatError(str(path), f"invalid JSON: {e}") from e

    error = best_match(_VALIDATOR.iter_errors(document))
    if error is not None:
        location = "/".join(str(part) for part in error.absolute_path) or "<root>"
        raise FormatError(str(path), f"unexpected dump layout at {location}: {error.message}")

    dump = [BlockDump.from_dict(item) for item in document]
    logger.debug(
        "Loaded dump file",
        operation="load_dump",
        context={"path": str(path), "blocks": len(dump)},
    )
    return dump
