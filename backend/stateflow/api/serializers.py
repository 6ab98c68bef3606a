import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from stateflow.ir.diagram import Diagram, format_timestamp, utc_now
from stateflow.ir.errors import DiagramImportError

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = (str, int, float, bool, type(None))

COLLECTION_FIELDS = ("actors", "states", "flows", "conditions")
REQUIRED_FIELDS = ("id", "name")


def serialize_ir(obj: Any):
    """
    Safely serialize visual IR objects into JSON-compatible structures.
    Deterministic: field order follows declaration order.
    """

    # Enums first: str-valued enums are also str instances
    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, PRIMITIVE_TYPES):
        return obj

    if isinstance(obj, datetime):
        return format_timestamp(obj)

    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)

    if isinstance(obj, (list, tuple)):
        return [serialize_ir(item) for item in obj]

    if isinstance(obj, dict):
        return {k: serialize_ir(v) for k, v in obj.items()}

    # Dataclass-like objects
    if hasattr(obj, "__dict__"):
        return {
            key: serialize_ir(value)
            for key, value in obj.__dict__.items()
            if not key.startswith("_")
        }

    return str(obj)


# ------------------------------------------------------------------ #
# Persisted / exported form
# ------------------------------------------------------------------ #

def diagram_to_record(diagram: Diagram) -> Dict[str, Any]:
    """Diagram → JSON-ready dict, timestamps as ISO text with milliseconds."""
    return diagram.model_dump(mode="json", by_alias=True, exclude_none=True)


def record_to_diagram(record: Dict[str, Any]) -> Diagram:
    """Stored record → Diagram. The store only holds documents it wrote itself."""
    return Diagram.model_validate(record)


def export_json(diagram: Diagram, indent: int = 2) -> str:
    return json.dumps(diagram_to_record(diagram), indent=indent, ensure_ascii=False)


def import_document(document: Any) -> Diagram:
    """
    Tolerant import of an external document.

    Requires `id` and `name`. Missing or non-list collections become empty,
    missing timestamps become now. Any other problem is reported as a single
    DiagramImportError.
    """
    if not isinstance(document, dict):
        raise DiagramImportError("document must be a JSON object")

    missing = [key for key in REQUIRED_FIELDS if not document.get(key)]
    if missing:
        raise DiagramImportError(
            f"missing required field(s): {', '.join(missing)}"
        )

    data = dict(document)
    for key in COLLECTION_FIELDS:
        if not isinstance(data.get(key), list):
            data[key] = []

    now = utc_now()
    for key in ("createdAt", "updatedAt"):
        if not data.get(key):
            data[key] = now

    try:
        return Diagram.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        message = f"invalid diagram document at '{location}': {first['msg']}"
        if e.error_count() > 1:
            message += f" (and {e.error_count() - 1} more)"
        logger.info("[IMPORT] %s", message)
        raise DiagramImportError(message) from e


def import_json(text: str) -> Diagram:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise DiagramImportError(f"invalid JSON: {e.msg} (line {e.lineno})") from e
    return import_document(document)
