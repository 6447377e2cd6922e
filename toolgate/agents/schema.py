import json
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

SCHEMA_PATH = Path(__file__).resolve().parent / "config.schema.json"


class SchemaName(str, Enum):
    AGENT = "agent"
    PERSONA = "persona"
    MCP_CONFIG = "mcpConfig"


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


@lru_cache(maxsize=None)
def _load_document(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def _validator(name: SchemaName) -> Draft202012Validator:
    document = _load_document(SCHEMA_PATH)
    schema = dict(document)
    schema["$ref"] = f"#/$defs/{name.value}"
    return Draft202012Validator(schema)


def first_schema_error(name: SchemaName, payload: Any) -> str | None:
    error = next(iter(_validator(name).iter_errors(payload)), None)
    if error is None:
        return None
    return format_schema_error(error)
