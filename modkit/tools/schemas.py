"""JSON Schema loading + validation for modkit's JSON documents.

Validation errors are reported with JSON Pointers so a broken parser output or
config file can be traced to the offending member.
"""

from __future__ import annotations

import importlib.resources as importlib_resources
import json
from functools import lru_cache
from typing import Any, Dict, List

import jsonschema


PARSE_RESULT_SCHEMA = "parse_result.schema.v1.json"
CONFIG_SCHEMA = "modkit.config.v1.json"


@lru_cache(maxsize=None)
def load_schema_text(name: str) -> str:
    with importlib_resources.files("modkit.schema").joinpath(name).open("r", encoding="utf-8") as f:
        return f.read()


def load_schema(name: str) -> Dict[str, Any]:
    return json.loads(load_schema_text(name))


def join_pointer(segments: List[Any]) -> str:
    if not segments:
        return ""
    return "/" + "/".join(str(s).replace("~", "~0").replace("/", "~1") for s in segments)


def validate(data: Any, schema: Dict[str, Any]) -> List[Dict[str, Any]]:
    validator = jsonschema.Draft202012Validator(schema)
    errors: List[Dict[str, Any]] = []
    for err in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path]):
        errors.append(
            {
                "pointer": join_pointer(list(err.absolute_path)),
                "message": err.message,
                "validator": err.validator,
            }
        )
    return errors


def format_errors(errors: List[Dict[str, Any]], limit: int = 5) -> str:
    return "; ".join(f"{e['pointer'] or '/'}: {e['message']}" for e in errors[:limit])
