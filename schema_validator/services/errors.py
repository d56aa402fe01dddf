"""Turn raw engine errors into the public ValidationError shape."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from schema_validator.schemas.types import ValidationError, ValidationSeverity
from schema_validator.services.engine import RawValidationError
from schema_validator.services.json_path import parse_path

MAX_LISTED_ENUM_VALUES = 5


def _json_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _json_value(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_json_value(v) for v in value]
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            # render 1.0 as 1, like JSON text does
            return int(value)
    return value


def improve_error(error: RawValidationError) -> RawValidationError:
    """
    Improve the message of an engine error, for example by listing the
    allowed values of an enum. Other fields are left as they are.
    """
    if error.keyword == "enum" and isinstance(error.schema, (list, tuple)):
        enums = [
            json.dumps(_json_value(value), separators=(",", ":"), ensure_ascii=False)
            for value in error.schema
        ]
        if len(enums) > MAX_LISTED_ENUM_VALUES:
            more = f"({len(enums) - MAX_LISTED_ENUM_VALUES} more...)"
            enums = enums[:MAX_LISTED_ENUM_VALUES] + [more]
        return replace(error, message="should be equal to one of: " + ", ".join(enums))

    if error.keyword == "additionalProperties":
        return replace(
            error,
            message="should NOT have additional property: "
            + str(error.params.get("additionalProperty")),
        )

    return error


def normalize_error(document: Any, error: RawValidationError) -> ValidationError:
    return ValidationError(
        path=parse_path(document, error.instance_path),
        message=error.message or "Unknown error",
        severity=ValidationSeverity.WARNING,
    )
