"""Public data model: validation findings and validator options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

JSONSchema = Union[dict[str, Any], bool]
JSONSchemaDefinitions = Mapping[str, JSONSchema]


class ValidationSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ValidationError(BaseModel):
    """A single non-conformance of a document to its schema."""

    model_config = ConfigDict(frozen=True)

    path: list[Union[str, int]]
    message: str
    severity: ValidationSeverity


Validator = Callable[[Any], list[ValidationError]]


@dataclass(frozen=True)
class ValidatorOptions:
    """
    Options for ``create_json_schema_validator``.

    schema:             the JSON schema to validate against (required)
    schema_definitions: named schemas which can be referenced using ``$ref``
    engine_options:     overrides for the engine options
    on_create_engine:   callback receiving the engine; it may configure the
                        engine in place or return a replacement
    """

    schema: Optional[JSONSchema] = None
    schema_definitions: Optional[JSONSchemaDefinitions] = None
    engine_options: Optional[Mapping[str, Any]] = None
    on_create_engine: Optional[Callable[[Any], Any]] = None
