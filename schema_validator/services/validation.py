"""
JSON Schema validator factory.

Builds a validation engine, compiles the schema once, and returns a function
mapping a document to its list of findings (empty list = valid).
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping, Union

from schema_validator.exceptions import ValidatorConfigError
from schema_validator.schemas.types import ValidationError, Validator, ValidatorOptions
from schema_validator.services.engine import create_engine
from schema_validator.services.errors import improve_error, normalize_error

logger = logging.getLogger(__name__)

LEGACY_SIGNATURE_MESSAGE = (
    "Deprecation warning: "
    "the signature of create_json_schema_validator is changed from "
    "create_json_schema_validator(schema, schema_definitions, engine_options) "
    "to "
    'create_json_schema_validator({"schema": ..., "schema_definitions": ..., '
    '"engine_options": ...}). '
    "Please pass the arguments as one options object instead of unnamed arguments."
)


def _coerce_options(options: Any, legacy_args: tuple) -> ValidatorOptions:
    if legacy_args:
        raise ValidatorConfigError(LEGACY_SIGNATURE_MESSAGE)

    if isinstance(options, ValidatorOptions):
        coerced = options
    elif isinstance(options, Mapping) and "schema" in options:
        unknown = sorted(set(options) - {f.name for f in dataclasses.fields(ValidatorOptions)})
        if unknown:
            raise ValidatorConfigError(f"Unknown validator options: {unknown}")
        coerced = ValidatorOptions(**options)
    else:
        raise ValidatorConfigError(LEGACY_SIGNATURE_MESSAGE)

    if coerced.schema is None:
        raise ValidatorConfigError(LEGACY_SIGNATURE_MESSAGE)
    return coerced


def create_json_schema_validator(
    options: Union[ValidatorOptions, Mapping[str, Any]], *legacy_args: Any
) -> Validator:
    """
    Create a JSON Schema validator.

    ``options`` is a ``ValidatorOptions`` or a mapping with the keys
    ``schema`` (required), ``schema_definitions``, ``engine_options`` and
    ``on_create_engine``. The callback receives the engine and may configure
    it in place or return another engine to use instead.

    With the ``data_refs`` engine option (on by default), keyword values such
    as ``{"$data": "/password"}`` are read from the validated document. Only
    absolute JSON pointers are supported; relative ones such as ``"1/max"``
    fail at creation with ``SchemaCompileError``.

    Raises ``ValidatorConfigError`` for unusable options and
    ``SchemaCompileError`` when the schema does not compile.
    """
    options = _coerce_options(options, legacy_args)

    engine = create_engine(options.schema_definitions, options.engine_options)
    if options.on_create_engine is not None:
        engine = options.on_create_engine(engine) or engine

        # improved messages and paths need the verbose error details
        if not engine.opts.get("verbose"):
            logger.warning("on_create_engine disabled verbose errors")
            raise ValidatorConfigError("The engine must be configured with the option verbose=True")

    compiled = engine.compile(options.schema)

    def validate(document: Any) -> list[ValidationError]:
        compiled(document)
        raw_errors = compiled.errors or []
        logger.debug("Validation produced %d findings", len(raw_errors))

        return [normalize_error(document, improve_error(error)) for error in raw_errors]

    return validate
