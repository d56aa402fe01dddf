"""
Validation engine built on ``jsonschema``.

Wraps the draft-specific ``jsonschema`` validator classes behind a small
engine object: create it with options, register named schemas, compile a
schema into a reusable callable, and read that callable's last error list.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional

from jsonpointer import JsonPointer, resolve_pointer
from jsonschema import (
    Draft4Validator,
    Draft6Validator,
    Draft7Validator,
    Draft201909Validator,
    Draft202012Validator,
)
from jsonschema.exceptions import SchemaError
from jsonschema.validators import extend, validator_for
from referencing import Registry, Resource
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT4, DRAFT6, DRAFT7, DRAFT201909, DRAFT202012
from jsonschema_specifications import REGISTRY as SPECIFICATIONS

from schema_validator.config import settings
from schema_validator.exceptions import SchemaCompileError, ValidatorConfigError
from schema_validator.schemas.types import JSONSchema, JSONSchemaDefinitions

logger = logging.getLogger(__name__)

DRAFTS = {
    "draft-04": (Draft4Validator, DRAFT4),
    "draft-06": (Draft6Validator, DRAFT6),
    "draft-07": (Draft7Validator, DRAFT7),
    "2019-09": (Draft201909Validator, DRAFT201909),
    "2020-12": (Draft202012Validator, DRAFT202012),
}

# Baseline every engine starts from; caller options are merged on top.
DEFAULT_ENGINE_OPTIONS: dict[str, Any] = {
    "all_errors": True,
    "verbose": True,
    "data_refs": True,
}

KNOWN_OPTIONS = {"all_errors", "verbose", "data_refs", "draft", "validate_formats"}

# Keywords whose value may be a {"$data": "/pointer"} reference into the document.
DATA_KEYWORDS = (
    "const",
    "enum",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "multipleOf",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
    "minProperties",
    "maxProperties",
)

# Keywords holding instance data rather than subschemas.
_NON_SCHEMA_KEYWORDS = {"const", "enum", "default", "examples"}

# Keywords mapping names to subschemas.
_SCHEMA_MAP_KEYWORDS = {
    "properties",
    "patternProperties",
    "definitions",
    "$defs",
    "dependentSchemas",
    "dependencies",
}

_MISSING = object()


@dataclass
class RawValidationError:
    """One failed constraint, as reported by the engine."""

    keyword: str
    instance_path: str
    schema_path: str
    message: str
    params: dict[str, Any] = field(default_factory=dict)
    schema: Any = None
    parent_schema: Any = None
    data: Any = None


def _is_data_ref(value: Any) -> bool:
    return isinstance(value, Mapping) and set(value) == {"$data"}


def _walk_schema(schema: Any, visit: Callable[[dict, Any], Any], context: Any = None) -> None:
    """
    Call ``visit(node, context)`` for ``schema`` and each subschema below it.

    ``visit`` returns the context handed to the node's own subschemas. Keys
    of name-to-subschema maps such as ``properties`` are names, never
    keywords, so a property called ``enum`` is still walked as a schema.
    """
    if not isinstance(schema, Mapping):
        return
    context = visit(schema, context)

    for keyword, value in list(schema.items()):
        if keyword in _NON_SCHEMA_KEYWORDS:
            continue
        if keyword in _SCHEMA_MAP_KEYWORDS and isinstance(value, Mapping):
            children = list(value.values())
        elif isinstance(value, list):
            children = value
        else:
            children = [value]
        for child in children:
            _walk_schema(child, visit, context)


def _strip_data_refs(schema: Any) -> Any:
    """Copy of ``schema`` without $data keyword values, for meta-schema checks."""
    stripped = copy.deepcopy(schema)

    def strip(node, context):
        for keyword in DATA_KEYWORDS:
            if _is_data_ref(node.get(keyword)):
                del node[keyword]

    _walk_schema(stripped, strip)
    return stripped


def _data_pointers(schema: Any) -> list[Any]:
    pointers = []

    def collect(node, context):
        pointers.extend(
            node[keyword]["$data"] for keyword in DATA_KEYWORDS if _is_data_ref(node.get(keyword))
        )

    _walk_schema(schema, collect)
    return pointers


def _find_additional_properties(instance: Mapping, schema: Mapping) -> Iterator[str]:
    properties = schema.get("properties", {})
    patterns = "|".join(schema.get("patternProperties", {}))
    for name in instance:
        if name not in properties and not (patterns and re.search(patterns, name)):
            yield name


def _to_pointer(parts) -> str:
    return JsonPointer.from_parts(list(parts)).path


class CompiledSchema:
    """
    A schema compiled against one engine.

    Calling it validates a document and returns whether it passed; the raw
    errors of the last call are kept on ``errors`` (``None`` after a pass).
    """

    def __init__(self, validator, opts: Mapping[str, Any], state: dict[str, Any]):
        self._validator = validator
        self._opts = opts
        self._state = state
        self.schema = validator.schema
        self.errors: Optional[list[RawValidationError]] = None

    def __call__(self, document: Any) -> bool:
        self._state["root"] = document
        try:
            errors = self._validator.iter_errors(document)
            if self._opts.get("all_errors"):
                raw = [e for error in errors for e in self._convert(error)]
            else:
                first = next(errors, None)
                raw = list(self._convert(first))[:1] if first is not None else []
        finally:
            self._state["root"] = _MISSING

        self.errors = raw or None
        return not raw

    def _convert(self, error) -> Iterator[RawValidationError]:
        verbose = bool(self._opts.get("verbose"))
        instance_path = _to_pointer(error.absolute_path)
        schema_path = _to_pointer(error.absolute_schema_path)
        details = {
            "schema": error.validator_value if verbose else None,
            "parent_schema": error.schema if verbose else None,
            "data": error.instance if verbose else None,
        }

        extras = []
        if (
            error.validator == "additionalProperties"
            and isinstance(error.instance, Mapping)
            and isinstance(error.schema, Mapping)
        ):
            extras = list(_find_additional_properties(error.instance, error.schema))

        if extras:
            # jsonschema reports all extras at once; emit one error per property
            for name in extras:
                yield RawValidationError(
                    keyword="additionalProperties",
                    instance_path=instance_path,
                    schema_path=schema_path,
                    message=f"Additional properties are not allowed ({name!r} was unexpected)",
                    params={"additionalProperty": name},
                    **details,
                )
            return

        params: dict[str, Any] = {}
        if error.validator == "enum":
            params["allowedValues"] = error.validator_value
        elif error.validator == "type":
            params["type"] = error.validator_value

        yield RawValidationError(
            keyword=error.validator,
            instance_path=instance_path,
            schema_path=schema_path,
            message=error.message,
            params=params,
            **details,
        )


class SchemaEngine:
    """Holds engine options and the registry of named schemas."""

    def __init__(self, opts: Optional[Mapping[str, Any]] = None):
        self.opts: dict[str, Any] = {
            "draft": settings.DEFAULT_DRAFT,
            "validate_formats": settings.VALIDATE_FORMATS,
            **DEFAULT_ENGINE_OPTIONS,
            **(opts or {}),
        }

        unknown = sorted(set(self.opts) - KNOWN_OPTIONS)
        if unknown:
            logger.warning("Unrecognized engine options: %s", ", ".join(unknown))

        draft = self.opts["draft"]
        if draft not in DRAFTS:
            raise ValidatorConfigError(
                f"Unsupported draft '{draft}'. Valid drafts: {list(DRAFTS)}"
            )
        self._validator_cls, self._specification = DRAFTS[draft]
        self._registry: Registry = Registry()
        self._definitions: dict[str, JSONSchema] = {}

    def add_schema(self, schema: JSONSchema, key: str) -> SchemaEngine:
        if key in self._definitions:
            raise SchemaCompileError(f"Schema with key '{key}' already exists")

        resource = Resource.from_contents(schema, default_specification=self._specification)
        resources = [(key, resource)]
        schema_id = resource.id()
        if schema_id and schema_id != key:
            resources.append((schema_id, resource))

        self._registry = self._registry.with_resources(resources)
        self._definitions[key] = schema
        logger.debug("Registered schema '%s'", key)
        return self

    def compile(self, schema: JSONSchema) -> CompiledSchema:
        """
        Compile ``schema`` into a reusable callable.

        The schema, every registered definition, and every ``$ref`` they
        contain are checked here, so a broken schema fails now rather than
        at validation time.
        """
        data_refs = bool(self.opts.get("data_refs"))
        schemas = [("<root>", schema), *self._definitions.items()]

        for name, candidate in schemas:
            self._check_schema(name, candidate, data_refs)

        registry = self._registry.combine(SPECIFICATIONS)
        for name, candidate in schemas:
            root = Resource.from_contents(candidate, default_specification=self._specification)
            self._check_refs(name, candidate, registry.resolver_with_root(root))

        validator_cls = validator_for(schema, default=self._validator_cls)
        state: dict[str, Any] = {"root": _MISSING}
        if data_refs:
            validator_cls = extend(
                validator_cls,
                validators={
                    keyword: _data_aware(validator_cls.VALIDATORS[keyword], state)
                    for keyword in DATA_KEYWORDS
                    if keyword in validator_cls.VALIDATORS
                },
            )

        format_checker = validator_cls.FORMAT_CHECKER if self.opts.get("validate_formats") else None
        validator = validator_cls(schema, registry=self._registry, format_checker=format_checker)
        logger.debug("Compiled schema with %s", validator_cls.__name__)
        return CompiledSchema(validator, dict(self.opts), state)

    def _check_schema(self, name: str, schema: JSONSchema, data_refs: bool) -> None:
        if data_refs:
            for pointer in _data_pointers(schema):
                if not isinstance(pointer, str) or (pointer and not pointer.startswith("/")):
                    raise SchemaCompileError(
                        f"Invalid $data pointer {pointer!r} in schema {name}: "
                        "only absolute JSON pointers are supported"
                    )
            schema = _strip_data_refs(schema)

        validator_cls = validator_for(schema, default=self._validator_cls)
        try:
            validator_cls.check_schema(schema)
        except SchemaError as exc:
            raise SchemaCompileError(f"Invalid schema {name}: {exc.message}") from exc

    def _nested_id(self, schema: Mapping) -> Optional[str]:
        # outside draft-04, "id" is an unknown keyword and may hold any value
        if any(not isinstance(schema.get(key, ""), str) for key in ("$id", "id")):
            return None
        return self._specification.id_of(schema)

    def _check_refs(self, name: str, schema: Any, resolver) -> None:
        def check(node, resolver):
            nested_id = None if node is schema else self._nested_id(node)
            ref = node.get("$ref")
            try:
                if nested_id:
                    resolver = resolver.lookup(nested_id).resolver
                if isinstance(ref, str):
                    resolver.lookup(ref)
            except Unresolvable as exc:
                raise SchemaCompileError(
                    f"Can't resolve reference {ref or nested_id!r} in schema {name}"
                ) from exc
            return resolver

        _walk_schema(schema, check, resolver)


def _data_aware(keyword_fn, state: dict[str, Any]):
    """Wrap a keyword so {"$data": pointer} values are read from the document."""

    def validate_keyword(validator, value, instance, schema):
        if _is_data_ref(value):
            root = state["root"]
            if root is _MISSING:
                return
            value = resolve_pointer(root, value["$data"], _MISSING)
            if value is _MISSING:
                return
        yield from keyword_fn(validator, value, instance, schema) or ()

    return validate_keyword


def create_engine(
    schema_definitions: Optional[JSONSchemaDefinitions] = None,
    engine_options: Optional[Mapping[str, Any]] = None,
) -> SchemaEngine:
    """Create an engine with the baseline options and register the definitions."""
    engine = SchemaEngine(engine_options)

    if schema_definitions:
        for ref, definition in schema_definitions.items():
            engine.add_schema(definition, ref)

    return engine
