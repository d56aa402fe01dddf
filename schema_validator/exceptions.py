"""Exceptions raised while building a validator.

Validation findings are never raised; they are returned as
``ValidationError`` entries.
"""


class SchemaValidatorError(ValueError):
    """Base class for configuration and compilation failures."""


class ValidatorConfigError(SchemaValidatorError):
    """The validator factory or engine was called with unusable options."""


class SchemaCompileError(SchemaValidatorError):
    """A schema or one of its definitions could not be compiled."""
