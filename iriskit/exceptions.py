"""
Exception types raised by iriskit.

Invalid configuration is reported with the built-in ValueError and file
failures with the built-in OSError; the classes below cover the rest.
"""


class FormatError(ValueError):
    """A record could not be parsed, has the wrong field count, or is missing a value."""


class SchemaError(ValueError):
    """Declared feature columns are absent, or the data does not have the expected shape or type."""


class StateError(RuntimeError):
    """An operation was invoked before the step it depends on (e.g. predict before train)."""
