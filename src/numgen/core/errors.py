from __future__ import annotations


class NumGenError(Exception):
    """Base class for errors raised by numgen."""


class InvalidConfiguration(NumGenError, ValueError):
    """
    A generator configuration field failed validation.

    Raised for non-numeric factor/start/max values, non-integer periods and
    update rules of an unsupported shape.
    """


class InvalidRange(NumGenError, ValueError):
    """Malformed bounds passed to SequenceGenerator.range()."""
