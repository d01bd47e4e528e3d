from __future__ import annotations


class VcardError(Exception):
    """Base class for everything the parser raises on bad input."""


class MalformedInputError(VcardError, ValueError):
    def __init__(self, message: str, lineno: int | None = None):
        self.lineno = lineno
        if lineno is not None:
            message = f"line {lineno}: {message}"
        super().__init__(message)


class DateParseError(VcardError, ValueError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Cannot parse date {value!r}")
