from __future__ import annotations


class CaseLabError(Exception):
    """Base class for errors that are reported to the user as a message."""


class ParseError(CaseLabError):
    """Input could not be parsed as JSON."""


class PathConflictError(ParseError):
    """Two paths disagree on whether a node is an object or an array."""


class InputTypeError(CaseLabError):
    """Input has the wrong type (file MIME type, non-object schema reference)."""


class StateError(CaseLabError):
    """Operation is not valid for the current table."""


class PersistenceError(CaseLabError):
    """Draft storage could not be read, written or decoded."""
