"""
errors.py — YTManager Exceptions
=================================
InvalidFormatError: a clip name or date string cannot be parsed. Always
                    surfaced, never defaulted.
PersistenceError:   the stream library file could not be written.
ActionError:        an operator-facing failure of a CLI/REST action
                    (no live broadcast, stream not in the library, ...).
"""

from __future__ import annotations


class InvalidFormatError(ValueError):
    """A file name or timestamp does not match the expected format."""


class PersistenceError(OSError):
    """The stream library could not be written to disk."""


class ActionError(Exception):
    """An action cannot run against the current state."""
