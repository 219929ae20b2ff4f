"""Errors raised by strict-mode locks."""

from __future__ import annotations


class LockStateError(RuntimeError):
    """A lock was released by a caller that does not hold it."""
