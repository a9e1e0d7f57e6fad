"""Utility helpers for oracle-priority."""

from .invariants import InvariantError, validate_record_data

__all__ = ["InvariantError", "validate_record_data"]
