"""Error taxonomy public surface.

Re-exports the one-class-per-file implementations under
``interact_core.base.errors_parts`` under a stable import path.
"""

from .errors_parts import (
    AuthError,
    ErrorCode,
    InteractError,
    PersistenceError,
    SynthesisError,
    TransportError,
    classify_exception,
    status_to_code,
)

__all__ = [
    "ErrorCode",
    "InteractError",
    "TransportError",
    "SynthesisError",
    "PersistenceError",
    "AuthError",
    "classify_exception",
    "status_to_code",
]
