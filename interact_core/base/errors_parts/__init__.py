"""Errors parts package.

Prefer importing from ``interact_core.base.errors`` for the stable surface.
"""

from .auth_error import AuthError
from .classification import classify_exception, status_to_code
from .error_code import ErrorCode
from .interact_error import InteractError
from .persistence_error import PersistenceError
from .synthesis_error import SynthesisError
from .transport_error import TransportError

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
