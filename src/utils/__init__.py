"""
Utilidades del microservicio
"""
from .auth import Actor, get_current_user, get_actor, require_manager
from .errors import (
    InvalidInputError,
    PermissionDeniedError,
    NotFoundError,
    ConflictError,
    DependencyError
)
from .transactions import atomic

__all__ = [
    "Actor",
    "get_current_user",
    "get_actor",
    "require_manager",
    "InvalidInputError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "DependencyError",
    "atomic"
]
