"""
Core Services Package.

Provides framework-level services used by all modules.
"""

from core.services.auth import (
    RECORD_CREATED_MESSAGE,
    REGISTRATION_PENDING_MESSAGE,
    AuthController,
    derive_names,
    new_employee_row,
)

__all__ = [
    "AuthController",
    "derive_names",
    "new_employee_row",
    "REGISTRATION_PENDING_MESSAGE",
    "RECORD_CREATED_MESSAGE",
]
