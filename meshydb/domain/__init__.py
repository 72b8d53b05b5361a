"""
Domain Models - Pure data entities.

No network dependencies. Serialization to/from the server's JSON only.
"""

from meshydb.domain.constants import Constants
from meshydb.domain.token import TokenRecord
from meshydb.domain.mesh import MeshData, PageResult
from meshydb.domain.user import (
    User,
    RegisterUser,
    AnonymousRegistration,
    ForgotPassword,
    PasswordUpdate,
    SecurityQuestion,
    SecurityQuestionHash,
    SecurityQuestionUpdate,
    UserVerificationHash,
    UserVerificationCheck,
    ResetPassword,
)

__all__ = [
    "Constants",
    "TokenRecord",
    "MeshData",
    "PageResult",
    "User",
    "RegisterUser",
    "AnonymousRegistration",
    "ForgotPassword",
    "PasswordUpdate",
    "SecurityQuestion",
    "SecurityQuestionHash",
    "SecurityQuestionUpdate",
    "UserVerificationHash",
    "UserVerificationCheck",
    "ResetPassword",
]
