"""
User Domain Models - Users, registration and verification payloads.

Attributes are snake_case; to_dict()/from_dict() speak the server's camelCase.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (trailing Z allowed) into an aware datetime."""
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class SecurityQuestion:
    """Security question with its plaintext answer (sent only when setting)."""
    question: str
    answer: str

    def to_dict(self) -> Dict[str, Any]:
        return {"question": self.question, "answer": self.answer}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecurityQuestion":
        return cls(question=data["question"], answer=data["answer"])


@dataclass
class SecurityQuestionHash:
    """Security question as stored by the server (answer hashed server-side)."""
    question: str
    answer_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {"question": self.question, "answerHash": self.answer_hash}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecurityQuestionHash":
        return cls(question=data["question"], answer_hash=data.get("answerHash", ""))


@dataclass
class SecurityQuestionUpdate:
    """Replacement set of security questions for the signed-in user."""
    security_questions: List[SecurityQuestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"securityQuestions": [q.to_dict() for q in self.security_questions]}


@dataclass
class User:
    """
    User entity - as returned by the server.

    Domain rules:
    - id is server-owned and round-tripped verbatim
    - Never deleted by this client
    """
    id: Optional[str]
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    verified: bool = False
    is_active: bool = True
    phone_number: Optional[str] = None
    email_address: Optional[str] = None
    roles: List[str] = field(default_factory=list)
    security_questions: List[SecurityQuestionHash] = field(default_factory=list)
    anonymous: bool = False

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the server's JSON shape."""
        return {
            "id": self.id,
            "username": self.username,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "verified": self.verified,
            "isActive": self.is_active,
            "phoneNumber": self.phone_number,
            "emailAddress": self.email_address,
            "roles": list(self.roles),
            "securityQuestions": [q.to_dict() for q in self.security_questions],
            "anonymous": self.anonymous,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Deserialize from the server's JSON shape."""
        return cls(
            id=data.get("id"),
            username=data["username"],
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            verified=data.get("verified", False),
            is_active=data.get("isActive", True),
            phone_number=data.get("phoneNumber"),
            email_address=data.get("emailAddress"),
            roles=list(data.get("roles") or []),
            security_questions=[
                SecurityQuestionHash.from_dict(q) for q in data.get("securityQuestions") or []
            ],
            anonymous=data.get("anonymous", False),
        )


@dataclass
class RegisterUser:
    """New user registration request."""
    username: str
    new_password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email_address: Optional[str] = None
    security_questions: List[SecurityQuestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "newPassword": self.new_password,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phoneNumber": self.phone_number,
            "emailAddress": self.email_address,
            "securityQuestions": [q.to_dict() for q in self.security_questions],
        }


@dataclass
class AnonymousRegistration:
    """Throwaway identity for anonymous sign-in."""
    username: str
    new_password: str

    def to_dict(self) -> Dict[str, Any]:
        return {"username": self.username, "newPassword": self.new_password}


@dataclass
class ForgotPassword:
    """Password recovery request; attempt selects which hint is generated."""
    username: str
    attempt: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"username": self.username, "attempt": self.attempt}


@dataclass
class PasswordUpdate:
    previous_password: str
    new_password: str

    def to_dict(self) -> Dict[str, Any]:
        return {"previousPassword": self.previous_password, "newPassword": self.new_password}


@dataclass
class UserVerificationHash:
    """
    Verification hash produced by the server.

    The client never computes or alters the hash; it hands the envelope
    back together with the code the user received.
    """
    username: str
    expires: Optional[datetime]
    hash: str
    hint: str = ""
    attempt: int = 1

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "expires": format_datetime(self.expires),
            "hash": self.hash,
            "hint": self.hint,
            "attempt": self.attempt,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserVerificationHash":
        return cls(
            username=data["username"],
            expires=parse_datetime(data.get("expires")),
            hash=data["hash"],
            hint=data.get("hint", ""),
            attempt=data.get("attempt", 1),
        )


@dataclass
class UserVerificationCheck(UserVerificationHash):
    """Verification hash plus the code the user was sent."""
    verification_code: str = ""

    @classmethod
    def from_hash(cls, verification: UserVerificationHash, verification_code: str) -> "UserVerificationCheck":
        return cls(
            username=verification.username,
            expires=verification.expires,
            hash=verification.hash,
            hint=verification.hint,
            attempt=verification.attempt,
            verification_code=verification_code,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["verificationCode"] = self.verification_code
        return data


@dataclass
class ResetPassword(UserVerificationCheck):
    """Password reset: verification check plus the new password."""
    new_password: str = ""

    @classmethod
    def from_hash(
        cls,
        verification: UserVerificationHash,
        verification_code: str,
        new_password: str = "",
    ) -> "ResetPassword":
        return cls(
            username=verification.username,
            expires=verification.expires,
            hash=verification.hash,
            hint=verification.hint,
            attempt=verification.attempt,
            verification_code=verification_code,
            new_password=new_password,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["newPassword"] = self.new_password
        return data
