"""
Numeris - Modeles Auth & Utilisateurs
Sign-up / login / password reset payloads and the stored user document.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config import new_object_id, now_iso
from .common import is_valid_email_format, require_text

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 20


def normalize_email(email: str) -> str:
    return email.lower().strip()


class UserLogin(BaseModel):
    email: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not is_valid_email_format(v.strip()):
            raise ValueError(f"invalid email format: {v}")
        return normalize_email(v)


class UserCreate(BaseModel):
    """Sign-up payload."""
    first_name: str
    last_name: str
    email: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    phone_number: str
    profession: Optional[str] = ""

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v, info):
        v = require_text(v, info.field_name.replace("_", " "))
        if not v.replace(" ", "").replace("-", "").isalpha():
            raise ValueError(f"{info.field_name.replace('_', ' ')} must contain only letters")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not is_valid_email_format(v.strip()):
            raise ValueError(f"invalid email format: {v}")
        return normalize_email(v)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v):
        return require_text(v, "phone number")


class PasswordReset(BaseModel):
    email: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    confirm_password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not is_valid_email_format(v.strip()):
            raise ValueError(f"invalid email format: {v}")
        return normalize_email(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("password and confirm password do not match")
        return self


class User(BaseModel):
    """Stored user document (collection `user`)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    first_name: str
    last_name: str
    email: str
    phone_number: str
    profession: str = ""
    password: str = ""
    token: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(by_alias=True, exclude_none=True)
        doc.setdefault("invoices", [])
        return doc

    def public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "profession": self.profession,
            "created_at": self.created_at,
        }


def new_user(data: UserCreate, password_hash: str) -> User:
    """Build a fresh user from a validated sign-up payload."""
    created_at = now_iso()
    return User(
        id=new_object_id(),
        first_name=data.first_name,
        last_name=data.last_name,
        email=normalize_email(data.email),
        phone_number=data.phone_number.strip(),
        profession=(data.profession or "").strip(),
        password=password_hash,
        created_at=created_at,
        updated_at=created_at,
    )
