"""User Schemas - Pydantic request models with field-level validation.

Invariants:
    - email matches a basic address pattern and is lower-cased
    - name: 1-100 chars after stripping
    - password: 8-128 chars, never echoed back
    - UserUpdate requires at least one field

Design Decisions:
    - Regex over email-validator: no extra dependency, DNS checks are not wanted here
"""

from pydantic import BaseModel, Field, field_validator, model_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _strip_non_empty(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


class UserCreate(BaseModel):
    email: str = Field(max_length=320, pattern=EMAIL_PATTERN)
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_non_empty(v)


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    password: str | None = Field(None, min_length=8, max_length=128)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return _strip_non_empty(v) if v is not None else v

    @model_validator(mode="after")
    def require_a_change(self):
        if self.name is None and self.password is None and self.is_active is None:
            raise ValueError("at least one of name, password, is_active is required")
        return self
