from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

from portal.errors import ValidationFailed


class Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)


def split_keywords(value):
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [str(keyword).strip() for keyword in value if str(keyword).strip()]


class RegisterPayload(Payload):
    username: str = Field(min_length=1, max_length=80)
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class LoginPayload(Payload):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class ProfileUpdate(Payload):
    username: Optional[str] = Field(default=None, min_length=1, max_length=80)
    email: Optional[EmailStr] = None

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower() if value else value


class RoleChange(Payload):
    role: Literal['student', 'supervisor', 'admin']


class ThesisUpload(Payload):
    title: str = Field(min_length=1, max_length=300)
    abstract: str = Field(min_length=1)
    author_name: str = Field(alias='authorName', min_length=1, max_length=200)
    department: str = Field(min_length=1, max_length=200)
    submission_year: int = Field(alias='submissionYear', ge=1000, le=9999)
    keywords: List[str] = []
    is_public: bool = Field(default=True, alias='isPublic')

    @field_validator('keywords', mode='before')
    @classmethod
    def parse_keywords(cls, value):
        return split_keywords(value)


class ThesisUpdate(Payload):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    abstract: Optional[str] = Field(default=None, min_length=1)
    author_name: Optional[str] = Field(default=None, alias='authorName', min_length=1, max_length=200)
    department: Optional[str] = Field(default=None, min_length=1, max_length=200)
    submission_year: Optional[int] = Field(default=None, alias='submissionYear', ge=1000, le=9999)
    keywords: Optional[List[str]] = None

    @field_validator('keywords', mode='before')
    @classmethod
    def parse_keywords(cls, value):
        # null leaves the keywords alone, like every other field
        return None if value is None else split_keywords(value)


def parse(schema, data):
    """Validate ``data`` against ``schema`` or raise ValidationFailed with per-field messages."""
    try:
        return schema.model_validate(data or {})
    except ValidationError as e:
        errors = [
            {'field': '.'.join(str(part) for part in err['loc']) or None, 'msg': err['msg']}
            for err in e.errors()
        ]
        raise ValidationFailed('Invalid request', errors=errors) from None
