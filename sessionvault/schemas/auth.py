"""
Authentication schemas.
"""

import re
from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator

from sessionvault.kernel.models.user import UserRole

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]*$")
DISPLAY_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\-\s]*$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[!@#$%^&*])")

USERNAME_MAX_LENGTH = 64
DISPLAY_NAME_MAX_LENGTH = 255

MIN_AGE_YEARS = 9
MAX_AGE_YEARS = 100

PASSWORD_TOO_SHORT = "Your password must be at least 8 characters long"
PASSWORD_TOO_WEAK = (
    "Your password must contain at least 1 uppercase, 1 lowercase, "
    "1 number, 1 special character"
)
INVALID_BIRTH_DATE = "You must provide a valid date of birth !"


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def check_password_length(value: str) -> str:
    if len(value) < 8:
        raise ValueError(PASSWORD_TOO_SHORT)
    return value


def check_password_strength(value: str) -> str:
    check_password_length(value)
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(PASSWORD_TOO_WEAK)
    return value


class UserLogin(BaseModel):
    """User login request."""

    email_or_username: str
    password: str

    @field_validator("email_or_username")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("You must provide a valid email or username!")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_length(v)


class UserCreate(BaseModel):
    """User registration request."""

    username: str
    email: EmailStr
    password: str
    password_confirmation: str
    display_name: str
    date_of_birth: date

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if len(v) < 2:
            raise ValueError("Your username should at least contain 2 letters")
        if len(v) > USERNAME_MAX_LENGTH:
            raise ValueError(f"Your username cannot exceed {USERNAME_MAX_LENGTH} characters")
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Your username cannot contain special characters")
        return v

    @field_validator("password", "password_confirmation")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Your name should at least contain 2 letters")
        if len(v.strip()) > DISPLAY_NAME_MAX_LENGTH:
            raise ValueError(f"Your name cannot exceed {DISPLAY_NAME_MAX_LENGTH} characters")
        if not DISPLAY_NAME_PATTERN.match(v):
            raise ValueError("Your name cannot contain special characters")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date) -> date:
        today = date.today()
        youngest = _years_before(today, MIN_AGE_YEARS)
        oldest = _years_before(today, MAX_AGE_YEARS)
        if v > youngest or v < oldest:
            raise ValueError(INVALID_BIRTH_DATE)
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "UserCreate":
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class UserResponse(BaseModel):
    """Public identity view."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: UserRole
    display_name: str
