"""Pydantic request schemas used by the validation gate.

Each request schema groups the `body`, `params` and `query` sections of
one route. Field types normalize as they validate (trimming, lower-casing
emails, parsing ids), and raise `PydanticCustomError` so the client-facing
message is exactly the text given here.
"""

import re
from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, BeforeValidator
from pydantic_core import PydanticCustomError

_DIGITS = re.compile(r"[0-9]+")
# largest value a signed 64-bit integer column holds
MAX_ID = 2 ** 63 - 1


def _fail(message: str):
    raise PydanticCustomError("value_error", message)


def _username(value: str) -> str:
    value = value.strip()
    if len(value) < 3:
        _fail("Username must be at least 3 characters long")
    if len(value) > 50:
        _fail("Username must be less than 50 characters")
    return value


def _email(value: str) -> str:
    value = value.strip().lower()
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        _fail("Invalid email format")
    return value


def _new_password(value: str) -> str:
    if len(value) < 6:
        _fail("Password must be at least 6 characters long")
    if len(value) > 100:
        _fail("Password must be less than 100 characters")
    return value


def _password(value: str) -> str:
    if not value:
        _fail("Password is required")
    return value


def _title(value: str) -> str:
    value = value.strip()
    if not value:
        _fail("Title is required")
    if len(value) > 255:
        _fail("Title must be less than 255 characters")
    return value


def _content(value: str) -> str:
    value = value.strip()
    if not value:
        _fail("Content is required")
    return value


def _post_id(value):
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not _DIGITS.fullmatch(value):
        _fail("Post ID must be a number")
    if len(value) > len(str(MAX_ID)) or int(value) > MAX_ID:
        _fail("Post ID must be a number")
    return int(value)


Username = Annotated[str, AfterValidator(_username)]
Email = Annotated[str, AfterValidator(_email)]
NewPassword = Annotated[str, AfterValidator(_new_password)]
Password = Annotated[str, AfterValidator(_password)]
Title = Annotated[str, AfterValidator(_title)]
Content = Annotated[str, AfterValidator(_content)]
PostId = Annotated[int, BeforeValidator(_post_id)]


class RegisterBody(BaseModel):
    username: Username
    email: Email
    password: NewPassword


class RegisterRequest(BaseModel):
    """POST /api/auth/register"""
    body: RegisterBody


class LoginBody(BaseModel):
    email: Email
    password: Password


class LoginRequest(BaseModel):
    """POST /api/auth/login"""
    body: LoginBody


class PostBody(BaseModel):
    title: Title
    content: Content


class PostIdParams(BaseModel):
    id: PostId


class CreatePostRequest(BaseModel):
    body: PostBody


class GetPostRequest(BaseModel):
    params: PostIdParams


class UpdatePostRequest(BaseModel):
    params: PostIdParams
    body: PostBody


class DeletePostRequest(BaseModel):
    params: PostIdParams
