import re
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
)

from blog.categories import Category
from blog.config import settings
from blog.tags import normalize_tags

# Request bodies use the Spanish field names of the public API as aliases;
# services read the English attribute names.

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _check_email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise ValueError("Invalid email format")
    return value.lower()


EmailAddress = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(_check_email)]


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Article ---

class ArticleCreate(_Request):
    title: NonEmptyStr = Field(alias="titulo", max_length=255)
    content: NonEmptyStr = Field(alias="contenido")
    author: NonEmptyStr = Field(alias="autor", max_length=100)
    category: Category = Field(Category.OTHER, alias="categoria")
    tags: list[str] = []

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value):
        return Category.parse(value) or Category.OTHER

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value):
        return normalize_tags(value)


class ArticleUpdate(_Request):
    """Partial update; blank or missing fields (tags included) keep their stored value."""

    title: str | None = Field(None, alias="titulo", max_length=255)
    content: str | None = Field(None, alias="contenido")
    author: str | None = Field(None, alias="autor", max_length=100)
    category: Category | None = Field(None, alias="categoria")
    tags: str | list[str] | None = None

    @field_validator("title", "content", "author", mode="before")
    @classmethod
    def _blank_text(cls, value):
        value = _blank_to_none(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags", mode="before")
    @classmethod
    def _blank_tags(cls, value):
        return _blank_to_none(value)

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, value):
        return Category.parse(value)


# --- Comment ---

class CommentCreate(_Request):
    article_id: int = Field(alias="articulo_id", ge=1)
    author_name: NonEmptyStr = Field(alias="nombre", max_length=100)
    content: NonEmptyStr = Field(alias="comentario")


# --- User ---

class UserCreate(_Request):
    name: NonEmptyStr = Field(alias="nombre", max_length=100)
    email: EmailAddress
    password: str = Field(min_length=settings.PASSWORD_MIN_LENGTH, max_length=128)


class UserUpdate(_Request):
    name: NonEmptyStr = Field(alias="nombre", max_length=100)
    email: EmailAddress
    password: str | None = Field(None, min_length=settings.PASSWORD_MIN_LENGTH, max_length=128)

    @field_validator("password", mode="before")
    @classmethod
    def _blank_password(cls, value):
        return _blank_to_none(value)


class LoginRequest(_Request):
    email: NonEmptyStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.lower()
