"""
Record shapes for everything read from `content/` and written to `public/`.

Every YAML / front-matter document passes through one of these models before
the rest of the build sees it. Models are strict (no silent coercion of a
number into a string and so on), camelCase on disk, snake_case in Python.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from bookfeed.errors import SchemaValidationError


PRIMARY_LOCALE = "zh"

# Ids become directory and file names under public/.
SLUG_RE = re.compile(r"^(?!\.)[^/\\\s]+$")

ContentStatus = Literal["complete", "ongoing", "hiatus"]
ItemType = Literal["book", "pagebook", "article"]


class Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        extra="ignore",
        frozen=True,
    )


class LocalizedString(BaseModel):
    """Text keyed by locale code. `zh` is always present."""

    model_config = ConfigDict(strict=True, extra="allow", frozen=True)

    __pydantic_extra__: dict[str, str] = Field(init=False)

    zh: str
    en: str | None = None
    vi: str | None = None

    def pick(self, locale: str | None = None, fallback: str = "") -> str:
        """Requested locale, then zh, then en, then `fallback`."""
        order = [locale] if locale else []
        order += [PRIMARY_LOCALE, "en"]
        texts = self.model_dump(exclude_none=True)
        for code in order:
            text = texts.get(code)
            if text:
                return text
        return fallback


def _iso_date(value: Any) -> Any:
    # YAML turns unquoted 2024-05-01 into a date object.
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


class Category(Record):
    id: str
    name: LocalizedString
    icon: str
    order: int


class Chapter(Record):
    id: str
    title: LocalizedString
    file: str
    word_count: int | None = None


class ItemBase(Record):
    id: str
    title: LocalizedString
    subtitle: LocalizedString | None = None
    description: LocalizedString | None = None
    difficulty: str
    categories: list[str]
    created_at: str | None = None

    @field_validator("id")
    @classmethod
    def _id_is_slug(cls, value: str) -> str:
        if not SLUG_RE.match(value) or ".." in value:
            raise ValueError("must be a slug: no '/', '\\', '..', whitespace or leading '.'")
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at_as_string(cls, value: Any) -> Any:
        return _iso_date(value)


class BookMeta(ItemBase):
    type: Literal["book"] = "book"
    author: LocalizedString | None = None
    status: ContentStatus | None = None


class PageBook(ItemBase):
    type: Literal["pagebook"] = "pagebook"
    image_url: str | None = None
    home_url: str


class ArticleMeta(ItemBase):
    type: Literal["article"] = "article"
    cover_image: str | None = None
    word_count: int | None = None


class BookItem(BookMeta):
    image_url: str | None = None
    manifest_url: str | None = None
    chapters_count: int | None = None


class ArticleItem(ArticleMeta):
    image_url: str | None = None
    source_url: str | None = None


FeedItem = Annotated[Union[BookItem, PageBook, ArticleItem], Field(discriminator="type")]


class BookManifest(Record):
    id: str
    title: LocalizedString
    subtitle: LocalizedString | None = None
    author: LocalizedString | None = None
    description: LocalizedString | None = None
    cover_url: str | None = None
    difficulty: str
    total_chapters: int
    status: ContentStatus
    chapters: list[Chapter]


class Feed(Record):
    version: str
    last_updated: str
    default_locale: str
    supported_locales: list[str]
    categories: list[Category]
    featured: list[str]
    items: list[FeedItem]


class Settings(Record):
    version: str
    default_locale: str
    supported_locales: list[str]
    base_path: str = ""


class CategoriesConfig(Record):
    categories: list[Category]


class FeaturedConfig(Record):
    featured: list[str]


# ── parse / dump ──────────────────────────────────────────────────


@dataclass(frozen=True)
class ParseResult:
    value: Any = None
    violations: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


def format_violations(exc: ValidationError) -> list[str]:
    out: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        out.append(f"{loc}: {err.get('msg', 'invalid')}")
    return out


def parse_record(model: type[BaseModel], data: Any) -> ParseResult:
    """Validate `data` against `model` without raising."""
    if not isinstance(data, dict):
        return ParseResult(violations=[f"<root>: expected a mapping, got {type(data).__name__}"])
    try:
        return ParseResult(value=model.model_validate(data))
    except ValidationError as e:
        return ParseResult(violations=format_violations(e))


def require_record(model: type[BaseModel], data: Any, document: str) -> Any:
    res = parse_record(model, data)
    if not res.ok:
        raise SchemaValidationError(document, res.violations)
    return res.value


def localized(value: Any) -> Any:
    """A bare string stands for the primary-locale text."""
    if isinstance(value, str):
        return {PRIMARY_LOCALE: value}
    return value


def dump_record(record: BaseModel) -> dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True, exclude_none=True)
