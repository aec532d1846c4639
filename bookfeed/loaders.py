"""
Read `content/` into validated records.

Layout:
  content/_config/{settings,categories,featured}.yaml
  content/books/<slug>/_index.yaml
  content/books/<slug>/chapters/*.md (+ optional <stem>.yaml)
  content/books/<slug>/cover.{jpg,jpeg,png,webp}, images/
  content/pagebooks/*.yaml
  content/articles/*.md, images/

Every document is validated on the way in; the first invalid one aborts the load.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Union

from bookfeed.errors import SchemaValidationError
from bookfeed.files import count_cjk, find_cover, load_yaml, read_markdown, sorted_files
from bookfeed.render import first_image
from bookfeed.schema import (
    ArticleMeta,
    BookMeta,
    CategoriesConfig,
    Category,
    Chapter,
    FeaturedConfig,
    PageBook,
    Settings,
    localized,
    require_record,
)


CONTENT_DIR = "content"
CONFIG_DIR = "_config"
BOOK_INDEX = "_index.yaml"


def _doc(path: Path, base_dir: Path) -> str:
    try:
        return path.relative_to(base_dir).as_posix()
    except ValueError:
        return str(path)


def _with_defaults(raw: Any, **defaults: Any) -> Any:
    # Non-mappings go through untouched so the schema reports them.
    if not isinstance(raw, dict):
        return raw
    return {**defaults, **raw}


# ── configuration ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Config:
    settings: Settings
    categories: list[Category]
    featured: list[str]


def _load_config_document(path: Path, model: type, base_dir: Path) -> Any:
    name = _doc(path, base_dir)
    if not path.is_file():
        raise SchemaValidationError(name, ["file not found"])
    return require_record(model, load_yaml(path), name)


def load_config(base_dir: Path) -> Config:
    config_dir = base_dir / CONTENT_DIR / CONFIG_DIR
    settings = _load_config_document(config_dir / "settings.yaml", Settings, base_dir)
    categories = _load_config_document(config_dir / "categories.yaml", CategoriesConfig, base_dir)
    featured = _load_config_document(config_dir / "featured.yaml", FeaturedConfig, base_dir)
    return Config(settings=settings, categories=categories.categories, featured=featured.featured)


# ── loaded records ────────────────────────────────────────────────


@dataclass(frozen=True)
class LoadedChapter:
    chapter: Chapter
    source: Path


@dataclass(frozen=True)
class LoadedBook:
    kind: ClassVar[str] = "book"

    meta: BookMeta
    source_dir: Path
    chapters: list[LoadedChapter]
    cover: Path | None = None

    @property
    def id(self) -> str:
        return self.meta.id


@dataclass(frozen=True)
class LoadedPageBook:
    kind: ClassVar[str] = "pagebook"

    meta: PageBook
    source: Path

    @property
    def id(self) -> str:
        return self.meta.id


@dataclass(frozen=True)
class LoadedArticle:
    kind: ClassVar[str] = "article"

    meta: ArticleMeta
    source: Path
    body: str

    @property
    def id(self) -> str:
        return self.meta.id

    @property
    def slug(self) -> str:
        return self.source.stem


LoadedItem = Union[LoadedBook, LoadedPageBook, LoadedArticle]


def source_of(item: LoadedItem) -> Path:
    if isinstance(item, LoadedBook):
        return item.source_dir
    return item.source


# ── loaders ───────────────────────────────────────────────────────


class Loader:
    """One on-disk content layout. `discover` returns validated records."""

    def discover(self, base_dir: Path) -> list[LoadedItem]:
        raise NotImplementedError


def _chapter_title(md_path: Path, front_matter: dict[str, Any]) -> Any:
    sidecar = md_path.with_suffix(".yaml")
    if sidecar.is_file():
        side = load_yaml(sidecar)
        if isinstance(side, dict) and side.get("title"):
            return side["title"]
    if front_matter.get("title"):
        return front_matter["title"]
    return f"Chapter {md_path.stem}"


def load_chapters(chapters_dir: Path, base_dir: Path) -> list[LoadedChapter]:
    """Chapters in filename order. A missing directory means no chapters."""
    chapters: list[LoadedChapter] = []
    for md_path in sorted_files(chapters_dir, ".md"):
        front_matter, body = read_markdown(md_path)
        record = {
            "id": md_path.stem,
            "title": localized(_chapter_title(md_path, front_matter)),
            "file": f"chapters/{md_path.name}",
            "wordCount": count_cjk(body),
        }
        chapter = require_record(Chapter, record, _doc(md_path, base_dir))
        chapters.append(LoadedChapter(chapter=chapter, source=md_path))
    return chapters


class BookLoader(Loader):
    def discover(self, base_dir: Path) -> list[LoadedItem]:
        books_dir = base_dir / CONTENT_DIR / "books"
        if not books_dir.is_dir():
            return []
        books: list[LoadedItem] = []
        for book_dir in sorted(books_dir.iterdir(), key=lambda p: p.name):
            index = book_dir / BOOK_INDEX
            if book_dir.name.startswith(".") or not index.is_file():
                continue
            raw = _with_defaults(load_yaml(index), id=book_dir.name)
            if isinstance(raw, dict):
                raw["type"] = "book"
            meta = require_record(BookMeta, raw, _doc(index, base_dir))
            books.append(
                LoadedBook(
                    meta=meta,
                    source_dir=book_dir,
                    chapters=load_chapters(book_dir / "chapters", base_dir),
                    cover=find_cover(book_dir),
                )
            )
        return books


class PageBookLoader(Loader):
    def discover(self, base_dir: Path) -> list[LoadedItem]:
        pagebooks: list[LoadedItem] = []
        for path in sorted_files(base_dir / CONTENT_DIR / "pagebooks", ".yaml"):
            raw = _with_defaults(load_yaml(path), id=path.stem)
            if isinstance(raw, dict):
                raw["type"] = "pagebook"
            meta = require_record(PageBook, raw, _doc(path, base_dir))
            pagebooks.append(LoadedPageBook(meta=meta, source=path))
        return pagebooks


class ArticleLoader(Loader):
    def discover(self, base_dir: Path) -> list[LoadedItem]:
        articles: list[LoadedItem] = []
        for path in sorted_files(base_dir / CONTENT_DIR / "articles", ".md"):
            front_matter, body = read_markdown(path)
            raw = {"id": path.stem, **front_matter, "type": "article", "wordCount": count_cjk(body)}
            if not raw.get("coverImage"):
                raw["coverImage"] = first_image(body)
            meta = require_record(ArticleMeta, raw, _doc(path, base_dir))
            articles.append(LoadedArticle(meta=meta, source=path, body=body))
        return articles


DEFAULT_LOADERS: tuple[Loader, ...] = (BookLoader(), PageBookLoader(), ArticleLoader())


def load_content(base_dir: Path, loaders: tuple[Loader, ...] = DEFAULT_LOADERS) -> list[LoadedItem]:
    items: list[LoadedItem] = []
    for loader in loaders:
        items.extend(loader.discover(base_dir))
    return items
