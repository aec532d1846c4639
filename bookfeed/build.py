#!/usr/bin/env python3
"""
Build `public/` from `content/`.

Outputs:
  - public/discover/feed.json            (every item, for catalog clients)
  - public/books/<id>/_index.json        (per-book manifest)
  - public/books/<id>/chapters/*.html
  - public/articles/*.html
  - public/images/{books/<id>,articles}/  (centralized images)
  - public/images/, public/admin/        (copied from static/images and admin/)

Every run starts from an empty output directory.
"""

from __future__ import annotations

import argparse
import sys
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from bookfeed.errors import BookFeedError, DuplicateItemError
from bookfeed.files import copy_file, copy_tree, read_markdown, reset_dir, write_json, write_text
from bookfeed.loaders import (
    CONTENT_DIR,
    Config,
    LoadedArticle,
    LoadedBook,
    LoadedItem,
    LoadedPageBook,
    load_config,
    load_content,
    source_of,
)
from bookfeed.render import join_url, render_document, resolve_image_url
from bookfeed.schema import ArticleItem, BookItem, BookManifest, Chapter, Feed, dump_record


PUBLIC_DIR = "public"
FEED_PATH = ("discover", "feed.json")
MANIFEST_NAME = "_index.json"
DEFAULT_STATUS = "ongoing"


@dataclass
class BuildResult:
    feed: Feed
    manifests: dict[str, BookManifest] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


def timestamp(now: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def check_unique_ids(items: list[LoadedItem], root: Path) -> None:
    seen: dict[str, list[str]] = defaultdict(list)
    for item in items:
        src = source_of(item)
        seen[item.id].append(src.relative_to(root).as_posix() if src.is_relative_to(root) else str(src))
    for item_id, sources in seen.items():
        if len(sources) > 1:
            raise DuplicateItemError(item_id, sources)


def sort_items(items: list) -> list:
    """Dated items first, newest first; undated items keep their order."""
    dated = sorted((i for i in items if i.created_at), key=lambda i: i.created_at, reverse=True)
    undated = [i for i in items if not i.created_at]
    return dated + undated


# ── per-kind emitters ─────────────────────────────────────────────


def emit_book(book: LoadedBook, config: Config, out_dir: Path, warnings: list[str]) -> tuple[BookItem, BookManifest]:
    base_path = config.settings.base_path
    book_out = out_dir / "books" / book.id
    images_out = out_dir / "images" / "books" / book.id
    image_base = join_url(base_path, "images", "books", book.id)
    book_title = book.meta.title.pick(fallback=book.id)

    chapters: list[Chapter] = []
    for loaded in book.chapters:
        chapter = loaded.chapter
        if not loaded.source.is_file():
            warnings.append(f"Book {book.id}: chapter source missing, left unrendered: {chapter.file}")
            chapters.append(chapter)
            continue
        _, body = read_markdown(loaded.source)
        html_name = loaded.source.with_suffix(".html").name
        title = f"{book_title} - {chapter.title.pick(fallback=chapter.id)}"
        write_text(book_out / "chapters" / html_name, render_document(body, title, image_base))
        chapters.append(chapter.model_copy(update={"file": f"chapters/{html_name}"}))

    cover_url = None
    if book.cover is not None:
        copy_file(book.cover, images_out)
        cover_url = join_url(base_path, "images", "books", book.id, book.cover.name)
    copy_tree(book.source_dir / "images", images_out)

    manifest = BookManifest(
        id=book.id,
        title=book.meta.title,
        subtitle=book.meta.subtitle,
        author=book.meta.author,
        description=book.meta.description,
        cover_url=cover_url,
        difficulty=book.meta.difficulty,
        total_chapters=len(chapters),
        status=book.meta.status or DEFAULT_STATUS,
        chapters=chapters,
    )
    write_json(book_out / MANIFEST_NAME, dump_record(manifest))

    if not chapters:
        warnings.append(f"Book {book.id}: no chapters found")

    item = BookItem.model_validate(
        {
            **book.meta.model_dump(),
            "image_url": cover_url,
            "manifest_url": f"books/{book.id}/{MANIFEST_NAME}",
            "chapters_count": len(chapters),
        }
    )
    return item, manifest


def emit_article(article: LoadedArticle, config: Config, out_dir: Path) -> ArticleItem:
    base_path = config.settings.base_path
    html_name = f"{article.slug}.html"
    title = article.meta.title.pick(fallback=article.id)
    page = render_document(article.body, title, join_url(base_path, "images", "articles"))
    write_text(out_dir / "articles" / html_name, page)

    cover = article.meta.cover_image
    return ArticleItem.model_validate(
        {
            **article.meta.model_dump(),
            "image_url": resolve_image_url(cover, base_path, "articles") if cover else None,
            "source_url": f"articles/{html_name}",
        }
    )


# ── build ─────────────────────────────────────────────────────────


def build(root: Path, out_dir: Path | None = None, now: datetime | None = None) -> BuildResult:
    out_dir = out_dir or root / PUBLIC_DIR
    started = now or datetime.now(timezone.utc)

    config = load_config(root)
    print(f"✓ Loaded config: {len(config.categories)} categories, {len(config.featured)} featured")

    loaded = load_content(root)
    check_unique_ids(loaded, root)
    counts: dict[str, int] = defaultdict(int)
    for item in loaded:
        counts[item.kind] += 1
    print(f"✓ Loaded {counts['book']} books, {counts['pagebook']} pagebooks, {counts['article']} articles")

    reset_dir(out_dir)
    print(f"✓ Cleaned {out_dir}")

    warnings: list[str] = []
    manifests: dict[str, BookManifest] = {}
    items = []
    for item in loaded:
        if isinstance(item, LoadedBook):
            book_item, manifest = emit_book(item, config, out_dir, warnings)
            manifests[item.id] = manifest
            items.append(book_item)
            print(f"  ✓ books/{item.id}/ ({manifest.total_chapters} chapters)")
        elif isinstance(item, LoadedPageBook):
            items.append(item.meta)
        elif isinstance(item, LoadedArticle):
            items.append(emit_article(item, config, out_dir))
            print(f"  ✓ articles/{item.slug}.html")
        else:
            raise TypeError(f"Unhandled content item: {item!r}")

    copy_tree(root / CONTENT_DIR / "articles" / "images", out_dir / "images" / "articles")

    known_categories = {c.id for c in config.categories}
    for item in items:
        for cat in item.categories:
            if cat not in known_categories:
                warnings.append(f"Item {item.id}: unknown category {cat}")

    item_ids = {item.id for item in items}
    for featured_id in config.featured:
        if featured_id not in item_ids:
            warnings.append(f"Featured item not found: {featured_id}")

    feed = Feed(
        version=config.settings.version,
        last_updated=timestamp(started),
        default_locale=config.settings.default_locale,
        supported_locales=config.settings.supported_locales,
        categories=config.categories,
        featured=config.featured,
        items=sort_items(items),
    )
    write_json(out_dir.joinpath(*FEED_PATH), dump_record(feed))
    print(f"✓ Generated {'/'.join(FEED_PATH)} ({len(items)} items)")

    static_images = root / "static" / "images"
    if static_images.is_dir():
        copy_tree(static_images, out_dir / "images")
        print("✓ Copied static images")
    admin_dir = root / "admin"
    if admin_dir.is_dir():
        copy_tree(admin_dir, out_dir / "admin")
        print("✓ Copied admin UI")

    return BuildResult(feed=feed, manifests=manifests, warnings=warnings)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Build the discovery feed and book manifests from content/.")
    ap.add_argument("--root", default=".", help="Repo root containing content/ (default: cwd)")
    ap.add_argument("--out", help="Output directory (default: <root>/public)")
    args = ap.parse_args(argv)

    root = Path(args.root).resolve()
    out_dir = Path(args.out).resolve() if args.out else root / PUBLIC_DIR

    try:
        result = build(root, out_dir)
    except BookFeedError as e:
        print(f"✗ Build failed: {e}", file=sys.stderr)
        return 1

    if result.warnings:
        print("\n⚠ Warnings:")
        for w in result.warnings:
            print(f"  - {w}")

    print(f"\nDone. {len(result.feed.items)} items, {len(result.manifests)} book manifests → {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
