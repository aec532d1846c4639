#!/usr/bin/env python3
"""
Check a built `public/` tree.

Re-reads discover/feed.json and every books/<id>/_index.json, validates them
against the same schemas the build writes with, then cross-checks references:
featured ids, category usage, manifest URLs and chapter files on disk.

Errors fail the check (exit 1); warnings are reported only.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bookfeed.schema import BookItem, BookManifest, Feed, PageBook, PRIMARY_LOCALE, parse_record


PUBLIC_DIR = "public"


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    checked: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def error(self, msg: str) -> None:
        self.errors.append(msg)

    def warn(self, msg: str) -> None:
        self.warnings.append(msg)

    def merge(self, other: ValidationResult) -> ValidationResult:
        return ValidationResult(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
            checked=self.checked + other.checked,
        )

    def as_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": self.errors, "warnings": self.warnings}


def _read_json(path: Path, label: str, result: ValidationResult) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        result.error(f"Failed to read {label}: {e}")
        return None


def validate_feed(out_dir: Path) -> ValidationResult:
    result = ValidationResult()
    feed_path = out_dir / "discover" / "feed.json"
    if not feed_path.is_file():
        result.error("feed.json not found - run build first")
        return result

    raw = _read_json(feed_path, "feed.json", result)
    if raw is None:
        return result
    parsed = parse_record(Feed, raw)
    if not parsed.ok:
        result.error(f"Feed schema validation failed: {'; '.join(parsed.violations)}")
        return result
    feed: Feed = parsed.value

    for item in feed.items:
        if not item.title.zh.strip():
            result.error(f"Item {item.id}: missing {PRIMARY_LOCALE} title")
        if not item.difficulty.strip():
            result.warn(f"Item {item.id}: missing difficulty")
        if not item.categories:
            result.warn(f"Item {item.id}: no categories assigned")

        if isinstance(item, BookItem):
            if not item.manifest_url:
                result.error(f"Book {item.id}: missing manifestUrl")
            elif not (out_dir / item.manifest_url).is_file():
                result.error(f"Book {item.id}: manifest not found: {item.manifest_url}")
            if not item.chapters_count:
                result.warn(f"Book {item.id}: no chapters found")
        elif isinstance(item, PageBook):
            if not item.home_url.strip():
                result.error(f"PageBook {item.id}: missing homeUrl")

    for item_id, n in sorted(Counter(i.id for i in feed.items).items()):
        if n > 1:
            result.error(f"Duplicate item id: {item_id} ({n}x)")

    item_ids = {i.id for i in feed.items}
    for featured_id in feed.featured:
        if featured_id not in item_ids:
            result.warn(f"Featured item not found: {featured_id}")

    known = {c.id for c in feed.categories}
    used = {cat for i in feed.items for cat in i.categories}
    for cat in feed.categories:
        if cat.id not in used:
            result.warn(f"Category not used: {cat.id}")
    for cat in sorted(used - known):
        result.warn(f"Unknown category referenced: {cat}")

    result.checked.append(f"Feed: {len(feed.items)} items")
    return result


def validate_manifests(out_dir: Path) -> ValidationResult:
    result = ValidationResult()
    books_dir = out_dir / "books"
    manifest_paths = sorted(books_dir.glob("*/_index.json")) if books_dir.is_dir() else []

    for path in manifest_paths:
        book_id = path.parent.name
        raw = _read_json(path, f"book {book_id} manifest", result)
        if raw is None:
            continue
        parsed = parse_record(BookManifest, raw)
        if not parsed.ok:
            result.error(f"Book {book_id} manifest invalid: {'; '.join(parsed.violations)}")
            continue
        manifest: BookManifest = parsed.value

        if not manifest.chapters:
            result.warn(f"Book {book_id}: no chapters")
        for chapter in manifest.chapters:
            if not (path.parent / chapter.file).is_file():
                result.error(f"Book {book_id}: chapter file not found: {chapter.file}")

        result.checked.append(f"Book {book_id}: {len(manifest.chapters)} chapters")
    return result


def validate_output(out_dir: Path) -> ValidationResult:
    return validate_feed(out_dir).merge(validate_manifests(out_dir))


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Validate a built public/ directory.")
    ap.add_argument("--root", default=".", help="Repo root (default: cwd)")
    ap.add_argument("--out", help="Built output directory (default: <root>/public)")
    ap.add_argument("--json", action="store_true", help="Emit JSON to stdout")
    args = ap.parse_args(argv)

    root = Path(args.root).resolve()
    out_dir = Path(args.out).resolve() if args.out else root / PUBLIC_DIR

    res = validate_output(out_dir)
    if args.json:
        print(json.dumps(res.as_dict(), ensure_ascii=False, indent=2))
        return 0 if res.valid else 1

    for line in res.checked:
        print(f"✓ {line}")
    if res.warnings:
        print("\n⚠ Warnings:")
        for w in res.warnings:
            print(f"  - {w}")
    if res.errors:
        print("\n✗ Errors:", file=sys.stderr)
        for e in res.errors:
            print(f"  - {e}", file=sys.stderr)
        print("\nValidation FAILED", file=sys.stderr)
        return 1

    print("\nValidation passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
