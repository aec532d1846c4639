"""Tests for bookfeed.schema."""

from __future__ import annotations

from datetime import date

import pytest

from bookfeed.errors import SchemaValidationError
from bookfeed.schema import (
    ArticleItem,
    BookMeta,
    Category,
    Chapter,
    Feed,
    LocalizedString,
    PageBook,
    Settings,
    dump_record,
    localized,
    parse_record,
    require_record,
)


def _feed(items):
    return {
        "version": "1.0.0",
        "lastUpdated": "2024-01-01T00:00:00.000Z",
        "defaultLocale": "zh",
        "supportedLocales": ["zh"],
        "categories": [],
        "featured": [],
        "items": items,
    }


class TestLocalizedString:
    def test_zh_required(self):
        res = parse_record(LocalizedString, {"en": "Hello"})
        assert not res.ok
        assert any(v.startswith("zh:") for v in res.violations)

    def test_extra_locales_kept(self):
        s = LocalizedString.model_validate({"zh": "你好", "ja": "こんにちは"})
        assert s.pick("ja") == "こんにちは"

    def test_pick_fallback_order(self):
        s = LocalizedString.model_validate({"zh": "", "en": "Hello"})
        assert s.pick("vi") == "Hello"
        assert LocalizedString.model_validate({"zh": ""}).pick(fallback="book-1") == "book-1"
        assert LocalizedString.model_validate({"zh": "你好", "en": "Hi"}).pick("en") == "Hi"

    def test_pick_ignores_attribute_names(self):
        s = LocalizedString.model_validate({"zh": "中文"})
        assert s.pick("pick") == "中文"
        assert s.pick("model_dump") == "中文"
        assert s.pick("__class__") == "中文"

    def test_bare_string_is_primary_locale(self):
        assert localized("第一章") == {"zh": "第一章"}
        assert localized({"zh": "x"}) == {"zh": "x"}


class TestRecords:
    def test_settings_base_path_defaults_empty(self):
        s = Settings.model_validate({"version": "1", "defaultLocale": "zh", "supportedLocales": ["zh"]})
        assert s.base_path == ""

    def test_strict_types(self):
        res = parse_record(Category, {"id": "a", "name": {"zh": "甲"}, "icon": "x", "order": "1"})
        assert not res.ok
        assert res.violations[0].startswith("order:")

    def test_version_must_be_string(self):
        res = parse_record(Settings, {"version": 1.0, "defaultLocale": "zh", "supportedLocales": ["zh"]})
        assert not res.ok

    def test_non_mapping_rejected(self):
        res = parse_record(Chapter, ["not", "a", "dict"])
        assert not res.ok
        assert "expected a mapping" in res.violations[0]

    def test_created_at_date_normalised(self):
        meta = BookMeta.model_validate(
            {
                "id": "b",
                "title": {"zh": "书"},
                "difficulty": "easy",
                "categories": [],
                "createdAt": date(2024, 3, 1),
            }
        )
        assert meta.created_at == "2024-03-01"

    def test_unknown_status_rejected(self):
        res = parse_record(
            BookMeta,
            {"id": "b", "title": {"zh": "书"}, "difficulty": "x", "categories": [], "status": "done"},
        )
        assert not res.ok

    def test_id_must_be_slug(self):
        for bad in ("../../escaped", "a/b", "a\\b", "..", ".hidden", "x..y", "two words", ""):
            res = parse_record(BookMeta, {"id": bad, "title": {"zh": "书"}, "difficulty": "x", "categories": []})
            assert not res.ok, bad
            assert res.violations[0].startswith("id:")

    def test_slug_ids_accepted(self):
        for good in ("hsk-1", "lu_xun.v2", "第一本"):
            meta = BookMeta.model_validate({"id": good, "title": {"zh": "书"}, "difficulty": "x", "categories": []})
            assert meta.id == good

    def test_require_record_raises_with_document(self):
        with pytest.raises(SchemaValidationError) as exc:
            require_record(PageBook, {"id": "p"}, "content/pagebooks/p.yaml")
        assert exc.value.document == "content/pagebooks/p.yaml"
        assert any(v.startswith("homeUrl:") for v in exc.value.violations)


class TestFeed:
    def test_items_discriminated_by_type(self):
        feed = Feed.model_validate(
            _feed(
                [
                    {"id": "p", "type": "pagebook", "title": {"zh": "页"}, "homeUrl": "https://x",
                     "difficulty": "a", "categories": []},
                    {"id": "a", "type": "article", "title": {"zh": "文"}, "sourceUrl": "articles/a.html",
                     "difficulty": "a", "categories": []},
                ]
            )
        )
        assert isinstance(feed.items[0], PageBook)
        assert isinstance(feed.items[1], ArticleItem)

    def test_variant_fields_enforced(self):
        res = parse_record(
            Feed,
            _feed([{"id": "p", "type": "pagebook", "title": {"zh": "页"}, "difficulty": "a", "categories": []}]),
        )
        assert not res.ok
        assert any("homeUrl" in v for v in res.violations)

    def test_unknown_type_rejected(self):
        res = parse_record(
            Feed, _feed([{"id": "x", "type": "video", "title": {"zh": "x"}, "difficulty": "a", "categories": []}])
        )
        assert not res.ok

    def test_dump_is_camel_case_without_nulls(self):
        ch = Chapter(id="01", title=LocalizedString(zh="一"), file="chapters/01.html", word_count=3)
        assert dump_record(ch) == {"id": "01", "title": {"zh": "一"}, "file": "chapters/01.html", "wordCount": 3}
