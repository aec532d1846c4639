from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest


PNG = b"\x89PNG\r\n\x1a\nfake"


def write(path: Path, text: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(text, bytes):
        path.write_bytes(text)
    else:
        path.write_text(dedent(text).lstrip("\n"), encoding="utf-8")
    return path


def write_config(root: Path, *, base_path: str = "", featured: list[str] | None = None) -> None:
    cfg = root / "content" / "_config"
    settings = 'version: "1.0.0"\ndefaultLocale: zh\nsupportedLocales: [zh, en]\n'
    if base_path:
        settings += f'basePath: "{base_path}"\n'
    write(cfg / "settings.yaml", settings)
    write(
        cfg / "categories.yaml",
        """
        categories:
          - id: grammar
            name: {zh: 语法, en: Grammar}
            icon: book
            order: 1
          - id: culture
            name: {zh: 文化, en: Culture}
            icon: globe
            order: 2
        """,
    )
    featured = ["hsk-1", "lu-xun-essay"] if featured is None else featured
    write(cfg / "featured.yaml", "featured: [" + ", ".join(featured) + "]\n")


def write_book(root: Path) -> Path:
    book = root / "content" / "books" / "hsk-1"
    write(
        book / "_index.yaml",
        """
        id: hsk-1
        title:
          zh: 汉语水平一级
          en: HSK Level 1
        difficulty: beginner
        categories: [grammar]
        createdAt: 2024-03-01
        """,
    )
    write(
        book / "chapters" / "01.md",
        """
        ---
        title: 第一课
        ---
        你好世界

        ![pic](../images/a.png)
        """,
    )
    write(book / "chapters" / "02.md", "我们\n")
    write(book / "chapters" / "02.yaml", "title:\n  zh: 第二课\n  en: Lesson 2\n")
    write(book / "chapters" / "03.md", "第三课内容\n")
    write(book / "cover.png", PNG)
    write(book / "images" / "a.png", PNG)
    return book


def write_pagebook(root: Path) -> Path:
    return write(
        root / "content" / "pagebooks" / "radicals.yaml",
        """
        title: {zh: 部首}
        homeUrl: https://example.com/radicals
        difficulty: intermediate
        categories: [grammar]
        """,
    )


def write_article(root: Path) -> Path:
    articles = root / "content" / "articles"
    write(articles / "images" / "first.png", PNG)
    return write(
        articles / "lu-xun-essay.md",
        """
        ---
        id: lu-xun-essay
        title:
          zh: 鲁迅杂文
          en: Lu Xun Essays
        difficulty: advanced
        categories: [culture]
        createdAt: "2024-05-10"
        ---
        鲁迅是作家。

        ![first](./images/first.png)

        更多内容
        """,
    )


@pytest.fixture
def make_site(tmp_path):
    """Factory for a small but complete content tree under tmp_path."""

    def _make(*, base_path: str = "", featured: list[str] | None = None) -> Path:
        root = tmp_path / "site"
        write_config(root, base_path=base_path, featured=featured)
        write_book(root)
        write_pagebook(root)
        write_article(root)
        return root

    return _make


@pytest.fixture
def site(make_site) -> Path:
    return make_site()
