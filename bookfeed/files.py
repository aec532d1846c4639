"""Filesystem helpers: YAML/markdown readers, JSON writer, deterministic copies."""

from __future__ import annotations

import json
import re
import shutil
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from bookfeed.errors import ContentError


COVER_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

CJK_RE = re.compile(r"[\u4e00-\u9fff\u3400-\u4dbf]")


def load_yaml(path: Path) -> Any:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ContentError(f"{path}: invalid YAML ({e})") from e
    return {} if data is None else data


def read_markdown(path: Path) -> tuple[dict[str, Any], str]:
    """Split a markdown file into (front matter, body)."""
    try:
        post = frontmatter.loads(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ContentError(f"{path}: invalid front matter ({e})") from e
    return dict(post.metadata), post.content


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_tree(src: Path, dst: Path) -> None:
    if not src.is_dir():
        return
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(src, dst, dirs_exist_ok=True)


def copy_file(src: Path, dst_dir: Path, name: str | None = None) -> Path:
    dst_dir.mkdir(parents=True, exist_ok=True)
    dst = dst_dir / (name or src.name)
    shutil.copy2(src, dst)
    return dst


def reset_dir(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


def sorted_files(directory: Path, suffix: str) -> list[Path]:
    """Files directly under `directory` ending in `suffix`, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.name.endswith(suffix)),
        key=lambda p: p.name,
    )


def find_cover(directory: Path) -> Path | None:
    for ext in COVER_EXTENSIONS:
        p = directory / f"cover{ext}"
        if p.is_file():
            return p
    return None


def count_cjk(text: str) -> int:
    return len(CJK_RE.findall(text))
