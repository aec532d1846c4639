"""Markdown body → standalone HTML page, with image paths made absolute."""

from __future__ import annotations

import html
import re

import markdown


MARKDOWN_EXTENSIONS = ["extra", "nl2br", "sane_lists"]

# Relative image roots authors may use: ../images/ (chapters) and ./images/ (articles).
_REL_IMAGES = r"(?:\.\./|\./)images/"

MD_IMAGE_RE = re.compile(r"(!\[[^\]]*\]\(\s*<?)" + _REL_IMAGES)
TAG_IMAGE_RE = re.compile(r"""(<img\b[^>]*?\bsrc\s*=\s*["'])""" + _REL_IMAGES, re.IGNORECASE)
# Reference-style definitions: `[a]: ../images/a.png` under `![x][a]`.
REF_IMAGE_RE = re.compile(r"(^[ \t]*\[[^\]]+\]:[ \t]*<?)" + _REL_IMAGES, re.MULTILINE)

FIRST_MD_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(\s*<?([^)\s>]+)")
FIRST_TAG_IMAGE_RE = re.compile(r"""<img\b[^>]*?\bsrc\s*=\s*["']([^"']+)["']""", re.IGNORECASE)

EXTERNAL_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*:|//|/)", re.IGNORECASE)


def join_url(base_path: str, *parts: str) -> str:
    """Absolute URL under the deployment base path ("" means site root)."""
    base = base_path.rstrip("/")
    tail = "/".join(p.strip("/") for p in parts if p and p.strip("/"))
    return f"{base}/{tail}"


def rewrite_image_paths(text: str, image_base_path: str | None) -> str:
    if image_base_path is None:
        return text
    prefix = image_base_path.rstrip("/") + "/"
    text = MD_IMAGE_RE.sub(lambda m: m.group(1) + prefix, text)
    text = TAG_IMAGE_RE.sub(lambda m: m.group(1) + prefix, text)
    return REF_IMAGE_RE.sub(lambda m: m.group(1) + prefix, text)


def first_image(text: str) -> str | None:
    """Target of the earliest image in a markdown body (markdown or <img> syntax)."""
    hits = [m for m in (FIRST_MD_IMAGE_RE.search(text), FIRST_TAG_IMAGE_RE.search(text)) if m]
    if not hits:
        return None
    return min(hits, key=lambda m: m.start()).group(1)


def resolve_image_url(ref: str, base_path: str, *location: str) -> str:
    """Map an authored image reference onto the centralized images location.

    Absolute paths and URLs with a scheme are returned unchanged.
    """
    if EXTERNAL_RE.match(ref):
        return ref
    name = re.sub(r"^(?:\.\.?/)+", "", ref)
    name = re.sub(r"^images/", "", name)
    return join_url(base_path, "images", *location, name)


def markdown_to_fragment(text: str) -> str:
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS, output_format="html")


STYLE = """
    * { box-sizing: border-box; }
    body {
      font-family: "Noto Serif SC", "Source Han Serif SC", "Songti SC", "PingFang SC", "Microsoft YaHei", serif;
      line-height: 1.8;
      margin: 0;
      padding: 16px;
      color: #333;
      background: #fff;
    }
    h1, h2, h3, h4, h5, h6 { margin: 1.5em 0 0.5em; font-weight: 600; line-height: 1.4; }
    h1 { font-size: 1.5em; }
    h2 { font-size: 1.3em; }
    h3 { font-size: 1.1em; }
    p { margin: 1em 0; text-align: justify; }
    ul, ol { padding-left: 1.5em; margin: 1em 0; }
    li { margin: 0.5em 0; }
    img { max-width: 100%; height: auto; }
    hr { border: none; border-top: 1px solid #ddd; margin: 2em 0; }
    strong { font-weight: 600; }
    code { background: #f5f5f5; padding: 2px 6px; border-radius: 3px; font-size: 0.9em; }
    blockquote { margin: 1em 0; padding: 0.5em 1em; border-left: 3px solid #ddd; color: #666; background: #f9f9f9; }
    table { border-collapse: collapse; margin: 1em 0; }
    th, td { border: 1px solid #ddd; padding: 4px 8px; }
    p strong:first-child { color: #1565c0; }
    @media (prefers-color-scheme: dark) {
      body { background: #1a1a1a; color: #e0e0e0; }
      hr { border-top-color: #444; }
      code { background: #2a2a2a; }
      blockquote { border-left-color: #444; background: #222; color: #aaa; }
      th, td { border-color: #444; }
      p strong:first-child { color: #64b5f6; }
    }
"""


def render_document(text: str, title: str, image_base_path: str | None = None) -> str:
    """Render a markdown body into a complete HTML page."""
    body = markdown_to_fragment(rewrite_image_paths(text, image_base_path))
    return f"""<!DOCTYPE html>
<html lang="zh-CN">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{html.escape(title, quote=True)}</title>
  <style>{STYLE}  </style>
</head>
<body>
{body}
</body>
</html>
"""
