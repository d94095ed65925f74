"""Turns Jekyll-style markdown posts into plain-text corpus entries.

A post is a markdown file with YAML front matter::

    ---
    title: Cats and Dogs
    date: 2023-04-01 10:00:00 +0200
    ---
    Cats are *great* pets. [Read more](https://example.com).

The body is rendered to HTML and stripped back to text, so markup and link
targets never reach the tokenizer while link text does.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import markdown as markdown_lib
import yaml

from rankedsearch.config import settings
from rankedsearch.errors import ContentError
from rankedsearch.models.document import SourceDocument
from rankedsearch.services.indexer.text_processor import TextProcessor

logger = logging.getLogger("rankedsearch.indexer.content")

text_processor = TextProcessor()

FRONT_MATTER_DELIMITER = "---"
EXCERPT_DIVIDER = " • "
ELLIPSIS = "..."
POST_SUFFIXES = (".md", ".markdown")
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_FRONT_MATTER_PATTERN = re.compile(
    rf"^{re.escape(FRONT_MATTER_DELIMITER)}\s*\n(.*?)\n{re.escape(FRONT_MATTER_DELIMITER)}\s*(?:\n|$)",
    re.DOTALL,
)
_FILENAME_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)$")


@dataclass(frozen=True)
class Post:
    path: Path
    title: str
    url: str
    published: datetime
    text: str

    def to_source(self, n_words: int | None = None) -> SourceDocument:
        return SourceDocument(
            title=self.title,
            text=self.text,
            url=self.url,
            date=self.published.strftime(DATE_FORMAT),
            excerpt=make_excerpt(self.text, n_words),
        )


def parse_front_matter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front matter from the markdown body.

    Returns (empty dict, original content) when there is no front matter.
    Invalid YAML raises ContentError.
    """
    match = _FRONT_MATTER_PATTERN.match(content)
    if not match:
        return {}, content

    try:
        metadata = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise ContentError(f"Invalid front matter: {e}") from e
    if not isinstance(metadata, dict):
        raise ContentError("Front matter must be a mapping")

    return metadata, content[match.end() :]


def markdown_to_text(markdown: str) -> str:
    """Render markdown and strip it to text, one block per line."""
    if not markdown:
        return ""
    html = markdown_lib.markdown(markdown, extensions=["fenced_code", "tables"])
    return text_processor.html_to_text(html)


def make_excerpt(text: str, n_words: int | None = None) -> str:
    """First ``n_words`` words of ``text``, block breaks shown as bullets.

    ``"..."`` is appended only when words were cut off.
    """
    if n_words is None:
        n_words = settings.excerpt_words
    content = text.replace("\n", EXCERPT_DIVIDER)
    if content.endswith(EXCERPT_DIVIDER):
        content = content[: -len(EXCERPT_DIVIDER)]

    words = content.split()
    excerpt = " ".join(words[:n_words])
    if len(words) > n_words:
        excerpt += ELLIPSIS
    return excerpt


def _coerce_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        published = value
    elif isinstance(value, date):
        published = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        raw = value.strip()
        try:
            published = datetime.strptime(raw, "%Y-%m-%d %H:%M:%S %z")
        except ValueError:
            try:
                published = datetime.fromisoformat(raw)
            except ValueError as e:
                raise ContentError(f"Unparseable date: {value!r}") from e
    else:
        raise ContentError(f"Unparseable date: {value!r}")

    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    return published


def _default_url(published: datetime, slug: str) -> str:
    return f"/{published:%Y/%m/%d}/{slug}.html"


def parse_post(path: Path) -> Post:
    """Read one post. Missing title or date raises ContentError."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ContentError(f"Cannot read post {path}: {e}") from e

    try:
        metadata, body = parse_front_matter(content)
    except ContentError as e:
        raise ContentError(f"{path}: {e}") from e

    title = metadata.get("title")
    if not title:
        raise ContentError(f"{path}: missing title")

    name_match = _FILENAME_PATTERN.match(path.stem)
    slug = name_match.group(4) if name_match else path.stem

    if "date" in metadata:
        published = _coerce_datetime(metadata["date"])
    elif name_match:
        published = _coerce_datetime("-".join(name_match.group(1, 2, 3)))
    else:
        raise ContentError(f"{path}: missing date")

    url = metadata.get("permalink") or _default_url(published, slug)

    return Post(
        path=path,
        title=str(title),
        url=str(url),
        published=published,
        text=markdown_to_text(body),
    )


def load_posts(directory: str | Path) -> list[Post]:
    """Load every post under ``directory``, oldest first.

    Oldest-first ordering is what makes the recency boost favor new posts.
    """
    root = Path(directory).expanduser()
    if not root.is_dir():
        raise ContentError(f"Posts directory not found: {root}")

    paths = sorted(p for p in root.rglob("*") if p.is_file() and p.suffix in POST_SUFFIXES)
    posts = [parse_post(p) for p in paths]
    posts.sort(key=lambda p: (p.published, p.path.name))

    logger.info("Loaded %d posts from %s", len(posts), root)
    return posts
