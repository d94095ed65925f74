import re
import logging
from pathlib import Path

from bs4 import BeautifulSoup

from rankedsearch.config import settings
from rankedsearch.errors import StopwordsUnavailableError

logger = logging.getLogger("rankedsearch.indexer.text_processor")

# Lazy-loaded stopword set, shared by indexing and querying
_stopwords: frozenset[str] | None = None


def _load_stopwords_file(path: str) -> frozenset[str]:
    try:
        with open(Path(path).expanduser(), encoding="utf-8") as f:
            words = {line.strip() for line in f}
    except OSError as e:
        raise StopwordsUnavailableError(f"Cannot read stopwords file {path}: {e}") from e
    words.discard("")
    return frozenset(words)


def _load_nltk_stopwords() -> frozenset[str]:
    try:
        from nltk.corpus import stopwords
        return frozenset(stopwords.words("english"))
    except LookupError:
        import nltk
        nltk.download("stopwords", quiet=True)
    try:
        from nltk.corpus import stopwords
        return frozenset(stopwords.words("english"))
    except LookupError as e:
        raise StopwordsUnavailableError("NLTK english stopwords are not available") from e


def _get_stopwords() -> frozenset[str]:
    global _stopwords
    if _stopwords is None:
        logger.info("Loading stopwords")
        if settings.stopwords_file:
            _stopwords = _load_stopwords_file(settings.stopwords_file)
        else:
            _stopwords = _load_nltk_stopwords()
        logger.info("Done loading %d stopwords", len(_stopwords))
    return _stopwords


def reset_stopwords() -> None:
    """Forget the cached stopword set so the next tokenize() reloads it."""
    global _stopwords
    _stopwords = None


class TextProcessor:
    """Turns raw text into the term sequence used by the index.

    Indexing and querying must share this pipeline: a query token only
    resolves if it was normalized exactly the way the corpus was.

    Pipeline: trim + lowercase -> whitespace split -> stopword removal ->
    removal of every character outside ``[a-z0-9_/-]``. Removal is global,
    so interior characters go too (``"don't"`` becomes ``"dont"``). Tokens
    left empty by the filter are dropped.
    """

    # Characters that may appear in a term
    STRIP_PATTERN = re.compile(r"[^a-z0-9_/\-]", re.IGNORECASE)
    BLOCK_TAGS = [
        "p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "pre",
        "blockquote", "tr", "br", "hr", "table", "ul", "ol", "dl", "dt", "dd",
    ]

    def html_to_text(self, html: str) -> str:
        """Strip HTML tags, scripts and styles; keep link text only.

        Each block element ends up on its own line so excerpts can mark
        block boundaries.
        """
        if not html:
            return ""
        soup = BeautifulSoup(html, "lxml")

        for tag in soup(["script", "style", "noscript"]):
            tag.decompose()
        for tag in soup.find_all(self.BLOCK_TAGS):
            tag.insert_after("\n")

        lines = (re.sub(r"\s+", " ", line).strip() for line in soup.get_text().splitlines())
        return "\n".join(line for line in lines if line)

    def split(self, text: str) -> list[str]:
        """Lowercase and split on whitespace."""
        if not text:
            return []
        return text.strip().lower().split()

    def remove_stopwords(self, tokens: list[str]) -> list[str]:
        stops = _get_stopwords()
        return [t for t in tokens if t not in stops]

    def strip_special(self, tokens: list[str]) -> list[str]:
        stripped = (self.STRIP_PATTERN.sub("", t) for t in tokens)
        return [t for t in stripped if t]

    def tokenize(self, text: str) -> list[str]:
        """Full pipeline. Order and duplicates are preserved."""
        tokens = self.split(text)
        tokens = self.remove_stopwords(tokens)
        return self.strip_special(tokens)
