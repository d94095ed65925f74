"""Reads and writes the persisted index (``search.json``).

Wire format::

    {
      "docs":     [{"title", "url", "date", "text"}, ...],
      "bow":      {"<term>": term_id, ...},
      "word2doc": {"<term_id>": [doc_id, ...], ...},
      "tfidf":    {"<term_id>,<doc_id>": score, ...}
    }

In memory the composite ``"t,d"`` keys become ``(t, d)`` tuples. Loading
fails closed: any structural problem raises CorruptIndexError.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rankedsearch.errors import CorruptIndexError
from rankedsearch.models.document import Document, PersistedDocument
from rankedsearch.models.index import PersistedIndex, SearchIndex, Vocabulary

logger = logging.getLogger("rankedsearch.index_store")


def _score_key(term_id: int, doc_id: int) -> str:
    return f"{term_id},{doc_id}"


def _parse_int(raw: str, what: str) -> int:
    if not (raw.isascii() and raw.isdigit()):
        raise CorruptIndexError(f"Invalid {what}: {raw!r}")
    return int(raw)


def _parse_score_key(key: str) -> tuple[int, int]:
    parts = key.split(",")
    if len(parts) != 2:
        raise CorruptIndexError(f"Invalid tfidf key: {key!r}")
    return _parse_int(parts[0], "tfidf term id"), _parse_int(parts[1], "tfidf doc id")


def to_payload(index: SearchIndex) -> dict[str, Any]:
    """Serialize to the JSON-ready wire format. Keys are emitted in id order."""
    return {
        "docs": [
            {"title": d.title, "url": d.url, "date": d.date, "text": d.excerpt}
            for d in index.documents
        ],
        "bow": dict(index.vocabulary),
        "word2doc": {
            str(term_id): sorted(index.postings[term_id])
            for term_id in sorted(index.postings)
        },
        "tfidf": {
            _score_key(term_id, doc_id): index.scores[(term_id, doc_id)]
            for term_id, doc_id in sorted(index.scores)
        },
    }


def from_payload(data: Any) -> SearchIndex:
    """Validate and convert a decoded payload. Raises CorruptIndexError."""
    try:
        persisted = PersistedIndex.model_validate(data)
    except ValidationError as e:
        raise CorruptIndexError(f"Malformed index: {e.error_count()} validation error(s)") from e

    total_docs = len(persisted.docs)
    documents = tuple(_to_document(i, d) for i, d in enumerate(persisted.docs))

    try:
        vocabulary = Vocabulary(persisted.bow)
    except ValueError as e:
        raise CorruptIndexError(f"Invalid vocabulary: {e}") from e
    n_terms = len(vocabulary)

    postings: dict[int, frozenset[int]] = {}
    for raw_term_id, doc_ids in persisted.word2doc.items():
        term_id = _parse_int(raw_term_id, "word2doc term id")
        if term_id >= n_terms:
            raise CorruptIndexError(f"word2doc references unknown term id {term_id}")
        if any(d < 0 or d >= total_docs for d in doc_ids):
            raise CorruptIndexError(f"word2doc[{term_id}] references unknown document")
        postings[term_id] = frozenset(doc_ids)

    scores: dict[tuple[int, int], float] = {}
    for key, value in persisted.tfidf.items():
        term_id, doc_id = _parse_score_key(key)
        if doc_id not in postings.get(term_id, ()):
            raise CorruptIndexError(f"tfidf entry {key!r} has no matching posting")
        scores[(term_id, doc_id)] = value

    if set(postings) != set(range(n_terms)):
        raise CorruptIndexError("word2doc must have one posting list per vocabulary term")
    empty = [t for t, docs in postings.items() if not docs]
    if empty:
        raise CorruptIndexError(f"word2doc has empty posting lists for term ids {sorted(empty)[:5]}")
    unscored = {(t, d) for t, docs in postings.items() for d in docs} - set(scores)
    if unscored:
        raise CorruptIndexError(f"{len(unscored)} posting(s) have no tfidf score, e.g. {min(unscored)}")

    return SearchIndex(
        documents=documents,
        vocabulary=vocabulary,
        postings=postings,
        scores=scores,
    )


def _to_document(doc_id: int, doc: PersistedDocument) -> Document:
    return Document(id=doc_id, title=doc.title, url=doc.url, date=doc.date, excerpt=doc.text)


def dump_index(index: SearchIndex, path: str | Path) -> None:
    """Write the index to ``path`` atomically (temp file + rename)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(to_payload(index), f, ensure_ascii=False, separators=(",", ":"))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Wrote index with %d documents to %s", index.total_docs, path)


def load_index(path: str | Path) -> SearchIndex:
    """Load and validate a persisted index. Raises CorruptIndexError."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorruptIndexError(f"Index {path} is not valid UTF-8 JSON: {e}") from e

    index = from_payload(data)
    logger.info(
        "Loaded index from %s: %d documents, %d terms",
        path,
        index.total_docs,
        len(index.vocabulary),
    )
    return index
