import enum
import logging
import threading
from pathlib import Path

from rankedsearch.config import settings
from rankedsearch.errors import CorruptIndexError, IndexNotReadyError
from rankedsearch.models.document import Document
from rankedsearch.models.index import SearchIndex
from rankedsearch.services.index_store import load_index
from rankedsearch.services.indexer.text_processor import TextProcessor

logger = logging.getLogger("rankedsearch.search.query_engine")

text_processor = TextProcessor()


def resolve_terms(index: SearchIndex, text: str) -> list[int] | None:
    """Map the query's distinct tokens to term ids, in first-seen order.

    Returns None if any token is not in the vocabulary (strict AND).
    """
    term_ids: list[int] = []
    for token in dict.fromkeys(text_processor.tokenize(text)):
        term_id = index.vocabulary.get(token)
        if term_id is None:
            return None
        term_ids.append(term_id)
    return term_ids


def ranked(
    index: SearchIndex,
    text: str,
    top_k: int | None = None,
) -> list[tuple[Document, float]]:
    """Evaluate a strict-AND query; return (document, score) pairs, best first.

    Candidates are the intersection of every query term's posting list.
    A candidate's score is the sum of its per-term TF-IDF scores. Ties go
    to the lower doc id. Misses of any kind return an empty list.
    """
    if top_k is None:
        top_k = settings.default_top_k
    if top_k <= 0:
        return []

    term_ids = resolve_terms(index, text)
    if not term_ids:
        return []

    # Start from the shortest list; the result set doesn't depend on order
    by_size = sorted(term_ids, key=lambda t: len(index.postings.get(t, ())))
    candidates = set(index.postings.get(by_size[0], ()))
    for term_id in by_size[1:]:
        if not candidates:
            break
        candidates &= index.postings.get(term_id, frozenset())

    if not candidates:
        return []

    # Fixed summation order keeps scores identical for reordered queries
    summed = sorted(term_ids)
    results = []
    for doc_id in candidates:
        doc_score = sum(index.scores.get((t, doc_id), 0.0) for t in summed)
        results.append((doc_id, doc_score))

    results.sort(key=lambda r: (-r[1], r[0]))
    return [(index.documents[doc_id], s) for doc_id, s in results[:top_k]]


def query(index: SearchIndex, text: str, top_k: int | None = None) -> list[Document]:
    """Top ``top_k`` documents (default 8) matching every term of ``text``."""
    return [doc for doc, _ in ranked(index, text, top_k)]


class EngineState(str, enum.Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class SearchService:
    """Owns one loaded SearchIndex and answers queries against it.

    Lifecycle: UNLOADED -> LOADING -> READY | FAILED. Queries outside
    READY raise IndexNotReadyError. ``load()`` may be called again to
    replace the index. Queries never mutate the index, so any number of
    callers may search concurrently.
    """

    def __init__(self, index_path: str | Path | None = None):
        self.index_path = Path(index_path or settings.index_path)
        self._state = EngineState.UNLOADED
        self._index: SearchIndex | None = None
        self._error: Exception | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def error(self) -> Exception | None:
        return self._error

    @property
    def index(self) -> SearchIndex:
        if self._state is not EngineState.READY or self._index is None:
            raise IndexNotReadyError(f"Search index is {self._state.value}")
        return self._index

    def load(self) -> EngineState:
        """Load the index from disk.

        A missing or corrupt index is recorded as FAILED and not raised. Any
        other error also leaves the service FAILED, then propagates.
        """
        with self._lock:
            previous = self._index
            self._state = EngineState.LOADING
            try:
                index = load_index(self.index_path)
            except (CorruptIndexError, OSError) as e:
                logger.error("Failed to load search index %s: %s", self.index_path, e)
                self._fail(e)
                return self._state
            except Exception as e:
                # Never left in LOADING; unexpected errors still propagate
                logger.exception("Unexpected error loading search index %s", self.index_path)
                self._fail(e)
                raise

            self._index = index
            self._error = None
            self._state = EngineState.READY
            if previous is not None:
                logger.info("Replaced search index (%d -> %d documents)", previous.total_docs, index.total_docs)
            return self._state

    def _fail(self, error: Exception) -> None:
        self._error = error
        self._index = None
        self._state = EngineState.FAILED

    def use(self, index: SearchIndex) -> None:
        """Serve an already built index."""
        with self._lock:
            self._index = index
            self._error = None
            self._state = EngineState.READY

    def search(self, text: str, top_k: int | None = None) -> list[tuple[Document, float]]:
        """Ranked (document, score) pairs. Raises IndexNotReadyError unless READY."""
        return ranked(self.index, text, top_k)
