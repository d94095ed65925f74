from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt

from rankedsearch.models.document import Document, PersistedDocument


class Vocabulary(Mapping[str, int]):
    """Immutable bijection between normalized terms and dense term ids."""

    __slots__ = ("_ids", "_terms")

    def __init__(self, terms: Mapping[str, int] | None = None):
        ids = dict(terms or {})
        terms_by_id = {term_id: term for term, term_id in ids.items()}
        if len(terms_by_id) != len(ids):
            raise ValueError("term ids must be unique")
        if set(terms_by_id) != set(range(len(ids))):
            raise ValueError("term ids must be dense and start at 0")
        self._ids = MappingProxyType(ids)
        self._terms = tuple(terms_by_id[i] for i in range(len(ids)))

    def __getitem__(self, term: str) -> int:
        return self._ids[term]

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"Vocabulary({len(self)} terms)"

    def term_for(self, term_id: int) -> str:
        return self._terms[term_id]


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class SearchIndex:
    """The built index: documents, vocabulary, posting lists and scores.

    Posting lists are keyed by term id; scores are keyed by
    ``(term_id, doc_id)`` pairs. All containers are read-only views.
    """

    documents: tuple[Document, ...]
    vocabulary: Vocabulary
    postings: Mapping[int, frozenset[int]]
    scores: Mapping[tuple[int, int], float]

    def __post_init__(self):
        # Copy into read-only views; callers keep no handle on the contents
        object.__setattr__(self, "documents", tuple(self.documents))
        object.__setattr__(
            self,
            "postings",
            _freeze({t: frozenset(docs) for t, docs in self.postings.items()}),
        )
        object.__setattr__(self, "scores", _freeze(self.scores))

    @classmethod
    def empty(cls) -> "SearchIndex":
        return cls(documents=(), vocabulary=Vocabulary(), postings={}, scores={})

    @property
    def total_docs(self) -> int:
        return len(self.documents)


# --- Persisted wire schema ---


class PersistedIndex(BaseModel):
    """Shape of ``search.json`` as consumed by browsers and the query engine."""

    model_config = ConfigDict(extra="ignore")

    docs: list[PersistedDocument]
    # Strict: a quoted or boolean id is a corrupt index, not a coercion
    bow: dict[str, StrictInt]
    word2doc: dict[str, list[StrictInt]]
    tfidf: dict[str, StrictFloat]
