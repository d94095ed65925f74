import logging
from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from rankedsearch.config import settings
from rankedsearch.models.document import Document, SourceDocument
from rankedsearch.models.index import Vocabulary
from rankedsearch.services.indexer.text_processor import TextProcessor

logger = logging.getLogger("rankedsearch.indexer.inverted_index")


@dataclass(frozen=True)
class BuildResult:
    """Output of one indexing pass.

    ``term_frequency`` and ``scores`` downstream are sparse: a missing
    ``(term_id, doc_id)`` pair means the term does not occur in that document.
    """

    documents: tuple[Document, ...]
    vocabulary: Vocabulary
    postings: dict[int, frozenset[int]]
    term_frequency: dict[tuple[int, int], int]
    document_frequency: dict[int, int]

    @property
    def total_docs(self) -> int:
        return len(self.documents)


class IndexBuilder:
    """Builds vocabulary, posting lists and frequency tables from a corpus.

    Corpus order matters: it fixes both term id assignment and the doc ids
    the recency boost is computed from. Supply documents oldest first.

    Tokenizing and counting a document is independent of every other
    document and may run on ``workers`` threads. Term ids are only ever
    assigned in the single merge loop, in corpus order, so the result is
    the same for any worker count.
    """

    def __init__(self, text_processor: TextProcessor | None = None, workers: int | None = None):
        self.text_processor = text_processor or TextProcessor()
        self.workers = workers if workers is not None else settings.index_workers

    def _analyze(self, doc: SourceDocument) -> tuple[list[str], Counter]:
        """Tokenize title + text; return terms in first-seen order with their counts."""
        tokens = self.text_processor.tokenize(f"{doc.title} {doc.text}")
        counts = Counter(tokens)
        # Counter preserves insertion order, i.e. first occurrence in the document
        return list(counts), counts

    def _analyze_all(self, documents: Sequence[SourceDocument]):
        if self.workers > 1 and len(documents) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                # map() yields in submission order
                yield from pool.map(self._analyze, documents)
        else:
            for doc in documents:
                yield self._analyze(doc)

    def build(self, documents: Sequence[SourceDocument]) -> BuildResult:
        """Index ``documents``. An empty corpus gives an empty result."""
        # Scratch state, local to this call
        term_ids: dict[str, int] = {}
        postings: dict[int, set[int]] = {}
        term_frequency: dict[tuple[int, int], int] = {}
        document_frequency: dict[int, int] = {}
        records: list[Document] = []

        for doc_id, (doc, (terms, counts)) in enumerate(
            zip(documents, self._analyze_all(documents))
        ):
            records.append(
                Document(
                    id=doc_id,
                    title=doc.title,
                    url=doc.url,
                    date=doc.date,
                    excerpt=doc.excerpt,
                )
            )
            for term in terms:
                term_id = term_ids.get(term)
                if term_id is None:
                    term_id = len(term_ids)
                    term_ids[term] = term_id
                postings.setdefault(term_id, set()).add(doc_id)
                term_frequency[(term_id, doc_id)] = counts[term]
                # Each term appears once in ``terms``, so this counts documents
                document_frequency[term_id] = document_frequency.get(term_id, 0) + 1

            if not terms:
                logger.debug("Document %d (%s) produced no terms", doc_id, doc.url)

        logger.info(
            "Indexed %d documents: %d unique terms, %d postings",
            len(records),
            len(term_ids),
            len(term_frequency),
        )

        return BuildResult(
            documents=tuple(records),
            vocabulary=Vocabulary(term_ids),
            postings={t: frozenset(docs) for t, docs in postings.items()},
            term_frequency=term_frequency,
            document_frequency=document_frequency,
        )
