import logging
import math
from collections.abc import Mapping

from rankedsearch.config import settings
from rankedsearch.errors import CorpusTooLargeError

logger = logging.getLogger("rankedsearch.indexer.scorer")


def recency_boost(doc_id: int, total_docs: int, base: float | None = None) -> float:
    """Exponential boost that grows with corpus position.

    boost = base^doc_id / (total_docs / 2)

    With the corpus supplied oldest first, newer documents rank higher.
    """
    if base is None:
        base = settings.boost_base
    return base**doc_id / (total_docs / 2)


def score(
    term_frequency: Mapping[tuple[int, int], int],
    document_frequency: Mapping[int, int],
    total_docs: int,
    epsilon: float | None = None,
    boost_base: float | None = None,
) -> dict[tuple[int, int], float]:
    """Compute the TF-IDF table, one entry per term frequency entry.

    For each (term_id, doc_id) with frequency tf:
      idf   = ln(total_docs / df(term_id) + epsilon)
      tfidf = round(tf * idf * recency_boost(doc_id), 4)

    epsilon only keeps ln() away from zero. ``total_docs <= 0`` yields an
    empty table. A score that overflows a float (with the default base,
    from doc id 3894 on) raises CorpusTooLargeError.
    """
    if total_docs <= 0:
        return {}
    if epsilon is None:
        epsilon = settings.idf_epsilon
    if boost_base is None:
        boost_base = settings.boost_base

    idf = {
        term_id: math.log(total_docs / df + epsilon)
        for term_id, df in document_frequency.items()
    }

    scores: dict[tuple[int, int], float] = {}
    for (term_id, doc_id), freq in term_frequency.items():
        try:
            value = round(freq * idf[term_id] * recency_boost(doc_id, total_docs, boost_base), 4)
        except OverflowError:
            value = math.inf
        if not math.isfinite(value):
            raise CorpusTooLargeError(
                f"Recency boost {boost_base}^{doc_id} overflows for a corpus of {total_docs} documents"
            )
        scores[(term_id, doc_id)] = value

    logger.info("Scored %d term/document pairs over %d documents", len(scores), total_docs)
    return scores
