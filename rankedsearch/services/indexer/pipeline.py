import logging
from collections.abc import Sequence
from pathlib import Path

from rankedsearch.config import settings
from rankedsearch.models.document import SourceDocument
from rankedsearch.models.index import SearchIndex
from rankedsearch.services.index_store import dump_index
from rankedsearch.services.indexer.content import load_posts
from rankedsearch.services.indexer.inverted_index import IndexBuilder
from rankedsearch.services.indexer.scorer import score

logger = logging.getLogger("rankedsearch.indexer.pipeline")


def build_search_index(
    sources: Sequence[SourceDocument],
    builder: IndexBuilder | None = None,
) -> SearchIndex:
    """Index and score a corpus (oldest first) into an immutable SearchIndex."""
    builder = builder or IndexBuilder()
    result = builder.build(sources)
    scores = score(result.term_frequency, result.document_frequency, result.total_docs)
    return SearchIndex(
        documents=result.documents,
        vocabulary=result.vocabulary,
        postings=result.postings,
        scores=scores,
    )


def generate_index(
    posts_dir: str | Path | None = None,
    output: str | Path | None = None,
) -> SearchIndex:
    """Full build: load posts, index, score and persist.

    Any error aborts before the output file is touched.
    """
    posts_dir = posts_dir or settings.posts_dir
    output = output or settings.index_path

    logger.info("Generating search index from %s", posts_dir)
    posts = load_posts(posts_dir)
    index = build_search_index([p.to_source() for p in posts])
    dump_index(index, output)
    logger.info("Done: %d documents, %d terms -> %s", index.total_docs, len(index.vocabulary), output)
    return index
