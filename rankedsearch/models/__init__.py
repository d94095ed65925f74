from rankedsearch.models.document import Document, PersistedDocument, SourceDocument
from rankedsearch.models.index import PersistedIndex, SearchIndex, Vocabulary

__all__ = [
    "Document",
    "SourceDocument",
    "PersistedDocument",
    "Vocabulary",
    "SearchIndex",
    "PersistedIndex",
]
