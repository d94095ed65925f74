class RankedSearchError(Exception):
    """Base class for all errors raised by rankedsearch."""


class StopwordsUnavailableError(RankedSearchError):
    """The stopword resource could not be loaded; tokenization cannot proceed."""


class ContentError(RankedSearchError):
    """A source post could not be read or is missing required metadata."""


class CorruptIndexError(RankedSearchError):
    """A persisted index is structurally invalid and must not be served."""


class IndexNotReadyError(RankedSearchError):
    """A query was issued before the search index finished loading."""


class CorpusTooLargeError(RankedSearchError):
    """The recency boost cannot be represented for a corpus this large."""
