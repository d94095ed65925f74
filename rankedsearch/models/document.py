from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, StrictStr


@dataclass(frozen=True)
class Document:
    """A search result record. ``id`` is the document's position in the corpus."""

    id: int
    title: str
    url: str
    date: str  # ISO-8601 with UTC offset
    excerpt: str


@dataclass(frozen=True)
class SourceDocument:
    """One corpus entry as handed to the indexer, text already reduced to plain text."""

    title: str
    text: str
    url: str
    date: str
    excerpt: str = ""


class PersistedDocument(BaseModel):
    """A ``docs`` entry of ``search.json``."""

    model_config = ConfigDict(extra="ignore")

    title: StrictStr
    url: StrictStr
    date: StrictStr
    text: StrictStr
