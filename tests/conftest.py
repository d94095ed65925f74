import pytest

from rankedsearch.config import settings
from rankedsearch.models.document import SourceDocument
from rankedsearch.services.indexer.text_processor import reset_stopwords

STOPWORDS = ["a", "an", "and", "are", "the", "is", "of", "to", "in", "for", "on", "with"]


@pytest.fixture(autouse=True)
def stopwords_file(tmp_path, monkeypatch):
    """Use a small fixed stopword list instead of the NLTK corpus."""
    path = tmp_path / "stopwords.txt"
    path.write_text("\n".join(STOPWORDS) + "\n", encoding="utf-8")
    monkeypatch.setattr(settings, "stopwords_file", str(path))
    reset_stopwords()
    yield path
    reset_stopwords()


def make_source(title: str, text: str, n: int = 0) -> SourceDocument:
    return SourceDocument(
        title=title,
        text=text,
        url=f"/posts/{n}.html",
        date=f"2023-01-{n + 1:02d}T00:00:00+0000",
        excerpt=text[:40],
    )


@pytest.fixture
def source_factory():
    return make_source


@pytest.fixture
def pets_corpus():
    return [
        make_source("Cats and Dogs", "Cats are great pets", 0),
        make_source("Dog Care", "Dogs need walks", 1),
    ]


@pytest.fixture
def blog_corpus():
    return [
        make_source("Python packaging", "Packaging python code with setuptools and wheels.", 0),
        make_source("Search engines", "An inverted index maps terms to documents.", 1),
        make_source("Python search", "Building a search index in python: tokenize, index, rank.", 2),
        make_source("Empty", "", 3),
        make_source("Ranking", "TF-IDF ranking for search: index terms, rank documents, search again.", 4),
    ]
