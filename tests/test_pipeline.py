"""Tests for the end-to-end index build."""

import pytest

from rankedsearch.config import settings
from rankedsearch.errors import ContentError
from rankedsearch.services.index_store import load_index
from rankedsearch.services.indexer.pipeline import generate_index
from rankedsearch.services.search.query_engine import query
from scripts.build_index import main


@pytest.fixture
def posts_dir(tmp_path):
    posts = tmp_path / "_posts"
    posts.mkdir()
    (posts / "2023-05-02-dog-care.md").write_text(
        "---\ntitle: Dog Care\n---\nDogs need [long walks](https://example.com/walks).\n",
        encoding="utf-8",
    )
    (posts / "2023-05-01-cats-and-dogs.md").write_text(
        "---\ntitle: Cats and Dogs\n---\nCats are **great** pets.\n",
        encoding="utf-8",
    )
    return posts


def test_generate_index(posts_dir, tmp_path):
    output = tmp_path / "_site" / "search.json"
    index = generate_index(posts_dir, output)

    # Oldest post first
    assert [d.title for d in index.documents] == ["Cats and Dogs", "Dog Care"]
    assert index.documents[1].url == "/2023/05/02/dog-care.html"
    assert index.documents[1].date == "2023-05-02T00:00:00+0000"
    assert load_index(output) == index

    assert [d.title for d in query(index, "walks")] == ["Dog Care"]
    assert query(index, "example") == []


def test_generate_index_aborts_without_writing(posts_dir, tmp_path):
    (posts_dir / "2023-05-03-broken.md").write_text("---\ndate: 2023-05-03\n---\nNo title", encoding="utf-8")
    output = tmp_path / "search.json"
    with pytest.raises(ContentError):
        generate_index(posts_dir, output)
    assert not output.exists()


def test_build_script(posts_dir, tmp_path, capsys):
    output = tmp_path / "search.json"
    assert main([str(posts_dir), "--output", str(output)]) == 0
    assert output.exists()
    assert "Documents: 2" in capsys.readouterr().out


def test_build_script_failure(tmp_path, capsys):
    output = tmp_path / "search.json"
    assert main([str(tmp_path / "missing"), "--output", str(output)]) == 1
    assert not output.exists()
    assert "Build failed" in capsys.readouterr().err


def test_build_script_corpus_too_large(posts_dir, tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(settings, "boost_base", 1e200)
    (posts_dir / "2023-05-03-walks.md").write_text("---\ntitle: Walks\n---\nLong walks.\n", encoding="utf-8")
    output = tmp_path / "search.json"
    assert main([str(posts_dir), "--output", str(output)]) == 1
    assert not output.exists()
    assert "Build failed" in capsys.readouterr().err
