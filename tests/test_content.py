"""Tests for post loading, markdown stripping and excerpts."""

from datetime import datetime, timezone

import pytest

from rankedsearch.errors import ContentError
from rankedsearch.services.indexer.content import (
    load_posts,
    make_excerpt,
    markdown_to_text,
    parse_front_matter,
    parse_post,
)


def write_post(directory, name, front_matter, body):
    path = directory / name
    path.write_text(f"---\n{front_matter}\n---\n{body}", encoding="utf-8")
    return path


def test_parse_front_matter():
    metadata, body = parse_front_matter("---\ntitle: Hello\ntags: [a, b]\n---\n# Body\n")
    assert metadata == {"title": "Hello", "tags": ["a", "b"]}
    assert body == "# Body\n"


def test_parse_front_matter_absent():
    metadata, body = parse_front_matter("# Just markdown")
    assert metadata == {}
    assert body == "# Just markdown"


def test_parse_front_matter_invalid_yaml():
    with pytest.raises(ContentError):
        parse_front_matter("---\ntitle: [unclosed\n---\nbody")


def test_markdown_to_text_keeps_link_text_only():
    text = markdown_to_text("Read [the guide](https://example.com/guide) **now**.")
    assert "the guide" in text
    assert "now" in text
    assert "example.com" not in text
    assert "**" not in text


def test_markdown_to_text_one_block_per_line():
    text = markdown_to_text("# Title\n\nFirst paragraph.\n\nSecond paragraph.")
    assert text.split("\n") == ["Title", "First paragraph.", "Second paragraph."]


def test_make_excerpt_short_text_untouched():
    assert make_excerpt("one two three", n_words=5) == "one two three"


def test_make_excerpt_truncates_with_ellipsis():
    text = " ".join(f"w{i}" for i in range(50))
    excerpt = make_excerpt(text, n_words=40)
    assert excerpt.endswith("w39...")
    assert len(excerpt[:-3].split()) == 40


def test_make_excerpt_exact_length_has_no_ellipsis():
    text = " ".join(f"w{i}" for i in range(40))
    assert not make_excerpt(text, n_words=40).endswith("...")


def test_make_excerpt_marks_line_breaks():
    assert make_excerpt("Title\nFirst line\n", n_words=10) == "Title • First line"


def test_parse_post_with_front_matter_date(tmp_path):
    path = write_post(
        tmp_path,
        "2023-04-01-cats.md",
        "title: Cats\ndate: 2023-04-01 10:00:00 +0200",
        "Cats are *great*.",
    )
    post = parse_post(path)
    assert post.title == "Cats"
    assert post.url == "/2023/04/01/cats.html"
    assert post.published.utcoffset().total_seconds() == 7200
    assert post.text == "Cats are great."

    source = post.to_source()
    assert source.date == "2023-04-01T10:00:00+0200"
    assert source.excerpt == "Cats are great."


def test_parse_post_date_from_filename_and_permalink(tmp_path):
    path = write_post(tmp_path, "2022-12-31-year-end.md", "title: Year end\npermalink: /year-end/", "Bye.")
    post = parse_post(path)
    assert post.published == datetime(2022, 12, 31, tzinfo=timezone.utc)
    assert post.url == "/year-end/"


def test_parse_post_missing_title(tmp_path):
    path = write_post(tmp_path, "2023-01-01-untitled.md", "date: 2023-01-01", "Body")
    with pytest.raises(ContentError):
        parse_post(path)


def test_parse_post_missing_date(tmp_path):
    path = write_post(tmp_path, "undated.md", "title: Undated", "Body")
    with pytest.raises(ContentError):
        parse_post(path)


def test_load_posts_oldest_first(tmp_path):
    write_post(tmp_path, "2023-03-01-newest.md", "title: Newest", "c")
    write_post(tmp_path, "2021-01-01-oldest.md", "title: Oldest", "a")
    write_post(tmp_path, "2022-06-15-middle.md", "title: Middle", "b")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    posts = load_posts(tmp_path)
    assert [p.title for p in posts] == ["Oldest", "Middle", "Newest"]


def test_load_posts_missing_directory(tmp_path):
    with pytest.raises(ContentError):
        load_posts(tmp_path / "nope")
