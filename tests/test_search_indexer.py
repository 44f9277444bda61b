"""Tests for search index building."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from models.options_models import SearchOptions
from models.search_models import HeadingAnchor, PageRecord
from services import options as options_service
from services import search_indexer
from services.options import normalize_options
from services.search_indexer import clean_text, create_search_index, generate_index_stats


@pytest.fixture
def options():
    return normalize_options({"fuseOptions": {"keys": [{"name": "title", "weight": 10}], "threshold": 0.3}})


class TestCleanText:
    """Test clean_text function."""

    def test_collapses_whitespace(self) -> None:
        """Should trim and collapse whitespace."""
        assert clean_text("  Title with   spaces \n\t here ") == "Title with spaces here"

    def test_strips_disallowed_characters(self) -> None:
        """Should keep word characters and basic punctuation only."""
        assert clean_text("Price: $5 & <b>tax</b> (approx.)!") == "Price: 5 btaxb (approx.)!"

    def test_truncates(self) -> None:
        """Should cut to the requested length."""
        assert clean_text("abcdef", 3) == "abc"

    def test_truncation_leaves_no_trailing_space(self) -> None:
        """Should not end with whitespace after cutting."""
        assert clean_text("abc def", 4) == "abc"

    @pytest.mark.parametrize("value", [None, "", 42, ["a"]])
    def test_non_text(self, value) -> None:
        """Should return an empty string for non-text input."""
        assert clean_text(value) == ""

    @pytest.mark.parametrize(
        "text",
        [
            "  a  © b  ",
            "Hello — world ★ again",
            "tabs\tand\nnewlines",
            "x" * 20 + " " + "y" * 20,
            "déjà vu, naïve café",
        ],
    )
    def test_idempotent(self, text: str) -> None:
        """Should not change already cleaned text."""
        once = clean_text(text, 25)
        assert clean_text(once, 25) == once


class TestCreateSearchIndex:
    """Test create_search_index function."""

    def test_index_with_entries(self, options) -> None:
        """Should wrap entries with metadata."""
        records = [
            PageRecord(
                id="page:/test",
                type="page",
                url="/test",
                title="Test Page",
                content="Test content here",
                excerpt="Test content...",
                headings=[],
                word_count=3,
            )
        ]

        result = create_search_index(records, options)

        assert result.version == "1.0.0"
        assert result.generator == "site-search-index"
        assert result.total_entries == 1
        assert len(result.entries) == 1

    @pytest.mark.parametrize("records", [[], None])
    def test_empty_index(self, options, records) -> None:
        """Should build an empty index for missing records."""
        result = create_search_index(records, options)

        assert result.total_entries == 0
        assert result.entries == []
        assert result.stats.total_entries == 0
        assert result.stats.entries_by_type == {}
        assert result.stats.total_content_length == 0
        assert result.stats.average_content_length == 0
        assert result.config.fuse_options == options.fuse_options

    def test_fuse_options_passed_through(self, options) -> None:
        """Should copy the ranking configuration unchanged."""
        data = create_search_index([], options).to_dict()

        assert data["config"]["fuseOptions"] == options.fuse_options

    def test_stats(self, options) -> None:
        """Should count entries by type and content length."""
        records = [
            {"id": "page:/one", "type": "page", "url": "/one", "title": "Page One", "content": "Content one"},
            {"id": "page:/two", "type": "page", "url": "/two", "title": "Page Two", "content": "Content two!!"},
            {"id": "post:/three", "type": "post", "url": "/three", "title": "Three", "content": "abc"},
        ]

        result = create_search_index(records, options)

        assert result.stats.total_entries == len(result.entries) == result.total_entries == 3
        assert result.stats.entries_by_type == {"page": 2, "post": 1}
        assert result.stats.total_content_length == 11 + 13 + 3
        assert result.stats.average_content_length == 9

    def test_clean_text_content(self, options) -> None:
        """Should clean title and content."""
        records = [
            {
                "id": "page:/test",
                "url": "/test",
                "title": "  Title with   spaces  ",
                "content": "Content  with   multiple    spaces",
            }
        ]

        entry = create_search_index(records, options).entries[0]

        assert entry.title == "Title with spaces"
        assert "  " not in entry.content

    def test_preserves_headings(self, options) -> None:
        """Should carry headings through."""
        records = [
            PageRecord(
                id="page:/test",
                url="/test",
                title="Test",
                content="Content",
                headings=[
                    HeadingAnchor(level="h2", id="section-1", title="Section 1"),
                    HeadingAnchor(level="h3", id="section-2", title="Section 2"),
                ],
            )
        ]

        entry = create_search_index(records, options).to_dict()["entries"][0]

        assert len(entry["headings"]) == 2
        assert entry["headings"][0] == {"level": "h2", "id": "section-1", "title": "Section 1"}

    def test_generated_timestamp(self, options) -> None:
        """Should stamp the build time in ISO format."""
        generated = create_search_index([], options).generated

        assert generated.endswith("Z")
        assert datetime.fromisoformat(generated.replace("Z", "+00:00")).year >= 2024

    def test_missing_ids(self, options) -> None:
        """Should assign positional ids when records have none."""
        records = [
            {"type": "page", "url": "/one", "title": "One", "content": "Content"},
            {"type": "page", "url": "/two", "title": "Two", "content": "Content"},
        ]

        entries = create_search_index(records, options).entries

        assert [e.id for e in entries] == ["entry-0", "entry-1"]

    def test_defaults_for_type_and_url(self, options) -> None:
        """Should default type to page and url to the site root."""
        entry = create_search_index([{"title": "T", "content": "C"}], options).entries[0]

        assert entry.type == "page"
        assert entry.url == "/"
        assert entry.score == 0

    def test_prunes_empty_optional_fields(self, options) -> None:
        """Should omit optional fields that are unset or empty."""
        records = [
            {
                "id": "page:/a",
                "url": "/a",
                "title": "A",
                "content": "Alpha",
                "description": "",
                "excerpt": "   ",
                "tags": [],
                "headings": [],
            }
        ]

        entry = create_search_index(records, options).to_dict()["entries"][0]

        assert set(entry) == {"id", "type", "url", "title", "content", "score"}
        assert entry["score"] == 0

    def test_keeps_optional_fields(self, options) -> None:
        """Should keep optional fields that carry values."""
        records = [
            {
                "id": "post:/b",
                "type": "post",
                "url": "/b",
                "title": "B",
                "content": "Beta",
                "description": "About   beta",
                "excerpt": "Beta...",
                "tags": ["greek", "letters"],
                "date": "2024-05-01",
                "author": "Sam",
            }
        ]

        entry = create_search_index(records, options).to_dict()["entries"][0]

        assert entry["description"] == "About beta"
        assert entry["excerpt"] == "Beta..."
        assert entry["tags"] == ["greek", "letters"]
        assert entry["date"] == "2024-05-01"
        assert entry["author"] == "Sam"
        assert "headings" not in entry

    def test_preserves_order(self, options) -> None:
        """Should keep input order."""
        records = [{"id": f"page:/{n}", "title": n, "content": n} for n in ["c", "a", "b"]]

        entries = create_search_index(records, options).entries

        assert [e.id for e in entries] == ["page:/c", "page:/a", "page:/b"]

    def test_truncation_warning(self, caplog) -> None:
        """Should warn about over-long content and still truncate it."""
        options = normalize_options({"maxContentLength": 10})
        records = [
            {"id": "page:/long", "url": "/long", "title": "Long", "content": "x" * 25},
            {"id": "page:/short", "url": "/short", "title": "Short", "content": "tiny"},
        ]

        with caplog.at_level(logging.WARNING):
            result = create_search_index(records, options)

        assert result.entries[0].content == "x" * 10
        assert "/long (25 chars)" in caplog.text
        assert "/short" not in caplog.text
        assert "maxContentLength" in caplog.text

    def test_loose_field_types_coerced(self, options) -> None:
        """Should accept null titles, a string tag and numeric heading levels."""
        records = [
            {"title": None, "content": "alpha"},
            {"content": "beta", "tags": "one"},
            {"content": "g", "headings": [{"level": 2, "id": "a", "title": "A"}]},
        ]

        entries = create_search_index(records, options).entries

        assert len(entries) == 3
        assert entries[0].title == ""
        assert entries[0].content == "alpha"
        assert entries[1].tags == ["one"]
        assert entries[2].headings[0].level == "h2"
        assert [e.id for e in entries] == ["entry-0", "entry-1", "entry-2"]

    def test_invalid_field_dropped(self, options, caplog) -> None:
        """Should drop only the invalid field and keep the record."""
        records = [
            {"url": "/bad", "title": "Bad", "content": "x", "headings": "not a list"},
            {"url": "/good", "title": "Good", "content": "fine"},
        ]

        with caplog.at_level(logging.WARNING):
            entries = create_search_index(records, options).entries

        assert [e.url for e in entries] == ["/bad", "/good"]
        assert entries[0].id == "entry-0"
        assert entries[0].headings is None
        assert "record #0: dropping invalid fields ['headings']" in caplog.text

    def test_invalid_alias_field_dropped(self, options) -> None:
        """Should drop a camelCase field that fails validation."""
        records = [{"url": "/wc", "content": "x", "wordCount": "many"}]

        entries = create_search_index(records, options).entries

        assert [e.url for e in entries] == ["/wc"]

    def test_non_mapping_record_skipped(self, options, caplog) -> None:
        """Should skip only records that are not mappings."""
        records = ["not a record", {"url": "/good", "content": "fine"}]

        with caplog.at_level(logging.WARNING):
            entries = create_search_index(records, options).entries

        assert [e.url for e in entries] == ["/good"]
        assert entries[0].id == "entry-1"
        assert "skipping non-mapping record #0" in caplog.text

    def test_default_max_content_length_shared(self) -> None:
        """Should use the same default content limit as the options layer."""
        assert search_indexer.DEFAULT_MAX_CONTENT_LENGTH is options_service.DEFAULT_MAX_CONTENT_LENGTH
        assert SearchOptions().max_content_length == options_service.DEFAULT_MAX_CONTENT_LENGTH == 10000
        assert len(clean_text("x" * 10050)) == 10000


class TestGenerateIndexStats:
    """Test generate_index_stats function."""

    def test_no_entries(self) -> None:
        """Should return zeroed statistics."""
        stats = generate_index_stats([])

        assert stats.model_dump(by_alias=True) == {
            "totalEntries": 0,
            "entriesByType": {},
            "totalContentLength": 0,
            "averageContentLength": 0,
        }
