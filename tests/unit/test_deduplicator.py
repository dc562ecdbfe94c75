"""Tests for deduplicator functionality."""

from scholarship_scraper.core.deduplicator import Deduplicator, generate_content_hash
from scholarship_scraper.core.models import Scholarship


def make_scholarship(name="Test Fellowship", link="https://example.edu/a", source="Example", deadline=""):
    return Scholarship(
        name=name,
        source=source,
        country="United States",
        degree=["PhD"],
        deadline=deadline,
        link=link,
    )


class TestGenerateContentHash:
    """Tests for generate_content_hash function."""

    def test_consistent_hash(self):
        """Test that same inputs produce same hash."""
        hash1 = generate_content_hash("test", "https://example.com/s/1", "Test", "2024-12-31")
        hash2 = generate_content_hash("test", "https://example.com/s/1", "Test", "2024-12-31")

        assert hash1 == hash2
        assert len(hash1) == 64

    def test_different_inputs_different_hash(self):
        hash1 = generate_content_hash("test", "https://example.com/s/1", "Test")
        hash2 = generate_content_hash("test", "https://example.com/s/2", "Test")

        assert hash1 != hash2

    def test_url_normalization(self):
        """Test that trailing slash and case do not matter."""
        hash1 = generate_content_hash("test", "HTTPS://EXAMPLE.COM/S/", "Test Award")
        hash2 = generate_content_hash("test", "https://example.com/s", "test award")

        assert hash1 == hash2

    def test_deadline_matters(self):
        hash1 = generate_content_hash("test", "https://example.com/s", "Test", "2024-01-01")
        hash2 = generate_content_hash("test", "https://example.com/s", "Test", "2025-01-01")

        assert hash1 != hash2


class TestDeduplicator:
    """Tests for Deduplicator class."""

    def test_first_occurrence_kept(self):
        dedup = Deduplicator()
        first = make_scholarship()

        assert dedup.process(first) is first
        assert dedup.process(make_scholarship()) is None
        assert len(dedup) == 1

    def test_same_link_is_duplicate(self):
        """Test that a link republished by another source is dropped even if renamed."""
        dedup = Deduplicator()
        dedup.process(make_scholarship(name="Fellowship A"))

        mirror = make_scholarship(name="Fellowship B", link="https://example.edu/a/", source="Mirror")

        assert dedup.process(mirror) is None

    def test_shared_page_link_within_source_kept(self):
        """Test that records falling back to the same listing URL stay distinct."""
        page = "https://example.edu/funding"
        records = [
            make_scholarship(name="Travel Grant", link=page),
            make_scholarship(name="Research Award", link=page),
            make_scholarship(name="Teaching Fellowship", link=page),
        ]

        result = Deduplicator().deduplicate(records)

        assert [s.name for s in result] == ["Travel Grant", "Research Award", "Teaching Fellowship"]

    def test_shared_page_link_not_matched_across_sources(self):
        dedup = Deduplicator()
        page = "https://example.edu/funding"
        dedup.deduplicate([
            make_scholarship(name="Travel Grant", link=page),
            make_scholarship(name="Research Award", link=page),
        ])

        other = make_scholarship(name="Library Prize", link=page, source="Mirror")

        assert dedup.process(other) is other

    def test_deduplicate_preserves_order(self):
        records = [
            make_scholarship(name="A", link="https://example.edu/a"),
            make_scholarship(name="B", link="https://example.edu/b"),
            make_scholarship(name="A", link="https://example.edu/a"),
            make_scholarship(name="C", link="https://example.edu/c"),
        ]

        result = Deduplicator().deduplicate(records)

        assert [s.name for s in result] == ["A", "B", "C"]

    def test_get_all_and_clear(self):
        dedup = Deduplicator()
        dedup.deduplicate([
            make_scholarship(name="A", link="https://example.edu/a"),
            make_scholarship(name="B", link="https://example.edu/b"),
        ])

        assert {s.name for s in dedup.get_all()} == {"A", "B"}

        dedup.clear()

        assert len(dedup) == 0
        assert dedup.get_all() == []
