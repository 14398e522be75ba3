"""
Unit tests for model output parsing helpers.
"""

from z88.core.parsing import (
    UNTITLED,
    count_words,
    extract_json,
    extract_title,
    parse_ethical_verdict,
    parse_quality_score,
)


class TestParseQualityScore:
    """Tests for parse_quality_score."""

    def test_plain_score(self):
        assert parse_quality_score("0.92") == 0.92

    def test_score_inside_sentence(self):
        assert parse_quality_score("I would rate this story 0.78 overall.") == 0.78

    def test_first_score_wins(self):
        assert parse_quality_score("0.6, maybe 0.9 after edits") == 0.6

    def test_one_point_zero(self):
        assert parse_quality_score("Score: 1.0") == 1.0

    def test_bare_integer_fallback(self):
        assert parse_quality_score("1") == 1.0
        assert parse_quality_score("0") == 0.0

    def test_unparseable_uses_default(self):
        assert parse_quality_score("Excellent work!") == 0.85
        assert parse_quality_score("", default=0.5) == 0.5
        assert parse_quality_score(None) == 0.85

    def test_ten_point_scale_is_not_a_score(self):
        """Test that '9/10' does not parse as 1 or 0."""
        assert parse_quality_score("9/10") == 0.85


class TestParseEthicalVerdict:
    """Tests for parse_ethical_verdict."""

    def test_approved(self):
        assert parse_ethical_verdict("APPROVED") is True
        assert parse_ethical_verdict("approved - no concerns") is True

    def test_rejected(self):
        assert parse_ethical_verdict("REJECTED: graphic violence") is False

    def test_leading_rejection_wins(self):
        assert parse_ethical_verdict("REJECTED. It would be APPROVED if revised.") is False

    def test_missing_verdict_is_not_approval(self):
        assert parse_ethical_verdict("I have some thoughts.") is False
        assert parse_ethical_verdict("") is False


class TestExtractTitle:
    """Tests for extract_title."""

    def test_markdown_heading(self):
        text = "Some preface\n# Neon Requiem\n\nThe rain never stopped."
        assert extract_title(text) == "Neon Requiem"

    def test_first_line_fallback(self):
        text = "\n\n**Chrome Hearts**\nThe city hummed."
        assert extract_title(text) == "Chrome Hearts"

    def test_quotes_stripped(self):
        assert extract_title('"Data Ghosts"\nBody') == "Data Ghosts"

    def test_empty_story(self):
        assert extract_title("") == UNTITLED
        assert extract_title("   \n  ") == UNTITLED

    def test_overlong_title(self):
        assert extract_title("word " * 60) == UNTITLED


class TestCountWords:
    def test_whitespace_split(self):
        assert count_words("one  two\nthree\tfour") == 4
        assert count_words("") == 0


class TestExtractJSON:
    """Tests for extract_json."""

    def test_plain_json(self):
        assert extract_json('{"genre": "Noir"}') == {"genre": "Noir"}

    def test_fenced_block(self):
        text = 'Here you go:\n```json\n{"tone": "Dark"}\n```'
        assert extract_json(text) == {"tone": "Dark"}

    def test_embedded_object(self):
        text = 'Sure! {"prompt": "Chapter {2}", "nested": {"a": 1}} Hope this helps.'
        assert extract_json(text) == {"prompt": "Chapter {2}", "nested": {"a": 1}}

    def test_no_json(self):
        assert extract_json("no braces here") is None
        assert extract_json("") is None
        assert extract_json("{broken") is None
