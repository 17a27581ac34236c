"""
Tests for the input tokenizer primitives.
"""

from palette.search.grammar import split_first_token, split_tokens, strip_leading_token


class TestSplitFirstToken:
    """Test leading-token extraction."""

    def test_empty_input(self):
        first = split_first_token("")
        assert first.token == ""
        assert first.rest == ""
        assert first.has_trailing_space is False

    def test_single_token(self):
        first = split_first_token("search")
        assert first.token == "search"
        assert first.rest == ""
        assert first.has_trailing_space is False

    def test_trailing_space_confirms_token(self):
        first = split_first_token("search ")
        assert first.token == "search"
        assert first.rest == ""
        assert first.has_trailing_space is True

    def test_rest_keeps_everything_after_first_separator(self):
        first = split_first_token("search default  notes")
        assert first.token == "search"
        assert first.rest == "default  notes"

    def test_leading_whitespace_ignored(self):
        first = split_first_token("   search x")
        assert first.token == "search"
        assert first.rest == "x"

    def test_whitespace_only(self):
        first = split_first_token("   ")
        assert first.token == ""
        assert first.has_trailing_space is True


class TestSplitTokens:
    """Test full token lists."""

    def test_empty(self):
        info = split_tokens("")
        assert info.tokens == []
        assert info.has_trailing_space is False

    def test_collapses_internal_whitespace(self):
        info = split_tokens(" default   notes\thello ")
        assert info.tokens == ["default", "notes", "hello"]
        assert info.has_trailing_space is True

    def test_no_trailing_space(self):
        info = split_tokens("default")
        assert info.tokens == ["default"]
        assert info.has_trailing_space is False

    def test_strip_leading_token(self):
        assert strip_leading_token("default notes hi") == "notes hi"
        assert strip_leading_token("default") == ""
