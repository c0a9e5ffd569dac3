"""
Tests for bmk/tokenizer.py quote-aware command splitting.
"""
import pytest

from bmk.tokenizer import split_on_space, join_tokens


class TestSplitOnSpace:
    """Test splitting commands into argument tokens."""

    def test_double_quoted_argument_stays_whole(self):
        """Spaces inside double quotes should not split, quotes are kept."""
        assert split_on_space('echo "Hello World"') == ["echo", '"Hello World"']

    def test_single_quoted_argument_stays_whole(self):
        assert split_on_space("echo 'Hello World'") == ["echo", "'Hello World'"]

    def test_empty_string_yields_one_empty_token(self):
        assert split_on_space("") == [""]

    def test_single_word(self):
        assert split_on_space("ls") == ["ls"]

    def test_plain_words(self):
        assert split_on_space("git log --oneline -n 5") == ["git", "log", "--oneline", "-n", "5"]

    def test_consecutive_spaces_emit_empty_tokens(self):
        assert split_on_space("ls  -la") == ["ls", "", "-la"]

    def test_trailing_space_emits_trailing_empty_token(self):
        assert split_on_space("ls ") == ["ls", ""]

    def test_leading_space_emits_leading_empty_token(self):
        assert split_on_space(" ls") == ["", "ls"]

    def test_only_spaces(self):
        assert split_on_space("  ") == ["", "", ""]

    def test_other_quote_inside_span_is_literal(self):
        """A single quote inside a double-quoted span neither opens nor closes."""
        assert split_on_space('echo "it\'s here" now') == ["echo", '"it\'s here"', "now"]

    def test_double_quote_inside_single_span_is_literal(self):
        assert split_on_space("echo 'say \"hi there\"' x") == ["echo", "'say \"hi there\"'", "x"]

    def test_escaped_quote_does_not_close_span(self):
        """A backslash right before the closing quote keeps the span open."""
        assert split_on_space(r'echo "a \" b" c') == ["echo", r'"a \" b"', "c"]

    def test_unterminated_quote_runs_to_end(self):
        assert split_on_space('echo "never closed here') == ["echo", '"never closed here']

    def test_unterminated_quote_still_emits_trailing_token(self):
        assert split_on_space('a "b ') == ["a", '"b ']

    def test_quote_mid_token(self):
        assert split_on_space('grep -e"foo bar" file') == ["grep", '-e"foo bar"', "file"]

    def test_adjacent_quoted_spans(self):
        assert split_on_space("""echo "a b"'c d' e""") == ["echo", """"a b"'c d'""", "e"]

    def test_tabs_are_not_delimiters(self):
        assert split_on_space("a\tb c") == ["a\tb", "c"]

    @pytest.mark.parametrize("command", [
        'echo "Hello World"',
        "ls  -la ",
        "docker run --rm -it 'my image'",
        "",
    ])
    def test_join_restores_command(self, command):
        assert join_tokens(split_on_space(command)) == command


class TestJoinTokens:
    """Test joining tokens back into a command line."""

    def test_join_with_single_spaces(self):
        assert join_tokens(["echo", '"Hello World"']) == 'echo "Hello World"'

    def test_join_single_empty_token(self):
        assert join_tokens([""]) == ""
