"""
Quote-aware splitting of stored shell commands.

Commands are split on single spaces, except where the space sits inside a
single- or double-quoted span. Quote characters are kept in the tokens;
nothing is unquoted or unescaped.
"""
from typing import List

QUOTE_CHARS = ('"', "'")


def split_on_space(s: str) -> List[str]:
    """
    Split a command string into argument tokens.

    Consecutive spaces produce empty tokens and a trailing token is always
    emitted, so ``split_on_space("")`` returns ``[""]``.

    Args:
        s: Raw command string as stored in a bookmark

    Returns:
        Ordered list of substrings of ``s``

    Examples:
        >>> split_on_space('echo "Hello World"')
        ['echo', '"Hello World"']
        >>> split_on_space("ls  -la")
        ['ls', '', '-la']
    """
    tokens = []
    begin = 0
    in_string = False
    quote = ""

    for i, char in enumerate(s):
        if char == " " and not in_string:
            tokens.append(s[begin:i])
            begin = i + 1
        elif char in QUOTE_CHARS:
            if not in_string:
                quote = char
                in_string = True
            elif char == quote and i > 0 and s[i - 1] != "\\":
                in_string = False

    tokens.append(s[begin:])
    return tokens


def join_tokens(tokens: List[str]) -> str:
    """Join tokens back into a single command line."""
    return " ".join(tokens)
