"""
Input Grammar - Whitespace tokenizer for palette input.

Two primitives:
  - split_first_token(): leading token + remainder
  - split_tokens(): full token list

Both report whether the input ends in whitespace, which is what the mode
parser uses to decide if a token has been confirmed.
"""

import re
from dataclasses import dataclass, field

_WHITESPACE = re.compile(r"\s")


@dataclass(frozen=True)
class FirstToken:
    token: str
    rest: str
    has_trailing_space: bool


@dataclass(frozen=True)
class TokenList:
    tokens: list[str] = field(default_factory=list)
    has_trailing_space: bool = False


def _ends_with_space(text: str) -> bool:
    return bool(text) and text[-1].isspace()


def split_first_token(text: str) -> FirstToken:
    """
    Split off the first whitespace-delimited token.

    Leading whitespace is ignored. The remainder starts right after the
    single whitespace character that ended the token.

    Args:
        text: Raw input (may be empty)

    Returns:
        FirstToken with token, rest and the trailing-space flag
    """
    trailing = _ends_with_space(text)
    trimmed = text.lstrip()
    if not trimmed:
        return FirstToken("", "", trailing)

    match = _WHITESPACE.search(trimmed)
    if match is None:
        return FirstToken(trimmed, "", trailing)

    return FirstToken(
        trimmed[:match.start()],
        trimmed[match.end():],
        trailing,
    )


def split_tokens(text: str) -> TokenList:
    """Split text into all of its tokens plus the trailing-space flag."""
    trimmed = text.rstrip()
    trailing = len(trimmed) != len(text)
    if not trimmed:
        return TokenList([], trailing)
    return TokenList(trimmed.split(), trailing)


def strip_leading_token(text: str) -> str:
    """Drop the first token, returning what followed it (or "")."""
    return split_first_token(text).rest
