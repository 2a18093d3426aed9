"""Lexical helpers for scanning CSS text without a full parser."""

from __future__ import annotations

from dataclasses import dataclass

_BLOCK_COMMENT_START = "/*"
_BLOCK_COMMENT_END = "*/"
_STRING_DELIMITERS = ("'", '"')
_ESCAPE_CHAR = "\\"


@dataclass(slots=True, frozen=True)
class CssBlock:
    """One top-level `prelude { body }` pair found in masked CSS."""

    prelude: str
    body: str


class UnbalancedBracesError(ValueError):
    """Raised when masked CSS has stray or unclosed braces."""


def mask_comments_and_strings(text: str) -> str:
    """Blank out comments and string contents while preserving offsets and line count."""
    chars = list(text)
    length = len(text)
    index = 0
    state: str | None = None

    while index < length:
        if state is None:
            if text.startswith(_BLOCK_COMMENT_START, index):
                chars[index] = chars[index + 1] = " "
                state = _BLOCK_COMMENT_END
                index += 2
                continue
            if text[index] in _STRING_DELIMITERS:
                chars[index] = " "
                state = text[index]
                index += 1
                continue
            index += 1
            continue

        if state == _BLOCK_COMMENT_END:
            if text.startswith(_BLOCK_COMMENT_END, index):
                chars[index] = chars[index + 1] = " "
                state = None
                index += 2
                continue
        elif text[index] == _ESCAPE_CHAR:
            chars[index] = " "
            if index + 1 < length and text[index + 1] != "\n":
                chars[index + 1] = " "
            index += 2
            continue
        elif text[index] == state:
            chars[index] = " "
            state = None
            index += 1
            continue

        if text[index] != "\n":
            chars[index] = " "
        index += 1

    return "".join(chars)


def split_blocks(masked_text: str) -> list[CssBlock]:
    """Split masked CSS into top-level blocks.

    Statements without a body (``@import ...;``) are dropped. Declarations
    nested inside a body are left for the caller to recurse into.
    """
    blocks: list[CssBlock] = []
    depth = 0
    prelude_start = 0
    body_start = 0
    prelude = ""

    for index, char in enumerate(masked_text):
        if char == "{":
            if depth == 0:
                prelude = masked_text[prelude_start:index]
                body_start = index + 1
            depth += 1
        elif char == "}":
            if depth == 0:
                raise UnbalancedBracesError("Unexpected '}'.")
            depth -= 1
            if depth == 0:
                blocks.append(
                    CssBlock(prelude=prelude.strip(), body=masked_text[body_start:index])
                )
                prelude_start = index + 1
        elif char == ";" and depth == 0:
            prelude_start = index + 1

    if depth != 0:
        raise UnbalancedBracesError("Unclosed '{'.")
    return blocks
