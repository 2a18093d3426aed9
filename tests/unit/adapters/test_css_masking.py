from __future__ import annotations

import pytest

from css_modules_flow_types.adapters import (
    UnbalancedBracesError,
    mask_comments_and_strings,
    split_blocks,
)


def test_masking_preserves_length_and_line_count() -> None:
    text = '/* a\n b */ .x { content: "{"; }\n'

    masked = mask_comments_and_strings(text)

    assert len(masked) == len(text)
    assert masked.count("\n") == text.count("\n")
    assert "{" not in masked.split(".x")[1].split("content")[1]


def test_masking_handles_escaped_quotes_inside_strings() -> None:
    text = ".x { content: 'it\\'s .y'; }"

    masked = mask_comments_and_strings(text)

    assert ".y" not in masked
    assert masked.startswith(".x {")


def test_split_blocks_returns_top_level_preludes_and_bodies() -> None:
    masked = mask_comments_and_strings(
        '@charset "utf-8";\n.a { color: red; }\n@media print { .b { color: blue; } }\n'
    )

    blocks = split_blocks(masked)

    assert [block.prelude for block in blocks] == [".a", "@media print"]
    assert ".b" in blocks[1].body


def test_split_blocks_rejects_unbalanced_input() -> None:
    with pytest.raises(UnbalancedBracesError, match="Unclosed"):
        split_blocks(".a { .b { }")
    with pytest.raises(UnbalancedBracesError, match="Unexpected"):
        split_blocks("}")
