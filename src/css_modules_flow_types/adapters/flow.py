"""CSS Modules token extraction and Flow declaration printing."""

from __future__ import annotations

import re
from pathlib import Path

from css_modules_flow_types.adapters.base import AdapterError
from css_modules_flow_types.adapters.lexical import (
    UnbalancedBracesError,
    mask_comments_and_strings,
    split_blocks,
)

FLOW_HEADER = (
    "/* @flow */",
    "/* This file is automatically generated by css-modules-flow-types */",
)

_NAME = r"-?(?:[_a-zA-Z]|\\.)(?:[\w-]|\\.)*"
_LOCAL_NAME_RE = re.compile(rf"([.#])({_NAME})")
_SCOPE_RE = re.compile(r":(global|local)\b(\()?")
_AT_RULE_RE = re.compile(r"@([-\w]+)\s*(.*)", re.DOTALL)
_KEYFRAMES_NAME_RE = re.compile(rf"^(?::local\(\s*)?({_NAME})\s*\)?$")
_ESCAPE_RE = re.compile(r"\\(.)")

# At-rules whose bodies hold further style rules.
_NESTING_AT_RULES = frozenset({"media", "supports", "layer", "container", "document", "scope"})


def extract_local_tokens(css_text: str) -> list[str]:
    """Return locally scoped class, id and keyframes names in first-seen order."""
    seen: dict[str, None] = {}
    _collect_tokens(mask_comments_and_strings(css_text), seen)
    return list(seen)


def _collect_tokens(masked_text: str, seen: dict[str, None]) -> None:
    for block in split_blocks(masked_text):
        at_rule = _AT_RULE_RE.match(block.prelude)
        if at_rule is None:
            for name in _selector_names(block.prelude):
                seen.setdefault(name, None)
            continue
        keyword = at_rule.group(1).lower()
        if keyword.endswith("keyframes"):
            keyframes = _KEYFRAMES_NAME_RE.match(at_rule.group(2).strip())
            if keyframes is not None:
                seen.setdefault(_unescape(keyframes.group(1)), None)
            continue
        if keyword in _NESTING_AT_RULES:
            _collect_tokens(block.body, seen)


def _selector_names(prelude: str) -> list[str]:
    names: list[str] = []
    for selector in _split_top_level(prelude, ","):
        names.extend(_scan_selector(selector, global_mode=False))
    return names


def _scan_selector(selector: str, global_mode: bool) -> list[str]:
    """Walk one compound selector, honouring :global/:local switches."""
    names: list[str] = []
    index = 0
    length = len(selector)
    while index < length:
        scope = _SCOPE_RE.match(selector, index)
        if scope is not None:
            is_global = scope.group(1) == "global"
            if scope.group(2):
                close = _matching_close(selector, scope.end() - 1, "(", ")")
                if not is_global:
                    names.extend(_scan_selector(selector[scope.end() : close], False))
                index = close + 1
            else:
                global_mode = is_global
                index = scope.end()
            continue
        if selector[index] == "[":
            index = _matching_close(selector, index, "[", "]") + 1
            continue
        if selector[index] == "\\":
            index += 2
            continue
        local = _LOCAL_NAME_RE.match(selector, index)
        if local is not None:
            if not global_mode:
                names.append(_unescape(local.group(2)))
            index = local.end()
            continue
        index += 1
    return names


def _split_top_level(text: str, separator: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char in "([":
            depth += 1
        elif char in ")]":
            depth = max(depth - 1, 0)
        elif char == separator and depth == 0:
            parts.append(text[start:index])
            start = index + 1
    parts.append(text[start:])
    return [part.strip() for part in parts if part.strip()]


def _matching_close(text: str, open_index: int, open_char: str, close_char: str) -> int:
    depth = 0
    for index in range(open_index, len(text)):
        if text[index] == open_char:
            depth += 1
        elif text[index] == close_char:
            depth -= 1
            if depth == 0:
                return index
    raise UnbalancedBracesError(f"Unclosed '{open_char}' in selector '{text.strip()}'.")


def _unescape(name: str) -> str:
    return _ESCAPE_RE.sub(r"\1", name)


def print_flow_definition(names: list[str]) -> str:
    """Render an exact-object Flow module declaration for the given names."""
    lines = list(FLOW_HEADER)
    lines.append("declare module.exports: {|")
    for name in names:
        quoted = name.replace("\\", "\\\\").replace("'", "\\'")
        lines.append(f"  +'{quoted}': string;")
    lines.append("|};")
    return "\n".join(lines) + "\n"


class FlowDeclarationConverter:
    """Convert a plain CSS file into a Flow declaration document."""

    name = "flow"

    def convert(self, css_path: Path) -> str:
        """Read CSS from disk and print its exported names."""
        css_text = css_path.read_text(encoding="utf-8")
        try:
            names = extract_local_tokens(css_text)
        except UnbalancedBracesError as exc:
            raise AdapterError(f"Unbalanced braces in {css_path}: {exc}") from exc
        return print_flow_definition(names)
