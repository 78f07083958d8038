from __future__ import annotations

"""
Valve Key-Value Text Parser.

Turns the text format used by Steam for appmanifest_*.acf and
libraryfolders.vdf files into a tree of insertion-ordered dicts. The scan
is a single left-to-right pass over the input that keeps open blocks on an
explicit stack, so arbitrarily deep nesting never grows the interpreter's
call stack.

Grammar accepted:
    document := pair*
    pair     := token ( token | '{' pair* '}' ) [conditional]
    token    := '"' escaped-chars '"' | bare-chars
    comment  := '//' up to end of line
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from steamshelf.domain.errors import KeyValuesParseError
from steamshelf.domain.models import AttributeNode, AttributeTree

# -----------------------------------------------------------------------------
# LEXICAL CONSTANTS
# -----------------------------------------------------------------------------

_ESCAPES: Dict[str, str] = {
    '"': '"',
    "\\": "\\",
    "n": "\n",
    "t": "\t",
}

_PLAIN_RUN = re.compile(r'[^"\\]+')
_BARE_TOKEN = re.compile(r'[^\s{}"\[\]]+')


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse(text: str) -> AttributeTree:
    """
    Parse key-value text into an attribute tree.

    Repeated keys inside one block keep the position of their first
    occurrence and the value of their last one.

    Args:
        text: Full document content.

    Returns:
        AttributeTree: Root container holding the top-level pairs.

    Raises:
        KeyValuesParseError: On any structural grammar violation.
    """
    root: AttributeTree = {}
    current: AttributeTree = root
    # Each entry: (parent container, offset of the '{' that opened the child)
    stack: List[Tuple[AttributeTree, int]] = []

    pending_key: Optional[str] = None
    pending_pos = 0

    pos = 0
    length = len(text)

    while pos < length:
        ch = text[pos]

        if ch.isspace():
            pos += 1
            continue

        if ch == "/" and text.startswith("//", pos):
            newline = text.find("\n", pos)
            pos = length if newline == -1 else newline + 1
            continue

        if ch == "[":
            pos = _skip_conditional(text, pos)
            continue

        if ch == "{":
            if pending_key is None:
                raise KeyValuesParseError("block found where a key was expected", pos, text)
            child: AttributeTree = {}
            current[pending_key] = child
            stack.append((current, pos))
            current = child
            pending_key = None
            pos += 1
            continue

        if ch == "}":
            if pending_key is not None:
                raise KeyValuesParseError(
                    f"key {pending_key!r} has no value", pending_pos, text
                )
            if not stack:
                raise KeyValuesParseError("unexpected closing brace", pos, text)
            current, _ = stack.pop()
            pos += 1
            continue

        start = pos
        if ch == '"':
            token, pos = _read_quoted(text, pos)
        else:
            token, pos = _read_bare(text, pos)

        if pending_key is None:
            pending_key = token
            pending_pos = start
        else:
            current[pending_key] = token
            pending_key = None

    if pending_key is not None:
        raise KeyValuesParseError(f"key {pending_key!r} has no value", pending_pos, text)

    if stack:
        _, brace_pos = stack[-1]
        raise KeyValuesParseError("unterminated block", brace_pos, text)

    return root


def load(path: Union[str, Path]) -> AttributeTree:
    """
    Read and parse a key-value file from disk.

    Undecodable bytes are replaced rather than rejected; the Steam client
    writes UTF-8 but older manifests can carry legacy encodings in names.

    Raises:
        OSError: If the file cannot be read.
        KeyValuesParseError: If the content is malformed.
    """
    with open(path, "r", encoding="utf-8-sig", errors="replace") as f:
        return parse(f.read())


def find_key(node: AttributeNode, key: str) -> Optional[AttributeNode]:
    """
    Case-insensitive child lookup, preferring an exact match.

    Args:
        node: Container to search. Leaves never have children.
        key: Key to look for.

    Returns:
        Optional[AttributeNode]: The child value, or None when absent.
    """
    if not isinstance(node, dict):
        return None
    if key in node:
        return node[key]
    folded = key.casefold()
    for candidate, value in node.items():
        if candidate.casefold() == folded:
            return value
    return None


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _read_quoted(text: str, start: int) -> Tuple[str, int]:
    """Consume a quoted token starting at the opening quote."""
    pieces: List[str] = []
    pos = start + 1
    length = len(text)

    while pos < length:
        run = _PLAIN_RUN.match(text, pos)
        if run:
            pieces.append(run.group())
            pos = run.end()
            continue

        ch = text[pos]
        if ch == '"':
            return "".join(pieces), pos + 1

        # Backslash escape; unknown sequences are kept verbatim
        if pos + 1 >= length:
            break
        nxt = text[pos + 1]
        pieces.append(_ESCAPES.get(nxt, "\\" + nxt))
        pos += 2

    raise KeyValuesParseError("unterminated string", start, text)


def _read_bare(text: str, start: int) -> Tuple[str, int]:
    """Consume an unquoted token."""
    match = _BARE_TOKEN.match(text, start)
    if not match:
        raise KeyValuesParseError(f"unexpected character {text[start]!r}", start, text)
    return match.group(), match.end()


def _skip_conditional(text: str, start: int) -> int:
    """Skip a platform conditional such as [$WIN32] without evaluating it."""
    end = text.find("]", start)
    if end == -1:
        raise KeyValuesParseError("unterminated conditional", start, text)
    return end + 1
