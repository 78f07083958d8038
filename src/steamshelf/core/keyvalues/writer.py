from __future__ import annotations

"""
Valve Key-Value Text Writer.

Renders an attribute tree back into the tab-indented layout used by the
Steam client. Output parses back into an equal tree. Like the parser, the
walk uses an explicit stack instead of recursion.
"""

from typing import Iterator, List, Tuple

from steamshelf.domain.models import AttributeNode, AttributeTree


def dumps(tree: AttributeTree, indent: str = "\t") -> str:
    """
    Serialize an attribute tree to key-value text.

    Args:
        tree: Root container.
        indent: Indentation unit per nesting level.

    Returns:
        str: The rendered document, newline terminated when not empty.
    """
    lines: List[str] = []
    stack: List[Iterator[Tuple[str, AttributeNode]]] = [iter(tree.items())]

    while stack:
        try:
            key, value = next(stack[-1])
        except StopIteration:
            stack.pop()
            if stack:
                lines.append(indent * (len(stack) - 1) + "}")
            continue

        pad = indent * (len(stack) - 1)
        if isinstance(value, dict):
            lines.append(f'{pad}"{escape(key)}"')
            lines.append(pad + "{")
            stack.append(iter(value.items()))
        else:
            lines.append(f'{pad}"{escape(key)}"{indent}{indent}"{escape(value)}"')

    return "\n".join(lines) + ("\n" if lines else "")


def escape(value: str) -> str:
    """Escape characters that have a meaning inside a quoted token."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )
