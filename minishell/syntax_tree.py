"""Building and printing the abstract syntax tree of a command line."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Node:
    """One node of the syntax tree: an operator or a command string."""

    value: str
    left: Optional["Node"] = None
    right: Optional["Node"] = None


def _is_and_or(token):
    return token.startswith(("&&", "||"))


def _is_pipe(token):
    return token.startswith("|")


def _is_redirect(token):
    return token.startswith((">", "<"))


def _split_at(tokens, start, end, matches):
    """Split at the first token outside parentheses for which ``matches`` holds."""
    depth = 0
    for pos in range(start, end + 1):
        token = tokens[pos]
        if token.startswith("("):
            depth += 1
        elif token.startswith(")"):
            depth -= 1
        elif not depth and matches(token):
            return Node(
                token,
                _build(tokens, start, pos - 1),
                _build(tokens, pos + 1, end),
            )
    return None


def _build(tokens, start, end):
    while start <= end:
        if start == end:
            return Node(tokens[start])
        for matches in (_is_and_or, _is_pipe, _is_redirect):
            node = _split_at(tokens, start, end, matches)
            if node is not None:
                return node
        # No operator outside parentheses: drop the enclosing pair.
        start += 1
        end -= 1
    return None


def create_ast(tokens):
    """Build a syntax tree from a token list; return None if it is empty.

    ``&&``/``||`` bind loosest, then ``|``, then redirections; the first
    matching operator outside parentheses becomes the root.
    """
    tokens = list(tokens)
    return _build(tokens, 0, len(tokens) - 1)


def _format_level(node, level, lines):
    if node is None:
        return
    lines.append("    " * level + node.value)
    _format_level(node.left, level + 1, lines)
    _format_level(node.right, level + 1, lines)


def format_ast(root):
    """Return the tree as text, one node per line, indented by depth."""
    lines = []
    _format_level(root, 0, lines)
    return "".join(line + "\n" for line in lines)