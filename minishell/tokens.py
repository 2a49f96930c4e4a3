"""Splitting a command line into command and operator tokens."""

_DOUBLE_OPERATORS = ("&&", "||", ">>", "<<")
_SINGLE_OPERATORS = ("(", ")", ">", "<", "|")
_QUOTES = "'\""


def _operator_len(text, pos):
    if text.startswith(_DOUBLE_OPERATORS, pos):
        return 2
    if text.startswith(_SINGLE_OPERATORS, pos):
        return 1
    return 0


def is_operator(text):
    """Return the length of the operator ``text`` starts with, 0 if none.

    ``&& || << >>`` have length 2, ``( ) | < >`` length 1.
    """
    return _operator_len(text, 0)


def is_redirection(text):
    """Return True if ``text`` starts with ``>`` or ``<``."""
    return text.startswith((">", "<"))


def clean_quotations(text):
    """Remove quote characters, keeping quotes nested in other quotes."""
    quote = None
    kept = []
    for ch in text:
        if quote:
            if ch == quote:
                quote = None
                continue
        elif ch in _QUOTES:
            quote = ch
            continue
        kept.append(ch)
    return "".join(kept)


def right_parenthesis(tokens):
    """Return True if the parentheses among ``tokens`` are balanced."""
    depth = 0
    for token in tokens:
        if token.startswith("("):
            depth += 1
        elif token.startswith(")"):
            depth -= 1
        if depth < 0:
            return False
    return depth == 0


def _command_end(line, pos):
    """Return the index where the command text starting at ``pos`` ends."""
    quote = None
    while pos < len(line):
        ch = line[pos]
        if quote:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif _operator_len(line, pos):
            break
        pos += 1
    return pos


def _raw_tokens(line):
    pos = 0
    while pos < len(line):
        if line[pos] == " ":
            pos += 1
            continue
        length = _operator_len(line, pos)
        if length:
            yield line[pos:pos + length]
            pos += length
        else:
            end = _command_end(line, pos)
            yield line[pos:end].rstrip(" ")
            pos = end


def _first_unquoted_space(text):
    quote = None
    for pos, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == " ":
            return pos
    return -1


def split_tokens(line):
    """Split ``line`` into command strings and operators.

    Words following a redirection target are moved onto the nearest
    preceding command, so ``cat > out -e`` becomes ``cat -e``, ``>``, ``out``.
    """
    tokens = list(_raw_tokens(line))
    for pos, token in enumerate(tokens):
        if not is_redirection(token) or pos + 1 >= len(tokens):
            continue
        target = tokens[pos + 1]
        cut = _first_unquoted_space(target)
        if cut < 0:
            continue
        for back in reversed(range(pos)):
            candidate = tokens[back]
            if is_operator(candidate):
                continue
            if back and is_redirection(tokens[back - 1]):
                continue
            tokens[back] = candidate + target[cut:]
            tokens[pos + 1] = target[:cut]
            break
    return tokens