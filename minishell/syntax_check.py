"""Syntax check of a raw command line before it is tokenized."""

from .errors import error_message, spec_error

_LEADING_ERRORS = ("&&", "||", "&", "|&", "|")
_QUOTES = "'\""


def _skip_spaces(line, pos):
    while pos < len(line) and line[pos] == " ":
        pos += 1
    return pos


def _scan(line, pos):
    """Scan a command word up to the next operator.

    Returns a verdict (bool) or a ``(pos, needs_string)`` pair telling where
    checking continues.
    """
    if line[pos] in "&|><":
        return False
    quote = None
    while pos < len(line):
        ch = line[pos]
        if quote:
            if ch == quote:
                quote = None
            pos += 1
            continue
        if ch in _QUOTES:
            quote = ch
            pos += 1
            continue
        if line.startswith(("&&", "||", ">>", "<<"), pos):
            return pos + 2, True
        if ch in "><":
            return pos + 1, True
        if ch == "|":
            after = _skip_spaces(line, pos + 1)
            if after >= len(line):
                error_message(None, "syntax error", "pipe at end of input")
                return False
            return after, False
        if ch in "()":
            return pos + 1, False
        pos += 1
    if quote:
        error_message(None, None, "syntax error: unclosed quotation mark")
        return False
    return True


def check_input(line, needs_string=False):
    """Return True if ``line`` is syntactically acceptable.

    ``needs_string`` means a word must follow (after a redirection or an
    operator). Errors are reported on standard error.
    """
    pos = 0
    while True:
        pos = _skip_spaces(line, pos)
        if pos >= len(line):
            if not needs_string:
                return True
            spec_error("newline")
            return False
        for token in _LEADING_ERRORS:
            if line.startswith(token, pos):
                spec_error(token)
                return False
        if line.startswith((">>", "<<"), pos):
            if needs_string:
                spec_error(line[pos:pos + 2])
                return False
            pos += 2
            needs_string = True
            continue
        if line.startswith((">", "<"), pos):
            if needs_string:
                spec_error(line[pos])
                return False
            pos += 1
            needs_string = True
            continue
        result = _scan(line, pos)
        if isinstance(result, bool):
            return result
        pos, needs_string = result