"""Argument splitting, variable expansion and wildcard expansion."""

import functools
import os
import string

from .errors import error_message

_QUOTES = "'\""
_ALNUM = frozenset(string.ascii_letters + string.digits)


def _arg_end(command, pos):
    quote = None
    while pos < len(command):
        ch = command[pos]
        if quote:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == " ":
            break
        pos += 1
    return pos


def get_args(command):
    """Split a command string into arguments at spaces outside quotes."""
    args = []
    pos = 0
    while pos < len(command):
        end = _arg_end(command, pos)
        args.append(command[pos:end])
        pos = end
        while pos < len(command) and command[pos] == " ":
            pos += 1
    return args


def _expand_word(word, env, status_text, shell_name):
    out = []
    quote = None
    pos = 0
    while pos < len(word):
        ch = word[pos]
        nxt = word[pos + 1] if pos + 1 < len(word) else ""
        if quote is None and ch in _QUOTES:
            quote = ch
        elif quote is not None and ch == quote:
            quote = None
        elif quote != "'" and ch == "$" and (nxt in _ALNUM or nxt == "?") and nxt:
            if nxt == "0":
                out.append(shell_name)
                pos += 2
            elif nxt.isdigit():
                pos += 2
            elif nxt == "?":
                out.append(status_text)
                pos += 2
            else:
                end = pos + 1
                while end < len(word) and word[end] in _ALNUM:
                    end += 1
                value = env.get(word[pos + 1:end])
                if value is not None:
                    out.append(value)
                pos = end
            continue
        out.append(ch)
        pos += 1
    return "".join(out)


def expand_variables(args, env, status, shell_name):
    """Replace ``$NAME``, ``$?`` and ``$0``..``$9`` outside single quotes.

    Unknown names and ``$1``..``$9`` expand to nothing; quotes are kept.
    """
    status_text = str(status)
    return [_expand_word(arg, env, status_text, shell_name) for arg in args]


def has_wildcards(word):
    """Return True if ``word`` contains a ``*`` outside quotes."""
    quote = None
    for ch in word:
        if quote:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "*":
            return True
    return False


def matches_wildcard(pattern, name):
    """Return True if ``pattern`` (with unquoted ``*``) matches ``name``."""

    @functools.lru_cache(maxsize=None)
    def hits(w, s, quote):
        if w == len(pattern):
            return s == len(name)
        wc = pattern[w]
        if quote is None and wc in _QUOTES:
            return hits(w + 1, s, wc)
        if quote is not None and wc == quote:
            return hits(w + 1, s, None)
        if quote is None and wc == "*":
            if s == len(name) or pattern[w + 1:w + 2] == "*":
                return hits(w + 1, s, None)
            if w + 1 == len(pattern):
                return True
            return hits(w + 1, s, None) or hits(w, s + 1, None)
        if s < len(name) and wc == name[s]:
            return hits(w + 1, s + 1, quote)
        return False

    return hits(0, 0, None)


def list_directory(path="."):
    """Return the names in ``path`` that do not start with a dot.

    On failure an error is reported and an empty list returned.
    """
    try:
        names = os.listdir(path)
    except OSError:
        error_message(None, None, "ERROR WILDCARD")
        return []
    return [name for name in names if not name.startswith(".")]


def add_wildcards(args, files=None):
    """Replace each wildcard argument by the matching file names.

    Arguments without a match are kept as they are. ``files`` defaults to
    the entries of the current directory.
    """
    if files is None:
        files = list_directory(".")
    files = list(files)
    result = []
    for arg in args:
        if has_wildcards(arg):
            hits = [name for name in files if matches_wildcard(arg, name)]
            if hits:
                result.extend(hits)
                continue
        result.append(arg)
    return result