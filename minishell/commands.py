"""The shell's built-in commands."""

import os
import string
import sys

from .environment import with_value
from .errors import ShellExit, error_message

_INT_MAX = 2147483647
_INT_MIN = -2147483648
_ATOI_SPACES = " \f\n\r\t\v"
_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_REST = frozenset(string.ascii_letters + string.digits + "_")
_DIGITS = frozenset(string.digits)


def _stream(out):
    return sys.stdout if out is None else out


def atoi(text):
    """Parse a leading decimal integer the way the shell's ``exit`` does.

    Leading whitespace and one sign are accepted; parsing stops at the first
    non-digit. A value above the 32-bit maximum gives -1, one below the
    32-bit minimum gives 0.
    """
    pos = 0
    while pos < len(text) and text[pos] in _ATOI_SPACES:
        pos += 1
    sign = 1
    if pos < len(text) and text[pos] in "+-":
        if text[pos] == "-":
            sign = -1
        pos += 1
    result = 0
    while pos < len(text) and text[pos] in _DIGITS:
        result = result * 10 + int(text[pos])
        if result * sign > _INT_MAX:
            return -1
        if result * sign < _INT_MIN:
            return 0
        pos += 1
    return result * sign


def is_valid_identifier(arg):
    """Return True if the name part of ``arg`` (before ``=``) is valid."""
    if not arg or arg[0] not in _IDENT_START:
        return False
    name = arg.partition("=")[0]
    return all(ch in _IDENT_REST for ch in name[1:])


def expand_home(word, env):
    """Replace a leading ``~`` with the home directory.

    ``HOME`` is looked up in ``env`` first, then in the process
    environment; without either the word is returned unchanged.
    """
    if not word.startswith("~"):
        return word
    home = env.get("HOME")
    if home is None:
        home = os.environ.get("HOME")
    if home is None:
        return word
    return home + word[1:]


def builtin_echo(argv, out=None):
    """Print the arguments separated by spaces; ``-n`` drops the newline."""
    words = list(argv[1:])
    newline = True
    if words and words[0] == "-n":
        newline = False
        words = words[1:]
    stream = _stream(out)
    stream.write(" ".join(words) + ("\n" if newline else ""))
    stream.flush()
    return 0


def _current_directory():
    try:
        return os.getcwd()
    except OSError:
        return ""


def builtin_cd(argv, env):
    """Change directory and update ``PWD`` and ``OLDPWD``."""
    if len(argv) > 2:
        error_message("cd", None, "too many arguments")
        return 1
    previous = env.get("PWD")
    if len(argv) == 1:
        home = env.get("HOME")
        if home is None:
            error_message("cd", None, "HOME not set")
            return 1
        try:
            os.chdir(home)
        except OSError:
            error_message("cd", None, "error changing to HOME directory")
            return 1
    else:
        target = argv[1]
        if target.startswith("~"):
            target = expand_home(target, env)
        try:
            os.chdir(target)
        except OSError:
            error_message("cd", target, "No such file or directory")
            return 1
    env.set("OLDPWD=" + (previous or ""))
    env.set("PWD=" + _current_directory())
    return 0


def builtin_pwd(out=None):
    """Print the current working directory."""
    stream = _stream(out)
    stream.write(_current_directory() + "\n")
    stream.flush()
    return 0


def builtin_export(argv, env, out=None):
    """Export names or assignments; without arguments list the exports."""
    if len(argv) == 1:
        stream = _stream(out)
        for line in env.export_declarations():
            stream.write(line + "\n")
        stream.flush()
    status = 0
    for arg in argv[1:]:
        if not is_valid_identifier(arg):
            error_message("export", arg, "not a valid identifier")
            status = 1
            continue
        if with_value(arg):
            env.set(arg)
        env.export(arg)
    return status


def builtin_unset(argv, env):
    """Remove the named variables from the environment and export list."""
    names = list(argv[1:])
    for name in names:
        env.delete(name)
    for name in names:
        if env.is_exported(name):
            env.unexport(name)
    return 0


def builtin_env(env, out=None):
    """Print every ``KEY=VALUE`` entry of the environment."""
    stream = _stream(out)
    for entry in env.as_list():
        stream.write(entry + "\n")
    stream.flush()
    return 0


def builtin_exit(argv, out=None):
    """Leave the shell by raising :class:`ShellExit`.

    Returns 1 without leaving when a numeric argument is followed by more
    arguments.
    """
    if len(argv) == 1:
        raise ShellExit(0)
    arg = argv[1]
    stream = _stream(out)
    stream.write("exit\n")
    stream.flush()
    digits = arg[1:] if arg[:1] in ("+", "-") else arg
    if not all(ch in _DIGITS for ch in digits):
        error_message("exit", arg, "numeric argument required")
        raise ShellExit(2)
    if len(argv) > 2:
        error_message("exit", None, "too many arguments")
        return 1
    raise ShellExit(atoi(arg) & 0xFF)


def run_builtin(argv, env, out=None):
    """Run ``argv`` if it names a built-in; return its status, else None."""
    if not argv:
        return None
    name = argv[0]
    if name == "echo":
        return builtin_echo(argv, out)
    if name == "cd":
        return builtin_cd(argv, env)
    if name == "pwd":
        return builtin_pwd(out)
    if name == "export":
        return builtin_export(argv, env, out)
    if name == "unset":
        return builtin_unset(argv, env)
    if name == "env":
        return builtin_env(env, out)
    if name == "exit":
        return builtin_exit(argv, out)
    return None