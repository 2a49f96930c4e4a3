"""Error reporting shared by the shell's components."""

import sys

PROMPT_NAME = "minishell"


class ShellExit(Exception):
    """Raised when the shell has to terminate with a given exit status."""

    def __init__(self, status):
        super().__init__(status)
        self.status = status


def error_message(cmd, arg, message):
    """Write ``minishell: [cmd: ][arg: ]message`` to standard error."""
    parts = [PROMPT_NAME]
    if cmd is not None:
        parts.append(cmd)
    if arg is not None:
        parts.append(arg)
    parts.append(message)
    sys.stderr.write(": ".join(parts) + "\n")
    sys.stderr.flush()


def spec_error(token):
    """Report a syntax error near the given token on standard error."""
    sys.stderr.write(
        f"{PROMPT_NAME}: syntax error near unexpected token `{token}'\n"
    )
    sys.stderr.flush()