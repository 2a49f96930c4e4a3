"""The interactive shell: prompt loop, line handling and signal setup."""

import enum
import os
import signal
import sys

from .environment import Environment
from .errors import ShellExit, error_message
from .executor import Executor
from .syntax_check import check_input
from .syntax_tree import create_ast
from .tokens import right_parenthesis, split_tokens

try:
    import readline as _readline
except ImportError:  # pragma: no cover - platform without readline
    _readline = None

PROMPT = "minishell > "
SHELL_NAME = "minishell"
INTERRUPT_STATUS = 130
SYNTAX_ERROR_STATUS = 2


class SignalMode(enum.IntEnum):
    """Which SIGINT behaviour the shell is in."""

    INIT = 0
    PROMPT = 1
    EXECUTING = 2
    CHILD = 3


class _SignalState:
    """The last received signal and the executor it should interrupt."""

    def __init__(self):
        self.received = 0
        self.target = None

    def take(self):
        received, self.received = self.received, 0
        return received


_state = _SignalState()


def _interrupt_while_executing(signum, frame):
    _state.received = signum
    if _state.target is not None:
        _state.target.interrupted = True
    os.write(2, b"\n")


def _interrupt_in_child(signum, frame):
    _state.received = signum
    os._exit(INTERRUPT_STATUS)


def install_signal_handlers(mode):
    """Set the SIGINT (and, on start-up, SIGQUIT) handling for ``mode``.

    At the prompt SIGINT raises KeyboardInterrupt; while commands run it
    only prints a newline and marks the run as interrupted; in a child it
    ends the process with status 130. Start-up also ignores SIGQUIT.
    """
    mode = SignalMode(mode)
    if mode is SignalMode.INIT:
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
        signal.signal(signal.SIGINT, signal.default_int_handler)
    elif mode is SignalMode.PROMPT:
        signal.signal(signal.SIGINT, signal.default_int_handler)
    elif mode is SignalMode.EXECUTING:
        signal.signal(signal.SIGINT, _interrupt_while_executing)
    else:
        signal.signal(signal.SIGINT, _interrupt_in_child)


def _add_history(line):
    if _readline is not None and line:
        _readline.add_history(line)


class Shell:
    """Reads command lines, checks them, builds their trees and runs them."""

    def __init__(self, envp=None):
        if envp is None:
            envp = os.environ
        self.shell_name = SHELL_NAME
        self.env = Environment(envp)
        self.executor = Executor(self.env, self.shell_name)
        self.status = 0

    def build_ast(self, line):
        """Tokenize ``line`` and return its syntax tree, or None.

        Unbalanced parentheses are reported and give None.
        """
        tokens = split_tokens(line)
        if not tokens:
            return None
        if not right_parenthesis(tokens):
            error_message("Syntax error", None, "Wrong parenthesis")
            return None
        return create_ast(tokens)

    def handle_line(self, line):
        """Check and run one command line; return the resulting status.

        :class:`ShellExit` raised by ``exit`` is passed on to the caller.
        """
        if not check_input(line, False):
            self.status = SYNTAX_ERROR_STATUS
            return self.status
        root = self.build_ast(line)
        if root is not None:
            executor = self.executor
            executor.last_status = self.status
            executor.status = self.status
            executor.interrupted = bool(_state.received)
            _state.target = executor
            try:
                self.status = executor.run(root)
            finally:
                _state.target = None
                executor.wait_for_children()
                executor.restore_stdio()
        if _state.take():
            self.status = INTERRUPT_STATUS
        return self.status

    def repl(self):
        """Prompt for lines until end of input or ``exit``; return the status."""
        handled = (signal.SIGINT, signal.SIGQUIT)
        previous = {sig: signal.getsignal(sig) for sig in handled}
        install_signal_handlers(SignalMode.INIT)
        try:
            while True:
                install_signal_handlers(SignalMode.PROMPT)
                try:
                    line = input(PROMPT)
                except EOFError:
                    break
                except KeyboardInterrupt:
                    sys.stderr.write("\n")
                    sys.stderr.flush()
                    self.status = INTERRUPT_STATUS
                    continue
                _add_history(line)
                install_signal_handlers(SignalMode.EXECUTING)
                try:
                    self.handle_line(line)
                except ShellExit as exc:
                    self.status = exc.status
                    return self.status
            sys.stdout.write("exit\n")
            sys.stdout.flush()
            return self.status
        finally:
            for sig, handler in previous.items():
                if handler is not None:
                    signal.signal(sig, handler)


def main(argv=None):
    """Start the interactive shell; it takes no arguments."""
    if argv is None:
        argv = sys.argv[1:]
    if argv:
        error_message(None, "main", "Too many arguments")
        return 1
    return Shell(os.environ).repl()


if __name__ == "__main__":
    sys.exit(main())