"""Running a syntax tree: operators, pipes, redirections and commands."""

import os
import signal
import stat
import subprocess
import sys
import tempfile
import traceback

from .commands import expand_home, run_builtin
from .errors import ShellExit, error_message, spec_error
from .expansion import add_wildcards, expand_variables, get_args
from .tokens import clean_quotations, is_redirection

_OUTPUT_FLAGS = {
    ">": (os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o755),
    ">>": (os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o644),
}


def _prompt_line():
    try:
        return input("> ")
    except EOFError:
        return None


def read_heredoc(delimiter, read_line):
    """Collect lines from ``read_line`` until one equals ``delimiter``.

    ``read_line`` returns a line without its newline, or None at end of
    input, which ends the document with a warning.
    """
    lines = []
    while True:
        line = read_line()
        if line is None:
            error_message(
                "warning",
                "here-document delimited by end-of-file - wanted",
                delimiter,
            )
            break
        if line == delimiter:
            break
        lines.append(line + "\n")
    return "".join(lines)


def _path_candidates(name, env):
    path = env.get("PATH")
    if path is None:
        return
    for directory in path.split(":"):
        if directory:
            yield f"{directory}/{name}"


def find_executable(name, env):
    """Return the first executable ``dir/name`` along ``PATH``, or None."""
    return next(
        (cand for cand in _path_candidates(name, env) if os.access(cand, os.X_OK)),
        None,
    )


def _exit_code(code):
    """Map a negative (signal) return code to the shell's 128+signal form."""
    return 128 - code if code < 0 else code


class Executor:
    """Walks a syntax tree and runs what it describes.

    ``stdin`` and ``stdout`` are the descriptors commands use when nothing
    is redirected; ``read_line`` supplies here-document lines.
    """

    def __init__(self, env, shell_name="minishell"):
        self.env = env
        self.shell_name = shell_name
        self.status = 0
        self.last_status = 0
        self.interrupted = False
        self.read_line = _prompt_line
        self.stdin = 0
        self.stdout = 1
        self._stdin = self.stdin
        self._stdout = self.stdout
        self._owned = set()
        self._children = []
        self._sync_fd = None

    # -- descriptor bookkeeping -------------------------------------------

    def _release(self, fd):
        if fd in self._owned:
            self._owned.discard(fd)
            try:
                os.close(fd)
            except OSError:
                pass

    def _replace_stdin(self, fd):
        if fd != self._stdin:
            self._release(self._stdin)
        self._stdin = fd
        self._owned.add(fd)

    def _replace_stdout(self, fd):
        if fd != self._stdout:
            self._release(self._stdout)
        self._stdout = fd
        self._owned.add(fd)

    def restore_stdio(self):
        """Close redirected descriptors and return to the default ones."""
        for fd in list(self._owned):
            self._release(fd)
        self._stdin = self.stdin
        self._stdout = self.stdout

    def _release_sync(self):
        if self._sync_fd is None:
            return
        try:
            os.write(self._sync_fd, b"\0")
        except OSError:
            pass
        try:
            os.close(self._sync_fd)
        except OSError:
            pass
        self._sync_fd = None

    # -- children -----------------------------------------------------------

    def _reap(self):
        status = None
        for child in self._children:
            if isinstance(child, int):
                try:
                    _, raw = os.waitpid(child, 0)
                except ChildProcessError:
                    continue
                status = _exit_code(os.waitstatus_to_exitcode(raw))
            else:
                status = _exit_code(child.wait())
        self._children.clear()
        return status

    def wait_for_children(self):
        """Wait for every started child; the last one gives the status."""
        status = self._reap()
        if status is not None:
            self.status = status
        return self.status

    # -- tree walking -------------------------------------------------------

    def run(self, node):
        """Run a syntax tree node and return its exit status."""
        if node is None:
            return 0
        value = node.value
        if value in ("&&", "||"):
            return self._run_and_or(node)
        if value == "|":
            return self._run_pipe(node)
        if is_redirection(value):
            return self._run_redirections(node)
        return self.execute(value)

    def _run_and_or(self, node):
        self.status = self.run(node.left)
        if self.interrupted:
            return 1
        self._reap()
        self.last_status = self.status
        self.restore_stdio()
        if node.value == "&&":
            return self.run(node.right) if self.status == 0 else self.status
        return self.run(node.right) if self.status else self.status

    def _run_pipe(self, node):
        read_end, write_end = os.pipe()
        sync_read, sync_write = os.pipe()
        try:
            pid = os.fork()
        except OSError:
            for fd in (read_end, write_end, sync_read, sync_write):
                os.close(fd)
            return 1
        if pid == 0:
            self._run_left_child(node.left, read_end, write_end, sync_read, sync_write)
        self._children.append(pid)
        os.close(write_end)
        os.close(sync_write)
        self._replace_stdin(read_end)
        # Wait until the left side has set up its redirections.
        os.read(sync_read, 1)
        os.close(sync_read)
        return self.run(node.right)

    def _run_left_child(self, node, read_end, write_end, sync_read, sync_write):
        status = 1
        try:
            signal.signal(signal.SIGINT, signal.SIG_DFL)
            os.close(read_end)
            os.close(sync_read)
            self._children = []
            self._sync_fd = sync_write
            self._replace_stdout(write_end)
            status = self.run(node)
        except ShellExit as exc:
            status = exc.status
        except BaseException:
            traceback.print_exc()
            status = 1
        finally:
            try:
                sys.stdout.flush()
                sys.stderr.flush()
            finally:
                os._exit(status & 0xFF)

    def _missing_target(self):
        spec_error("newline")
        return 2

    def _run_redirections(self, node):
        current = node
        while current.right is not None and is_redirection(current.right.value):
            target = current.right.left
            if target is None:
                return self._missing_target()
            self.status = self.redirect(current.value, target.value)
            if self.status:
                return self.status
            current = current.right
        if current.right is None:
            return self._missing_target()
        self.status = self.redirect(current.value, current.right.value)
        if self.status:
            return self.status
        return self.run(node.left)

    # -- redirections -------------------------------------------------------

    def redirect(self, operator, word):
        """Apply one redirection; return 0 on success, 1 on failure."""
        word = clean_quotations(word)
        if operator == "<<":
            return self.heredoc(word)
        words = add_wildcards([word])
        if len(words) > 1:
            error_message(None, None, "ambiguous redirect")
            return 1
        target = expand_variables(
            words, self.env, self.last_status, self.shell_name
        )[0]
        if operator in _OUTPUT_FLAGS:
            flags, mode = _OUTPUT_FLAGS[operator]
        elif operator == "<":
            flags, mode = os.O_RDONLY, 0
        else:
            return 1
        try:
            fd = os.open(target, flags, mode)
        except OSError as exc:
            sys.stderr.write(f"open: {exc.strerror}\n")
            sys.stderr.flush()
            return 1
        if operator == "<":
            self._replace_stdin(fd)
        else:
            self._replace_stdout(fd)
        return 0

    def heredoc(self, delimiter):
        """Read a here-document and make it the standard input."""
        try:
            text = read_heredoc(delimiter, self.read_line)
        except KeyboardInterrupt:
            return 130
        fd, path = tempfile.mkstemp(prefix="heredoc-")
        os.unlink(path)
        with open(fd, "wb", closefd=False) as buffer:
            buffer.write(text.encode())
        os.lseek(fd, 0, os.SEEK_SET)
        self._replace_stdin(fd)
        return 0

    # -- commands -----------------------------------------------------------

    def _process_env(self):
        return dict(entry.split("=", 1) for entry in self.env.as_list())

    def _start_external(self, argv):
        """Start ``argv``; return None once started, else the failure status."""
        name = argv[0]
        if name.startswith("~/"):
            name = expand_home(name, self.env)
            argv = [name, *argv[1:]]
        if name.startswith((".", "/")):
            try:
                info = os.stat(name)
            except OSError:
                error_message(name, None, "No such file or directory")
                return 127
            if stat.S_ISDIR(info.st_mode):
                error_message(name, None, "Is a directory")
                return 126
            if not os.access(name, os.X_OK):
                error_message(name, None, "Permission denied")
                return 126
            path = name
        else:
            if self.env.get("PATH") is None:
                error_message(name, None, "No such file or directory")
                return 127
            path = find_executable(name, self.env)
            if path is None:
                if any(os.path.exists(c) for c in _path_candidates(name, self.env)):
                    error_message(name, None, "Permission denied")
                    return 126
                error_message(name, None, "command not found")
                return 127
        try:
            proc = subprocess.Popen(
                argv,
                executable=path,
                stdin=self._stdin,
                stdout=self._stdout,
                env=self._process_env(),
            )
        except OSError as exc:
            error_message(name, None, exc.strerror or str(exc))
            return 126
        self._children.append(proc)
        return None

    def execute(self, command):
        """Expand and run one simple command string; return its status."""
        if self.interrupted:
            return 130
        self._release_sync()
        if not command:
            return 0
        args = get_args(command)
        if not args:
            return 0
        args = add_wildcards(args)
        args = expand_variables(args, self.env, self.last_status, self.shell_name)
        args = [arg for arg in args if arg]
        if not args:
            return 0
        argv = [clean_quotations(arg) for arg in args]
        try:
            with open(self._stdout, "w", closefd=False) as out:
                builtin_status = run_builtin(argv, self.env, out)
        except BaseException:
            self.restore_stdio()
            raise
        if builtin_status is not None:
            self.status = builtin_status
            self.restore_stdio()
            self._reap()
            return self.status
        failure = self._start_external(argv)
        self.restore_stdio()
        if failure is not None:
            self._reap()
            self.status = failure
            return self.status
        return self.wait_for_children()