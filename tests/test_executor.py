import os

import pytest

from minishell.environment import Environment
from minishell.errors import ShellExit
from minishell.executor import Executor, find_executable, read_heredoc
from minishell.syntax_tree import create_ast
from minishell.tokens import split_tokens


@pytest.fixture
def executor(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    env = Environment(
        {
            "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
            "HOME": str(tmp_path),
        }
    )
    return Executor(env, "minishell")


def run_line(executor, line):
    status = executor.run(create_ast(split_tokens(line)))
    executor.restore_stdio()
    return status


def make_script(path, body, mode=0o755):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(mode)
    return path


def test_read_heredoc_stops_at_delimiter():
    lines = iter(["hello", "world", "EOF", "ignored"])
    assert read_heredoc("EOF", lambda: next(lines, None)) == "hello\nworld\n"


def test_read_heredoc_warns_at_end_of_input(capsys):
    lines = iter(["only"])
    assert read_heredoc("STOP", lambda: next(lines, None)) == "only\n"
    assert "here-document delimited by end-of-file" in capsys.readouterr().err


def test_find_executable_in_path(tmp_path):
    script = make_script(tmp_path / "tool", "exit 0\n")
    env = Environment({"PATH": str(tmp_path)})
    assert find_executable("tool", env) == str(script)


def test_find_executable_skips_non_executable(tmp_path):
    make_script(tmp_path / "tool", "exit 0\n", mode=0o644)
    env = Environment({"PATH": str(tmp_path)})
    assert find_executable("tool", env) is None


def test_find_executable_without_path():
    assert find_executable("ls", Environment({})) is None


def test_output_redirection(executor, tmp_path):
    assert run_line(executor, "echo hi there > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "hi there\n"


def test_append_redirection(executor, tmp_path):
    assert run_line(executor, "echo one >> log.txt") == 0
    assert run_line(executor, "echo two >> log.txt") == 0
    assert (tmp_path / "log.txt").read_text() == "one\ntwo\n"


def test_input_redirection(executor, tmp_path):
    (tmp_path / "in.txt").write_text("data\n")
    assert run_line(executor, "cat < in.txt > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "data\n"


def test_heredoc_feeds_command(executor, tmp_path):
    lines = iter(["first", "second", "END"])
    executor.read_line = lambda: next(lines, None)
    assert run_line(executor, "cat << END > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "first\nsecond\n"


def test_pipe_passes_output(executor, tmp_path):
    assert run_line(executor, "echo abc | cat > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "abc\n"
    assert executor.wait_for_children() == executor.status


def test_and_skips_right_side_on_failure(executor, tmp_path):
    assert run_line(executor, "export 1bad && echo no > f.txt") == 1
    assert not (tmp_path / "f.txt").exists()


def test_or_runs_right_side_on_failure(executor, tmp_path):
    assert run_line(executor, "export 1bad || echo yes > f.txt") == 0
    assert (tmp_path / "f.txt").read_text() == "yes\n"


def test_or_updates_last_status(executor, tmp_path):
    assert run_line(executor, "export 1bad || echo $? > f.txt") == 0
    assert (tmp_path / "f.txt").read_text() == "1\n"


def test_variable_expansion(executor, tmp_path):
    executor.env.set("GREETING=hi")
    assert run_line(executor, "echo $GREETING > f.txt") == 0
    assert (tmp_path / "f.txt").read_text() == "hi\n"


def test_shell_name_expansion(executor, tmp_path):
    assert run_line(executor, "echo $0 > f.txt") == 0
    assert (tmp_path / "f.txt").read_text() == "minishell\n"


def test_script_runs_and_writes(executor, tmp_path):
    make_script(tmp_path / "tool.sh", "echo script-ran\n")
    assert run_line(executor, "./tool.sh > out.txt") == 0
    assert (tmp_path / "out.txt").read_text() == "script-ran\n"


def test_script_exit_status(executor, tmp_path):
    make_script(tmp_path / "fail.sh", "exit 7\n")
    assert executor.execute("./fail.sh") == 7


def test_command_not_found(executor, tmp_path, capsys):
    executor.env.set(f"PATH={tmp_path}")
    assert executor.execute("definitely_missing") == 127
    assert "command not found" in capsys.readouterr().err


def test_command_without_permission(executor, tmp_path, capsys):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    make_script(bin_dir / "tool", "exit 0\n", mode=0o644)
    executor.env.set(f"PATH={bin_dir}")
    assert executor.execute("tool") == 126
    assert "Permission denied" in capsys.readouterr().err


def test_no_path_variable(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    executor = Executor(Environment({}), "minishell")
    assert executor.execute("ls") == 127
    assert "No such file or directory" in capsys.readouterr().err


def test_directory_is_not_runnable(executor, tmp_path, capsys):
    (tmp_path / "sub").mkdir()
    assert executor.execute("./sub") == 126
    assert "Is a directory" in capsys.readouterr().err


def test_missing_relative_path(executor, capsys):
    assert executor.execute("./nope") == 127
    assert "No such file or directory" in capsys.readouterr().err


def test_ambiguous_redirect(executor, tmp_path, capsys):
    (tmp_path / "a1.txt").write_text("")
    (tmp_path / "a2.txt").write_text("")
    assert executor.redirect(">", "a*.txt") == 1
    assert "ambiguous redirect" in capsys.readouterr().err


def test_wildcard_redirect_with_single_match(executor, tmp_path):
    (tmp_path / "only.txt").write_text("")
    assert run_line(executor, "echo hit > o*.txt") == 0
    assert (tmp_path / "only.txt").read_text() == "hit\n"


def test_missing_input_file(executor, capsys):
    assert executor.redirect("<", "absent.txt") == 1
    assert "open" in capsys.readouterr().err


def test_quoted_redirect_target(executor, tmp_path):
    assert executor.redirect(">", "'my file'") == 0
    executor.restore_stdio()
    assert (tmp_path / "my file").exists()


def test_restore_stdio_undoes_redirection(executor, tmp_path, capfd):
    assert executor.redirect(">", "f.txt") == 0
    executor.restore_stdio()
    executor.execute("echo x")
    assert capfd.readouterr().out == "x\n"
    assert (tmp_path / "f.txt").read_text() == ""


def test_exit_builtin_raises(executor):
    with pytest.raises(ShellExit) as info:
        executor.execute("exit 3")
    assert info.value.status == 3


def test_interrupted_execution(executor):
    executor.interrupted = True
    assert executor.execute("echo x") == 130


def test_wait_without_children_keeps_status(executor):
    executor.status = 5
    assert executor.wait_for_children() == 5


def test_empty_tree_succeeds(executor):
    assert executor.run(None) == 0