import pytest

from minishell.syntax_check import check_input


def _unexpected(token):
    return f"minishell: syntax error near unexpected token `{token}'\n"


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   ",
        "ls -l",
        "echo '|'",
        'echo "a && b"',
        "cat << EOF",
        "ls > out",
        "> out",
        "(ls)",
        "ls | wc -l",
        "a && b || c",
    ],
)
def test_valid_lines(line, capsys):
    assert check_input(line, False) is True
    assert capsys.readouterr().err == ""


@pytest.mark.parametrize("token", ["&&", "||", "&", "|"])
def test_leading_operator_is_rejected(token, capsys):
    assert check_input(f"{token} ls", False) is False
    assert capsys.readouterr().err == _unexpected(token)


def test_redirection_without_target(capsys):
    assert check_input("ls >", False) is False
    assert capsys.readouterr().err == _unexpected("newline")


def test_double_redirection(capsys):
    assert check_input("ls > > f", False) is False
    assert capsys.readouterr().err == _unexpected(">")


def test_heredoc_followed_by_pipe(capsys):
    assert check_input("ls << | x", False) is False
    assert capsys.readouterr().err == _unexpected("|")


def test_repeated_and(capsys):
    assert check_input("ls && && ls", False) is False
    assert capsys.readouterr().err == _unexpected("&&")


def test_pipe_at_end(capsys):
    assert check_input("ls |", False) is False
    assert capsys.readouterr().err == "minishell: syntax error: pipe at end of input\n"


def test_unclosed_quote(capsys):
    assert check_input("echo 'abc", False) is False
    assert capsys.readouterr().err == "minishell: syntax error: unclosed quotation mark\n"


def test_needs_string_on_empty(capsys):
    assert check_input("", True) is False
    assert capsys.readouterr().err == _unexpected("newline")