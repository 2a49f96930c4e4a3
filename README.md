# minishell

A small interactive shell in the spirit of bash. It reads a command line,
checks its syntax, splits it into tokens, builds a syntax tree from them and
runs that tree. It needs a POSIX system: pipelines are run with `fork`.

## Features

- Command lists joined with `&&` and `||`, grouped with `(` `)`
- Pipelines with `|`
- Redirections `<`, `>`, `>>` and here-documents `<<`
- Single and double quotes; `$` is not expanded inside single quotes, and a
  quoted `*` is matched literally
- Variable expansion: `$NAME`, `$?` (last status), `$0` (shell name);
  `$1` to `$9` and unknown names expand to nothing
- `*` wildcards, matched against the names in the current directory that do
  not start with a dot; a pattern without a match is kept as written
- Built-in commands: `echo [-n]`, `cd`, `pwd`, `export`, `unset`, `env`, `exit`
- External programs, given by a path starting with `.` or `/`, or looked up
  through `PATH`

## Installing

```
pip install .
```

## Running

```
minishell
```

The shell shows the prompt `minishell > `. It takes no arguments. Ctrl-C
drops the current line and sets the status to 130. Ctrl-D (end of input)
prints `exit` and leaves the shell with the last status; `exit [n]` leaves
it with status `n`.

```
minishell > export GREETING=hello
minishell > echo "$GREETING world" | cat > out.txt
minishell > cat < out.txt && echo done
hello world
done
minishell > ls *.txt || echo none
out.txt
minishell > cat << EOF
> first line
> EOF
first line
```

A syntax error (for example a line starting with `|` or ending in `>`) is
reported on standard error and sets the status to 2.

## Using it from Python

The stages can be used on their own:

```python
from minishell.tokens import split_tokens
from minishell.syntax_tree import create_ast, format_ast

tokens = split_tokens("echo a && echo b | cat")
print(format_ast(create_ast(tokens)))
```

- `minishell.syntax_check.check_input(line)` tells whether a line is
  syntactically acceptable.
- `minishell.expansion` has `get_args`, `expand_variables`, `add_wildcards`
  and `matches_wildcard`.
- `minishell.environment.Environment` holds the environment entries and the
  export list shown by `export`.
- `minishell.executor.Executor` runs a syntax tree.
- `minishell.shell.Shell` runs single lines through `Shell.handle_line`, and
  `Shell.repl` runs the interactive loop.

## What it does not do

- It does not run script files or `-c` strings; it only reads lines
  interactively.
- There are no shell-local variables: `NAME=value` on its own is run as a
  command, and only `export` sets variables.
- `cd -`, job control, background jobs (`&`), `;` command separators and
  descriptor numbers in redirections (`2>`) are not supported.

## Tests

```
pip install .[test]
pytest
```