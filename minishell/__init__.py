"""A small interactive shell with pipes, redirections, lists, variables and wildcards."""

__version__ = "0.1.0"

__all__ = [
    "commands",
    "environment",
    "errors",
    "executor",
    "expansion",
    "shell",
    "syntax_check",
    "syntax_tree",
    "tokens",
]