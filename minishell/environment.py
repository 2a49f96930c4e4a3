"""Environment variables and the list of exported names."""

from collections.abc import Mapping


def with_value(text):
    """Return True if ``text`` contains an ``=`` assignment."""
    return "=" in text


def _key(entry):
    return entry.partition("=")[0]


class Environment:
    """Ordered ``KEY=VALUE`` entries plus the export list shown by ``export``.

    The export list may also hold bare names that were exported without a
    value; those never appear among the environment entries.
    """

    def __init__(self, envp=()):
        if isinstance(envp, Mapping):
            entries = [f"{key}={value}" for key, value in envp.items()]
        else:
            entries = [entry for entry in envp if with_value(entry)]
        self._env = list(entries)
        self._exports = list(entries)

    def _env_index(self, key):
        return next(
            (pos for pos, entry in enumerate(self._env) if _key(entry) == key),
            None,
        )

    def _export_index(self, key):
        return next(
            (pos for pos, entry in enumerate(self._exports) if _key(entry) == key),
            None,
        )

    def get(self, key):
        """Return the value of ``key`` in the environment, or None."""
        pos = self._env_index(key)
        if pos is None:
            return None
        return self._env[pos].partition("=")[2]

    def set(self, assignment):
        """Add or replace an entry given as ``KEY=VALUE``."""
        if not with_value(assignment):
            raise ValueError(f"not an assignment: {assignment!r}")
        pos = self._env_index(_key(assignment))
        if pos is None:
            self._env.append(assignment)
        else:
            self._env[pos] = assignment

    def delete(self, key):
        """Remove ``key`` from the environment if present."""
        pos = self._env_index(key)
        if pos is not None:
            del self._env[pos]

    def as_list(self):
        """Return the environment as a list of ``KEY=VALUE`` strings."""
        return list(self._env)

    def export(self, entry):
        """Add ``KEY`` or ``KEY=VALUE`` to the export list.

        A bare name never overwrites an entry that already exists.
        """
        pos = self._export_index(_key(entry))
        if pos is None:
            self._exports.append(entry)
        elif with_value(entry):
            self._exports[pos] = entry

    def unexport(self, key):
        """Remove ``key`` from the export list if present."""
        pos = self._export_index(_key(key))
        if pos is not None:
            del self._exports[pos]

    def is_exported(self, key):
        """Return True if ``key`` is on the export list."""
        return self._export_index(key) is not None

    def export_declarations(self):
        """Sort the export list and return its ``declare -x`` lines."""
        self._exports.sort()
        return [f"declare -x {entry}" for entry in self._exports]

    def search(self, key):
        """Look ``key`` up in the environment, then among exported values."""
        value = self.get(key)
        if value is not None:
            return value
        pos = self._export_index(key)
        if pos is None or not with_value(self._exports[pos]):
            return None
        return self._exports[pos].partition("=")[2]