"""Parsing of the plain-text kernel configuration into a read-only mapping."""

import enum
import re
from collections.abc import Mapping

_LINE_RE = re.compile(r'^([A-Za-z0-9_]+)=(.*)$')


class ConfigState(enum.Enum):
    BUILT_IN = 'y'
    LOADABLE = 'm'


class KernelConfig(Mapping):
    """Immutable mapping of configuration keys to their raw values.

    Keys can be looked up with or without the CONFIG_ prefix.
    """

    def __init__(self, entries=()):
        self._data = dict(entries)

    def _key(self, key):
        if key in self._data:
            return key
        prefixed = 'CONFIG_' + key
        if prefixed in self._data:
            return prefixed
        return None

    def __getitem__(self, key):
        found = self._key(key)
        if found is None:
            raise KeyError(key)
        return self._data[found]

    def __contains__(self, key):
        return isinstance(key, str) and self._key(key) is not None

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return f"KernelConfig({len(self._data)} entries)"

    def get_value(self, key):
        """Like [] but with a readable error for the CLI."""
        try:
            return self[key]
        except KeyError:
            raise KeyError(f"key {key!r} not found") from None

    def state(self, key):
        """ConfigState for y/m options, None for anything else or missing keys."""
        try:
            return ConfigState(self[key])
        except (KeyError, ValueError):
            return None

    def is_enabled(self, key):
        return self.state(key) is not None

    def to_text(self):
        return ''.join(f"{key}={value}\n" for key, value in self._data.items())


def parse_config(text):
    """Build a KernelConfig from KEY=VALUE lines, skipping everything else."""
    if isinstance(text, bytes):
        text = text.decode('utf-8', errors='replace')

    entries = {}
    for line in text.splitlines():
        m = _LINE_RE.match(line.strip())
        if m:
            entries[m.group(1)] = m.group(2)
    return KernelConfig(entries)
