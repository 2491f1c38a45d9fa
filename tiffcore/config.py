"""Parser configuration -- limits and leniency switches."""

import json
from dataclasses import dataclass, fields

# Hard cap on directories followed in one chain walk. Multi-page scans
# rarely exceed a few hundred pages.
DEFAULT_MAX_DIRECTORIES = 1024

# Safety limit for null-terminated string reads through a cursor
DEFAULT_MAX_ASCII_LENGTH = 65536


@dataclass
class ParserConfig:
    """Tunable parser limits.

    ``strict_values`` controls what happens when a tag's byte buffer is
    shorter than its declared count implies: lenient (default) keeps the
    complete elements and logs a warning, strict raises MalformedFile.
    """

    max_directories: int = DEFAULT_MAX_DIRECTORIES
    strict_values: bool = False
    max_ascii_length: int = DEFAULT_MAX_ASCII_LENGTH

    @classmethod
    def default(cls) -> 'ParserConfig':
        """Return the built-in defaults."""
        return cls()

    @classmethod
    def from_json(cls, path) -> 'ParserConfig':
        """Load settings from a JSON file on top of the defaults.

        JSON format::

            {
              "max_directories": 64,
              "strict_values": true,
              "max_ascii_length": 4096
            }

        All keys are optional. Unknown keys raise ValueError.
        """
        with open(str(path), 'r') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError('parser config must be a JSON object')

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f'unknown parser config keys: {", ".join(sorted(unknown))}')

        config = cls.default()
        for key, value in data.items():
            setattr(config, key, value)

        if config.max_directories < 1:
            raise ValueError('max_directories must be at least 1')
        if config.max_ascii_length < 0:
            raise ValueError('max_ascii_length must not be negative')
        return config


def resolve(config) -> ParserConfig:
    """Return ``config`` or the defaults when it is None."""
    return config if config is not None else ParserConfig.default()
