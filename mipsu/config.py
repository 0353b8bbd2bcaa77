"""
Conversion options and YAML configuration files.

A configuration file is a YAML mapping of option names to values:

    quiet: false
    nreg: true
    dimm: false
    strict: false
    raw: false
    byteorder: big
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError

CONFIG_ENV_VAR = "MIPSU_CONFIG"

VALID_BYTEORDERS = ("big", "little")


@dataclass(frozen=True)
class Options:
    """
    Presentation and behavior toggles.

    Attributes:
        quiet: Emit only the converted value (no bitfield view or listing columns)
        nreg: Render registers as numerals ($5) instead of ABI names ($a1)
        dimm: Render immediates in decimal instead of exact-width hex
        strict: Require 0x/0b prefixes on every literal and "$" on registers;
            abort a stream on its first error
        raw: Read and write binary 4-byte words instead of text literals
        byteorder: Byte order of raw words
        verbose: Report progress on the error stream
    """

    quiet: bool = False
    nreg: bool = False
    dimm: bool = False
    strict: bool = False
    raw: bool = False
    byteorder: str = "big"
    verbose: bool = False

    def merged(self, **overrides) -> "Options":
        """Return a copy with the given options switched on."""
        return replace(self, **{k: v for k, v in overrides.items() if v})


_OPTION_NAMES = frozenset(f.name for f in fields(Options))


def parse_config(yaml_content: str) -> Options:
    """
    Parse and validate a YAML configuration document.

    Args:
        yaml_content: Raw YAML string content

    Returns:
        Options with the configured values; unset options keep their defaults

    Raises:
        ConfigError: If the document is not a valid configuration
    """
    try:
        config = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if config is None:
        return Options()
    if not isinstance(config, dict):
        raise ConfigError("Configuration must be a YAML mapping/dictionary")

    _validate_config(config)
    return Options(**config)


def _validate_config(config: dict) -> None:
    """Validate option names and value types."""
    for key, value in config.items():
        if key not in _OPTION_NAMES:
            valid = ", ".join(sorted(_OPTION_NAMES))
            raise ConfigError(f"Unknown option '{key}' (valid options: {valid})")

        if key == "byteorder":
            if value not in VALID_BYTEORDERS:
                raise ConfigError(
                    f"Option 'byteorder' must be one of {', '.join(VALID_BYTEORDERS)}, got {value!r}"
                )
        elif not isinstance(value, bool):
            raise ConfigError(f"Option '{key}' must be true or false, got {value!r}")


def find_config(path: Optional[str] = None) -> Optional[Path]:
    """
    Locate the configuration file.

    An explicit path wins over $MIPSU_CONFIG; without either there is no file.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return None
    return Path(path)


def load_config(path: Optional[str] = None) -> Options:
    """
    Load options from the configuration file, or defaults if there is none.

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    config_path = find_config(path)
    if config_path is None:
        return Options()

    try:
        content = config_path.read_text()
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {config_path}: {e.strerror}")
    return parse_config(content)
