"""
elfsym Configuration
=====================

Settings live in slotted dataclasses with working defaults.  A TOML file
overrides individual keys; its ``[global]`` table maps onto
:class:`GlobalConfig` and its ``[symbols]`` table onto
:class:`SymbolsConfig`.  Unknown tables and keys are ignored so that one
file can be shared with other tools.

Example ``config.toml``::

    [global]
    log_level = "DEBUG"
    log_file = "logs/elfsym.log"
    log_json = true

    [symbols]
    stop_on_error = true
    lookup_types = ["FUNC"]

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, TypeVar

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

_T = TypeVar("_T")

# Looked up in the working directory when no explicit path is given.
_DEFAULT_CONFIG_NAME = "config.toml"


@dataclass(slots=True)
class SymbolsConfig:
    """Symbol-table reading and address resolution."""

    max_file_size: int = 268_435_456  # 256 MiB
    # Abort at the first malformed entry instead of recording it and going on.
    stop_on_error: bool = False
    # Let undefined (SHN_UNDEF) symbols take part in address lookup.
    include_undefined: bool = False
    lookup_types: list[str] = field(
        default_factory=lambda: ["NOTYPE", "OBJECT", "FUNC"]
    )
    address_width: int = 16


@dataclass(slots=True)
class GlobalConfig:
    """Logging and general behaviour."""

    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False
    debug: bool = False


@dataclass(slots=True)
class ElfsymConfig:
    """Complete configuration.

    Usage:
        >>> config = ElfsymConfig.load()                # ./config.toml, if any
        >>> config = ElfsymConfig.load("custom.toml")
        >>> config.symbols.stop_on_error
        False
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    symbols: SymbolsConfig = field(default_factory=SymbolsConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> ElfsymConfig:
        """Read a TOML file on top of the defaults.

        Without *path*, ``config.toml`` in the working directory is used
        when it exists and plain defaults otherwise.

        Raises:
            FileNotFoundError: An explicit *path* does not exist.
            tomllib.TOMLDecodeError: The file is not valid TOML.
        """
        if path is None:
            config_path = Path.cwd() / _DEFAULT_CONFIG_NAME
            if not config_path.is_file():
                return cls()
        else:
            config_path = Path(path)
            if not config_path.is_file():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=_from_table(GlobalConfig, raw.get("global", {})),
            symbols=_from_table(SymbolsConfig, raw.get("symbols", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _from_table(kind: type[_T], table: dict[str, Any]) -> _T:
    known = {f.name for f in fields(kind)}  # type: ignore[arg-type]
    return kind(**{k: v for k, v in table.items() if k in known})
