"""Configuration loading and management for catalogo-query.

Configuration sources are merged in priority order:
    1. Defaults (defined in Settings / QueryDefaults)
    2. Project config (./catalogo-query.toml)
    3. Explicit config file
    4. Environment variables (CATALOGO_* plus DB_DSN / RESULTS_JSON_PATH)
    5. CLI overrides (passed as kwargs)

Example:
    >>> settings = load_settings(db_path="data.sqlite")
    >>> settings.db_path
    'data.sqlite'
    >>> settings.defaults.colore
    'rosso'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigFileError, InvalidConfigError

PROJECT_CONFIG_NAME = "catalogo-query.toml"

# Thresholds below this make no sense for a "multiple suppliers" question.
MIN_SUPPLIERS_FLOOR = 2


@dataclass(frozen=True)
class QueryDefaults:
    """Default values for query parameters the caller leaves out.

    Attributes:
        colore: Colour used by q3 and q7
        fornitore: Supplier name used by q4
        colore1: First colour used by q8 and q9
        colore2: Second colour used by q8 and q9
        min_fornitori: Supplier-count threshold used by q10
    """

    colore: str = "rosso"
    fornitore: str = "Acme"
    colore1: str = "rosso"
    colore2: str = "verde"
    min_fornitori: int = MIN_SUPPLIERS_FLOOR

    def __post_init__(self) -> None:
        for name in ("colore", "fornitore", "colore1", "colore2"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise InvalidConfigError(name, value, "must be a non-empty string")
        if isinstance(self.min_fornitori, bool) or not isinstance(self.min_fornitori, int):
            raise InvalidConfigError("min_fornitori", self.min_fornitori, "must be an integer")
        if self.min_fornitori < MIN_SUPPLIERS_FLOOR:
            raise InvalidConfigError(
                "min_fornitori", self.min_fornitori, f"must be at least {MIN_SUPPLIERS_FLOOR}"
            )


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the query service.

    Attributes:
        db_path: SQLite database holding Fornitori, Pezzi and Catalogo
        results_path: JSON file the snapshot sink writes to
        history_path: Optional SQLite database keeping every stored snapshot
        page_size: Default page size for paginated API responses
        max_page_size: Upper bound for a requested page size
        defaults: Query parameter defaults
    """

    db_path: str = "database.sqlite"
    results_path: str = str(Path("storage") / "esiti.json")
    history_path: Optional[str] = None
    page_size: int = 50
    max_page_size: int = 100
    defaults: QueryDefaults = field(default_factory=QueryDefaults)

    def __post_init__(self) -> None:
        if not self.db_path:
            raise InvalidConfigError("db_path", self.db_path, "must not be empty")
        if not self.results_path:
            raise InvalidConfigError("results_path", self.results_path, "must not be empty")
        if self.max_page_size < 1:
            raise InvalidConfigError("max_page_size", self.max_page_size, "must be at least 1")
        if not 1 <= self.page_size <= self.max_page_size:
            raise InvalidConfigError(
                "page_size", self.page_size, f"must be between 1 and {self.max_page_size}"
            )


def load_settings(config_file: Optional[Path] = None, **overrides: Any) -> Settings:
    """Load settings with auto-discovery and merging.

    Args:
        config_file: Optional explicit TOML config file
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options don't mask lower layers.

    Returns:
        Validated Settings instance

    Raises:
        ConfigFileError: If a config file is missing or cannot be parsed
        InvalidConfigError: If a value is invalid
    """
    merged: dict[str, Any] = {}
    defaults: dict[str, Any] = {}

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        _merge_file(project_config, merged, defaults)

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        _merge_file(config_file, merged, defaults)

    env_settings, env_defaults = _load_env_vars()
    merged.update(env_settings)
    defaults.update(env_defaults)

    override_defaults = overrides.pop("defaults", None)
    if isinstance(override_defaults, dict):
        defaults.update(override_defaults)
    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        merged["defaults"] = QueryDefaults(**defaults)
        return Settings(**merged)
    except TypeError as e:
        # Unknown field in config
        raise InvalidConfigError("settings", merged, str(e))


def _merge_file(path: Path, merged: dict[str, Any], defaults: dict[str, Any]) -> None:
    """Merge one TOML file into the settings and defaults dicts."""
    try:
        data = _load_toml_file(path)
    except ConfigFileError:
        raise
    except Exception as e:
        raise ConfigFileError(path, str(e))

    section = data.pop("defaults", None)
    if section is not None:
        if not isinstance(section, dict):
            raise ConfigFileError(path, "[defaults] must be a table")
        defaults.update(section)
    merged.update(data)


def _load_env_vars() -> tuple[dict[str, Any], dict[str, Any]]:
    """Load settings from environment variables.

    Supported environment variables:
        CATALOGO_DB_PATH: str
        CATALOGO_RESULTS_PATH: str
        CATALOGO_HISTORY_PATH: str
        CATALOGO_PAGE_SIZE: int
        CATALOGO_MAX_PAGE_SIZE: int
        CATALOGO_DEFAULT_COLORE, CATALOGO_DEFAULT_FORNITORE,
        CATALOGO_DEFAULT_COLORE1, CATALOGO_DEFAULT_COLORE2: str
        CATALOGO_DEFAULT_MIN_FORNITORI: int
        DB_DSN: ``sqlite:<path>`` (legacy, lower priority than CATALOGO_DB_PATH)
        RESULTS_JSON_PATH: str (legacy, lower priority than CATALOGO_RESULTS_PATH)

    Returns:
        Tuple of (settings overrides, query default overrides).
    """
    settings: dict[str, Any] = {}
    defaults: dict[str, Any] = {}

    dsn = os.environ.get("DB_DSN")
    if dsn:
        settings["db_path"] = _path_from_dsn(dsn)
    results_path = os.environ.get("RESULTS_JSON_PATH")
    if results_path:
        settings["results_path"] = results_path

    settings.update(_scan_env(Settings, "CATALOGO_", skip={"defaults"}))
    defaults.update(_scan_env(QueryDefaults, "CATALOGO_DEFAULT_"))
    return settings, defaults


def _scan_env(cls: type, prefix: str, skip: frozenset[str] | set[str] = frozenset()) -> dict:
    """Collect ``<prefix><FIELD>`` variables for the fields of a dataclass."""
    type_hints = get_type_hints(cls)
    result: dict[str, Any] = {}
    for f in fields(cls):
        if f.name in skip:
            continue
        env_key = f"{prefix}{f.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue
        try:
            result[f.name] = _parse_env_value(env_value, type_hints[f.name])
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

    if type_hint is int:
        return int(value)
    return value


def _path_from_dsn(dsn: str) -> str:
    """Extract the database path from a ``sqlite:<path>`` DSN."""
    if not dsn.startswith("sqlite:"):
        raise InvalidConfigError("DB_DSN", dsn, "only sqlite: DSNs are supported")
    path = dsn[len("sqlite:") :]
    if path.startswith("///"):
        path = path[2:]
    if not path:
        raise InvalidConfigError("DB_DSN", dsn, "missing database path")
    return path


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigFileError: If tomllib/tomli not available
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigFileError(
                path,
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli",
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
