"""Configuration loading and management for tenant-audit.

Configuration sources are merged in priority order:
    1. Defaults (defined in AuditConfig)
    2. Global config (~/.tenant-audit.toml)
    3. Project config (./tenant-audit.toml)
    4. Explicit config file
    5. Environment variables (TENANT_AUDIT_* prefix)
    6. CLI overrides (passed as kwargs)

The resulting AuditConfig is built once at startup and is immutable.

Example:
    >>> config = load_config(max_depth=2)
    >>> config.max_depth
    2
    >>> config.max_file_size_bytes
    10485760
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError
from .flags import RULE_NAMES

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "TENANT_AUDIT_"

DEFAULT_VOLUMES_DIR = "/var/lib/pterodactyl/volumes"


@dataclass(frozen=True)
class AuditConfig:
    """Configuration for an audit run.

    Attributes:
        Input:
            volumes_dir: Directory holding one subdirectory per tenant

        Walker limits:
            max_file_size_mb: Files larger than this are tallied but not inspected
            max_depth: Deepest nested re-walk allowed (1 = tenant root)

        Exclusion rules:
            excluded_dir_names: Directory base names pruned with their subtree
            excluded_dir_prefixes: Directory base-name prefixes pruned the same way

        Inspection:
            inspected_extensions: File extensions whose content is evaluated.
                The shell_script rule only fires during walks when ".sh" is
                listed here; the defaults never pass a .sh path to it.
            enabled_rules: Flag rules to apply (see flags.RULE_NAMES)
            follow_symlinks: Read content through symlinked files

        Merging:
            rewalk_flagged_dirs: Re-walk subdirectories holding flagged files and
                add their percentages into the parent's

        Execution:
            workers: Tenants walked in parallel (None or 1 = sequential)
            verbosity: Logging verbosity level
    """

    volumes_dir: str = DEFAULT_VOLUMES_DIR

    max_file_size_mb: float = 10.0
    max_depth: int = 3

    excluded_dir_names: tuple[str, ...] = ("node_modules", "plugins", "assets")
    excluded_dir_prefixes: tuple[str, ...] = (".", "?")

    inspected_extensions: tuple[str, ...] = (".js", ".py")
    enabled_rules: tuple[str, ...] = RULE_NAMES
    follow_symlinks: bool = False

    rewalk_flagged_dirs: bool = True

    workers: Optional[int] = None
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.volumes_dir:
            raise ValueError("volumes_dir must not be empty")

        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")

        for prefix in self.excluded_dir_prefixes:
            if not prefix:
                raise ValueError("excluded_dir_prefixes must not contain empty strings")
        for ext in self.inspected_extensions:
            if not ext.startswith("."):
                raise ValueError(f"inspected extension {ext!r} must start with '.'")

        unknown = set(self.enabled_rules) - set(RULE_NAMES)
        if unknown:
            raise ValueError(
                f"Unknown flag rules: {', '.join(sorted(unknown))}. "
                f"Choose from: {', '.join(RULE_NAMES)}"
            )

        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of: quiet, normal, verbose")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def volumes_path(self) -> Path:
        return Path(self.volumes_dir)


DEFAULT_CONFIG = AuditConfig()

# Fields that TOML may give as lists; stored as tuples to keep the config hashable
_TUPLE_FIELDS = (
    "excluded_dir_names",
    "excluded_dir_prefixes",
    "inspected_extensions",
    "enabled_rules",
)


def load_config(config_file: Optional[Path] = None, **overrides) -> AuditConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options keep lower-priority values.

    Returns:
        Validated AuditConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or the
            merged values fail validation
    """
    merged: dict = {}

    global_config = Path.home() / ".tenant-audit.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "tenant-audit.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    for name in _TUPLE_FIELDS:
        value = merged.get(name)
        if isinstance(value, list):
            merged[name] = tuple(value)
        elif isinstance(value, str):
            raise InvalidConfigError(name, value, "expected a list of strings")

    try:
        return AuditConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from TENANT_AUDIT_* environment variables.

    Supported environment variables:
        TENANT_AUDIT_VOLUMES_DIR: str
        TENANT_AUDIT_MAX_FILE_SIZE_MB: float
        TENANT_AUDIT_MAX_DEPTH: int
        TENANT_AUDIT_FOLLOW_SYMLINKS: bool (true/false/1/0)
        TENANT_AUDIT_REWALK_FLAGGED_DIRS: bool
        TENANT_AUDIT_WORKERS: int
        TENANT_AUDIT_VERBOSITY: quiet/normal/verbose

    Tuple fields (exclusions, extensions, rules) are only read from TOML.
    """
    type_hints = get_type_hints(AuditConfig)

    result: dict[str, Any] = {}

    for field_name in AuditConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be expressed in a single variable.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]; unwrap to X
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is tuple or type_hint is tuple:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
