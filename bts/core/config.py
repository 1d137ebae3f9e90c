"""Typed configuration loading and access.

The configuration is a closed structure read from `bts.toml`: only the keys
below are recognized, anything else is rejected when the file is loaded.

    default_sync_type = "frontend"

    [repos.schema]
    url = "https://github.com/your-org/schema-repo.git"
    folder = "schema-repo"
    revision = "main"

    [repos.guidewire]
    url = "https://github.com/your-org/guidewire-repo.git"
    folder = "guidewire-repo"
    spec = "openapi.yaml"

    [output]
    dir = "src/generated"
    operations = "operations"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table, unknown_keys, wrong_type_keys
from .sync_type import SyncType, parse_sync_type

__all__ = [
    "CONFIG_FILENAME",
    "Config",
    "ConfigError",
    "OutputConfig",
    "RepoConfig",
    "ReposConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "bts.toml"

DEFAULT_SCHEMA_URL = "https://github.com/your-org/schema-repo.git"
DEFAULT_GUIDEWIRE_URL = "https://github.com/your-org/guidewire-repo.git"

_TOP_KEYS = frozenset({"default_sync_type", "repos", "output"})
_REPOS_KEYS = frozenset({"schema", "guidewire"})
_SCHEMA_REPO_KEYS = frozenset({"url", "folder", "revision"})
_GUIDEWIRE_REPO_KEYS = frozenset({"url", "folder", "revision", "spec"})
_OUTPUT_KEYS = frozenset({"dir", "operations"})


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RepoConfig:
    """One upstream repository.

    Attributes:
        url: Clone URL
        folder: Transient clone folder, relative to the project root
        revision: Static default revision, used when nothing else resolves one
        spec: OpenAPI document path inside the checkout (guidewire only)
    """

    url: str
    folder: str
    revision: str | None = None
    spec: str | None = None


@dataclass(frozen=True, slots=True)
class ReposConfig:
    schema: RepoConfig = field(
        default_factory=lambda: RepoConfig(url=DEFAULT_SCHEMA_URL, folder="schema-repo")
    )
    guidewire: RepoConfig = field(
        default_factory=lambda: RepoConfig(
            url=DEFAULT_GUIDEWIRE_URL,
            folder="guidewire-repo",
            spec="openapi.yaml",
        )
    )


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Where generated artifacts and operation documents live."""

    dir: str = "src/generated"
    operations: str = "operations"


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container. Read-only once loaded."""

    default_sync_type: SyncType | None = None
    repos: ReposConfig = field(default_factory=ReposConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            ValueError: Unknown keys, wrong value types or invalid values.
        """
        _reject_unknown(data, _TOP_KEYS, "")

        default_sync_type: SyncType | None = None
        raw_type = data.get("default_sync_type")
        if raw_type is not None:
            if not isinstance(raw_type, str):
                raise ValueError("default_sync_type must be a string")
            parsed = parse_sync_type(raw_type)
            if isinstance(parsed, Err):
                raise ValueError(parsed.error.message)
            default_sync_type = parsed.value

        repos = _table(data, "repos")
        _reject_unknown(repos, _REPOS_KEYS, "repos")
        defaults = ReposConfig()
        schema = _repo(
            _table(repos, "schema", "repos."),
            defaults.schema,
            _SCHEMA_REPO_KEYS,
            "repos.schema",
        )
        guidewire = _repo(
            _table(repos, "guidewire", "repos."),
            defaults.guidewire,
            _GUIDEWIRE_REPO_KEYS,
            "repos.guidewire",
        )

        output = _table(data, "output")
        _reject_unknown(output, _OUTPUT_KEYS, "output")
        _reject_non_strings(output, _OUTPUT_KEYS, "output")
        default_output = OutputConfig()
        out_dir = get_str(output, "dir") or default_output.dir
        operations = get_str(output, "operations") or default_output.operations
        _require_relative(out_dir, "output.dir")
        _require_relative(operations, "output.operations")

        repos_config = ReposConfig(schema=schema, guidewire=guidewire)
        output_config = OutputConfig(dir=out_dir, operations=operations)
        _reject_overlapping_folders(repos_config, output_config)

        return cls(
            default_sync_type=default_sync_type,
            repos=repos_config,
            output=output_config,
        )


def _table(data: Mapping[str, object], key: str, prefix: str = "") -> StrDict:
    if key not in data:
        return {}
    table = get_table(data, key)
    if table is None:
        raise ValueError(f"[{prefix}{key}] must be a table")
    return table


def _reject_unknown(table: Mapping[str, object], allowed: frozenset[str], where: str) -> None:
    extra = unknown_keys(table, allowed)
    if extra:
        location = f" in [{where}]" if where else ""
        raise ValueError(f"unknown key(s){location}: {', '.join(extra)}")


def _reject_non_strings(table: Mapping[str, object], keys: frozenset[str], where: str) -> None:
    bad = wrong_type_keys(table, keys)
    if bad:
        raise ValueError(f"[{where}] value(s) must be strings: {', '.join(bad)}")


def _require_relative(value: str, key: str) -> None:
    path = Path(value)
    if path.is_absolute() or ".." in path.parts:
        raise ValueError(f"{key} must be a relative path inside the project: {value}")


def _require_clone_folder(value: str, key: str) -> None:
    """A clone folder is deleted before every clone; it must be a real subfolder."""
    _require_relative(value, key)
    if not Path(value).parts:
        raise ValueError(f"{key} must name a folder below the project root: {value!r}")


def _overlaps(a: str, b: str) -> bool:
    """True when one relative path equals or contains the other."""
    pa, pb = Path(a).parts, Path(b).parts
    shortest = min(len(pa), len(pb))
    return pa[:shortest] == pb[:shortest]


def _reject_overlapping_folders(repos: ReposConfig, output: OutputConfig) -> None:
    clones = [
        ("repos.schema.folder", repos.schema.folder),
        ("repos.guidewire.folder", repos.guidewire.folder),
    ]
    outputs = [("output.dir", output.dir), ("output.operations", output.operations)]

    (schema_key, schema_folder), (guidewire_key, guidewire_folder) = clones
    if _overlaps(schema_folder, guidewire_folder):
        raise ValueError(
            f"{schema_key} and {guidewire_key} must not overlap: "
            f"{schema_folder!r}, {guidewire_folder!r}"
        )
    for key, folder in clones:
        for out_key, out_dir in outputs:
            if _overlaps(folder, out_dir):
                raise ValueError(f"{key} must not overlap {out_key}: {folder!r}, {out_dir!r}")


def _repo(
    table: StrDict,
    default: RepoConfig,
    allowed: frozenset[str],
    where: str,
) -> RepoConfig:
    _reject_unknown(table, allowed, where)
    _reject_non_strings(table, allowed, where)

    folder = get_str(table, "folder") or default.folder
    _require_clone_folder(folder, f"{where}.folder")
    spec = get_str(table, "spec") or default.spec
    if spec is not None:
        _require_relative(spec, f"{where}.spec")

    return RepoConfig(
        url=get_str(table, "url") or default.url,
        folder=folder,
        revision=get_str(table, "revision") or default.revision,
        spec=spec,
    )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file.

    Args:
        path: Path to bts.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file means built-in defaults."""
    if not path.exists():
        return Ok(Config())
    return load_config(path)
