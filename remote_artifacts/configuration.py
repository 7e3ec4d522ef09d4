"""
Repository configuration and its resolution from loosely shaped input.

A :class:`Configuration` is always fully populated. The
:class:`ConfigurationResolver` turns whatever a caller hands in (nothing, a
preset name, a config file, a mapping, field/value pairs, or something
unusable) into one, and never raises while doing so.

Config files are TOML or JSON and use camelCase keys:

    serverUrl = "http://example.com"
    repositoryUrl = "http://example.com/repository/releases"
    repositoryName = "releases"
    acceptMediaType = "application/json"
    verbosity = 1

Usage:
    from remote_artifacts import resolve_configuration

    config = resolve_configuration()                  # default preset
    config = resolve_configuration("test")            # named preset
    config = resolve_configuration("path/to/my.toml") # config file
    config = resolve_configuration({"repositoryName": "x"})
    config = resolve_configuration("repositoryName", "x")
    config = resolve_configuration(repository_name="x")
"""

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ._compat import require_tomlkit, require_tomllib


logger = logging.getLogger(__name__)

CONFIG_FILE_PREFIX = "artifacts-config-"
CONFIG_FILE_SUFFIXES = (".toml", ".json")
CONFIG_PATH_ENV = "REMOTE_ARTIFACTS_CONFIG_PATH"
PRESETS_DIR = Path(__file__).parent / "configs"
DEFAULT_PRESET = "default"

# camelCase keys used in config files -> dataclass attribute names
_CAMEL_KEYS = {
    "serverUrl": "server_url",
    "repositoryUrl": "repository_url",
    "repositoryName": "repository_name",
    "username": "username",
    "password": "password",
    "acceptMediaType": "accept_media_type",
    "verbosity": "verbosity",
    "cacheFolder": "cache_folder",
}


@dataclass(frozen=True)
class Configuration:
    """Connection and caching settings for one remote repository."""
    server_url: str = ""
    repository_url: str = ""
    repository_name: str = ""
    username: str = ""
    password: str = ""
    accept_media_type: str = ""
    verbosity: int = 0
    cache_folder: str = ""

    @classmethod
    def from_dict(
        cls,
        data: Mapping,
        base: Optional["Configuration"] = None,
    ) -> "Configuration":
        """
        Overlay recognized keys of ``data`` onto ``base``.

        Keys may be camelCase (as in config files) or snake_case. Unknown
        keys are ignored.

        Parameters
        ----------
        data : Mapping
            Partial configuration
        base : Configuration, optional
            Values for everything ``data`` does not mention. Defaults to an
            all-empty Configuration.

        Returns
        -------
        Configuration
            New, fully populated configuration
        """
        base = base if base is not None else cls()
        changes = {}
        for key, value in data.items():
            field_name = _field_name(key)
            if field_name is None:
                logger.debug("Ignoring unknown configuration key %r", key)
                continue
            changes[field_name] = _coerce(field_name, value, getattr(base, field_name))
        return replace(base, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration keyed by camelCase file keys."""
        values = asdict(self)
        return {camel: values[attr] for camel, attr in _CAMEL_KEYS.items()}

    @property
    def auth(self) -> Optional[Tuple[str, str]]:
        """Basic-auth credentials, or None for anonymous access."""
        if self.username:
            return (self.username, self.password)
        return None


def _field_name(key: Any) -> Optional[str]:
    if not isinstance(key, str):
        return None
    if key in _CAMEL_KEYS:
        return _CAMEL_KEYS[key]
    if key in _CAMEL_KEYS.values():
        return key
    return None


def _coerce(field_name: str, value: Any, fallback: Any) -> Any:
    """Coerce a raw value to the field's canonical type, or keep ``fallback``."""
    if field_name == "verbosity":
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            logger.debug("Ignoring non-integer verbosity %r", value)
            return fallback
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    logger.debug("Ignoring non-string value for %s: %r", field_name, value)
    return fallback


def _is_pair_list(values) -> bool:
    """True for ("name", value, "name", value, ...)."""
    return len(values) % 2 == 0 and all(isinstance(k, str) for k in values[0::2])


def _is_file(path: Union[str, Path]) -> bool:
    try:
        return Path(path).is_file()
    except (OSError, ValueError):
        return False


def config_search_path(extra: Optional[Iterable[Union[str, Path]]] = None) -> List[Path]:
    """
    Directories searched for configuration files, in order.

    1. ``extra`` directories (if given)
    2. Directories listed in $REMOTE_ARTIFACTS_CONFIG_PATH
    3. Current working directory
    4. Presets shipped with the package
    """
    directories = [Path(p) for p in (extra or [])]
    env_path = os.environ.get(CONFIG_PATH_ENV, "")
    directories.extend(Path(p) for p in env_path.split(os.pathsep) if p)
    directories.append(Path.cwd())
    directories.append(PRESETS_DIR)
    return directories


def find_configuration_file(
    name: str,
    search_path: Optional[Iterable[Union[str, Path]]] = None,
) -> Optional[Path]:
    """
    Look up a configuration file by bare file name.

    Returns the absolute path of the first match on the search path, or None
    if the file is not found anywhere.
    """
    if not name:
        return None
    for directory in config_search_path(search_path):
        candidate = directory / name
        if _is_file(candidate):
            return candidate.resolve()
    return None


def find_preset(
    project: str,
    search_path: Optional[Iterable[Union[str, Path]]] = None,
) -> Optional[Path]:
    """Find the config file for a named project, e.g. "test"."""
    for suffix in CONFIG_FILE_SUFFIXES:
        found = find_configuration_file(
            f"{CONFIG_FILE_PREFIX}{project}{suffix}", search_path
        )
        if found is not None:
            return found
    return None


def load_configuration_file(
    path: Union[str, Path],
    base: Optional[Configuration] = None,
) -> Configuration:
    """
    Read a TOML or JSON config file onto ``base``.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the file cannot be parsed or does not hold a table of fields
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    if path.suffix.lower() == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        tomllib = require_tomllib()
        with open(path, "rb") as f:
            data = tomllib.load(f)

    if not isinstance(data, Mapping):
        raise ValueError(f"Configuration file {path} does not contain a table of fields")

    return Configuration.from_dict(data, base=base)


def write_configuration(configuration: Configuration, path: Union[str, Path]) -> Path:
    """
    Write a configuration to a TOML or JSON file (chosen by suffix).

    Existing TOML files are updated in place so comments survive.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    values = configuration.to_dict()

    if path.suffix.lower() == ".json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump(values, f, indent=2)
            f.write("\n")
        return path

    tomlkit = require_tomlkit()
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            doc = tomlkit.load(f)
    else:
        doc = tomlkit.document()
    for key, value in values.items():
        doc[key] = value
    with open(path, "w", encoding="utf-8") as f:
        f.write(tomlkit.dumps(doc))
    return path


class InputShape(Enum):
    """The kinds of input the resolver understands."""
    NONE = "none"
    CONFIGURATION = "configuration"
    PRESET = "preset"
    FILE = "file"
    MAPPING = "mapping"
    PAIRS = "pairs"
    INVALID = "invalid"


class ConfigurationResolver:
    """
    Collapse any supported input into a canonical :class:`Configuration`.

    The default configuration is loaded once per resolver from the
    ``default`` preset on the search path, or passed in explicitly.
    """

    def __init__(
        self,
        search_path: Optional[Iterable[Union[str, Path]]] = None,
        default: Optional[Configuration] = None,
    ):
        self.search_path = [Path(p) for p in (search_path or [])]
        self._default = default

    @property
    def default(self) -> Configuration:
        if self._default is None:
            self._default = self._load_default()
        return self._default

    def _load_default(self) -> Configuration:
        path = find_preset(DEFAULT_PRESET, self.search_path)
        if path is None:
            logger.debug("No default preset found, using empty configuration")
            return Configuration()
        return self._load_file(path, Configuration()) or Configuration()

    def _load_file(self, path: Path, base: Configuration) -> Optional[Configuration]:
        try:
            return load_configuration_file(path, base=base)
        except (OSError, ValueError, ImportError) as e:
            logger.warning("Could not read configuration file %s: %s", path, e)
            return None

    def classify(self, args: Tuple[Any, ...]) -> Tuple[InputShape, Any]:
        """
        Decide which input shape positional ``args`` represent.

        Returns the shape and its payload: the Configuration, preset or file
        path, mapping, or dict built from pairs.
        """
        if len(args) == 0:
            return InputShape.NONE, None

        if len(args) == 1:
            arg = args[0]
            if arg is None:
                return InputShape.NONE, None
            if isinstance(arg, Configuration):
                return InputShape.CONFIGURATION, arg
            if isinstance(arg, Mapping):
                return InputShape.MAPPING, arg
            if isinstance(arg, (list, tuple)) and arg and _is_pair_list(arg):
                return InputShape.PAIRS, dict(zip(arg[0::2], arg[1::2]))
            if isinstance(arg, os.PathLike):
                arg = os.fspath(arg)
            if isinstance(arg, str) and arg:
                preset = find_preset(arg, self.search_path)
                if preset is not None:
                    return InputShape.PRESET, preset
                if _is_file(arg):
                    return InputShape.FILE, Path(arg)
                found = find_configuration_file(arg, self.search_path)
                if found is not None:
                    return InputShape.FILE, found
            return InputShape.INVALID, arg

        if _is_pair_list(args):
            return InputShape.PAIRS, dict(zip(args[0::2], args[1::2]))

        return InputShape.INVALID, args

    def resolve(self, *args: Any, **field_values: Any) -> Configuration:
        """
        Resolve input to a canonical configuration. Never raises.

        Keyword arguments are field/value pairs applied on top of whatever
        the positional input resolved to.
        """
        shape, payload = self.classify(args)

        if shape is InputShape.CONFIGURATION:
            configuration = payload
        elif shape in (InputShape.PRESET, InputShape.FILE):
            configuration = self._load_file(payload, self.default) or self.default
        elif shape in (InputShape.MAPPING, InputShape.PAIRS):
            configuration = Configuration.from_dict(payload, base=self.default)
        elif shape is InputShape.INVALID:
            logger.debug("Unusable configuration input %r, using default", payload)
            configuration = self.default
        else:
            configuration = self.default

        if field_values:
            configuration = Configuration.from_dict(field_values, base=configuration)
        return configuration


def resolve_configuration(*args: Any, **field_values: Any) -> Configuration:
    """
    Resolve any supported input to a canonical :class:`Configuration`.

    Uses a :class:`ConfigurationResolver` with the standard search path. See
    the module docstring for the accepted input shapes.
    """
    return ConfigurationResolver().resolve(*args, **field_values)


def default_configuration() -> Configuration:
    """Return the configuration used when no input is given."""
    return ConfigurationResolver().default
