"""
Artifact identity: coordinates, file-name decomposition and locations.

An artifact is identified by ``(remote_path, artifact_id, version, type)``,
laid out Maven-style both in the remote repository and in the local cache:

    <root>/<group path>/<artifact_id>/<version>/<artifact_id>-<version>.<type>
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple, Union

from .configuration import Configuration


DEFAULT_VERSION = "1"

# Compression/packaging suffixes that wrap another format. For these the
# final extension is still the type, but the preceding extension is kept in
# the artifact id and reported as the format hint ("data.nii.gz" -> "nii").
WRAPPER_EXTENSIONS = frozenset({"gz", "bz2", "xz", "z", "zip", "lz4", "zst"})

# Global cache root used when a configuration does not name one
_cache_dir: Optional[Path] = None


def get_cache_dir() -> Path:
    """Get the global artifact cache directory."""
    if _cache_dir is None:
        return Path.home() / ".remote_artifacts"
    return _cache_dir


def set_cache_dir(path: Union[str, Path]):
    """Set the global artifact cache directory."""
    global _cache_dir
    _cache_dir = Path(path)
    _cache_dir.mkdir(parents=True, exist_ok=True)


def split_file_name(file_name: Union[str, Path]) -> Tuple[str, str]:
    """
    Split a file name into ``(artifact_id, type)``.

    The type is the final extension without its dot; the artifact id is
    everything before that dot, so inner extensions stay in the id:

    >>> split_file_name("data.nii.gz")
    ('data.nii', 'gz')
    >>> split_file_name("README")
    ('README', '')
    >>> split_file_name(".DS_Store")
    ('', 'DS_Store')

    Names starting with a dot have no base name; the remainder is the type.
    """
    name = Path(file_name).name
    stem, dot, extension = name.rpartition(".")
    if not dot:
        return name, ""
    return stem, extension


def inner_type(artifact_id: str, type: str) -> str:
    """
    Format hint for wrapped files, e.g. "nii" for ("data.nii", "gz").

    Returns "" when ``type`` is not a wrapper extension or the artifact id
    carries no inner extension.
    """
    if type.lower() not in WRAPPER_EXTENSIONS:
        return ""
    stem, _, extension = artifact_id.rpartition(".")
    return extension if stem else ""


def normalize_remote_path(remote_path: str) -> str:
    """Turn "a.b/c" or "/a/b/c/" into the URL group path "a/b/c"."""
    segments = remote_path.replace(".", "/").split("/")
    return "/".join(s for s in segments if s)


@dataclass(frozen=True)
class ArtifactCoordinates:
    """Where an artifact lives: group path, id, version and type."""
    remote_path: str
    artifact_id: str
    version: str = DEFAULT_VERSION
    type: str = ""

    @classmethod
    def from_file(
        cls,
        file_name: Union[str, Path],
        remote_path: str,
        version: str = DEFAULT_VERSION,
        artifact_id: Optional[str] = None,
    ) -> "ArtifactCoordinates":
        """Derive coordinates from a local file name."""
        derived_id, type = split_file_name(file_name)
        return cls(
            remote_path=remote_path,
            artifact_id=artifact_id or derived_id,
            version=version,
            type=type,
        )

    @property
    def group_path(self) -> str:
        return normalize_remote_path(self.remote_path)

    @property
    def group_id(self) -> str:
        """Maven groupId, e.g. "org.example" for remote path "org/example"."""
        return self.group_path.replace("/", ".")

    @property
    def file_name(self) -> str:
        name = f"{self.artifact_id}-{self.version}"
        if self.type:
            name = f"{name}.{self.type}"
        return name

    @property
    def format_hint(self) -> str:
        return inner_type(self.artifact_id, self.type)

    @property
    def relative_path(self) -> str:
        """Path below a repository or cache root, always with "/"."""
        return "/".join([self.group_path, self.artifact_id, self.version, self.file_name])

    def with_type(self, type: str) -> "ArtifactCoordinates":
        return replace(self, type=type)


def artifact_url(configuration: Configuration, coords: ArtifactCoordinates) -> str:
    """Full remote URL of an artifact under ``configuration.repository_url``."""
    base = configuration.repository_url.rstrip("/")
    return f"{base}/{coords.relative_path}"


def cache_root(configuration: Configuration) -> Path:
    """Local cache root for a configuration."""
    if configuration.cache_folder:
        return Path(configuration.cache_folder).expanduser()
    return get_cache_dir()


def cache_path(configuration: Configuration, coords: ArtifactCoordinates) -> Path:
    """Local cache file for an artifact. Same coordinates, same file."""
    return cache_root(configuration).joinpath(*coords.relative_path.split("/"))


@dataclass(frozen=True)
class Artifact:
    """
    Metadata about one published or fetched artifact.

    Created fresh by each publish or fetch call.
    """
    remote_path: str
    artifact_id: str
    version: str
    type: str
    url: str
    local_path: str = ""
    description: str = ""
    name: str = ""

    @property
    def coordinates(self) -> ArtifactCoordinates:
        return ArtifactCoordinates(
            remote_path=self.remote_path,
            artifact_id=self.artifact_id,
            version=self.version,
            type=self.type,
        )

    @classmethod
    def build(
        cls,
        configuration: Configuration,
        coords: ArtifactCoordinates,
        local_path: Union[str, Path, None] = None,
        description: str = "",
        name: str = "",
    ) -> "Artifact":
        return cls(
            remote_path=coords.remote_path,
            artifact_id=coords.artifact_id,
            version=coords.version,
            type=coords.type,
            url=artifact_url(configuration, coords),
            local_path=str(local_path) if local_path else "",
            description=description,
            name=name,
        )
