"""
Single-artifact transfer: publish, fetch and read one artifact, and ask the
repository server to rescan.

Uploads follow the Maven repository convention of one PUT per file plus
``.sha1`` and ``.md5`` checksum files next to it. Fetched files land in the
local cache and are reused until ``force=True``.
"""

import logging
import shutil
from pathlib import Path
from typing import Any, Optional, Tuple, Union
from xml.sax.saxutils import escape

import httpx

from .configuration import Configuration, resolve_configuration
from .coordinates import (
    DEFAULT_VERSION,
    Artifact,
    ArtifactCoordinates,
    artifact_url,
    cache_path,
)
from .utils import compute_checksum, download_file, http_client, load_data, progress_level


logger = logging.getLogger(__name__)

CHECKSUM_ALGORITHMS = ("sha1", "md5")

# Archiva REST endpoint, relative to configuration.server_url
RESCAN_ENDPOINT = "archiva/restServices/archivaServices/repositoriesService/scanRepositoryNow"

POM_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
         xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 http://maven.apache.org/xsd/maven-4.0.0.xsd">
  <modelVersion>4.0.0</modelVersion>
  <groupId>{group_id}</groupId>
  <artifactId>{artifact_id}</artifactId>
  <version>{version}</version>
  <packaging>{packaging}</packaging>
  <name>{name}</name>
  <description>{description}</description>
</project>
"""


def build_pom(coords: ArtifactCoordinates, name: str = "", description: str = "") -> str:
    """Minimal POM describing an artifact, carrying its name and description."""
    return POM_TEMPLATE.format(
        group_id=escape(coords.group_id),
        artifact_id=escape(coords.artifact_id),
        version=escape(coords.version),
        packaging=escape(coords.type or "file"),
        name=escape(name),
        description=escape(description),
    )


def _put(
    client: httpx.Client,
    configuration: Configuration,
    url: str,
    content: bytes,
):
    response = client.put(
        url,
        content=content,
        auth=configuration.auth,
        headers={"Content-Type": "application/octet-stream"},
    )
    response.raise_for_status()


def _put_with_checksums(
    client: httpx.Client,
    configuration: Configuration,
    url: str,
    path: Path,
):
    _put(client, configuration, url, path.read_bytes())
    for algorithm in CHECKSUM_ALGORITHMS:
        checksum = compute_checksum(path, algorithm)
        _put(client, configuration, f"{url}.{algorithm}", checksum.encode("ascii"))


def publish_artifact(
    configuration: Any,
    file: Union[str, Path],
    remote_path: str,
    artifact_id: Optional[str] = None,
    version: str = DEFAULT_VERSION,
    description: str = "",
    name: str = "",
    delete_local: bool = False,
    rescan: bool = True,
    generate_pom: bool = True,
    verbose: bool = False,
    client: Optional[httpx.Client] = None,
) -> Artifact:
    """
    Publish one local file as an artifact.

    Parameters
    ----------
    configuration : Configuration or any input accepted by resolve_configuration
        Target repository
    file : str or Path
        Local file to publish
    remote_path : str
        Group path in the repository, e.g. "org/example" or "org.example"
    artifact_id : str, optional
        Defaults to the file name without its final extension
    version : str
        Artifact version (default "1")
    description, name : str
        Metadata written to the generated POM
    delete_local : bool
        Remove the local cache copy after publishing
    rescan : bool
        Ask the server to rescan once the upload is done
    generate_pom : bool
        Upload a generated POM next to non-pom artifacts
    verbose : bool
        Log progress at INFO instead of DEBUG
    client : httpx.Client, optional
        HTTP client to use; a temporary one is created if omitted

    Returns
    -------
    Artifact
        Metadata of the published artifact. ``local_path`` is empty when
        ``delete_local`` removed the cache copy.

    Raises
    ------
    FileNotFoundError
        If ``file`` does not exist
    ValueError
        If ``remote_path`` is empty or no artifact id can be derived
    httpx.HTTPError
        If an upload fails
    """
    configuration = resolve_configuration(configuration)
    file = Path(file)
    if not file.is_file():
        raise FileNotFoundError(f"No file {file} found to publish")
    if not remote_path:
        raise ValueError("remote_path must not be empty")

    coords = ArtifactCoordinates.from_file(
        file, remote_path, version=version, artifact_id=artifact_id
    )
    if not coords.artifact_id:
        raise ValueError(f"Cannot derive an artifact id from {file.name!r}")

    level = progress_level(verbose, configuration.verbosity)
    local = cache_path(configuration, coords)
    local.parent.mkdir(parents=True, exist_ok=True)
    if file.resolve() != local.resolve():
        shutil.copyfile(file, local)

    url = artifact_url(configuration, coords)
    with http_client(client) as http:
        logger.log(level, "Publishing %s to %s", file, url)
        _put_with_checksums(http, configuration, url, local)

        if generate_pom and coords.type != "pom":
            pom_coords = coords.with_type("pom")
            pom_path = cache_path(configuration, pom_coords)
            pom_path.write_text(build_pom(coords, name, description), encoding="utf-8")
            _put_with_checksums(
                http, configuration, artifact_url(configuration, pom_coords), pom_path
            )
            if delete_local:
                pom_path.unlink()

        if rescan:
            request_rescan(configuration, client=http)

    if delete_local:
        local.unlink()
        local = None

    return Artifact.build(
        configuration, coords, local_path=local, description=description, name=name
    )


def _remote_checksum(
    client: httpx.Client,
    configuration: Configuration,
    url: str,
) -> Optional[str]:
    """Checksum published next to ``url``, or None if the server has none."""
    response = client.get(f"{url}.sha1", auth=configuration.auth)
    if response.status_code != 200:
        return None
    text = response.text.strip()
    return text.split()[0].lower() if text else None


def fetch_artifact(
    configuration: Any,
    remote_path: str,
    artifact_id: str,
    version: str = DEFAULT_VERSION,
    type: str = "",
    force: bool = False,
    verify: bool = True,
    verbose: bool = False,
    client: Optional[httpx.Client] = None,
) -> Artifact:
    """
    Fetch an artifact into the local cache.

    A cached copy is reused unless ``force`` is True. GET requests carry
    ``configuration.accept_media_type`` as the Accept header.

    Returns
    -------
    Artifact
        Metadata whose ``local_path`` names the cached file

    Raises
    ------
    httpx.HTTPStatusError
        If the server does not serve the artifact
    RuntimeError
        If the downloaded file does not match the remote SHA-1 checksum
    """
    configuration = resolve_configuration(configuration)
    coords = ArtifactCoordinates(
        remote_path=remote_path, artifact_id=artifact_id, version=version, type=type
    )
    level = progress_level(verbose, configuration.verbosity)
    local = cache_path(configuration, coords)

    if local.is_file() and not force:
        logger.log(level, "Reusing cached artifact %s", local)
        return Artifact.build(configuration, coords, local_path=local)

    url = artifact_url(configuration, coords)
    headers = {}
    if configuration.accept_media_type:
        headers["Accept"] = configuration.accept_media_type

    with http_client(client) as http:
        logger.log(level, "Fetching %s", url)
        size = download_file(
            http,
            url,
            local,
            headers=headers,
            auth=configuration.auth,
            verbose=verbose,
            verbosity=configuration.verbosity,
        )

        if verify:
            expected = _remote_checksum(http, configuration, url)
            if expected is not None and compute_checksum(local, "sha1") != expected:
                local.unlink()
                raise RuntimeError(f"Checksum verification failed for {url}")

    logger.log(level, "Fetched %s -> %s (%d bytes)", url, local, size)
    return Artifact.build(configuration, coords, local_path=local)


def read_artifact(
    configuration: Any,
    remote_path: str,
    artifact_id: str,
    version: str = DEFAULT_VERSION,
    type: str = "",
    force: bool = False,
    verbose: bool = False,
    client: Optional[httpx.Client] = None,
) -> Tuple[Any, Artifact]:
    """
    Fetch an artifact and load its contents.

    Returns
    -------
    tuple
        ``(data, artifact)`` where data is parsed JSON/TOML, text for text
        types such as "pom", or raw bytes otherwise
    """
    configuration = resolve_configuration(configuration)
    artifact = fetch_artifact(
        configuration,
        remote_path,
        artifact_id,
        version=version,
        type=type,
        force=force,
        verbose=verbose,
        client=client,
    )
    return load_data(artifact.local_path, artifact.type), artifact


def request_rescan(
    configuration: Any,
    client: Optional[httpx.Client] = None,
) -> bool:
    """
    Ask the repository server to rescan its listing and search index.

    Failures are logged and reported as False; they never raise.
    """
    configuration = resolve_configuration(configuration)
    if not configuration.server_url or not configuration.repository_name:
        logger.warning("Cannot request rescan: server_url and repository_name are required")
        return False

    url = f"{configuration.server_url.rstrip('/')}/{RESCAN_ENDPOINT}"
    params = {"repositoryId": configuration.repository_name, "fullScan": "true"}
    try:
        with http_client(client) as http:
            response = http.get(url, params=params, auth=configuration.auth)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(
            "Rescan request for repository %s failed: %s",
            configuration.repository_name,
            e,
        )
        return False

    if response.text.strip().lower() == "false":
        logger.warning(
            "Repository %s refused the rescan request", configuration.repository_name
        )
        return False

    logger.log(
        progress_level(verbosity=configuration.verbosity),
        "Requested rescan of repository %s",
        configuration.repository_name,
    )
    return True


def artifact_cached(configuration: Configuration, coords: ArtifactCoordinates) -> bool:
    """Check if an artifact is already in the local cache."""
    return cache_path(configuration, coords).is_file()


def clear_cached_artifact(configuration: Configuration, coords: ArtifactCoordinates) -> bool:
    """
    Remove an artifact from the local cache.

    Returns
    -------
    bool
        True if a cached file was removed, False if there was none
    """
    path = cache_path(configuration, coords)
    if not path.is_file():
        return False
    path.unlink()
    logger.debug("Cleared cached artifact %s", path)
    return True
