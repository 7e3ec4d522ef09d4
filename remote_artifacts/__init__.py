"""
remote_artifacts: exchange versioned artifacts with a Maven-style repository.

This package fetches artifacts into a local cache and publishes local files,
one at a time or a whole folder at once, to a remote repository laid out as
group/artifact/version/type. Where to connect is described by a
Configuration that can be resolved from presets, config files, mappings or
field/value pairs.

Usage:
    from remote_artifacts import resolve_configuration, read_artifact, publish_artifacts

    config = resolve_configuration(repositoryUrl="https://repo1.maven.org/maven2/")
    data, artifact = read_artifact(config, "ant", "ant-commons-logging",
                                   version="1.6.5", type="pom")

    artifacts = publish_artifacts(resolve_configuration("test"), "results/", "my/group")
"""

from .configuration import (
    Configuration,
    ConfigurationResolver,
    resolve_configuration,
    default_configuration,
    find_configuration_file,
    load_configuration_file,
    write_configuration,
)

from .coordinates import (
    Artifact,
    ArtifactCoordinates,
    split_file_name,
    artifact_url,
    cache_path,
    set_cache_dir,
    get_cache_dir,
)

from .transfer import (
    publish_artifact,
    fetch_artifact,
    read_artifact,
    request_rescan,
    artifact_cached,
    clear_cached_artifact,
)

from .publish import publish_artifacts, select_files

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "Configuration",
    "ConfigurationResolver",
    "resolve_configuration",
    "default_configuration",
    "find_configuration_file",
    "load_configuration_file",
    "write_configuration",
    # Artifact identity
    "Artifact",
    "ArtifactCoordinates",
    "split_file_name",
    "artifact_url",
    "cache_path",
    # Cache management
    "set_cache_dir",
    "get_cache_dir",
    "artifact_cached",
    "clear_cached_artifact",
    # Transfer
    "publish_artifact",     # Upload one file with checksums and POM
    "fetch_artifact",       # Download one artifact into the cache
    "read_artifact",        # Fetch and load contents
    "request_rescan",       # Ask the server to re-index
    "publish_artifacts",    # Publish a whole folder, rescan once
    "select_files",
]
