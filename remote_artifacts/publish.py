"""
Publish every file in a folder as an artifact.

Publication runs in two phases: all selected files are uploaded one by one
without rescanning, then the repository is asked to rescan once.
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

import httpx

from .configuration import resolve_configuration
from .coordinates import DEFAULT_VERSION, Artifact, split_file_name
from .transfer import publish_artifact, request_rescan
from .utils import http_client, progress_level


logger = logging.getLogger(__name__)

# Never published: Apple directory store files and MATLAB editor backups.
# Compared case-insensitively against the file extension.
EXCLUDED_EXTENSIONS = frozenset({"ds_store", "asv"})


def is_publishable(path: Path, type: str = "") -> bool:
    """
    Check whether a directory entry should be published.

    Directories, deny-listed extensions and names without a base name are
    rejected. Files without an extension are always accepted. Otherwise the
    extension must equal ``type`` (case-sensitive) when a type is given.
    """
    if path.is_dir():
        return False
    artifact_id, extension = split_file_name(path.name)
    if not extension:
        return True
    if extension.lower() in EXCLUDED_EXTENSIONS:
        return False
    if not artifact_id:
        logger.warning("Skipping %s: a name starting with a dot has no artifact id", path)
        return False
    return not type or extension == type


def select_files(folder: Union[str, Path], type: str = "") -> List[Path]:
    """List the files of ``folder`` that would be published, sorted by name."""
    folder = Path(folder)
    return [p for p in sorted(folder.iterdir()) if is_publishable(p, type)]


def _check_folder(folder: Path):
    if folder.is_dir():
        return
    if folder.exists():
        # Passing a file instead of its folder is a common mistake
        logger.warning("The folder argument %s appears to be a file", folder)
        raise NotADirectoryError(f"{folder} is a file, not a folder")
    raise FileNotFoundError(f"No folder {folder} found")


def publish_artifacts(
    configuration: Any,
    folder: Union[str, Path],
    remote_path: str,
    version: str = DEFAULT_VERSION,
    type: str = "",
    description: str = "",
    name: str = "",
    delete_local: bool = False,
    rescan: bool = True,
    verbose: bool = False,
    client: Optional[httpx.Client] = None,
) -> List[Artifact]:
    """
    Publish each file in a folder to the repository at ``remote_path``.

    Sub-directories are not included. The artifact id of each artifact is
    its file name without the final extension and its type is that
    extension, so "data.nii.gz" becomes artifact "data.nii" of type "gz".

    Parameters
    ----------
    configuration : Configuration or any input accepted by resolve_configuration
        Target repository; ``repository_url`` must point at its root
    folder : str or Path
        Folder holding the files to publish
    remote_path : str
        Group path for all artifacts
    version : str
        Version used for every artifact (default "1")
    type : str
        Only publish files with this extension (default: all)
    description, name : str
        Metadata added to every artifact
    delete_local : bool
        Remove the local cache copies after publishing
    rescan : bool
        Ask the server to rescan once after all files are published
    verbose : bool
        Log progress at INFO instead of DEBUG
    client : httpx.Client, optional
        HTTP client shared by all uploads

    Returns
    -------
    list of Artifact
        Published artifacts in selection order; empty if nothing matched

    Raises
    ------
    FileNotFoundError
        If ``folder`` does not exist
    NotADirectoryError
        If ``folder`` is a file
    ValueError
        If ``remote_path`` is empty
    httpx.HTTPError
        If publishing any file fails; no rescan is requested then
    """
    configuration = resolve_configuration(configuration)
    folder = Path(folder)
    _check_folder(folder)
    if not remote_path:
        raise ValueError("remote_path must not be empty")

    level = progress_level(verbose, configuration.verbosity)
    files = select_files(folder, type)
    # Artifacts that come with their own POM must not get a generated one
    own_poms = {
        split_file_name(f.name)[0] for f in files if split_file_name(f.name)[1] == "pom"
    }

    artifacts = []
    with http_client(client) as http:
        for file in files:
            artifact_id, _ = split_file_name(file.name)
            artifacts.append(
                publish_artifact(
                    configuration,
                    file,
                    remote_path,
                    artifact_id=artifact_id,
                    version=version,
                    description=description,
                    name=name,
                    delete_local=delete_local,
                    rescan=False,
                    generate_pom=artifact_id not in own_poms,
                    verbose=verbose,
                    client=http,
                )
            )
            logger.log(level, "Published %s to %s", file, remote_path)
        logger.log(level, "Done with %d artifacts", len(artifacts))

        if rescan:
            request_rescan(configuration, client=http)

    return artifacts
