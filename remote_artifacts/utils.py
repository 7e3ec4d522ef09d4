"""Shared utility functions for remote_artifacts."""

import hashlib
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple, Union

import httpx

from ._compat import require_tomllib


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
CHUNK_SIZE = 65536

# Types returned as text by load_data()
TEXT_TYPES = frozenset({"pom", "xml", "txt", "csv", "md", "properties", "html"})


def progress_level(verbose: bool = False, verbosity: int = 0) -> int:
    """Log level for progress messages: INFO when asked to be chatty."""
    return logging.INFO if verbose or verbosity > 0 else logging.DEBUG


@contextmanager
def http_client(client: Optional[httpx.Client] = None) -> Iterator[httpx.Client]:
    """Yield ``client`` as-is, or a short-lived client that is closed afterwards."""
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=DEFAULT_TIMEOUT, follow_redirects=True) as owned:
        yield owned


def compute_checksum(filepath: Union[str, Path], algorithm: str = "sha1") -> str:
    """
    Compute a hex digest of a file.

    Parameters
    ----------
    filepath : str or Path
        Path to the file
    algorithm : str
        Any hashlib algorithm name, e.g. "sha1", "md5", "sha256"

    Returns
    -------
    str
        Hexadecimal digest
    """
    digest = hashlib.new(algorithm)
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


def download_file(
    client: httpx.Client,
    url: str,
    destination: Path,
    headers: Optional[Dict[str, str]] = None,
    auth: Optional[Tuple[str, str]] = None,
    verbose: bool = False,
    verbosity: int = 0,
) -> int:
    """
    Stream a GET response into ``destination``.

    The body goes to a temporary file next to the destination first, so an
    interrupted download never leaves a partial file in the cache.

    Returns
    -------
    int
        Number of bytes written

    Raises
    ------
    httpx.HTTPStatusError
        If the server answers with an error status
    """
    level = progress_level(verbose, verbosity)
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=destination.parent, suffix=".part")
    tmp_path = Path(tmp_name)
    downloaded = 0
    try:
        with os.fdopen(fd, "wb") as fh:
            with client.stream("GET", url, headers=headers, auth=auth) as response:
                response.raise_for_status()
                total = int(response.headers.get("content-length") or 0)
                next_percent = 10
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    fh.write(chunk)
                    downloaded += len(chunk)
                    if total and downloaded * 100 >= next_percent * total:
                        logger.log(
                            level,
                            "Download progress %s %d%% (%d/%d bytes)",
                            url,
                            downloaded * 100 // total,
                            downloaded,
                            total,
                        )
                        next_percent += 10
        os.replace(tmp_path, destination)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    return downloaded


def load_data(path: Union[str, Path], type: str) -> Any:
    """
    Load a fetched file according to its artifact type.

    json -> parsed object, toml -> dict, text types -> str, else bytes.
    """
    path = Path(path)
    type = type.lower()
    if type == "json":
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    if type == "toml":
        tomllib = require_tomllib()
        with open(path, "rb") as f:
            return tomllib.load(f)
    if type in TEXT_TYPES:
        return path.read_text(encoding="utf-8")
    return path.read_bytes()
