"""Shared fixtures: an in-memory Maven-style repository behind httpx.MockTransport."""

import httpx
import pytest

SERVER_URL = "http://repo.test"
REPOSITORY_URL = "http://repo.test/repository/test-repository"


class FakeRepository:
    """Stores PUT bodies by URL path, serves them back and counts rescans."""

    def __init__(self):
        self.files = {}
        self.requests = []
        self.rescans = 0
        self.fail_paths = set()
        self.rescan_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/scanRepositoryNow"):
            self.rescans += 1
            return httpx.Response(self.rescan_status, text="true")

        if any(path.endswith(suffix) for suffix in self.fail_paths):
            return httpx.Response(500, text="broken")

        if request.method == "PUT":
            self.files[path] = request.content
            return httpx.Response(201)

        if request.method == "GET":
            if path in self.files:
                return httpx.Response(200, content=self.files[path])
            return httpx.Response(404)

        return httpx.Response(405)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def uploaded(self, suffix=""):
        """Paths of uploaded artifacts, without checksum files."""
        return sorted(
            p for p in self.files
            if p.endswith(suffix) and not p.endswith((".sha1", ".md5"))
        )


@pytest.fixture
def fake_repository():
    return FakeRepository()


@pytest.fixture
def configuration(tmp_path):
    from remote_artifacts import Configuration

    return Configuration(
        server_url=SERVER_URL,
        repository_url=REPOSITORY_URL,
        repository_name="test-repository",
        username="test",
        password="secret",
        accept_media_type="application/json",
        cache_folder=str(tmp_path / "cache"),
    )
