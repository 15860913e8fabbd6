import base64
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from treegrab.core.tree import assemble_tree
from treegrab.infrastructure.error_handler import RemoteApiError
from treegrab.interfaces.api import GitHubDownloader
from treegrab.models import (
    DownloadConfig, DownloadFailed, DownloadReporter, FilterSpec, FlatEntry,
    LoggingDownloadReporter, DownloadCompleted, DownloadStarted, TreeEntryKind, TreeListing
)

# Mark all tests in this file as asyncio
pytestmark = pytest.mark.asyncio

API = "https://api.github.com"


# ---- Fixtures and Test Helpers ----

def gh_entry(path: str, kind: str, sha: str) -> dict:
    return {"path": path, "mode": "100644", "type": kind, "sha": sha,
            "url": f"{API}/repos/octo/repo/git/{kind}s/{sha}", "size": 4}


RECURSIVE = {
    "sha": "root-sha",
    "url": f"{API}/repos/octo/repo/git/trees/root-sha",
    "truncated": False,
    "tree": [
        gh_entry("build.gradle", "blob", "b-gradle"),
        gh_entry("src", "tree", "t-src"),
        gh_entry("src/App.java", "blob", "b-app"),
        gh_entry("src/Broken.java", "blob", "b-missing"),
    ],
}

BLOBS = {
    "b-gradle": b"apply plugin: 'java'\n",
    "b-app": b"class App {}\n",
}


def handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/repos/octo/repo/git/trees/main":
        return httpx.Response(200, json=RECURSIVE)
    sha = path.rsplit("/", 1)[-1]
    if path.startswith("/repos/octo/repo/git/blobs/") and sha in BLOBS:
        content = base64.b64encode(BLOBS[sha]).decode()
        return httpx.Response(200, json={"content": content + "\n", "encoding": "base64"})
    return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def downloader():
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    config = DownloadConfig(max_concurrent_downloads=2, access_token=None)
    return GitHubDownloader(config=config, client=client)


class Collector(DownloadReporter):
    def __init__(self):
        self.events = []

    def on_event(self, event):
        self.events.append(event)


## GitHubDownloader API Tests
# ------------------------------

async def test_get_tree(downloader):
    root = await downloader.get_tree("octo", "repo", "main")

    assert [child.path for child in root.children] == ["build.gradle", "src"]
    assert root.sha == "root-sha"


async def test_download_writes_filtered_files(downloader, tmp_path):
    files = await downloader.download(
        "octo", "repo", "main", tmp_path, filters=FilterSpec(excluded=["**/Broken.java"])
    )

    assert [f.path for f in files] == ["build.gradle", "src/App.java"]
    assert (tmp_path / "build.gradle").read_bytes() == BLOBS["b-gradle"]
    assert (tmp_path / "src" / "App.java").read_bytes() == BLOBS["b-app"]


async def test_download_surfaces_remote_error_after_other_files(downloader, tmp_path):
    reporter = Collector()

    with pytest.raises(RemoteApiError, match="Not Found"):
        await downloader.download("octo", "repo", "main", tmp_path, reporter=reporter)

    failed = [e.path for e in reporter.events if isinstance(e, DownloadFailed)]
    completed = {e.path for e in reporter.events if isinstance(e, DownloadCompleted)}
    assert failed == ["src/Broken.java"]
    assert completed == {"build.gradle", "src/App.java"}


async def test_download_tree_delegates_to_orchestrator(downloader, tmp_path):
    listing = TreeListing(sha="s", url="u", entries=[
        FlatEntry(path="a.txt", mode="100644", kind=TreeEntryKind.BLOB, sha="b", url="blob-url", size=1)
    ])
    tree = assemble_tree(listing)
    downloader.orchestrator.download_tree = AsyncMock(return_value=list(tree.children))

    result = await downloader.download_tree(tree, tmp_path)

    assert result == list(tree.children)
    downloader.orchestrator.download_tree.assert_awaited_once_with(tree, tmp_path, None, None)


async def test_unknown_ref_fails_fetch(downloader, tmp_path):
    with pytest.raises(RemoteApiError):
        await downloader.get_tree("octo", "repo", "does-not-exist")


async def test_rate_limit_info_after_request(tmp_path):
    def limited(request):
        return httpx.Response(200, json=RECURSIVE, headers={"x-ratelimit-remaining": "41"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(limited))
    async with GitHubDownloader(config=DownloadConfig(), client=client) as downloader:
        await downloader.get_tree("octo", "repo", "main")
        assert downloader.get_rate_limit_info().remaining == 41


async def test_auth_token_from_environment(monkeypatch):
    monkeypatch.setenv("GITHUB_ACCESS_TOKEN", "from_env")

    downloader = GitHubDownloader()

    assert downloader.auth_token == "from_env"
    await downloader.close()


async def test_logging_reporter_logs_events(monkeypatch):
    mock_logger = MagicMock()
    monkeypatch.setattr("treegrab.models.download.logger", mock_logger)
    reporter = LoggingDownloadReporter()

    reporter.on_event(DownloadStarted(path="a"))
    reporter.on_event(DownloadCompleted(path="a"))
    reporter.on_event(DownloadFailed(path="b", error=RemoteApiError("nope")))

    assert mock_logger.debug.call_count == 2
    mock_logger.error.assert_called_once()
    assert "nope" in mock_logger.error.call_args.args[0]


async def test_auth_token_does_not_modify_given_config():
    config = DownloadConfig(access_token="from_config", max_concurrent_downloads=3)

    downloader = GitHubDownloader(auth_token="explicit", config=config)

    assert downloader.auth_token == "explicit"
    assert downloader.config.max_concurrent_downloads == 3
    assert config.access_token == "from_config"
    await downloader.close()
