# ruff: noqa: ANN201, ANN001, ANN204
import json
import os
import tempfile

import httpx
import pytest

# Keep config and logs of the test run out of the user's home directory
_TEST_HOME = tempfile.mkdtemp(prefix="templatehub-tests-")
os.environ.setdefault("TEMPLATEHUB_CONFIG_PATH", os.path.join(_TEST_HOME, "config.yaml"))
os.environ.setdefault("TEMPLATEHUB_DATA_DIR", os.path.join(_TEST_HOME, "data"))

from templatehub.models.config import PathsConfig, ToolSource  # noqa: E402
from templatehub.services.git import GitService, GitToolManager  # noqa: E402
from templatehub.services.github import GitHubClient, RateLimitedCache  # noqa: E402

API = "https://api.github.com/"


def repository_payload(
    id=1,
    owner="x",
    name="y",
    default_branch="main",
    updated_at="2024-01-01T00:00:00Z",
):
    full_name = f"{owner}/{name}"
    return {
        "id": id,
        "name": name,
        "full_name": full_name,
        "description": "A template",
        "html_url": f"https://github.com/{full_name}",
        "clone_url": f"https://github.com/{full_name}.git",
        "default_branch": default_branch,
        "updated_at": updated_at,
        "stargazers_count": 3,
    }


def branch_payload(tree_sha, name="main"):
    return {"name": name, "commit": {"sha": "c0ffee", "commit": {"tree": {"sha": tree_sha}}}}


def tree_payload(*entries):
    return {"sha": "t", "tree": [{"path": path, "type": kind, "sha": sha} for path, kind, sha in entries]}


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeGitHub:
    """Serves canned API responses keyed by the request path and query."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path, body, status=200, headers=None):
        self.routes[path] = (status, body, headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode("ascii").lstrip("/")
        self.requests.append(path)
        if path not in self.routes:
            return httpx.Response(404, json={"message": "Not Found"})

        status, body, headers = self.routes[path]
        if isinstance(body, Exception):
            raise body
        content = body if isinstance(body, str) else json.dumps(body)
        return httpx.Response(status, content=content.encode("utf-8"), headers=headers)

    def count(self, path):
        return self.requests.count(path)


class FakeGit(GitService):
    """Records git commands; ``clone`` writes the given files into the working copy."""

    def __init__(self, files=None):
        super().__init__(GitToolManager(ToolSource()))
        self.files = files or {}
        self.commands = []

    async def run(self, *args, cwd, line_callback=None):
        cwd.mkdir(parents=True, exist_ok=True)
        self.commands.append(args)
        if args[0] == "clone":
            (cwd / ".git").mkdir(exist_ok=True)
            (cwd / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
            for rel, content in self.files.items():
                target = cwd / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
        if line_callback:
            await line_callback("Receiving objects: 100% (3/3), done.")
        return True


class RecordingScope:
    def __init__(self, messages):
        self.messages = messages

    def update(self, message, current, total):
        self.messages.append(message)


class RecordingSink:
    def __init__(self):
        self.labels = []
        self.messages = []

    def start(self, label):
        from contextlib import contextmanager

        @contextmanager
        def scope():
            self.labels.append(label)
            yield RecordingScope(self.messages)

        return scope()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def cache(github, clock):
    transport = httpx.MockTransport(github.handler)
    return RateLimitedCache(base_url=API, client=httpx.AsyncClient(transport=transport), clock=clock)


@pytest.fixture
def client(cache):
    return GitHubClient(cache)


@pytest.fixture
def paths(tmp_path):
    return PathsConfig(data_dir=tmp_path / "data")


@pytest.fixture
def git():
    return FakeGit(files={"src/main.code": "print('hi')\n", "README.md": "# readme\n", ".gitignore": "bin/\n"})
