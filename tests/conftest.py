import logging
import sys
from typing import Iterator, Optional

import pytest


@pytest.fixture(autouse=True)
def clean_env_and_modules(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, logger state, or cached path resolution.
    """

    keys = [
        "DJEMINI_LOGS_DIR",
        "DJEMINI_AUTH_DIR",
        "DJEMINI_DATA_DIR",
        "DJEMINI_DB_PATH",
        "DJEMINI_COMMAND",
        "DJEMINI_RUN_ID",
        "DJEMINI_VERBOSE",
        "DJEMINI_QUIET",
        "DJEMINI_PRIVACY",
        "DJEMINI_BATCH_SIZE",
        "DJEMINI_BATCH_DELAY_SEC",
        "DJEMINI_PUBLISH_DELAY_SEC",
        "DJEMINI_AI_MODEL",
        "DJEMINI_AI_BASE_URL",
        "DJEMINI_AI_MAX_RETRIES",
        "GEMINI_API_KEY",
        "YT_SLEEP_SEC",
        "YT_MAX_RETRIES",
        "YT_BACKOFF_BASE_SEC",
        "LOG_LEVEL",
        "LOG_RETENTION",
    ]
    for k in keys:
        monkeypatch.delenv(k, raising=False)

    # Keep every file a test touches under tmp_path
    monkeypatch.setenv("DJEMINI_LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("DJEMINI_AUTH_DIR", str(tmp_path / "auth"))
    monkeypatch.setenv("DJEMINI_DATA_DIR", str(tmp_path / "data"))

    from djemini.env import reset_env_caches

    reset_env_caches()

    # Reset logger global state
    import djemini.logger.state

    djemini.logger.state.reset()

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    # Force re-import of path + logger modules
    for mod in [
        "djemini.env.paths",
        "djemini.logger",
        "djemini.logger.state",
        "djemini.logger.file",
        "djemini.logger.console",
        "djemini.logger.retention",
    ]:
        sys.modules.pop(mod, None)
        parent_name, _, child = mod.rpartition(".")
        parent = sys.modules.get(parent_name)
        if parent is not None and hasattr(parent, child):
            delattr(parent, child)


# ------------------------------------------------------------
# Store
# ------------------------------------------------------------


@pytest.fixture
def store():
    from djemini.store import Store

    s = Store(":memory:")
    yield s
    s.close()


# ------------------------------------------------------------
# Fakes
# ------------------------------------------------------------


class FakeCatalog:
    """
    In-memory CatalogProvider.

    `fail` maps an operation key to an exception (or a list of exceptions
    raised in turn). Keys: "liked", "playlist:<id>", "create:<name>",
    "add:<item id>", "add", "title", "mine".
    """

    name = "fake"

    def __init__(self, liked=None, playlists=None, mine=None, titles=None):
        self.liked = list(liked or [])
        self.playlists = dict(playlists or {})
        self.mine = list(mine or [])
        self.titles = dict(titles or {})
        self.fail: dict = {}
        self.created: list[tuple[str, str, str]] = []
        self.added: list[tuple[str, str]] = []
        self.calls: list[str] = []
        self._next_id = 0

    def _maybe_fail(self, key: str) -> None:
        exc = self.fail.get(key)
        if exc is None:
            return
        if isinstance(exc, list):
            if not exc:
                return
            exc = exc.pop(0)
            if exc is None:
                return
        raise exc

    def list_my_playlists(self):
        self.calls.append("mine")
        self._maybe_fail("mine")
        return iter(self.mine)

    def get_playlist_title(self, remote_id: str) -> Optional[str]:
        self.calls.append(f"title:{remote_id}")
        self._maybe_fail("title")
        return self.titles.get(remote_id)

    def list_liked_items(self) -> Iterator:
        self.calls.append("liked")
        self._maybe_fail("liked")
        return iter(self.liked)

    def list_playlist_items(self, remote_id: str) -> Iterator:
        self.calls.append(f"playlist:{remote_id}")
        self._maybe_fail(f"playlist:{remote_id}")
        return iter(self.playlists.get(remote_id, []))

    def create_playlist(self, name: str, description: str, privacy: str) -> str:
        self.calls.append(f"create:{name}")
        self._maybe_fail(f"create:{name}")
        self._next_id += 1
        remote_id = f"PLremote{self._next_id}"
        self.created.append((name, description, privacy))
        return remote_id

    def add_item(self, remote_playlist_id: str, external_item_id: str) -> None:
        self.calls.append(f"add:{external_item_id}")
        self._maybe_fail("add")
        self._maybe_fail(f"add:{external_item_id}")
        self.added.append((remote_playlist_id, external_item_id))


class FakeCompletionClient:
    """Returns canned replies in order; an Exception entry is raised instead."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts: list[str] = []

    def complete_json(self, prompt: str, *, name: str = "completion") -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError(f"unexpected AI call: {name}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


def no_sleep(_seconds: float) -> None:
    return None
