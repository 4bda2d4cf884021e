from pathlib import Path
import tempfile

from blurt.live_cache import LiveCache
from blurt.settings_store import SETTINGS_KEY, SettingsStore
from blurt.snippet_store import SNIPPETS_KEY, SnippetStore
from blurt.storage import open_storage
from blurt.typing_session import TypingSession


class FakeStorage:
    def __init__(self):
        self._handlers = []

    def subscribe(self, handler):
        self._handlers.append(handler)
        return lambda: self._handlers.remove(handler)

    # test seam
    def simulate(self, changes, area="local"):
        for handler in list(self._handlers):
            handler(changes, area)


class StaticSnippets:
    def list_snippets(self):
        return [{"id": "1", "trigger": "/a", "body": "x"}]


class StaticSettings:
    def get_settings(self):
        return {"enabled": True, "triggerPrefix": "/"}


def test_cache_hydrates_and_follows_changes():
    storage = FakeStorage()
    cache = LiveCache(StaticSnippets(), StaticSettings(), storage)
    called = []
    cache.add_listener(called.append)
    cache.start()
    assert cache.is_running()
    assert cache.snippets[0]["trigger"] == "/a"

    storage.simulate({SETTINGS_KEY: {"oldValue": None, "newValue": {"triggerPrefix": "#"}}})
    assert cache.settings["triggerPrefix"] == "#"
    # fields absent from the change fall back to defaults
    assert cache.settings["autocompleteMaxItems"] == 8

    storage.simulate({SNIPPETS_KEY: {"oldValue": [], "newValue": [{"id": "2", "trigger": "#b", "body": "y"}]}})
    assert [s["id"] for s in cache.snippets] == ["2"]
    assert called == [[SETTINGS_KEY], [SNIPPETS_KEY]]

    # unrelated keys and removals are ignored
    storage.simulate({"other": {"oldValue": 1, "newValue": 2}})
    storage.simulate({SNIPPETS_KEY: {"oldValue": [], "newValue": None}})
    assert len(called) == 2
    assert [s["id"] for s in cache.snippets] == ["2"]

    cache.stop()
    assert not cache.is_running()
    storage.simulate({SNIPPETS_KEY: {"oldValue": [], "newValue": []}})
    assert [s["id"] for s in cache.snippets] == ["2"]


def test_failing_listener_is_isolated():
    storage = FakeStorage()
    cache = LiveCache(StaticSnippets(), StaticSettings(), storage)

    def broken(changed):
        raise ValueError("listener bug")

    cache.add_listener(broken)
    cache.start()
    storage.simulate({SNIPPETS_KEY: {"oldValue": [], "newValue": []}})
    assert cache.snippets == []


def test_cache_with_real_storage():
    with tempfile.TemporaryDirectory() as td:
        storage = open_storage(Path(td))
        snippets = SnippetStore(storage)
        settings = SettingsStore(storage)
        cache = LiveCache(snippets, settings, storage)
        cache.start()
        assert cache.snippets == []

        snippets.save_snippets([{"id": "1", "trigger": "/sig", "body": "Regards"}])
        settings.update_settings({"theme": "light"})
        assert cache.snippets[0]["trigger"] == "/sig"
        assert cache.settings["theme"] == "light"
        cache.stop()


def test_listener_removal_and_session_detach():
    storage = FakeStorage()
    cache = LiveCache(StaticSnippets(), StaticSettings(), storage)
    cache.start()

    called = []
    remove = cache.add_listener(called.append)
    remove()
    storage.simulate({SNIPPETS_KEY: {"oldValue": [], "newValue": []}})
    assert called == []

    sessions = [TypingSession(cache, f"host{i}.com") for i in range(100)]
    assert cache.listener_count() == 100
    for session in sessions:
        session.detach()
    assert cache.listener_count() == 0
    cache.stop()
