import tempfile
from pathlib import Path

from blurtgui import BlurtAPI


def test_api_surface_and_seeding():
    with tempfile.TemporaryDirectory() as td:
        api = BlurtAPI(base_dir=Path(td))
        try:
            ping = api.ping()
            assert ping["status"] == "ok"
            assert ping["ready"] is True
            # first run seeds example snippets
            assert ping["snippetCount"] == 2
            assert {s["trigger"] for s in api.list_snippets()} == {"/sig", "/addr"}
            assert api.get_settings()["triggerPrefix"] == "/"
        finally:
            api.shutdown()


def test_api_edit_suggest_and_expand():
    with tempfile.TemporaryDirectory() as td:
        api = BlurtAPI(base_dir=Path(td))
        try:
            saved = api.save_snippet("rabbit-holes", "Rabbit holes", "down we go")
            assert saved["status"] == "success"
            # cache follows storage writes
            assert any(s["trigger"] == "/rabbit-holes" for s in api.list_snippets())

            assert [s["trigger"] for s in api.suggest("/rh")] == ["/rabbit-holes"]
            assert api.expand("/rh")["snippet"]["body"] == "down we go"
            assert api.expand("/missing")["status"] == "error"

            api.save_settings({"blocklist": "example.com"})
            status = api.site_status("www.example.com")
            assert status == {"host": "www.example.com", "enabled": False, "autocomplete": False}

            assert api.delete_snippet(saved["snippet"]["id"])["status"] == "success"
            assert api.search_snippets("rabbit")["count"] == 0
        finally:
            api.shutdown()


def test_api_restart_keeps_data_and_heals_duplicates():
    with tempfile.TemporaryDirectory() as td:
        api = BlurtAPI(base_dir=Path(td))
        snippets = api.list_snippets()
        api._snippet_store.save_snippets(snippets + [dict(snippets[0], trigger="/copy")])
        api.shutdown()

        reopened = BlurtAPI(base_dir=Path(td))
        try:
            assert len(reopened.list_snippets()) == 2
        finally:
            reopened.shutdown()
