from blurt.matching import (
    autocomplete_suggestions,
    filter_suggestions,
    match_trigger_pure,
    match_trigger_with_aliases,
    should_show_all_for_query,
)


def s(id, trigger, body="x", description=None):
    return {"id": id, "trigger": trigger, "body": body, "description": description}


def test_alias_match_for_acronym():
    m = match_trigger_with_aliases("/rh", [s("1", "/rabbit-holes")], "/")
    assert m is not None and m["id"] == "1"


def test_alias_match_for_letter_digits():
    m = match_trigger_with_aliases("/L2", [s("1", "/rabbit-holes"), s("3", "/L-Think2")], "/")
    assert m["id"] == "3"


def test_exact_match_prefers_longest_trigger():
    m = match_trigger_with_aliases("/addr", [s("1", "/a"), s("2", "/addr")], "/")
    assert m["id"] == "2"


def test_exact_match_is_case_insensitive_and_trimmed():
    m = match_trigger_with_aliases("  /SIG ", [s("1", "/sig")], "/")
    assert m["id"] == "1"


def test_exact_match_wins_over_alias():
    # "/rh" is both the alias of /rabbit-holes and a trigger of its own
    snippets = [s("1", "/rabbit-holes"), s("2", "/rh")]
    assert match_trigger_with_aliases("/rh", snippets, "/")["id"] == "2"


def test_duplicate_triggers_resolve_to_first_encountered():
    snippets = [s("1", "/dup"), s("2", "/dup")]
    assert match_trigger_with_aliases("/dup", snippets, "/")["id"] == "1"


def test_alias_requires_prefix():
    assert match_trigger_with_aliases("rh", [s("1", "/rabbit-holes")], "/") is None


def test_no_match_returns_none():
    assert match_trigger_with_aliases("/zzz", [s("1", "/sig")], "/") is None
    assert match_trigger_with_aliases("   ", [s("1", "/sig")], "/") is None


def test_match_trigger_pure_requires_prefix_and_prefers_longest():
    snippets = [s("1", "/a"), s("2", "/addr"), s("3", "/ab")]
    assert match_trigger_pure("a", snippets, "/") is None
    assert match_trigger_pure("/a", snippets, "/")["id"] == "1"
    assert match_trigger_pure("/addr", snippets, "/")["id"] == "2"
    assert match_trigger_pure("/ADDR", snippets, "/") is None


def test_autocomplete_by_alias():
    snippets = [s("1", "/rabbit-holes"), s("2", "/roadmap"), s("3", "/L-Think2")]
    assert any(x["id"] == "1" for x in autocomplete_suggestions("/rh", snippets, "/", 8))
    assert any(x["id"] == "3" for x in autocomplete_suggestions("/L2", snippets, "/", 8))


def test_autocomplete_by_subsequence():
    out = autocomplete_suggestions("/lt", [s("3", "/L-Think2")], "/", 8)
    assert [x["id"] for x in out] == ["3"]


def test_autocomplete_keeps_collection_order_without_duplicates():
    snippets = [s("1", "/roadmap"), s("2", "/rabbit-holes"), s("3", "/rhino")]
    out = autocomplete_suggestions("/r", snippets, "/", 8)
    assert [x["id"] for x in out] == ["1", "2", "3"]


def test_autocomplete_short_circuits_without_prefix_or_term():
    snippets = [s("1", "/sig")]
    assert autocomplete_suggestions("", snippets, "/", 8) == []
    assert autocomplete_suggestions("   ", snippets, "/", 8) == []
    assert autocomplete_suggestions("sig", snippets, "/", 8) == []


def test_autocomplete_bare_prefix_matches_by_startswith_only():
    snippets = [s("1", "/sig"), s("2", "#other")]
    # empty normalized query never matches by subsequence
    assert [x["id"] for x in autocomplete_suggestions("/", snippets, "/", 8)] == ["1"]


def test_autocomplete_limit_is_clamped_to_one():
    snippets = [s("1", "/a"), s("2", "/ab")]
    assert len(autocomplete_suggestions("/a", snippets, "/", -5)) == 1
    assert len(autocomplete_suggestions("/a", snippets, "/", 1)) == 1


def test_filter_suggestions_prefix_only():
    snippets = [s("1", "/a", "x", "A"), s("2", "/ab", "y", "B"), s("3", "/b", "z", "C")]
    assert len(filter_suggestions("/a", snippets, "/", 1)) == 1
    assert [x["id"] for x in filter_suggestions("/a", snippets, "/", 10)] == ["1", "2"]
    assert filter_suggestions("a", snippets, "/", 10) == []
    # no alias or fuzzy logic here
    assert filter_suggestions("/lt", [s("9", "/L-Think2")], "/", 10) == []


def test_should_show_all_for_query():
    assert should_show_all_for_query("/", "/")
    assert should_show_all_for_query("  ", "/")
    assert not should_show_all_for_query("/a", "/")
