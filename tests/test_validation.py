from blurt.validation import can_save_snippet, count_chars, detect_overlap_warnings, normalize_trigger


def test_normalize_trigger_adds_prefix_when_missing():
    assert normalize_trigger("sig", "/") == "/sig"
    assert normalize_trigger("/sig", "/") == "/sig"
    assert normalize_trigger("  addr  ", "/") == "/addr"


def test_normalize_trigger_empty_input():
    assert normalize_trigger("   ", "/") == ""
    assert normalize_trigger("", "#") == ""


def test_normalize_trigger_always_starts_with_prefix():
    for prefix in ("/", "#", ";;", ":"):
        for raw in ("a", " b ", "/c", "::d", "e f"):
            assert normalize_trigger(raw, prefix).startswith(prefix)


def test_overlap_warning_names_both_triggers():
    warnings = detect_overlap_warnings([
        {"id": "1", "trigger": "/a", "body": "x"},
        {"id": "2", "trigger": "/ab", "body": "y"},
    ])
    assert len(warnings) == 1
    assert "/a" in warnings[0]
    assert "/ab" in warnings[0]


def test_no_overlap_for_disjoint_triggers():
    warnings = detect_overlap_warnings([
        {"id": "1", "trigger": "/foo", "body": "x"},
        {"id": "2", "trigger": "/bar", "body": "y"},
    ])
    assert warnings == []


def test_overlap_reports_non_adjacent_pairs():
    # sorted: /a, /ab, /abc, /ac -> /a prefixes three triggers, /ab prefixes one
    warnings = detect_overlap_warnings([
        {"trigger": "/ac"},
        {"trigger": "/abc"},
        {"trigger": "/a"},
        {"trigger": "/ab"},
    ])
    assert len(warnings) == 4
    assert 'Trigger overlap: "/a" is a prefix of "/ac"' in warnings


def test_can_save_snippet_requires_all_fields():
    assert not can_save_snippet("/", "/", "d", "b")
    assert not can_save_snippet("/t", "/", "", "b")
    assert not can_save_snippet("/t", "/", "d", "   ")
    assert can_save_snippet("/t", "/", "d", "b")


def test_can_save_snippet_tolerates_none():
    assert not can_save_snippet(None, "/", None, None)


def test_count_chars():
    assert count_chars("hello") == 5
    assert count_chars(None) == 0
