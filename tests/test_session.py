"""Tests for the pure mention session transitions.

This module verifies:
- The idle invariant (every field cleared)
- Menu and search entry from scanner matches
- Highlight clamping over the active list
- Single and multi (toggle) candidate picks
- Field toggling, its cap, and unknown keys
- Stale lookup results are ignored
"""

import pytest

from doccomposer.errors import FieldLimitError, UnknownFieldError
from doccomposer.scanner import scan
from doccomposer.session import (
    MentionSession,
    SessionMode,
    apply_candidates,
    begin_lookup,
    cancel,
    finish_selection,
    idle,
    move_highlight,
    open_menu,
    pick_candidate,
    start_search,
    toggle_field,
    update_query,
)


def search_session(content: str) -> MentionSession:
    return start_search(scan(content, len(content)))


def field_session(record) -> MentionSession:
    return pick_candidate(search_session("@uye"), record)


class TestIdleInvariant:
    def test_idle_is_default(self):
        session = idle()
        assert session.is_idle
        assert session.trigger_offset == -1
        assert session.selected_fields == ()

    def test_idle_with_leftover_state_is_rejected(self):
        with pytest.raises(ValueError):
            MentionSession(mode=SessionMode.IDLE, query="ahmet")

    def test_cancel_from_any_state(self, members):
        for session in (open_menu(scan("@", 1)), search_session("@uye a"), field_session(members[0])):
            assert cancel(session) == idle()


class TestEntry:
    def test_open_menu(self):
        session = open_menu(scan("x @", 3))
        assert session.mode is SessionMode.COMMAND_MENU
        assert session.trigger_offset == 2
        assert len(session.menu_commands) == 2

    def test_single_search(self):
        session = search_session("@uye")
        assert session.mode is SessionMode.ENTITY_SEARCH
        assert session.multi_select is False
        assert session.query == ""

    def test_multi_search_with_query(self):
        session = search_session("@uyetablo mehmet")
        assert session.multi_select is True
        assert session.query == "mehmet"
        assert session.span_end == len("@uyetablo mehmet")

    def test_start_search_needs_command(self):
        with pytest.raises(ValueError):
            start_search(scan("@", 1))

    def test_update_query_resets_highlight(self, members):
        session = apply_candidates(begin_lookup(search_session("@uye a"), 1), 1, members)
        session = move_highlight(session, 2)
        updated = update_query(session, scan("@uye ah", 7))
        assert updated.query == "ah"
        assert updated.highlight_index == 0
        assert updated.trigger_offset == session.trigger_offset


class TestHighlight:
    def test_clamped_to_candidates(self, members):
        session = apply_candidates(begin_lookup(search_session("@uye"), 1), 1, members)
        session = move_highlight(session, 10)
        assert session.highlight_index == len(members) - 1
        session = move_highlight(session, -10)
        assert session.highlight_index == 0

    def test_menu_navigation(self):
        session = move_highlight(open_menu(scan("@", 1)), 1)
        assert session.highlighted.trigger == "uyetablo"

    def test_no_op_without_items(self):
        session = search_session("@uye")
        assert move_highlight(session, 1) is session
        assert move_highlight(idle(), 1) == idle()


class TestLookupResults:
    def test_results_replace_candidates(self, members):
        session = begin_lookup(search_session("@uye"), 3)
        assert session.loading
        session = apply_candidates(session, 3, members[:2])
        assert session.candidates == tuple(members[:2])
        assert not session.loading
        assert session.searched

    def test_stale_generation_ignored(self, members):
        session = begin_lookup(search_session("@uye"), 4)
        assert apply_candidates(session, 3, members) is session

    def test_results_after_leaving_search_ignored(self, members):
        session = open_menu(scan("@", 1))
        assert apply_candidates(session, 0, members) is session

    def test_empty_result_is_no_results_state(self):
        session = apply_candidates(begin_lookup(search_session("@uye zzz"), 1), 1, [])
        assert session.mode is SessionMode.ENTITY_SEARCH
        assert session.no_results


class TestPicking:
    def test_single_pick_moves_to_field_select(self, members):
        session = field_session(members[1])
        assert session.mode is SessionMode.FIELD_SELECT
        assert session.selected_entities == (members[1],)
        assert session.preview_entity == members[1]

    def test_multi_pick_resets_query_and_stays(self, members):
        session = search_session("@uyetablo meh")
        picked = pick_candidate(session, members[1])
        assert picked.mode is SessionMode.ENTITY_SEARCH
        assert picked.query == ""
        assert picked.selected_entities == (members[1],)
        assert picked.span_end == picked.query_offset

    def test_multi_pick_twice_deselects(self, members):
        session = search_session("@uyetablo")
        before = session.selected_entities
        twice = pick_candidate(pick_candidate(session, members[0]), members[0])
        assert twice.selected_entities == before

    def test_multi_pick_matches_by_id(self, members):
        refreshed = members[0].model_copy(update={"fields": {"first_name": "Ahmet", "last_name": "Yılmaz"}})
        session = pick_candidate(search_session("@uyetablo"), members[0])
        assert session.is_selected(refreshed)
        assert pick_candidate(session, refreshed).selected_entities == ()

    def test_multi_pick_keeps_insertion_order(self, members):
        session = search_session("@uyetablo")
        for record in (members[2], members[0], members[1]):
            session = pick_candidate(session, record)
        assert [r.id for r in session.selected_entities] == ["3", "1", "2"]

    def test_finish_requires_selection(self, members):
        session = search_session("@uyetablo")
        assert finish_selection(session) is session
        session = pick_candidate(pick_candidate(session, members[0]), members[1])
        finished = finish_selection(session)
        assert finished.mode is SessionMode.FIELD_SELECT
        assert finished.preview_entity == members[0]
        assert len(finished.selected_entities) == 2

    def test_finish_ignored_in_single_mode(self):
        session = search_session("@uye")
        assert finish_selection(session) is session


class TestFieldToggle:
    def test_toggle_twice_restores(self, members, catalog):
        session = toggle_field(field_session(members[0]), "first_name", catalog)
        session = toggle_field(session, "last_name", catalog)
        original = session.selected_fields
        toggled = toggle_field(toggle_field(session, "phone", catalog), "phone", catalog)
        assert toggled.selected_fields == original

    def test_insertion_order_is_display_order(self, members, catalog):
        session = field_session(members[0])
        for key in ("phone", "first_name", "city"):
            session = toggle_field(session, key, catalog)
        assert session.selected_fields == ("phone", "first_name", "city")

    def test_sixth_field_rejected(self, members, catalog):
        session = field_session(members[0])
        for key in catalog.keys[:5]:
            session = toggle_field(session, key, catalog)
        with pytest.raises(FieldLimitError):
            toggle_field(session, catalog.keys[5], catalog)
        assert len(session.selected_fields) == 5

    def test_larger_limit_is_clamped_to_five(self, members, catalog):
        session = field_session(members[0])
        for key in catalog.keys[:5]:
            session = toggle_field(session, key, catalog, max_fields=8)
        with pytest.raises(FieldLimitError) as exc_info:
            toggle_field(session, catalog.keys[5], catalog, max_fields=8)
        assert exc_info.value.limit == 5
        assert len(session.selected_fields) == 5

    def test_unknown_key(self, members, catalog):
        with pytest.raises(UnknownFieldError):
            toggle_field(field_session(members[0]), "shoe_size", catalog)

    def test_ignored_outside_field_select(self, catalog):
        session = search_session("@uye")
        assert toggle_field(session, "first_name", catalog) is session
