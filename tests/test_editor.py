"""Tests for the browsing/editing state machine"""

import random

import pytest

from catalog import ParameterInstance, NAME_PARAM, ENV_PARAM
from constants import BEGIN_EDIT_PREFILL
from editor import Action, EditSession, EditorModel, Mode
from exceptions import ConfigurationError, SessionError
from conftest import press


class TestNavigation:
    """Selection movement while browsing"""

    def test_previous_from_first_wraps_to_last(self, demo_model):
        press(demo_model, "up")
        assert demo_model.selected == 2

    def test_next_from_last_wraps_to_first(self, demo_model):
        demo_model.selected = 2
        press(demo_model, "down")
        assert demo_model.selected == 0

    @pytest.mark.parametrize("key", ["left", "up", "shift+tab"])
    def test_previous_keys(self, demo_model, key):
        demo_model.selected = 1
        press(demo_model, key)
        assert demo_model.selected == 0

    @pytest.mark.parametrize("key", ["right", "down", "tab"])
    def test_next_keys(self, demo_model, key):
        press(demo_model, key)
        assert demo_model.selected == 1

    @pytest.mark.parametrize("key", ["esc", "ctrl+c", "enter"])
    def test_quit_keys(self, demo_model, key):
        assert demo_model.update(key) is Action.QUIT

    def test_empty_parameter_list(self):
        model = EditorModel(image="unknown")

        assert press(model, "down", "up", "a") is Action.CONTINUE
        assert model.selected == 0
        assert model.mode is Mode.BROWSING
        assert model.update("enter") is Action.QUIT


class TestBeginEdit:
    """Entering edit mode"""

    def test_alphanumeric_starts_edit_with_key_in_buffer(self, demo_model):
        press(demo_model, "x")

        assert demo_model.mode is Mode.EDITING
        assert demo_model.session.buffer == "x"
        assert demo_model.session.cursor == 1
        assert demo_model.session.segments is None

    def test_default_is_not_written_until_commit(self, demo_model):
        press(demo_model, "x")
        assert demo_model.parameters[0].value == ""

    def test_composite_value_is_split(self, demo_model):
        press(demo_model, "tab", "x")
        assert demo_model.session.segments == ["/a", "/b"]

    @pytest.mark.parametrize("key", ["-", "/", " ", "é", "backspace", "unknown"])
    def test_other_keys_do_not_start_edit(self, demo_model, key):
        press(demo_model, key)
        assert demo_model.mode is Mode.BROWSING
        assert demo_model.session is None

    def test_prefill_seeds_buffer_with_current_value(self, demo_catalog):
        model = EditorModel.from_catalog(demo_catalog, "demo", begin_edit=BEGIN_EDIT_PREFILL)
        press(model, "x")

        assert model.session.buffer == "alpine-testx"
        assert model.session.cursor == len("alpine-testx")

    def test_prefill_seeds_only_editable_segment(self, demo_catalog):
        model = EditorModel.from_catalog(demo_catalog, "demo", begin_edit=BEGIN_EDIT_PREFILL)
        press(model, "tab", "x", "enter")

        assert model.parameters[1].value == "/ax:/b"

    def test_unknown_begin_edit_mode(self):
        with pytest.raises(ConfigurationError):
            EditorModel(image="demo", begin_edit="overwrite")


class TestEditing:
    """Buffer and cursor handling while editing"""

    def test_insert_at_cursor(self, demo_model):
        press(demo_model, "a", "b", "c", "left", "left", "X")

        assert demo_model.session.buffer == "aXbc"
        assert demo_model.session.cursor == 2

    def test_quit_letters_are_inserted(self, demo_model):
        press(demo_model, "a", "q")
        assert demo_model.session.buffer == "aq"
        assert demo_model.mode is Mode.EDITING

    def test_delete_left(self, demo_model):
        press(demo_model, "a", "b", "backspace")
        assert demo_model.session.buffer == "a"
        assert demo_model.session.cursor == 1

    def test_delete_left_at_start_is_noop(self, demo_model):
        press(demo_model, "a", "b", "left", "left", "backspace")
        assert demo_model.session.buffer == "ab"
        assert demo_model.session.cursor == 0

    def test_cursor_movement_is_clamped(self, demo_model):
        press(demo_model, "a", "left", "left", "left")
        assert demo_model.session.cursor == 0

        press(demo_model, "right", "right", "right")
        assert demo_model.session.cursor == 1

    def test_cursor_stays_inside_buffer(self, demo_model):
        rng = random.Random(1234)
        keys = ["left", "right", "backspace", "a", "b", "up", "down"]
        press(demo_model, "a")

        for _ in range(500):
            press(demo_model, rng.choice(keys))
            session = demo_model.session
            assert 0 <= session.cursor <= len(session.buffer)

    def test_session_rejects_cursor_outside_buffer(self):
        with pytest.raises(AssertionError):
            EditSession(buffer="ab", cursor=3)


class TestCommit:
    """Writing the edit buffer back to the parameter"""

    def test_plain_value(self, demo_model):
        press(demo_model, "m", "y", "-", "a", "p", "p", "enter")

        assert demo_model.parameters[0].value == "my-app"
        assert demo_model.mode is Mode.BROWSING
        assert demo_model.session is None
        assert demo_model.selected == 0

    def test_composite_first_segment(self, demo_model):
        press(demo_model, "tab", "x", "backspace", "/", "c", "enter")

        assert demo_model.parameters[1].value == "/c:/b"

    def test_composite_second_segment(self, demo_model):
        press(demo_model, "up", "n", "e", "w", "enter")

        assert demo_model.parameters[2].value == "KEY=new"

    def test_composite_with_missing_segment(self):
        model = EditorModel(image="demo", parameters=[ParameterInstance(ENV_PARAM, ["NOVALUE"])])
        press(model, "v", "enter")

        assert model.parameters[0].value == "NOVALUE=v"

    def test_empty_buffer_falls_back_to_default(self, demo_model):
        press(demo_model, "x", "backspace", "enter")

        assert demo_model.parameters[0].value == "alpine-test"
        assert not demo_model.parameters[0].is_edited

    def test_confirm_and_advance(self, demo_model):
        press(demo_model, "z", "tab")

        assert demo_model.parameters[0].value == "z"
        assert demo_model.selected == 1
        assert demo_model.mode is Mode.BROWSING

    def test_confirm_and_advance_on_last_wraps(self, demo_model):
        press(demo_model, "up", "n", "tab")

        assert demo_model.parameters[2].value == "KEY=n"
        assert demo_model.selected == 0

    def test_cancel_leaves_default_untouched(self, demo_model):
        press(demo_model, "x", "y", "left", "backspace", "esc")

        assert demo_model.parameters[0].value == ""
        assert demo_model.mode is Mode.BROWSING
        assert demo_model.session is None

    def test_cancel_leaves_committed_value_untouched(self, demo_model):
        press(demo_model, "z", "z", "enter", "q", "esc")

        assert demo_model.parameters[0].value == "zz"


class TestEditedFlag:
    """Which values count as changed"""

    def test_default_value_is_not_edited(self):
        assert not ParameterInstance(NAME_PARAM, ["a", "b"], value="a").is_edited

    def test_empty_value_is_not_edited(self):
        assert not ParameterInstance(NAME_PARAM, ["a", "b"]).is_edited

    def test_other_candidate_is_edited(self):
        assert ParameterInstance(NAME_PARAM, ["a", "b"], value="b").is_edited


def test_fail_stores_error_and_quits(demo_model):
    error = SessionError("terminal went away")

    assert demo_model.fail(error) is Action.QUIT
    assert demo_model.error is error
