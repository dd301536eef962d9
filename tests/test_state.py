"""Tests for navigation state transitions."""

import os
import shutil
from unittest.mock import patch

import pytest

from noice.errors import DirectoryUnreadable, InvalidFilter
from noice.state import MATCH_EVERYTHING, NavigationState


def _make_tree(root):
    (root / "alpha").mkdir()
    (root / "alpha" / "inner.txt").write_text("x", encoding="utf-8")
    (root / "alpha" / "second.txt").write_text("y", encoding="utf-8")
    (root / "beta").mkdir()
    (root / "gamma.txt").write_text("data", encoding="utf-8")
    (root / ".hidden").write_text("secret", encoding="utf-8")


def _loaded_state(path, **kwargs):
    state = NavigationState(current_path=str(path), **kwargs)
    state.load()
    return state


def test_load_applies_default_filter(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)

    assert state.listing.names == ["alpha", "beta", "gamma.txt"]
    assert state.selected_index == 0
    assert state.filter_pattern == "^[^.]"


def test_current_path_is_normalized(tmp_path):
    state = NavigationState(current_path=str(tmp_path) + "/./")
    assert state.current_path == str(tmp_path)


def test_move_selection_is_clamped(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)

    state.move_selection(-5)
    assert state.selected_index == 0
    state.move_selection(10)
    assert state.selected_index == 2
    state.select_first()
    assert state.selected_index == 0
    state.select_last()
    assert state.selected_index == 2


def test_selection_on_empty_listing(tmp_path):
    state = _loaded_state(tmp_path)

    state.move_selection(1)
    state.select_last()

    assert state.selected_index == 0
    assert state.selected_entry() is None
    assert state.selected_path() is None


def test_enter_and_go_up_restores_selection(tmp_path):
    """Going back up highlights the directory we were in."""
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)
    state.select_last()  # gamma.txt
    state.move_selection(-1)  # beta
    state.move_selection(-1)  # alpha

    state.enter_directory("alpha")
    assert state.current_path == str(tmp_path / "alpha")
    assert state.selected_index == 0

    assert state.go_up() is True
    assert state.current_path == str(tmp_path)
    assert state.selected_entry().name == "alpha"
    assert state.pending_restore_path is None


def test_reentering_restores_previous_child_selection(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)

    state.enter_directory("alpha")
    state.select_last()
    assert state.selected_entry().name == "second.txt"
    state.go_up()

    state.enter_directory("alpha")
    assert state.selected_entry().name == "second.txt"


def test_entering_a_different_directory_starts_at_top(tmp_path):
    _make_tree(tmp_path)
    (tmp_path / "beta" / "a").write_text("x", encoding="utf-8")
    (tmp_path / "beta" / "b").write_text("x", encoding="utf-8")
    state = _loaded_state(tmp_path)

    state.enter_directory("alpha")
    state.select_last()
    state.go_up()
    state.enter_directory("beta")

    assert state.selected_index == 0


def test_go_up_at_root_is_noop():
    state = _loaded_state("/")

    assert state.go_up() is False
    assert state.current_path == "/"


def test_enter_deleted_directory_leaves_state_unchanged(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)
    state.move_selection(1)
    shutil.rmtree(tmp_path / "beta")

    with pytest.raises(DirectoryUnreadable):
        state.enter_directory("beta")

    assert state.current_path == str(tmp_path)
    assert state.selected_index == 1
    assert state.listing.names == ["alpha", "beta", "gamma.txt"]


def test_toggle_dotfiles_round_trip(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)

    state.toggle_dotfiles()
    assert state.filter_pattern == MATCH_EVERYTHING
    assert ".hidden" in state.listing.names

    state.toggle_dotfiles()
    assert state.filter_pattern == "^[^.]"
    assert ".hidden" not in state.listing.names


def test_invalid_filter_keeps_previous_listing(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)
    state.move_selection(2)

    with pytest.raises(InvalidFilter):
        state.apply_filter("[")

    assert state.filter_pattern == "^[^.]"
    assert state.selected_index == 2
    assert len(state.listing) == 3


def test_apply_filter_keeps_selection_when_still_visible(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)
    state.move_selection(1)  # beta

    state.apply_filter("a")

    assert state.listing.names == ["alpha", "beta", "gamma.txt"]
    assert state.selected_entry().name == "beta"

    state.apply_filter("txt$")
    assert state.listing.names == ["gamma.txt"]
    assert state.selected_index == 0


def test_empty_filter_restores_default(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)
    state.apply_filter(".")

    state.apply_filter(None)

    assert state.filter_pattern == "^[^.]"


def test_toggle_sort_keeps_selected_entry(tmp_path):
    _make_tree(tmp_path)
    os.utime(tmp_path / "alpha", (1_000_000, 1_000_000))
    os.utime(tmp_path / "beta", (2_000_000, 2_000_000))
    os.utime(tmp_path / "gamma.txt", (3_000_000, 3_000_000))
    state = _loaded_state(tmp_path)
    state.select_first()  # alpha

    state.toggle_sort()

    assert state.sort_by_time is True
    assert state.listing.names == ["gamma.txt", "beta", "alpha"]
    assert state.selected_entry().name == "alpha"


def test_change_directory_relative_and_absolute(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)
    state.apply_filter(".")

    assert state.change_directory("alpha") is True
    assert state.current_path == str(tmp_path / "alpha")
    assert state.filter_pattern == "^[^.]"

    assert state.change_directory("..") is True
    assert state.current_path == str(tmp_path)

    assert state.change_directory(str(tmp_path / "beta")) is True
    assert state.current_path == str(tmp_path / "beta")


def test_change_directory_empty_is_noop(tmp_path):
    state = _loaded_state(tmp_path)

    assert state.change_directory("") is False
    assert state.current_path == str(tmp_path)


def test_change_directory_missing_raises(tmp_path):
    state = _loaded_state(tmp_path)

    with pytest.raises(DirectoryUnreadable):
        state.change_directory("nowhere")

    assert state.current_path == str(tmp_path)


def test_go_home_highlights_directory_we_left(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path / "beta")

    assert state.go_home(str(tmp_path)) is True

    assert state.current_path == str(tmp_path)
    assert state.selected_entry().name == "beta"


def test_go_home_without_home(tmp_path):
    state = _loaded_state(tmp_path)
    assert state.go_home(None) is False
    assert state.go_home("") is False


def test_refresh_picks_up_new_entries(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)
    state.move_selection(1)  # beta

    (tmp_path / "aardvark").write_text("x", encoding="utf-8")
    state.refresh()

    assert state.listing.names[0] == "aardvark"
    assert state.selected_entry().name == "beta"


def test_total_size_tracks_listing(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)

    assert state.total_size == 4
    state.toggle_dotfiles()
    assert state.total_size == 10


def test_go_up_failure_leaves_state_unchanged(tmp_path):
    """An unreadable parent keeps the current directory, listing and selection."""
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path / "alpha")
    state.select_last()
    listing = state.listing

    error = DirectoryUnreadable(str(tmp_path), "Permission denied")
    with patch("noice.state.check_directory", side_effect=error):
        with pytest.raises(DirectoryUnreadable):
            state.go_up()

    assert state.current_path == str(tmp_path / "alpha")
    assert state.listing is listing
    assert state.selected_entry().name == "second.txt"
    assert state.left_selection is None


def test_reentering_after_child_removed_starts_at_top(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path)
    state.enter_directory("alpha")
    state.select_last()
    state.go_up()

    (tmp_path / "alpha" / "second.txt").unlink()
    state.enter_directory("alpha")

    assert state.listing.names == ["inner.txt"]
    assert state.selected_index == 0


def test_reentering_after_child_filtered_out_starts_at_top(tmp_path):
    _make_tree(tmp_path)
    state = _loaded_state(tmp_path, default_filter="^[^s]")
    state.enter_directory("alpha")
    state.apply_filter(".")
    state.select_last()
    assert state.selected_entry().name == "second.txt"
    state.go_up()

    state.enter_directory("alpha")

    assert state.listing.names == ["inner.txt"]
    assert state.selected_index == 0
