"""Tests for color management."""

import curses
from unittest.mock import patch

from noice import colors
from noice.colors import ColorPair, get_entry_color, init_colors, parse_color_name
from noice.listing import Entry, EntryKind


def test_parse_color_name_with_style():
    assert parse_color_name("blue_bold") == (curses.COLOR_BLUE, curses.A_BOLD)
    assert parse_color_name("red_dim") == (curses.COLOR_RED, curses.A_DIM)
    assert parse_color_name("cyan") == (curses.COLOR_CYAN, curses.A_NORMAL)


def test_parse_color_name_unknown_uses_terminal_default():
    assert parse_color_name("chartreuse") == (-1, curses.A_NORMAL)


@patch("curses.has_colors", return_value=False)
def test_entry_color_without_color_support(mock_has_colors):
    entry = Entry("dir", EntryKind.DIRECTORY)
    assert get_entry_color(entry) == curses.A_NORMAL


@patch("curses.has_colors", return_value=False)
def test_init_colors_without_color_support(mock_has_colors):
    with patch("curses.start_color") as mock_start:
        init_colors({"directory": "blue_bold"})
    mock_start.assert_not_called()


@patch("curses.color_pair", side_effect=lambda pair: pair << 8)
@patch("curses.init_pair")
@patch("curses.use_default_colors")
@patch("curses.start_color")
@patch("curses.has_colors", return_value=True)
def test_init_colors_registers_configured_kinds(
    mock_has_colors, mock_start, mock_default, mock_init_pair, mock_color_pair
):
    """Only kinds named in the configuration get a color pair."""
    init_colors({"directory": "blue_bold", "fifo": "yellow"})

    mock_init_pair.assert_any_call(ColorPair.DIRECTORY, curses.COLOR_BLUE, -1)
    mock_init_pair.assert_any_call(ColorPair.FIFO, curses.COLOR_YELLOW, -1)
    assert mock_init_pair.call_count == 2

    directory = Entry("d", EntryKind.DIRECTORY)
    regular = Entry("f", EntryKind.REGULAR)
    assert get_entry_color(directory) == (ColorPair.DIRECTORY << 8) | curses.A_BOLD
    assert get_entry_color(regular) == curses.A_NORMAL

    colors._kind_attributes.clear()
