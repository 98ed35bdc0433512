"""Tests for rester.tui.components -- text area, select list and block."""

from __future__ import annotations

from rester.tui.components.block import Block
from rester.tui.components.select_list import SelectList
from rester.tui.components.text_area import TextArea
from rester.tui.utils import visible_width

from .test_screen import strip_sgr


class TestTextArea:
    def test_typing_and_enter(self):
        area = TextArea()
        for ch in "ab":
            area.handle_input(ch)
        assert area.handle_input("\r") is True
        area.handle_input("c")
        assert area.text == "ab\nc"

    def test_single_line_leaves_enter_to_caller(self):
        area = TextArea(multiline=False)
        area.handle_input("a")
        assert area.handle_input("\r") is False
        assert area.text == "a"

    def test_single_line_strips_newlines(self):
        area = TextArea("a\nb", multiline=False)
        assert area.text == "ab"
        area.set_value("c\r\nd")
        assert area.text == "cd"

    def test_set_value_puts_cursor_at_end(self):
        area = TextArea()
        area.set_value("hello")
        area.handle_input("!")
        assert area.text == "hello!"

    def test_paste_keeps_newlines_when_multiline(self):
        area = TextArea()
        area.handle_input("\x1b[200~one\r\ntwo\x1b[201~")
        assert area.text == "one\ntwo"

    def test_space_and_unhandled_keys(self):
        area = TextArea()
        assert area.handle_input(" ") is True
        assert area.text == " "
        assert area.handle_input("\x1b[15~") is False

    def test_cursor_shown_only_when_focused(self):
        area = TextArea()
        area.set_value("ab")
        assert "\x1b[7m" not in "".join(area.render(10, 1))
        area.focused = True
        line = area.render(10, 1)[0]
        assert "\x1b[7m \x1b[27m" in line
        assert strip_sgr(line) == "ab" + " " * 8

    def test_render_fills_area(self):
        area = TextArea("one\ntwo")
        lines = area.render(6, 4)
        assert len(lines) == 4
        assert all(visible_width(line) == 6 for line in lines)

    def test_scrolls_to_cursor(self):
        area = TextArea()
        area.set_value("\n".join(str(i) for i in range(10)))
        area.focused = True
        lines = [strip_sgr(line).strip() for line in area.render(5, 3)]
        assert lines == ["7", "8", "9"]

    def test_horizontal_scroll_keeps_cursor_visible(self):
        area = TextArea(multiline=False)
        area.set_value("abcdefghij")
        area.focused = True
        line = strip_sgr(area.render(5, 1)[0])
        assert visible_width(line) == 5
        assert line.startswith("ghij")


class TestSelectList:
    def test_wraps_both_ways(self):
        items = SelectList(["a", "b", "c"])
        items.move_up()
        assert items.selected() == "c"
        items.move_down()
        assert items.selected() == "a"

    def test_set_items_clamps_selection(self):
        items = SelectList(["a", "b", "c"])
        items.set_selected_index(2)
        items.set_items(["a"])
        assert items.selected_index == 0

    def test_empty(self):
        items = SelectList()
        items.move_down()
        assert items.selected() is None
        assert "no saved requests" in items.render(30, 3)[0]

    def test_render_marks_selection(self):
        items = SelectList(["alpha", "beta"])
        items.move_down()
        lines = [strip_sgr(line) for line in items.render(12, 5)]
        assert lines == ["  alpha     ", "→ beta      "]

    def test_window_follows_selection(self):
        items = SelectList([str(i) for i in range(20)])
        items.set_selected_index(15)
        lines = [strip_sgr(line).strip() for line in items.render(10, 4)]
        assert "→ 15" in lines
        assert len(lines) == 4

    def test_multiline_label_flattened(self):
        lines = SelectList(["a\nb"]).render(10, 1)
        assert strip_sgr(lines[0]).startswith("→ a b")


class TestBlock:
    def test_plain_border(self):
        lines = Block("Title").render(10, 3, ["inner"])
        assert lines == ["┌Title───┐", "│inner   │", "└────────┘"]

    def test_active_border_is_double(self):
        lines = [strip_sgr(line) for line in Block("T", active=True).render(5, 3, [])]
        assert lines == ["╔T══╗", "║   ║", "╚═══╝"]

    def test_long_title_truncated(self):
        top = Block("A very long title").render(8, 2, [])[0]
        assert visible_width(top) == 8
        assert "…" in top

    def test_too_small(self):
        assert Block("x").render(1, 3, []) == [" ", " ", " "]
        assert Block("x").render(5, 1, []) == ["     "]
