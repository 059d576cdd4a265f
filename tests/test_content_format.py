from __future__ import annotations

from kisanpath.content_format import parse_lesson_content


def test_markup_lines_become_blocks() -> None:
    blocks = parse_lesson_content("## Soil Health\nTest before you buy.\n- Take five samples\n• Send to the lab\n\nDone")

    assert [(block.kind, block.text) for block in blocks] == [
        ("heading", "Soil Health"),
        ("paragraph", "Test before you buy."),
        ("bullet", "Take five samples"),
        ("bullet", "Send to the lab"),
        ("spacer", ""),
        ("paragraph", "Done"),
    ]


def test_literal_backslash_n_is_a_line_break() -> None:
    blocks = parse_lesson_content("## One\\nTwo")
    assert [block.kind for block in blocks] == ["heading", "paragraph"]


def test_heading_markers_are_stripped_everywhere() -> None:
    blocks = parse_lesson_content("  ## Water ## Budget  ")
    assert blocks[0].text == "Water  Budget"


def test_empty_content_has_no_blocks() -> None:
    assert parse_lesson_content(None) == []
    assert parse_lesson_content("") == []
