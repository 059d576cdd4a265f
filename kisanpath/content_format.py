"""Split lesson bodies written in the light lesson markup into display blocks."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel

BlockKind = Literal["heading", "bullet", "paragraph", "spacer"]

BULLET_MARKERS = ("-", "•")


class ContentBlock(BaseModel):
    kind: BlockKind
    text: str = ""


def parse_lesson_content(content: Optional[str]) -> List[ContentBlock]:
    """Turn ``content`` into blocks, one per line.

    ``##`` starts a heading, ``-`` or ``•`` a bullet, blank lines become
    spacers. Stored bodies sometimes carry a literal backslash-n instead of a
    newline; both are accepted.
    """
    if not content:
        return []
    blocks: List[ContentBlock] = []
    for line in content.replace("\\n", "\n").split("\n"):
        trimmed = line.strip()
        if trimmed.startswith("##"):
            blocks.append(ContentBlock(kind="heading", text=trimmed.replace("##", "").strip()))
        elif trimmed.startswith(BULLET_MARKERS):
            blocks.append(ContentBlock(kind="bullet", text=trimmed[1:].strip()))
        elif trimmed:
            blocks.append(ContentBlock(kind="paragraph", text=trimmed))
        else:
            blocks.append(ContentBlock(kind="spacer"))
    return blocks


__all__ = ["BlockKind", "ContentBlock", "parse_lesson_content"]
