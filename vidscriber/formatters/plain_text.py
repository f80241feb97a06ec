"""Plain text timeline formatter with per-utterance visual context.

WHY: Editors need a quick, readable view of the compiled timeline for
review of who says what and what is on screen meanwhile, without
opening a JSON viewer.

HOW: One block per utterance: a "[time] Speaker: text" line followed by
one indented line per linked visual node, rendered with the same link
strings as the compact JSON. The visual summary, when present, comes
first as its own paragraph.

RULES:
- Header format: "[s.sss->s.sss] <speaker>: <text>"
- Unknown speaker (None) is shown as "Speaker"
- Linked nodes: "    -> <link string>", in link order
- Blank line between blocks; no trailing whitespace on any line
- Output suffix: "-timeline.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import Dict, List, Optional

from vidscriber.core.compactor import ref_string, time_range
from vidscriber.core.ir import Compilation, SpeechSegment, iter_nodes
from vidscriber.formatters.base import BaseFormatter, FormatterOutput

_UNKNOWN_SPEAKER = "Speaker"


def _segment_block(segment: SpeechSegment, labels: Dict[str, Optional[str]]) -> str:
    lines = ["{} {}: {}".format(
        time_range(segment.start_ms, segment.end_ms),
        segment.speaker or _UNKNOWN_SPEAKER,
        segment.text,
    ).rstrip()]
    for ref in segment.video_nodes:
        lines.append("    -> {}".format(ref_string(ref, labels.get(ref.node_id))))
    return "\n".join(lines)


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces a readable speech timeline with visual links."""

    @property
    def name(self) -> str:
        return "Plain Text"

    @property
    def suffix(self) -> str:
        return "-timeline.txt"

    def format(self, compilation: Compilation) -> List[FormatterOutput]:
        labels = {node.id: node.label for node in iter_nodes(compilation.timeline)}

        blocks: List[str] = []
        if compilation.summary:
            blocks.append(compilation.summary.strip())
        for segment in compilation.segments:
            blocks.append(_segment_block(segment, labels))

        content = "\n\n".join(blocks)
        if content:
            content += "\n"

        return [
            FormatterOutput(
                suffix=self.suffix,
                content=content,
                media_type="text/plain",
            )
        ]
