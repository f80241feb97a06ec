"""Rendering of a Compilation into the final vidscriber.v1 document.

WHY: Downstream editing tools (and language models driving them) read
the compiled artifact, so it must be small, readable and byte-stable.
Times are rendered as short second strings, links as one-line strings,
and empty containers are left out entirely.

HOW: Pure functions over the frozen IR. The visual tree is rendered
bottom-up from a pre-order listing, so arbitrarily deep trees need no
recursion.

RULES:
- Top level: version, summary, speech_timeline, video_timeline
- Time strings: ms / 1000 with exactly 3 decimals, "[s.sss->s.sss]" for
  ranges and "[s.sss]" for instants
- Link strings: "<node_id>[ (label)] <time>"
- Word strings: "[s.sss->s.sss] text"
- Omit video_nodes, words, tags, children when empty
- Idempotent: identical input → identical output
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from vidscriber.config import OUTPUT_VERSION
from vidscriber.core.ir import (
    Compilation,
    SpeechSegment,
    VideoNodeRef,
    VisualNode,
    iter_nodes,
)


def ms_to_seconds(ms: float) -> str:
    """Render milliseconds as seconds with exactly three decimals."""
    return "{:.3f}".format(ms / 1000)


def time_range(start_ms: float, end_ms: float) -> str:
    return "[{}->{}]".format(ms_to_seconds(start_ms), ms_to_seconds(end_ms))


def time_instant(ms: float) -> str:
    return "[{}]".format(ms_to_seconds(ms))


def node_time(node: VisualNode) -> str:
    if node.is_moment:
        return time_instant(node.start_ms)
    return time_range(node.start_ms, node.end_ms)


def ref_string(ref: VideoNodeRef, label: Optional[str]) -> str:
    """Render one link, e.g. ``"state_0.span_1 (typing) [1.200->2.000]"``."""
    if ref.is_moment:
        when = time_instant(ref.t_ms)
    else:
        when = time_range(ref.local_start_ms, ref.local_end_ms)
    if label:
        return "{} ({}) {}".format(ref.node_id, label, when)
    return "{} {}".format(ref.node_id, when)


def compact_segment(
    segment: SpeechSegment,
    labels: Dict[str, Optional[str]],
) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": segment.id,
        "time": time_range(segment.start_ms, segment.end_ms),
        "speaker": segment.speaker,
        "language": segment.language,
        "text": segment.text,
    }
    if segment.video_nodes:
        out["video_nodes"] = [
            ref_string(ref, labels.get(ref.node_id)) for ref in segment.video_nodes
        ]
    if segment.words:
        out["words"] = [
            "{} {}".format(time_range(w.start_ms, w.end_ms), w.text)
            for w in segment.words
        ]
    return out


def compact_video_timeline(forest: tuple) -> List[Dict[str, Any]]:
    """Render the normalized forest as nested dicts, without recursion."""
    nodes = list(iter_nodes(forest))
    rendered: Dict[str, Dict[str, Any]] = {}
    for node in reversed(nodes):
        res: Dict[str, Any] = {
            "id": node.id,
            "kind": node.kind,
            "time": node_time(node),
            "label": node.label,
        }
        if node.tags:
            res["tags"] = list(node.tags)
        if node.children:
            # ids are unique, and children precede their parent in reverse pre-order
            res["children"] = [rendered[child.id] for child in node.children]
        rendered[node.id] = res
    return [rendered[node.id] for node in forest]


def compact(compilation: Compilation) -> Dict[str, Any]:
    """Render a linked Compilation into the vidscriber.v1 document.

    Args:
        compilation: Linked segments plus the normalized visual document.

    Returns:
        A fresh dict ready for json.dumps; no IR objects are shared with it.
    """
    labels = {node.id: node.label for node in iter_nodes(compilation.timeline)}
    return {
        "version": OUTPUT_VERSION,
        "summary": compilation.summary,
        "speech_timeline": [
            compact_segment(segment, labels) for segment in compilation.segments
        ],
        "video_timeline": compact_video_timeline(compilation.timeline),
    }
