"""Temporal linking of speech segments to visual nodes.

WHY: An editor looking at an utterance wants to know what is on screen
while it is spoken, and how much of each visual event overlaps it. This
module computes those cross-references once, so the output can carry
them directly.

HOW: For every segment, every node of the forest is visited in pre-order
(all descendants included) and tested for overlap. Links are collected
in a list owned by that segment alone, then frozen into a tuple on a new
SpeechSegment record. The input segments are not mutated.

RULES:
- Moment node: linked iff seg.start_ms <= t_ms <= seg.end_ms (closed,
  a moment exactly on a boundary IS linked)
- Interval node: local_start = max(starts), local_end = min(ends);
  linked iff local_end > local_start (an exact touch is NOT linked)
- Links keep visit order: forest document order, per segment
- O(segments x nodes); deterministic
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional, Sequence, Tuple

from vidscriber.core.ir import SpeechSegment, VideoNodeRef, VisualNode, iter_nodes

logger = logging.getLogger(__name__)


def overlap(segment: SpeechSegment, node: VisualNode) -> Optional[VideoNodeRef]:
    """Return the link between ``segment`` and ``node``, or None.

    The closed test for moments and the strict test for intervals are
    deliberately different; see the module RULES.
    """
    if node.is_moment:
        t_ms = node.t_ms
        if segment.start_ms <= t_ms <= segment.end_ms:
            return VideoNodeRef(node_id=node.id, is_moment=True, t_ms=t_ms)
        return None

    local_start = max(segment.start_ms, node.start_ms)
    local_end = min(segment.end_ms, node.end_ms)
    if local_end > local_start:
        return VideoNodeRef(
            node_id=node.id,
            is_moment=False,
            local_start_ms=local_start,
            local_end_ms=local_end,
        )
    return None


def link_segment(
    segment: SpeechSegment,
    nodes: Sequence[VisualNode],
) -> SpeechSegment:
    """Return a copy of ``segment`` with video_nodes set.

    Args:
        segment: A segment from the segmenter.
        nodes: Every node of the forest, already flattened in pre-order.
    """
    refs: List[VideoNodeRef] = []
    for node in nodes:
        ref = overlap(segment, node)
        if ref is not None:
            refs.append(ref)
    return dataclasses.replace(segment, video_nodes=tuple(refs))


def link_timelines(
    segments: Sequence[SpeechSegment],
    forest: Tuple[VisualNode, ...],
) -> Tuple[SpeechSegment, ...]:
    """Link every segment against the whole visual forest.

    Args:
        segments: Ordered speech segments.
        forest: Top-level normalized visual nodes.

    Returns:
        New segments, same order, each carrying its VideoNodeRefs.
    """
    nodes = list(iter_nodes(forest))
    linked = tuple(link_segment(segment, nodes) for segment in segments)
    logger.debug(
        "Linked %d segments against %d visual nodes (%d links)",
        len(linked), len(nodes), sum(len(s.video_nodes) for s in linked),
    )
    return linked
