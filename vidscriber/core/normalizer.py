"""Validation and canonicalization of the hierarchical visual timeline.

WHY: The vision pipeline produces a free-form tree of state, span and
moment nodes whose ids are whatever the model felt like writing. The
linker and the output need canonical, path-derived ids, uniform fields
and moments expressed as zero-width intervals, and a malformed tree must
be rejected outright instead of half-compiled.

HOW: The document is first unwrapped from the multi-pass envelope (if
any), then validated against hierarchy_v1.json with jsonschema plus an
explicit end_ms > start_ms check. Normalization walks the tree with an
explicit stack in pre-order, assigning ids from per-scope, per-kind
counters owned by each parent frame. A second pass in reverse pre-order
builds the frozen VisualNode records bottom-up, so every node's children
already exist when the node itself is built.

RULES:
- Any validation problem → SchemaViolation listing every error; no output
- Ids: "<kind>_<n>" at top level, "<parent id>.<kind>_<n>" when nested,
  n counted separately per kind within each parent
- Missing/empty label → None; missing tags → (); duplicate tags dropped
- Moments: is_moment=True, start_ms = end_ms = t_ms
- Sibling order is never changed
- No recursion: arbitrarily deep trees are safe
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from jsonschema import Draft202012Validator

from vidscriber.core.errors import SchemaViolation
from vidscriber.core.ir import KIND_MOMENT, VisualDocument, VisualNode

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "hierarchy_v1.json"

_CACHED_VALIDATORS: Optional[Tuple[Draft202012Validator, Draft202012Validator]] = None


def _get_validators() -> Tuple[Draft202012Validator, Draft202012Validator]:
    """Load the hierarchy schema once; return (document, node) validators."""
    global _CACHED_VALIDATORS
    if _CACHED_VALIDATORS is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            schema = json.load(f)
        Draft202012Validator.check_schema(schema)
        _CACHED_VALIDATORS = (
            Draft202012Validator(schema),
            Draft202012Validator(schema["$defs"]["node"]),
        )
    return _CACHED_VALIDATORS


def _format_path(path: Any) -> str:
    parts = [str(p) for p in path]
    return "/".join(parts) if parts else "<root>"


def _path_key(path: Any) -> List[Tuple[int, Any]]:
    # array indices sort numerically, before property names
    return [(0, p) if isinstance(p, int) else (1, str(p)) for p in path]


def extract_transcription(visual: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Unwrap the hierarchy document from a multi-pass envelope.

    WHY: The vision pipeline may run several refinement passes and hand
    over all of them, naming the authoritative one in ``finalPhase``.

    RULES:
    - None → None (no visual annotation at all)
    - ``{"finalPhase": key, key: {"transcription": doc}}`` → doc, or None
      when that phase has no transcription
    - A non-string finalPhase → SchemaViolation
    - Anything else is taken as the hierarchy document itself
    """
    if visual is None:
        return None
    if not isinstance(visual, Mapping):
        raise SchemaViolation(["<root>: visual document must be a JSON object"])
    final_phase = visual.get("finalPhase")
    if final_phase is None:
        return visual
    if not isinstance(final_phase, str):
        raise SchemaViolation(["finalPhase: {!r} is not of type 'string'".format(final_phase)])
    phase = visual.get(final_phase)
    if not isinstance(phase, Mapping):
        return None
    return phase.get("transcription")


def _node_errors(
    validator: Draft202012Validator,
    node: Mapping[str, Any],
    path: Tuple[Any, ...],
) -> List[str]:
    """Schema errors for one node, plus the end_ms > start_ms check.

    The interval comparison only runs when the node is otherwise valid,
    so it can rely on both fields being integers.
    """
    errors = sorted(validator.iter_errors(node), key=lambda e: _path_key(e.absolute_path))
    messages = [
        "{}: {}".format(_format_path(path + tuple(e.absolute_path)), e.message)
        for e in errors
    ]
    if not messages and node["kind"] != KIND_MOMENT:
        start, end = node["start_ms"], node["end_ms"]
        if end <= start:
            messages.append("{}: end_ms ({}) must be greater than start_ms ({})".format(
                _format_path(path), end, start,
            ))
    return messages


def validate_document(document: Any) -> None:
    """Validate a raw hierarchy document, raising SchemaViolation on failure.

    HOW: The document shell is checked first. Nodes are then checked one
    at a time while walking the tree with an explicit stack, which keeps
    validation safe on arbitrarily deep trees and reports every bad node
    with its full JSON path.
    """
    doc_validator, node_validator = _get_validators()
    shell_errors = sorted(doc_validator.iter_errors(document), key=lambda e: _path_key(e.absolute_path))
    if shell_errors:
        raise SchemaViolation([
            "{}: {}".format(_format_path(e.absolute_path), e.message) for e in shell_errors
        ])

    messages: List[str] = []
    timeline = document.get("timeline") or []
    stack: List[Tuple[Mapping[str, Any], Tuple[Any, ...]]] = [
        (timeline[i], ("timeline", i)) for i in range(len(timeline) - 1, -1, -1)
    ]
    while stack:
        node, path = stack.pop()
        messages.extend(_node_errors(node_validator, node, path))
        children = node.get("children")
        if not isinstance(children, list):
            continue
        for i in range(len(children) - 1, -1, -1):
            # non-object children were already reported by the node schema
            if isinstance(children[i], Mapping):
                stack.append((children[i], path + ("children", i)))

    if messages:
        raise SchemaViolation(messages)


def _dedupe(tags: Any) -> Tuple[str, ...]:
    seen: Dict[str, None] = {}
    for tag in tags or ():
        seen.setdefault(tag, None)
    return tuple(seen)


def normalize_forest(raw_nodes: List[Mapping[str, Any]]) -> Tuple[VisualNode, ...]:
    """Canonicalize an already-validated list of raw nodes.

    Args:
        raw_nodes: The ``timeline`` array of a valid hierarchy document.

    Returns:
        The top-level VisualNode tuple, children nested in order.
    """
    # Pass 1: pre-order walk assigning ids. Each frame is
    # (raw node, parent index in `order` or -1, the parent's kind counter).
    order: List[Tuple[str, Mapping[str, Any]]] = []
    child_indices: List[List[int]] = []
    roots: List[int] = []

    top_counter: Counter = Counter()
    stack: List[Tuple[Mapping[str, Any], int, Counter]] = [
        (raw, -1, top_counter) for raw in reversed(raw_nodes)
    ]
    while stack:
        raw, parent, counter = stack.pop()
        kind = raw["kind"]
        local = "{}_{}".format(kind, counter[kind])
        counter[kind] += 1
        node_id = local if parent < 0 else "{}.{}".format(order[parent][0], local)

        index = len(order)
        order.append((node_id, raw))
        child_indices.append([])
        if parent < 0:
            roots.append(index)
        else:
            child_indices[parent].append(index)

        scope: Counter = Counter()
        for child in reversed(raw.get("children") or []):
            stack.append((child, index, scope))

    # Pass 2: children always follow their parent in pre-order, so building
    # in reverse guarantees they exist before the parent needs them.
    built: List[Optional[VisualNode]] = [None] * len(order)
    for index in range(len(order) - 1, -1, -1):
        node_id, raw = order[index]
        kind = raw["kind"]
        if kind == KIND_MOMENT:
            start = end = raw["t_ms"]
        else:
            start, end = raw["start_ms"], raw["end_ms"]
        built[index] = VisualNode(
            id=node_id,
            kind=kind,
            label=raw.get("label") or None,
            is_moment=kind == KIND_MOMENT,
            start_ms=start,
            end_ms=end,
            tags=_dedupe(raw.get("tags")),
            children=tuple(built[i] for i in child_indices[index]),
        )

    return tuple(built[i] for i in roots)


def normalize_visual(visual: Optional[Mapping[str, Any]]) -> VisualDocument:
    """Validate and normalize a visual annotation document.

    Args:
        visual: A hierarchy v1 document, a multi-pass envelope, or None.

    Returns:
        VisualDocument with canonical node forest and summary.

    Raises:
        SchemaViolation: If the document does not conform to hierarchy v1.
    """
    document = extract_transcription(visual)
    if document is None:
        return VisualDocument(version=None, summary=None, timeline=())

    validate_document(document)
    timeline = normalize_forest(document.get("timeline") or [])
    logger.debug("Normalized %d top-level visual nodes", len(timeline))
    return VisualDocument(
        version=document.get("version"),
        summary=document.get("summary") or None,
        timeline=timeline,
    )
