"""vidscriber.v1 compact JSON formatter.

WHY: The compact document is the artifact downstream editing tools
consume. Writing it through the formatter registry lets the CLI and API
treat it like any other output, and validating it against the bundled
schema guarantees no malformed document ever leaves the process.

HOW: Delegates rendering to core.compactor.compact(), validates the
result with jsonschema against schemas/vidscriber_v1.json, and
serializes with a fixed indent and key order. The video timeline is
validated node by node with an explicit stack, like the input tree.

RULES:
- Output is byte-identical for identical input
- Validate before returning; raise on failure
- Output suffix: "-vidscriber.json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from vidscriber.core.compactor import compact
from vidscriber.core.ir import Compilation
from vidscriber.formatters.base import BaseFormatter, FormatterOutput

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "vidscriber_v1.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def validate_output(document: Dict[str, Any]) -> None:
    """Validate a compiled document against the vidscriber.v1 schema.

    Raises:
        jsonschema.ValidationError: On the first problem found.
    """
    schema = _get_schema()
    jsonschema.validate(instance=document, schema=schema)

    # $defs/node refers to the shared time patterns, so keep the root
    # schema as the resolution context and point at the node definition.
    node_validator = jsonschema.Draft202012Validator(
        {"$ref": "#/$defs/node", "$defs": schema["$defs"]}
    )
    stack = list(reversed(document["video_timeline"]))
    while stack:
        node = stack.pop()
        node_validator.validate(node)
        stack.extend(reversed(node.get("children", [])))


def dumps(document: Dict[str, Any]) -> str:
    """Serialize a compiled document the same way every time."""
    return json.dumps(document, indent=2, ensure_ascii=False)


class CompactJSONFormatter(BaseFormatter):
    """Formatter that produces the vidscriber.v1 JSON document."""

    @property
    def name(self) -> str:
        return "Compact JSON"

    @property
    def suffix(self) -> str:
        return "-vidscriber.json"

    def format(self, compilation: Compilation) -> List[FormatterOutput]:
        """Render, validate and serialize the compiled document.

        Raises:
            jsonschema.ValidationError: If the rendered document does not
                match the output schema.
        """
        document = compact(compilation)
        validate_output(document)
        return [
            FormatterOutput(
                suffix=self.suffix,
                content=dumps(document),
                media_type="application/json",
            )
        ]
