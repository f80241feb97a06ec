"""Output formatter registry.

WHY: The CLI and the HTTP API need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["compact_json"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API models)
- Values are BaseFormatter subclasses (not instances)
- compact_json is the default and must stay first
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vidscriber.formatters.compact_json import CompactJSONFormatter
from vidscriber.formatters.plain_text import PlainTextFormatter

if TYPE_CHECKING:
    from vidscriber.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "compact_json": CompactJSONFormatter,
    "plain_text": PlainTextFormatter,
}

DEFAULT_FORMAT = "compact_json"
