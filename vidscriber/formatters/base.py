"""Formatter interface shared by every output format.

WHY: The compact document and the review text are both views of one
Compilation. The CLI writes them to disk and the HTTP API streams them
back, and neither surface should care which view it is handling.

HOW: A formatter declares a display name and a file suffix, and turns a
Compilation into FormatterOutput records. Each record knows the suffix
it should be saved under and the MIME type to serve it with.

RULES:
- ``format()`` returns a list; a view may span more than one file
- ``suffix`` begins with "-" and includes the extension
- Naming the file (stem + suffix) is left to the caller
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from vidscriber.core.ir import Compilation


@dataclass
class FormatterOutput:
    """A rendered file, not yet written anywhere.

    Attributes:
        suffix: Appended to the speech file's stem, so
                ``"-timeline.txt"`` saves as ``"interview-timeline.txt"``.
        content: Rendered text.
        media_type: MIME type used by the HTTP API response.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Base class for output views of a Compilation.

    New formats subclass this, then get a key in
    ``vidscriber.formatters.FORMATTERS`` to become visible to the CLI
    ``--formats`` flag and the API ``format`` field.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name listed by GET /formats."""

    @property
    @abstractmethod
    def suffix(self) -> str:
        """Suffix of the file this formatter writes."""

    @abstractmethod
    def format(self, compilation: Compilation) -> list[FormatterOutput]:
        """Render ``compilation`` into its output file(s)."""
