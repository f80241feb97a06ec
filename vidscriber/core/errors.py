"""Domain exceptions raised by the compiler core.

WHY: The CLI and the HTTP API must tell a malformed visual document
apart from a programming error, and report every problem at once rather
than the first one jsonschema happens to find.

RULES:
- VidscriberError is a ValueError, so callers catching ValueError for
  bad input (as the CLI does for configuration errors) also catch these
- SchemaViolation always carries at least one human-readable error
"""

from __future__ import annotations

from typing import List, Sequence


class VidscriberError(ValueError):
    """Base class for all compiler errors."""


class SchemaViolation(VidscriberError):
    """The visual annotation document failed structural validation.

    Attributes:
        errors: One message per problem, each prefixed with the JSON path
                of the offending value (e.g. ``"timeline/0/children/2: ..."``).
    """

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        if len(self.errors) == 1:
            message = "Visual document is invalid: {}".format(self.errors[0])
        else:
            message = "Visual document is invalid ({} errors): {}".format(
                len(self.errors), "; ".join(self.errors)
            )
        super().__init__(message)
