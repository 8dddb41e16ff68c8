"""
Typed field values.

Declarations built by the synthesizer carry these instead of bare strings so
the emitter never has to guess whether "aws_x.y" is a reference or text.
Plain ``str`` values (usually user config passed through) still go through
``is_reference_string``.
"""
from dataclasses import dataclass
from typing import Any, Optional

REFERENCE_PREFIXES = ("var.", "aws_", "google_", "azurerm_")


def is_reference_string(value: str) -> bool:
    return value.startswith(REFERENCE_PREFIXES)


@dataclass(frozen=True)
class Reference:
    """An unquoted pointer at another block, e.g. ``aws_s3_bucket.logs.arn``."""
    address: str
    attribute: Optional[str] = None

    def __str__(self) -> str:
        if self.attribute:
            return f"{self.address}.{self.attribute}"
        return self.address


@dataclass(frozen=True)
class Literal:
    """A string that is always quoted, even if it looks like a reference."""
    value: str


@dataclass(frozen=True)
class Template:
    """A quoted string whose ``${...}`` interpolations are kept as-is."""
    text: str


@dataclass(frozen=True, eq=False)
class JsonEncode:
    """A document rendered as ``jsonencode({...})``."""
    document: Any


def var(name: str) -> Reference:
    return Reference(f"var.{name}")


def literal(value: Any) -> Any:
    """Wrap a user-supplied name in ``Literal`` when it would read as a reference."""
    if isinstance(value, str) and is_reference_string(value):
        return Literal(value)
    return value
