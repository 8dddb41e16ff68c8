from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from graphform.models.values import JsonEncode, Literal, Reference, Template


class DiagnosticKind(str, Enum):
    MALFORMED_NODE       = "MalformedNode"
    UNKNOWN_SERVICE_KIND = "UnknownServiceKind"
    UNKNOWN_PROVIDER     = "UnknownProvider"
    DANGLING_EDGE        = "DanglingEdge"
    NAME_COLLISION       = "NameCollision"


@dataclass
class Diagnostic:
    kind: DiagnosticKind
    subject: str          # node id, edge id or declaration name
    message: str

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "subject": self.subject,
            "message": self.message,
        }


def plain(value: Any) -> Any:
    """Convert typed field values into JSON-friendly Python objects."""
    if isinstance(value, Reference):
        return str(value)
    if isinstance(value, Literal):
        return value.value
    if isinstance(value, Template):
        return value.text
    if isinstance(value, JsonEncode):
        return plain(value.document)
    if isinstance(value, dict):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(v) for v in value]
    return value


@dataclass
class Declaration:
    declaration_type: str        # e.g. "aws_s3_bucket"
    name: str                    # sanitized, unique within one output
    fields: Dict[str, Any] = field(default_factory=dict)
    depends_on: List[str] = field(default_factory=list)
    mode: str = "resource"       # "resource" or "data"
    node_id: Optional[str] = None
    role: str = "primary"        # "primary" or "auxiliary"

    @property
    def address(self) -> str:
        if self.mode == "data":
            return f"data.{self.declaration_type}.{self.name}"
        return f"{self.declaration_type}.{self.name}"

    def ref(self, attribute: Optional[str] = None) -> Reference:
        return Reference(self.address, attribute)

    def add_dependency(self, address: str) -> None:
        if address != self.address and address not in self.depends_on:
            self.depends_on.append(address)

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "type": self.declaration_type,
            "name": self.name,
            "address": self.address,
            "node_id": self.node_id,
            "role": self.role,
            "fields": plain(self.fields),
            "depends_on": list(self.depends_on),
        }


@dataclass
class Variable:
    description: str
    type: str = "string"
    default: Any = None
    sensitive: bool = False

    def to_dict(self) -> dict:
        data = {"description": self.description, "type": self.type}
        if self.default is not None:
            data["default"] = self.default
        if self.sensitive:
            data["sensitive"] = True
        return data


@dataclass
class Output:
    description: str
    value: Reference

    def to_dict(self) -> dict:
        return {"description": self.description, "value": str(self.value)}


@dataclass
class SynthesisOutput:
    provider: str
    declarations: List[Declaration] = field(default_factory=list)
    variables: Dict[str, Variable] = field(default_factory=dict)
    outputs: Dict[str, Output] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def find(self, address: str) -> Optional[Declaration]:
        for d in self.declarations:
            if d.address == address:
                return d
        return None

    def primary_for(self, node_id: str) -> Optional[Declaration]:
        for d in self.declarations:
            if d.node_id == node_id and d.role == "primary":
                return d
        return None

    def for_node(self, node_id: str) -> List[Declaration]:
        return [d for d in self.declarations if d.node_id == node_id]

    @property
    def needs_archive(self) -> bool:
        return any(d.mode == "data" and d.declaration_type == "archive_file" for d in self.declarations)

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "declarations": [d.to_dict() for d in self.declarations],
            "variables": {k: v.to_dict() for k, v in self.variables.items()},
            "outputs": {k: o.to_dict() for k, o in self.outputs.items()},
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
