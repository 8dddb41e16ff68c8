from typing import Any, Dict, Iterable, List, Optional

from rich.console import Console

from graphform.models.declaration import Declaration, Diagnostic, DiagnosticKind
from graphform.models.graph import RelationshipEdge, ResourceNode
from graphform.models.values import literal
from graphform.synthesis.naming import NameRegistry, SuffixSequence, hyphenate

console = Console(stderr=True)

ENVIRONMENT_TAG = "terraform-generated"


class SynthesisContext:
    """Per-call state shared by mappers, expanders and wiring. Never reused."""

    def __init__(self, provider: str, suffixes: SuffixSequence, reserved: Iterable[str] = ()):
        self.provider = provider
        self.suffixes = suffixes
        self.registry = NameRegistry(reserved)
        self.nodes: List[ResourceNode] = []
        self.nodes_by_id: Dict[str, ResourceNode] = {}
        self.edges: List[RelationshipEdge] = []
        self.primaries: Dict[str, Declaration] = {}
        self.roles: Dict[str, Declaration] = {}
        self.diagnostics: List[Diagnostic] = []

    # ------------------------------------------------------------ diagnostics

    def warn(self, kind: DiagnosticKind, subject: str, message: str) -> None:
        self.diagnostics.append(Diagnostic(kind, subject, message))
        console.print(f"[yellow]Warning:[/yellow] {message}")

    # ------------------------------------------------------------ graph access

    def index(self, nodes: List[ResourceNode], edges: List[RelationshipEdge]) -> None:
        self.nodes = nodes
        self.nodes_by_id = {n.id: n for n in nodes}
        self.edges = edges

    def outgoing(self, node_id: str) -> List[RelationshipEdge]:
        return [e for e in self.edges if e.source_id == node_id]

    def incoming(self, node_id: str) -> List[RelationshipEdge]:
        return [e for e in self.edges if e.target_id == node_id]

    def name_of(self, node: ResourceNode) -> str:
        return self.primaries[node.id].name

    # ------------------------------------------------------------ naming

    def claim(self, base: str) -> str:
        name = self.registry.claim(base)
        if name != base:
            self.warn(
                DiagnosticKind.NAME_COLLISION, base,
                f"declaration name '{base}' is already taken; using '{name}'",
            )
        return name

    def default_name(self, node: ResourceNode, label: str) -> str:
        """Generated resource name such as ``orders-table-001``."""
        return f"{hyphenate(self.name_of(node))}-{label}-{self.suffixes.next()}"

    def auxiliary(
        self,
        node: ResourceNode,
        declaration_type: str,
        base_name: str,
        fields: Dict[str, Any],
        depends_on: Optional[List[str]] = None,
        mode: str = "resource",
    ) -> Declaration:
        return Declaration(
            declaration_type=declaration_type,
            name=self.claim(base_name),
            fields=fields,
            depends_on=list(depends_on or []),
            mode=mode,
            node_id=node.id,
            role="auxiliary",
        )


def tags(name: str, **extra: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {"Name": literal(name), "Environment": ENVIRONMENT_TAG}
    out.update(extra)
    return out


def or_default(value: Any, default: Any) -> Any:
    """``default`` for missing or empty values; explicit 0 and False are kept."""
    return default if value is None or value == "" else value
