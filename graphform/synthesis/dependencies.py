from typing import Iterable, List, Tuple

from graphform.models.declaration import Declaration
from graphform.models.graph import ResourceNode
from graphform.synthesis.context import SynthesisContext


def edge_dependencies(node: ResourceNode, ctx: SynthesisContext) -> List[str]:
    """
    Primary addresses of every node with an edge into ``node``, in edge order.
    Self-loops are ignored.
    """
    deps: List[str] = []
    for edge in ctx.incoming(node.id):
        if edge.source_id == node.id:
            continue
        source = ctx.primaries.get(edge.source_id)
        if source is not None and source.address not in deps:
            deps.append(source.address)
    return deps


def merge(*groups: Iterable[str]) -> List[str]:
    out: List[str] = []
    for group in groups:
        for address in group:
            if address not in out:
                out.append(address)
    return out


def missing_dependencies(declarations: List[Declaration]) -> List[Tuple[str, str]]:
    """(declaration, dependency) pairs whose dependency is not declared."""
    known = {d.address for d in declarations}
    return [
        (d.address, dep)
        for d in declarations
        for dep in d.depends_on
        if dep not in known
    ]
