"""
Graph → declarations. Runs the whole pipeline from scratch on every call:
field mapping, auxiliary expansion, wiring, dependencies, variables, outputs.
"""
from typing import List, Optional

from graphform.models.declaration import Declaration, DiagnosticKind, SynthesisOutput
from graphform.models.graph import RelationshipEdge, ResourceNode
from graphform.models.settings import parse_settings
from graphform.synthesis import aws, azure, dependencies, gcp, variables, wiring
from graphform.synthesis.catalog import declaration_type_for
from graphform.synthesis.context import SynthesisContext
from graphform.synthesis.naming import SuffixSequence, sanitize_name

PROVIDERS = {
    "aws": aws,
    "gcp": gcp,
    "azure": azure,
}

_RESERVED_NAMES = {
    "azure": [azure.RESOURCE_GROUP_NAME],
}


def _usable_nodes(nodes: List[ResourceNode], ctx: SynthesisContext) -> List[ResourceNode]:
    usable = []
    seen_ids = set()
    unknown_providers = set()
    for node in nodes:
        if not node.service_kind or not node.provider:
            ctx.warn(DiagnosticKind.MALFORMED_NODE, node.id,
                     f"skipping node '{node.id}': missing service kind or provider")
            continue
        if node.kind is None:
            ctx.warn(DiagnosticKind.MALFORMED_NODE, node.id,
                     f"skipping node '{node.id}': unknown service kind '{node.service_kind}'")
            continue
        if node.id in seen_ids:
            ctx.warn(DiagnosticKind.MALFORMED_NODE, node.id,
                     f"skipping node '{node.id}': duplicate node id")
            continue
        if not (node.declaration_type or declaration_type_for(node.provider, node.service_kind)):
            ctx.warn(DiagnosticKind.MALFORMED_NODE, node.id,
                     f"skipping node '{node.id}': no declaration type for {node.provider}/{node.service_kind}")
            continue
        if node.provider not in PROVIDERS and node.provider not in unknown_providers:
            unknown_providers.add(node.provider)
            ctx.warn(DiagnosticKind.UNKNOWN_PROVIDER, node.provider,
                     f"unknown provider '{node.provider}'; passing node config through unchanged")
        seen_ids.add(node.id)
        usable.append(node)
    return usable


def _usable_edges(edges: List[RelationshipEdge], node_ids: set, ctx: SynthesisContext) -> List[RelationshipEdge]:
    usable = []
    for edge in edges:
        if edge.source_id not in node_ids or edge.target_id not in node_ids:
            ctx.warn(DiagnosticKind.DANGLING_EDGE, edge.id,
                     f"ignoring edge '{edge.id}': {edge.source_id} -> {edge.target_id} references a missing node")
            continue
        usable.append(edge)
    return usable


def _map_fields(node: ResourceNode, ctx: SynthesisContext):
    module = PROVIDERS.get(node.provider)
    settings = parse_settings(node.provider, node.service_kind, node.config)
    mapper = module.MAPPERS.get(node.service_kind) if module else None
    if mapper is None or settings is None:
        if module is not None:
            ctx.warn(DiagnosticKind.UNKNOWN_SERVICE_KIND, node.id,
                     f"no field mapping for {node.provider}/{node.service_kind}; "
                     f"passing config of '{node.label}' through unchanged")
        return dict(node.config), None
    for key in settings.dropped:
        ctx.warn(DiagnosticKind.MALFORMED_NODE, node.id,
                 f"ignoring unusable config value '{key}' on node '{node.id}'; using the default")
    return mapper(settings, node, ctx), settings


def synthesize(
    nodes: List[ResourceNode],
    edges: List[RelationshipEdge],
    provider: str,
    suffixes: Optional[SuffixSequence] = None,
) -> SynthesisOutput:
    """
    Build every declaration, variable and output for one graph snapshot.

    Problems are recovered locally and recorded in ``diagnostics``; an empty
    ``declarations`` list is the only failure signal.
    """
    ctx = SynthesisContext(provider, suffixes or SuffixSequence(), _RESERVED_NAMES.get(provider, ()))
    if provider not in PROVIDERS:
        ctx.warn(DiagnosticKind.UNKNOWN_PROVIDER, provider or "",
                 f"unknown provider '{provider}'; no provider preamble will be generated")

    usable = _usable_nodes(nodes, ctx)
    ctx.index(usable, _usable_edges(edges, {n.id for n in usable}, ctx))

    # Primary names are claimed up front so edges can reference any node
    for node in usable:
        ctx.primaries[node.id] = Declaration(
            declaration_type=node.declaration_type or declaration_type_for(node.provider, node.service_kind),
            name=ctx.claim(sanitize_name(node.display_name) or sanitize_name(node.service_kind)),
            node_id=node.id,
        )

    declarations: List[Declaration] = []
    for node in usable:
        primary = ctx.primaries[node.id]
        primary.fields, settings = _map_fields(node, ctx)

        module = PROVIDERS.get(node.provider)
        auxiliaries = module.expand(node, primary, settings, ctx) if module else []
        auxiliaries += wiring.wire(node, primary, ctx)

        primary.depends_on = dependencies.merge(
            dependencies.edge_dependencies(node, ctx),
            primary.depends_on,
        )
        declarations.append(primary)
        declarations.extend(auxiliaries)

    return SynthesisOutput(
        provider=provider,
        declarations=declarations,
        variables=variables.synthesize_variables(usable, provider),
        outputs=variables.synthesize_outputs(usable, ctx),
        diagnostics=ctx.diagnostics,
    )
