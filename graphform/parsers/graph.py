"""
Load resource graphs from YAML/JSON documents.

Two layouts are accepted. The native one::

    provider: aws
    nodes:
      - id: fn
        service: lambda
        name: Fn
        config: {runtime: python3.12}
    edges:
      - source: fn
        target: table
        relationship: accesses

and the canvas export, where each node keeps ``id``/``name``/
``terraformType``/``config`` under ``data`` and each edge keeps its
``relationship`` under ``data``.
"""
import json
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console

from graphform.connections.validator import RuleTable, resolve_relationship
from graphform.detect import detect_data
from graphform.models.graph import Graph, RelationshipEdge, ResourceNode

console = Console(stderr=True)


def _infer_provider(declaration_type: str) -> str:
    if declaration_type.startswith("aws_"):
        return "aws"
    if declaration_type.startswith("azurerm_"):
        return "azure"
    if declaration_type.startswith("google_"):
        return "gcp"
    return ""


def _first(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if raw.get(k) not in (None, ""):
            return raw[k]
    return default


def _native_node(raw: Dict[str, Any], index: int, provider: str) -> ResourceNode:
    declaration_type = str(_first(raw, "type", "declaration_type", default=""))
    config = raw.get("config")
    return ResourceNode(
        id=str(_first(raw, "id", default=f"node-{index + 1}")),
        service_kind=str(_first(raw, "service", "service_kind", "kind", default="")),
        provider=str(_first(raw, "provider", default=provider or _infer_provider(declaration_type))),
        display_name=str(_first(raw, "name", "display_name", default="")),
        declaration_type=declaration_type,
        config=dict(config) if isinstance(config, dict) else {},
    )


def _canvas_node(raw: Dict[str, Any], index: int, provider: str) -> ResourceNode:
    data = raw.get("data") or {}
    declaration_type = str(_first(data, "terraformType", default=""))
    config = data.get("config")
    return ResourceNode(
        id=str(_first(raw, "id", default=f"node-{index + 1}")),
        service_kind=str(_first(data, "id", "service", default="")),
        provider=str(_first(data, "provider", default=provider or _infer_provider(declaration_type))),
        display_name=str(_first(data, "name", "label", default="")),
        declaration_type=declaration_type,
        config=dict(config) if isinstance(config, dict) else {},
    )


def _edge_fields(raw: Dict[str, Any], layout: str) -> Dict[str, Any]:
    if layout == "canvas":
        data = raw.get("data") or {}
        return {
            "relationship": _first(data, "relationship"),
            "description": _first(data, "description", default=""),
            "bidirectional": bool(data.get("bidirectional", False)),
        }
    return {
        "relationship": _first(raw, "relationship", "relationship_kind"),
        "description": _first(raw, "description", default=""),
        "bidirectional": bool(raw.get("bidirectional", False)),
    }


def parse_data(
    data: Any,
    provider: Optional[str] = None,
    source_file: str = "",
    rules: Optional[RuleTable] = None,
) -> Graph:
    """
    Build a Graph from a loaded document. ``provider`` overrides the
    document's own provider. Edges without a relationship get the one from
    the matching connection rule, else ``connects_to``.
    """
    layout = detect_data(data)
    if layout == "unknown":
        console.print(f"[yellow]Warning:[/yellow] {source_file or 'document'} is not a resource graph")
        return Graph(provider=provider or "", source_file=source_file)

    doc_provider = str(provider or data.get("provider") or "")
    build_node = _canvas_node if layout == "canvas" else _native_node
    nodes: List[ResourceNode] = [
        build_node(raw, i, doc_provider)
        for i, raw in enumerate(data.get("nodes") or [])
        if isinstance(raw, dict)
    ]
    if not doc_provider:
        doc_provider = next((n.provider for n in nodes if n.provider), "")

    nodes_by_id = {n.id: n for n in nodes}
    edges: List[RelationshipEdge] = []
    for i, raw in enumerate(data.get("edges") or []):
        if not isinstance(raw, dict):
            continue
        extra = _edge_fields(raw, layout)
        edge = RelationshipEdge(
            id=str(_first(raw, "id", default=f"edge-{i + 1}")),
            source_id=str(_first(raw, "source", "source_id", "from", default="")),
            target_id=str(_first(raw, "target", "target_id", "to", default="")),
            description=str(extra["description"]),
            bidirectional=extra["bidirectional"],
        )
        relationship = resolve_relationship(edge, nodes_by_id, doc_provider, extra["relationship"], rules)
        edges.append(RelationshipEdge(
            id=edge.id,
            source_id=edge.source_id,
            target_id=edge.target_id,
            relationship_kind=str(relationship),
            description=edge.description,
            bidirectional=edge.bidirectional,
        ))

    return Graph(provider=doc_provider, nodes=nodes, edges=edges, source_file=source_file)


def parse_file(filepath: str, provider: Optional[str] = None, rules: Optional[RuleTable] = None) -> Graph:
    try:
        with open(filepath) as fh:
            if filepath.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        console.print(f"[yellow]Warning:[/yellow] failed to parse {filepath}: {exc}")
        return Graph(provider=provider or "", source_file=filepath)

    return parse_data(data, provider=provider, source_file=filepath, rules=rules)
