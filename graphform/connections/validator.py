"""
Connection validation against the rule table.

A missing rule is not an error: it only means the edge is a generic/manual
connection that the engine wires as ``connects_to``.
"""
from typing import Dict, List, Optional

from graphform.connections.rules import ConnectionRule, rules_for
from graphform.models.graph import DEFAULT_RELATIONSHIP, RelationshipEdge, ResourceNode

RuleTable = Dict[str, List[ConnectionRule]]


def validate_connection(
    source_kind: str, target_kind: str, provider: str, rules: Optional[RuleTable] = None
) -> Optional[ConnectionRule]:
    for rule in rules_for(provider, rules):
        if rule.source_kind == source_kind and rule.target_kind == target_kind:
            return rule
        if rule.bidirectional and rule.source_kind == target_kind and rule.target_kind == source_kind:
            return rule
    return None


def get_valid_targets(source_kind: str, provider: str, rules: Optional[RuleTable] = None) -> List[str]:
    table = rules_for(provider, rules)
    targets = [r.target_kind for r in table if r.source_kind == source_kind]
    targets += [r.source_kind for r in table if r.bidirectional and r.target_kind == source_kind]
    return list(dict.fromkeys(targets))


def classify_edge(
    edge: RelationshipEdge,
    nodes_by_id: Dict[str, ResourceNode],
    provider: str,
    rules: Optional[RuleTable] = None,
) -> Optional[ConnectionRule]:
    source = nodes_by_id.get(edge.source_id)
    target = nodes_by_id.get(edge.target_id)
    if source is None or target is None:
        return None
    return validate_connection(source.service_kind, target.service_kind, provider, rules)


def resolve_relationship(
    edge: RelationshipEdge,
    nodes_by_id: Dict[str, ResourceNode],
    provider: str,
    explicit: Optional[str] = None,
    rules: Optional[RuleTable] = None,
) -> str:
    """An explicit relationship wins, then the matching rule's, then ``connects_to``."""
    if explicit:
        return explicit
    rule = classify_edge(edge, nodes_by_id, provider, rules)
    return rule.relationship if rule else DEFAULT_RELATIONSHIP


def _has_edge_to_kind(
    node: ResourceNode,
    target_kind: str,
    edges: List[RelationshipEdge],
    nodes_by_id: Dict[str, ResourceNode],
    bidirectional: bool,
) -> bool:
    for e in edges:
        if e.source_id == node.id:
            other = nodes_by_id.get(e.target_id)
        elif (bidirectional or e.bidirectional) and e.target_id == node.id:
            other = nodes_by_id.get(e.source_id)
        else:
            continue
        if other is not None and other.service_kind == target_kind:
            return True
    return False


def get_connection_suggestions(
    nodes: List[ResourceNode],
    edges: List[RelationshipEdge],
    provider: str,
    rules: Optional[RuleTable] = None,
) -> List[str]:
    suggestions: List[str] = []
    table = rules_for(provider, rules)
    nodes_by_id = {n.id: n for n in nodes}
    kinds_present = {n.service_kind for n in nodes}

    for node in nodes:
        for rule in table:
            if not rule.required or rule.source_kind != node.service_kind:
                continue
            if _has_edge_to_kind(node, rule.target_kind, edges, nodes_by_id, rule.bidirectional):
                continue
            if rule.target_kind in kinds_present:
                suggestions.append(
                    f"{node.label} should connect to {rule.target_kind} ({rule.description})"
                )
            else:
                suggestions.append(
                    f"{node.label} requires a {rule.target_kind} ({rule.description}); add one to the diagram"
                )
    return suggestions
