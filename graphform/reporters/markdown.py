"""
Markdown + Mermaid synthesis report: what was generated from the graph and
what the engine had to skip or flag along the way.
"""
import re
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from jinja2 import Environment

from graphform import __version__
from graphform.models.declaration import Declaration, SynthesisOutput
from graphform.models.graph import Graph, ResourceNode

_CATEGORY_MAP = {
    # Service kind → subgraph label
    "ec2": "Compute",
    "lambda": "Compute",
    "fargate": "Compute",
    "compute": "Compute",
    "functions": "Compute",
    "vm": "Compute",
    "s3": "Data",
    "rds": "Data",
    "dynamodb": "Data",
    "storage": "Data",
    "sql": "Data",
    "blob": "Data",
    "vpc": "Networking",
    "alb": "Networking",
    "api_gateway": "Networking",
    "lb": "Networking",
    "vnet": "Networking",
    "sqs": "Messaging",
    "sns": "Messaging",
    "step_functions": "Messaging",
    "cognito": "Security",
    "secrets_manager": "Security",
    "cloudwatch": "Security",
}

_SG_ORDER = ["Networking", "Compute", "Messaging", "Data", "Security", "Other"]


def _sanitize_node_id(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_]", "_", name)


def _node_subgraph(node: ResourceNode) -> str:
    return _CATEGORY_MAP.get(node.service_kind, "Other")


def _node_shape(node: ResourceNode) -> str:
    """Return a Mermaid node definition string (without ID)."""
    label = node.label.replace('"', "'")
    sg = _node_subgraph(node)
    if sg == "Data":
        return f'[("{label}")]'
    if sg == "Networking":
        return f'{{"{label}"}}'
    if sg == "Messaging":
        return f'[/"{label}"/]'
    return f'["{label}"]'


def _build_mermaid(graph: Graph, output: SynthesisOutput) -> str:
    generated = {d.node_id for d in output.declarations if d.node_id}
    subgraphs: Dict[str, List[ResourceNode]] = defaultdict(list)
    for n in graph.nodes:
        subgraphs[_node_subgraph(n)].append(n)

    lines = ["flowchart LR"]
    for sg_name in _SG_ORDER:
        members = subgraphs.get(sg_name, [])
        if not members:
            continue
        lines.append(f"    subgraph {sg_name}")
        for n in members:
            lines.append(f"        {_sanitize_node_id(n.id)}{_node_shape(n)}")
        lines.append("    end")

    node_ids = {n.id for n in graph.nodes}
    added_edges = set()
    for e in graph.edges:
        if e.source_id not in node_ids or e.target_id not in node_ids:
            continue
        src_id = _sanitize_node_id(e.source_id)
        dst_id = _sanitize_node_id(e.target_id)
        if (src_id, dst_id) in added_edges or src_id == dst_id:
            continue
        added_edges.add((src_id, dst_id))
        arrow = "<-->" if e.bidirectional else "-->"
        lines.append(f"    {src_id} {arrow}|{e.relationship_kind}| {dst_id}")

    # Nodes that produced nothing are highlighted
    for n in graph.nodes:
        if n.id not in generated:
            lines.append(f"    style {_sanitize_node_id(n.id)} fill:#ff8800,color:#fff")

    return "\n".join(lines)


def _count_by_type(declarations: List[Declaration]) -> Dict[str, int]:
    counts: Dict[str, int] = defaultdict(int)
    for d in declarations:
        counts[d.declaration_type] += 1
    return dict(sorted(counts.items()))


_TEMPLATE = """\
# Terraform Synthesis Report

**Generated:** {{ generated }}
**Source:** {{ source }}
**Provider:** {{ provider }}
**Tool:** graphform v{{ version }}

---

## Summary

**{{ node_count }} nodes** and **{{ edge_count }} edges** produced **{{ declaration_count }} declarations**, \
{{ variable_count }} variables and {{ output_count }} outputs.
{% for t, n in type_counts.items() %}
- `{{ t }}`: {{ n }}{% endfor %}

{% if diagnostics %}
{{ diagnostics|length }} diagnostic(s) were recorded; see below.
{% else %}
No diagnostics were recorded.
{% endif %}

---

## Declarations

| # | Address | Node | Role | Depends on |
|---|---------|------|------|------------|
{% for d in declarations %}| {{ loop.index }} | `{{ d.address }}` | {{ d.node_id or "" }} | {{ d.role }} | {{ d.depends_on|join(", ") }} |
{% endfor %}

## Variables

| Name | Type | Default | Description |
|------|------|---------|-------------|
{% for name, v in variables.items() %}| `{{ name }}` | {{ v.type }} | {{ "(sensitive)" if v.sensitive else (v.default if v.default is not none else "") }} | {{ v.description }} |
{% endfor %}

## Outputs

| Name | Value | Description |
|------|-------|-------------|
{% for name, o in outputs.items() %}| `{{ name }}` | `{{ o.value }}` | {{ o.description }} |
{% endfor %}
{% if diagnostics %}

## Diagnostics

| Kind | Subject | Message |
|------|---------|---------|
{% for d in diagnostics %}| {{ d.kind.value }} | `{{ d.subject }}` | {{ d.message }} |
{% endfor %}
{% endif %}
{% if suggestions %}

## Connection Suggestions

{% for s in suggestions %}
- {{ s }}
{% endfor %}
{% endif %}
{% if syntax_errors is not none %}

## Syntax Check

{% if syntax_errors %}
{% for f, err in syntax_errors.items() %}
- `{{ f }}`: {{ err }}
{% endfor %}
{% else %}
All generated files parse as HCL.
{% endif %}
{% endif %}

## Architecture Diagram

```mermaid
{{ mermaid }}
```
"""


def build_report(
    graph: Graph,
    output: SynthesisOutput,
    suggestions: Optional[List[str]] = None,
    syntax_errors: Optional[Dict[str, str]] = None,
    generated: Optional[datetime] = None,
) -> str:
    """
    ``syntax_errors`` is None when no syntax check was run; an empty dict
    means every file parsed.
    """
    env = Environment(autoescape=False, trim_blocks=True)
    template = env.from_string(_TEMPLATE)
    when = generated or datetime.now(timezone.utc)

    return template.render(
        generated=when.strftime("%Y-%m-%d %H:%M UTC"),
        source=graph.source_file or "-",
        provider=output.provider or "-",
        version=__version__,
        node_count=len(graph.nodes),
        edge_count=len(graph.edges),
        declaration_count=len(output.declarations),
        variable_count=len(output.variables),
        output_count=len(output.outputs),
        type_counts=_count_by_type(output.declarations),
        declarations=output.declarations,
        variables=output.variables,
        outputs=output.outputs,
        diagnostics=output.diagnostics,
        suggestions=suggestions or [],
        syntax_errors=syntax_errors,
        mermaid=_build_mermaid(graph, output),
    )
