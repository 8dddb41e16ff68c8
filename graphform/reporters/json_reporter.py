"""
JSON synthesis report generator.
"""
import json
from datetime import datetime, timezone
from typing import Dict, List, Optional

from graphform import __version__
from graphform.models.declaration import SynthesisOutput
from graphform.models.graph import Graph


def build_report(
    graph: Graph,
    output: SynthesisOutput,
    suggestions: Optional[List[str]] = None,
    syntax_errors: Optional[Dict[str, str]] = None,
    generated: Optional[datetime] = None,
) -> str:
    when = generated or datetime.now(timezone.utc)
    report = {
        "meta": {
            "generated": when.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "source": graph.source_file,
            "tool": "graphform",
            "version": __version__,
        },
        "summary": {
            "nodes": len(graph.nodes),
            "edges": len(graph.edges),
            "declarations": len(output.declarations),
            "variables": len(output.variables),
            "outputs": len(output.outputs),
            "diagnostics": len(output.diagnostics),
        },
        **output.to_dict(),
        "suggestions": list(suggestions or []),
    }
    if syntax_errors is not None:
        report["syntax_errors"] = syntax_errors
    return json.dumps(report, indent=2)
