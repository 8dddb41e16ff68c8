import json
import os
from typing import Any

import yaml


def detect_data(data: Any) -> str:
    """
    Return 'graph', 'canvas', or 'unknown' for an already-loaded document.

    A canvas export (React Flow) keeps service details under each node's
    ``data`` mapping; the native graph format has them at the top level.
    """
    if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
        return "unknown"
    nodes = [n for n in data["nodes"] if isinstance(n, dict)]
    if not nodes:
        return "graph" if "provider" in data else "unknown"
    if all(isinstance(n.get("data"), dict) for n in nodes):
        return "canvas"
    if any(k in nodes[0] for k in ("service", "service_kind", "kind")):
        return "graph"
    return "unknown"


def detect_format(filepath: str) -> str:
    """
    Return 'graph', 'canvas', or 'unknown'.
    """
    _, ext = os.path.splitext(filepath.lower())

    if ext == ".json":
        try:
            with open(filepath) as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            return "unknown"
        return detect_data(data)

    if ext in (".yaml", ".yml"):
        try:
            with open(filepath) as fh:
                data = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError):
            return "unknown"
        return detect_data(data)

    return "unknown"
