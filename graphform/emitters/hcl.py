"""
Terraform (HCL) text emitter for SynthesisOutput.
"""
import re
from typing import Any, Dict, List, Optional

from graphform.emitters.preamble import preamble_for
from graphform.models.declaration import Declaration, Output, SynthesisOutput, Variable
from graphform.models.values import JsonEncode, Literal, Reference, Template, is_reference_string

INDENT = "  "

# Maps under these keys are arguments (`tags = { ... }`); every other map is a block
ARGUMENT_MAP_KEYS = {"tags", "labels", "variables"}

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


def escape_string(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("${", "$${")
        .replace("%{", "%%{")
    )


def quote(value: str) -> str:
    return f'"{escape_string(value)}"'


def format_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, Reference):
        return str(value)
    if isinstance(value, Template):
        return '"' + value.text.replace('"', '\\"') + '"'
    if isinstance(value, Literal):
        return quote(value.value)
    if isinstance(value, JsonEncode):
        return f"jsonencode({format_expression(value.document, 0)})"
    if isinstance(value, str):
        if is_reference_string(value):
            return value
        return quote(value)
    return quote(str(value))


def _object_key(key: str) -> str:
    return key if _IDENT_RE.match(key) else quote(key)


def format_expression(value: Any, indent: int) -> str:
    """Render any value as an HCL expression (object/tuple literals for dicts/lists)."""
    pad = INDENT * indent
    if isinstance(value, dict):
        if not value:
            return "{}"
        lines = ["{"]
        for k, v in value.items():
            if v is None:
                continue
            lines.append(f"{pad}{INDENT}{_object_key(str(k))} = {format_expression(v, indent + 1)}")
        lines.append(f"{pad}}}")
        return "\n".join(lines)
    if isinstance(value, (list, tuple)):
        if not any(isinstance(v, (dict, list, tuple)) for v in value):
            return "[" + ", ".join(format_scalar(v) for v in value) + "]"
        items = [f"{pad}{INDENT}{format_expression(v, indent + 1)}" for v in value]
        return "[\n" + ",\n".join(items) + f"\n{pad}]"
    return format_scalar(value)


def _heredoc_marker(text: str) -> str:
    marker = "EOT"
    lines = set(text.splitlines())
    i = 1
    while marker in lines:
        marker = f"EOT{i}"
        i += 1
    return marker


def render_body(fields: Dict[str, Any], indent: int) -> List[str]:
    pad = INDENT * indent
    lines: List[str] = []
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, dict):
            if key in ARGUMENT_MAP_KEYS:
                lines.append(f"{pad}{key} = {format_expression(value, indent)}")
            elif not value:
                lines.append(f"{pad}{key} {{}}")
            else:
                lines.append(f"{pad}{key} {{")
                lines.extend(render_body(value, indent + 1))
                lines.append(f"{pad}}}")
        elif isinstance(value, (list, tuple)) and value and all(isinstance(v, dict) for v in value):
            for item in value:
                lines.append(f"{pad}{key} {{")
                lines.extend(render_body(item, indent + 1))
                lines.append(f"{pad}}}")
        elif isinstance(value, (list, tuple)):
            lines.append(f"{pad}{key} = {format_expression(list(value), indent)}")
        elif isinstance(value, str) and "\n" in value:
            marker = _heredoc_marker(value)
            body = value.replace("${", "$${").replace("%{", "%%{")
            lines.append(f"{pad}{key} = <<{marker}")
            lines.append(body)
            lines.append(marker)
        else:
            lines.append(f"{pad}{key} = {format_scalar(value)}")
    return lines


def render_declaration(decl: Declaration) -> str:
    lines = [f'{decl.mode} "{decl.declaration_type}" "{decl.name}" {{']
    lines.extend(render_body(decl.fields, 1))
    if decl.depends_on:
        lines.append(f"{INDENT}depends_on = [{', '.join(decl.depends_on)}]")
    lines.append("}")
    return "\n".join(lines)


def render_variable(name: str, variable: Variable) -> str:
    lines = [f'variable "{name}" {{', f"{INDENT}description = {quote(variable.description)}"]
    lines.append(f"{INDENT}type        = {variable.type}")
    if variable.default is not None:
        lines.append(f"{INDENT}default     = {format_expression(variable.default, 1)}")
    if variable.sensitive:
        lines.append(f"{INDENT}sensitive   = true")
    lines.append("}")
    return "\n".join(lines)


def render_output(name: str, output: Output) -> str:
    return "\n".join([
        f'output "{name}" {{',
        f"{INDENT}description = {quote(output.description)}",
        f"{INDENT}value       = {format_scalar(output.value)}",
        "}",
    ])


def _join(blocks: List[str], header: Optional[str] = None) -> str:
    if not blocks:
        return ""
    parts = [header] if header else []
    parts.append("\n\n".join(blocks))
    return "\n".join(parts) + "\n"


def render_declarations(output: SynthesisOutput) -> str:
    return _join([render_declaration(d) for d in output.declarations], "# Resources")


def render_variables(output: SynthesisOutput) -> str:
    return _join([render_variable(n, v) for n, v in output.variables.items()], "# Variables")


def render_outputs(output: SynthesisOutput) -> str:
    return _join([render_output(n, o) for n, o in output.outputs.items()], "# Outputs")


def render_document(output: SynthesisOutput) -> str:
    """Preamble, then declarations, variables and outputs, as one document."""
    sections = [
        preamble_for(output),
        render_declarations(output),
        render_variables(output),
        render_outputs(output),
    ]
    return "\n".join(s for s in sections if s)


def render_files(output: SynthesisOutput) -> Dict[str, str]:
    return {
        "main.tf": render_declarations(output),
        "variables.tf": render_variables(output),
        "outputs.tf": render_outputs(output),
        "provider.tf": preamble_for(output),
    }
