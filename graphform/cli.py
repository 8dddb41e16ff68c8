"""
graphform CLI entry point.
"""
import os
import sys
from typing import Dict, List, Optional

import click
from rich.console import Console
from rich.table import Table

from graphform import __version__
from graphform.connections.rules import merged_rules
from graphform.connections.validator import RuleTable, classify_edge, get_connection_suggestions, get_valid_targets
from graphform.detect import detect_format
from graphform.emitters import hcl, lint
from graphform.models.declaration import SynthesisOutput
from graphform.models.graph import Graph, Provider
from graphform.parsers import graph as graph_parser
from graphform.reporters import json_reporter, markdown
from graphform.synthesis.engine import synthesize

console = Console(stderr=True)

_BANNER = r"""
                        _      __
   __ _ _ __ __ _ _ __ | |__  / _| ___  _ __ _ __ ___
  / _` | '__/ _` | '_ \| '_ \| |_ / _ \| '__| '_ ` _ \
 | (_| | | | (_| | |_) | | | |  _| (_) | |  | | | | | |
  \__, |_|  \__,_| .__/|_| |_|_|  \___/|_|  |_| |_| |_|
  |___/          |_|
"""

_REPORT_FILES = {
    "json": "graphform-report.json",
    "markdown": "graphform-report.md",
}


def _print_banner(no_color: bool = False) -> None:
    c = Console(stderr=True, no_color=no_color)
    c.print(f"[bold cyan]{_BANNER}[/bold cyan]")
    c.print(f"  [dim]diagram to Terraform[/dim]   [dim]v{__version__}[/dim]\n")


def _load_graph(path: str, provider: Optional[str], rules: RuleTable, stderr: Console) -> Graph:
    if not os.path.exists(path):
        stderr.print(f"[red]No such file:[/red] {path}")
        sys.exit(2)
    fmt = detect_format(path)
    if fmt == "unknown":
        stderr.print(f"[red]Unsupported file:[/red] {path} is not a graph or canvas document")
        sys.exit(2)
    return graph_parser.parse_file(path, provider=provider, rules=rules)


def _print_declarations_table(output: SynthesisOutput, ascii_mode: bool = False) -> None:
    tbl = Table(title="Generated Declarations", show_header=True, header_style="bold")
    tbl.add_column("#", style="dim", width=4)
    tbl.add_column("Address", width=50)
    tbl.add_column("Node", width=16)
    tbl.add_column("Role", width=10)
    tbl.add_column("Depends on")

    arrow = "->" if ascii_mode else "→"
    for i, d in enumerate(output.declarations, 1):
        deps = ", ".join(d.depends_on)
        tbl.add_row(
            str(i),
            d.address,
            d.node_id or "",
            d.role,
            f"{arrow} {deps}" if deps else "",
        )

    Console(stderr=True).print(tbl)


def _print_diagnostics_table(output: SynthesisOutput, no_color: bool) -> None:
    tbl = Table(title="Diagnostics", show_header=True, header_style="bold")
    tbl.add_column("Kind", width=20)
    tbl.add_column("Subject", width=20)
    tbl.add_column("Message")
    for d in output.diagnostics:
        kind = d.kind.value if no_color else f"[yellow]{d.kind.value}[/yellow]"
        tbl.add_row(kind, d.subject, d.message[:100] + "…" if len(d.message) > 100 else d.message)
    Console(stderr=True, no_color=no_color).print(tbl)


def _write_files(directory: str, files: Dict[str, str]) -> List[str]:
    os.makedirs(directory, exist_ok=True)
    written = []
    for filename, text in files.items():
        if not text:
            continue
        path = os.path.join(directory, filename)
        with open(path, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(text)
        written.append(path)
    return written


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(__version__)
@click.pass_context
def cli(ctx):
    """graphform: turn architecture graphs into Terraform."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command()
@click.argument("graph_path", metavar="GRAPH", type=click.Path())
@click.option(
    "--provider", "-p",
    type=click.Choice([p.value for p in Provider], case_sensitive=False),
    default=None,
    help="Override the provider declared in the graph document.",
)
@click.option(
    "--output", "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Write main.tf, variables.tf, outputs.tf and provider.tf (or the report) into this directory.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["hcl", "json", "markdown"], case_sensitive=False),
    default="hcl",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--rules",
    type=click.Path(dir_okay=False),
    default=None,
    help="Extra connection rules (YAML). Defaults to ./graphform_rules.yaml when present.",
)
@click.option(
    "--summary",
    is_flag=True,
    default=False,
    help="Print terminal summary table only, do not write any output.",
)
@click.option(
    "--check",
    is_flag=True,
    default=False,
    help="Parse the generated files with python-hcl2 and report syntax errors.",
)
@click.option(
    "--fail-on-diagnostics",
    is_flag=True,
    default=False,
    help="Exit with code 1 if any diagnostic or syntax error is recorded (for CI gates).",
)
@click.option(
    "--ascii",
    is_flag=True,
    default=False,
    help="Use ASCII-only symbols in terminal tables.",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable rich terminal color output.",
)
def generate(
    graph_path: str,
    provider: Optional[str],
    output: Optional[str],
    output_format: str,
    rules: Optional[str],
    summary: bool,
    check: bool,
    fail_on_diagnostics: bool,
    ascii: bool,
    no_color: bool,
) -> None:
    """
    Generate Terraform from a resource graph.

    GRAPH is a YAML/JSON graph document or a canvas export.
    """
    _print_banner(no_color)
    stderr = Console(stderr=True, no_color=no_color)
    rule_table = merged_rules(rules)

    # 1. Load
    with stderr.status("[bold]Loading graph…"):
        graph = _load_graph(graph_path, provider and provider.lower(), rule_table, stderr)

    if not graph.nodes:
        stderr.print("[yellow]No nodes found in the graph.[/yellow]")
        sys.exit(0)

    stderr.print(
        f"Loaded [bold]{len(graph.nodes)}[/bold] nodes and [bold]{len(graph.edges)}[/bold] edges "
        f"({graph.provider or 'no provider'})."
    )

    # 2. Synthesize
    with stderr.status("[bold]Synthesizing declarations…"):
        result = synthesize(graph.nodes, graph.edges, graph.provider)
        suggestions = get_connection_suggestions(graph.nodes, graph.edges, graph.provider, rule_table)
        files = hcl.render_files(result)

    stderr.print(
        f"Generated [bold]{len(result.declarations)}[/bold] declarations, "
        f"{len(result.variables)} variables, {len(result.outputs)} outputs."
    )
    for s in suggestions:
        stderr.print(f"[cyan]Suggestion:[/cyan] {s}")

    syntax_errors = None
    if check:
        syntax_errors = lint.check_files(files)
        for filename, err in syntax_errors.items():
            stderr.print(f"[red]Syntax error in {filename}:[/red] {err}")
        if not syntax_errors:
            stderr.print("[green]All generated files parse as HCL.[/green]")

    # 3. Terminal tables
    if summary or output:
        _print_declarations_table(result, ascii_mode=ascii)
    if result.diagnostics:
        _print_diagnostics_table(result, no_color)

    # 4. Emit
    if not summary:
        fmt = output_format.lower()
        if fmt == "hcl":
            if output:
                for path in _write_files(output, files):
                    stderr.print(f"Wrote [bold]{path}[/bold]")
            else:
                click.echo(hcl.render_document(result))
        else:
            if fmt == "json":
                report = json_reporter.build_report(graph, result, suggestions, syntax_errors)
            else:
                report = markdown.build_report(graph, result, suggestions, syntax_errors)
            if output:
                for path in _write_files(output, {_REPORT_FILES[fmt]: report}):
                    stderr.print(f"Report written to [bold]{path}[/bold]")
            else:
                click.echo(report)

    # 5. CI gate
    if fail_on_diagnostics and (result.diagnostics or syntax_errors):
        stderr.print(
            f"[red]CI gate triggered:[/red] {len(result.diagnostics)} diagnostic(s), "
            f"{len(syntax_errors or {})} syntax error(s) (--fail-on-diagnostics)."
        )
        sys.exit(1)

    sys.exit(0)


@cli.command()
@click.argument("graph_path", metavar="GRAPH", type=click.Path())
@click.option("--rules", type=click.Path(dir_okay=False), default=None, help="Extra connection rules (YAML).")
@click.option("--strict", is_flag=True, default=False, help="Exit with code 1 if any suggestion is produced.")
def validate(graph_path: str, rules: Optional[str], strict: bool) -> None:
    """
    Check the edges of GRAPH against the connection rules.
    """
    rule_table = merged_rules(rules)
    graph = _load_graph(graph_path, None, rule_table, console)
    nodes_by_id = graph.node_map()

    tbl = Table(title="Connections", show_header=True, header_style="bold")
    tbl.add_column("Edge", style="dim", width=12)
    tbl.add_column("Source", width=20)
    tbl.add_column("Target", width=20)
    tbl.add_column("Relationship", width=16)
    tbl.add_column("Rule")
    for e in graph.edges:
        src = nodes_by_id.get(e.source_id)
        tgt = nodes_by_id.get(e.target_id)
        rule = classify_edge(e, nodes_by_id, graph.provider, rule_table)
        tbl.add_row(
            e.id,
            src.label if src else f"[red]{e.source_id} (missing)[/red]",
            tgt.label if tgt else f"[red]{e.target_id} (missing)[/red]",
            e.relationship_kind,
            rule.description if rule else "[dim]generic connection[/dim]",
        )
    console.print(tbl)

    suggestions = get_connection_suggestions(graph.nodes, graph.edges, graph.provider, rule_table)
    for s in suggestions:
        console.print(f"[cyan]Suggestion:[/cyan] {s}")
    if not suggestions:
        console.print("[green]No missing connections.[/green]")

    if strict and suggestions:
        sys.exit(1)
    sys.exit(0)


@cli.command()
@click.argument("kind")
@click.option(
    "--provider", "-p",
    type=click.Choice([p.value for p in Provider], case_sensitive=False),
    default="aws",
    show_default=True,
)
@click.option("--rules", type=click.Path(dir_okay=False), default=None, help="Extra connection rules (YAML).")
def targets(kind: str, provider: str, rules: Optional[str]) -> None:
    """
    List the service kinds KIND can connect to.
    """
    valid = get_valid_targets(kind, provider.lower(), merged_rules(rules))
    if not valid:
        console.print(f"[yellow]No connection rules for {provider}/{kind}.[/yellow]")
        sys.exit(0)
    for target in valid:
        click.echo(target)
    sys.exit(0)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
