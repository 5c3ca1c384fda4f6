"""
Main CLI entry point for the coordination planner.

Provides the primary command-line interface with subcommands for planning
a cross-repository change and inspecting the ecosystem.
"""

import json
import os
import sys
from pathlib import Path
from typing import List, Optional

import click

from repo_coord import __version__
from repo_coord.cli.base import (
    console, handle_cli_errors, setup_cli_context, add_common_options,
    print_success, print_info, print_table, print_panel
)
from repo_coord.lib.config import create_config_template
from repo_coord.lib.ecosystem import default_ecosystem, save_ecosystem
from repo_coord.models.change_impact import ActionType, ChangeImpact, CoordinationComplexity
from repo_coord.models.coordination_plan import CoordinationAnalysis, DependencyOrderEntry, RiskLevel
from repo_coord.models.ecosystem import EcosystemConfig


OUTPUT_FORMATS = click.Choice(["table", "json"], case_sensitive=False)

RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}

COMPLEXITY_STYLES = {
    CoordinationComplexity.SIMPLE: "green",
    CoordinationComplexity.MODERATE: "yellow",
    CoordinationComplexity.COMPLEX: "red",
}


@click.group()
@click.version_option(version=__version__, prog_name="repo-coord")
@click.pass_context
def cli(ctx):
    """
    Cross-Repository Change Coordination Planner

    Work out which repositories a change affects, in what order to change
    them, what can run in parallel and how risky the coordination is.
    """
    ctx.ensure_object(dict)


@cli.command("analyze")
@click.option("--category", "-c", required=True, help="Change category (protocol, feature, bugfix, infrastructure, breaking)")
@click.option("--target", "-t", required=True, help="Repository where the change originates")
@click.option("--changed-file", "-f", "changed_files", multiple=True, help="Changed file path (repeatable)")
@click.option("--description", "-d", help="Description of the change")
@click.option("--format", "output_format", type=OUTPUT_FORMATS, help="Output format")
@add_common_options
@handle_cli_errors
def analyze(
    category: str,
    target: str,
    changed_files: tuple,
    description: Optional[str],
    output_format: Optional[str],
    config: Optional[str],
    env_file: Optional[str],
    ecosystem: Optional[str],
    verbose: bool
):
    """Plan a change across all affected repositories."""
    context = setup_cli_context(config, env_file, ecosystem, verbose)
    planner = context.get_service("planner")

    analysis = planner.analyze({
        "change_category": category,
        "target_repository": target,
        "changed_files": list(changed_files),
        "description": description,
    })

    if context.output_format(output_format) == "json":
        click.echo(json.dumps(analysis.to_dict(), indent=2))
    else:
        _display_analysis(analysis)


@cli.command("impact")
@click.option("--category", "-c", required=True, help="Change category, used when files and description are inconclusive")
@click.option("--target", "-t", required=True, help="Repository where the change was made")
@click.option("--changed-file", "-f", "changed_files", multiple=True, help="Changed file path (repeatable)")
@click.option("--description", "-d", help="Description or commit message of the change")
@click.option("--format", "output_format", type=OUTPUT_FORMATS, help="Output format")
@add_common_options
@handle_cli_errors
def impact(
    category: str,
    target: str,
    changed_files: tuple,
    description: Optional[str],
    output_format: Optional[str],
    config: Optional[str],
    env_file: Optional[str],
    ecosystem: Optional[str],
    verbose: bool
):
    """Show the follow-up work a change causes in dependent repositories."""
    context = setup_cli_context(config, env_file, ecosystem, verbose)
    planner = context.get_service("planner")

    change_impact = planner.analyze_change_impact({
        "change_category": category,
        "target_repository": target,
        "changed_files": list(changed_files),
        "description": description,
    })

    if context.output_format(output_format) == "json":
        click.echo(json.dumps(change_impact.to_dict(), indent=2))
    else:
        _display_change_impact(change_impact)


@cli.command("order")
@click.option("--category", "-c", default="feature", show_default=True, help="Change category whose topology applies")
@click.option("--repository", "-r", "repositories", multiple=True, help="Repository to include (repeatable, default all)")
@click.option("--format", "output_format", type=OUTPUT_FORMATS, help="Output format")
@add_common_options
@handle_cli_errors
def order(
    category: str,
    repositories: tuple,
    output_format: Optional[str],
    config: Optional[str],
    env_file: Optional[str],
    ecosystem: Optional[str],
    verbose: bool
):
    """Show the dependency order of repositories for a change category."""
    context = setup_cli_context(config, env_file, ecosystem, verbose)
    planner = context.get_service("planner")

    entries = planner.dependency_order(category, list(repositories) or None)

    if context.output_format(output_format) == "json":
        click.echo(json.dumps({
            "category": category,
            "execution_order": [entry.repository for entry in entries],
            "details": [entry.model_dump() for entry in entries],
        }, indent=2))
    else:
        _display_dependency_order(category, entries)


@cli.command("repos")
@click.option("--format", "output_format", type=OUTPUT_FORMATS, help="Output format")
@add_common_options
@handle_cli_errors
def repos(
    output_format: Optional[str],
    config: Optional[str],
    env_file: Optional[str],
    ecosystem: Optional[str],
    verbose: bool
):
    """List the repositories of the ecosystem."""
    context = setup_cli_context(config, env_file, ecosystem, verbose)

    if context.output_format(output_format) == "json":
        click.echo(json.dumps({
            "ecosystem": context.ecosystem.name,
            "categories": context.ecosystem.categories,
            "repositories": [repo.model_dump(mode="json") for repo in context.ecosystem.repositories],
        }, indent=2))
    else:
        _display_repositories(context.ecosystem)


@cli.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--ecosystem", "write_ecosystem", is_flag=True, help="Write the built-in ecosystem instead of a config template")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@handle_cli_errors
def init_config(path: str, write_ecosystem: bool, force: bool):
    """Write a configuration template or the built-in ecosystem to PATH."""
    if Path(path).exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")

    if write_ecosystem:
        save_ecosystem(default_ecosystem(), path)
        print_success(f"Ecosystem written to {path}")
    else:
        create_config_template(path)
        print_success(f"Configuration template written to {path}")


@cli.command("serve")
@click.option("--host", default="localhost", help="Host to bind to")
@click.option("--port", type=int, default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
@add_common_options
@handle_cli_errors
def serve(
    host: str,
    port: int,
    reload: bool,
    config: Optional[str],
    env_file: Optional[str],
    ecosystem: Optional[str],
    verbose: bool
):
    """Start the API server."""
    import uvicorn

    print_info(f"Starting API server on {host}:{port}")

    if reload:
        print_info("Auto-reload enabled")

    # The app reads these on startup
    if config:
        os.environ["CONFIG_FILE"] = config
    if env_file:
        os.environ["ENV_FILE"] = env_file
    if ecosystem:
        os.environ["REPO_COORD_ECOSYSTEM_FILE"] = ecosystem

    uvicorn.run(
        "repo_coord.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="debug" if verbose else "info"
    )


def _display_analysis(analysis: CoordinationAnalysis) -> None:
    """Display a coordination analysis as tables and panels."""
    plan = analysis.coordination_plan
    intelligence = analysis.intelligence
    risk = plan.risk_assessment
    risk_level = RiskLevel(risk.level)

    print_panel(analysis.summary, title="Coordination Plan", style=RISK_STYLES[risk_level])

    rows = []
    for record in plan.affected_repositories:
        rows.append([
            record.repository,
            record.impact_level.value,
            record.estimated_effort.label,
            ", ".join(record.blocked_by) or "-",
            ", ".join(record.blocks) or "-",
        ])
    print_table(rows, ["Repository", "Impact", "Effort", "Blocked by", "Blocks"], "Affected Repositories")

    print_info(f"Execution order: {' → '.join(plan.execution_order)}")
    print_info(f"Critical path: {' → '.join(intelligence.critical_path)}")
    if intelligence.parallelizable:
        for i, group in enumerate(intelligence.parallelizable, start=1):
            print_info(f"Parallel group {i}: {', '.join(group)}")
    else:
        print_info("Parallel groups: none")

    risk_lines = [f"Level: {risk_level.value.upper()} (score {risk.score})"]
    risk_lines += [f"• {factor}" for factor in risk.factors]
    if risk.mitigations:
        risk_lines.append("Mitigations:")
        risk_lines += [f"• {mitigation}" for mitigation in risk.mitigations]
    print_panel("\n".join(risk_lines), title="Risk Assessment", style=RISK_STYLES[risk_level])

    timeline = plan.timeline_estimate
    phase_rows = [[name, estimate.label] for name, estimate in timeline.by_phase.items()]
    phase_rows.append(["Total", f"{timeline.total_days} days"])
    print_table(phase_rows, ["Phase", "Duration"], "Timeline Estimate")

    comms = plan.communication_plan
    print_panel(
        f"Stakeholders: {', '.join(comms.stakeholders)}\n"
        f"Checkpoints: {', '.join(comms.checkpoints)}\n"
        f"Documentation: {', '.join(comms.documentation)}",
        title="Communication Plan"
    )


def _display_change_impact(change_impact: ChangeImpact) -> None:
    complexity = CoordinationComplexity(change_impact.coordination_complexity)
    print_panel(change_impact.summary, title="Change Impact", style=COMPLEXITY_STYLES[complexity])

    if change_impact.required_actions:
        rows = [
            [
                action.repository,
                ActionType(action.action_type).value,
                action.priority.value,
                "yes" if action.automatable else "no",
                action.estimated_effort.label,
                action.description,
            ]
            for action in change_impact.required_actions
        ]
        print_table(rows, ["Repository", "Action", "Priority", "Automatable", "Effort", "Description"], "Required Actions")
    else:
        print_info("No follow-up required in other repositories")

    for recommendation in change_impact.automation_recommendations:
        print_info(f"• {recommendation}")


def _display_dependency_order(category: str, entries: List[DependencyOrderEntry]) -> None:
    rows = [
        [
            entry.order,
            entry.repository,
            entry.repository_type,
            ", ".join(entry.dependencies) or "-",
            ", ".join(entry.dependents) or "-",
        ]
        for entry in entries
    ]
    print_table(rows, ["#", "Repository", "Type", "Depends on", "Dependents"], f"Dependency Order ({category})")

    foundations = [entry.repository for entry in entries if not entry.dependencies]
    if foundations:
        print_info(f"Foundation repositories (no dependencies): {', '.join(foundations)}")


def _display_repositories(ecosystem: EcosystemConfig) -> None:
    rows = [
        [repo.name, repo.label, repo.repository_type.value, "yes" if repo.testable else "no", repo.description]
        for repo in sorted(ecosystem.repositories, key=lambda r: r.priority)
    ]
    print_table(rows, ["Name", "Display Name", "Type", "Tests", "Description"], f"Repositories ({ecosystem.name})")


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
