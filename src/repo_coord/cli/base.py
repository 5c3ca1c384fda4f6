"""
Base CLI infrastructure and common utilities.

Provides common functionality for all CLI commands including
configuration, logging, and error handling.
"""

import functools
import logging
import sys
from typing import Dict, Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from repo_coord.lib.config import get_config_manager, setup_logging, Config
from repo_coord.lib.ecosystem import resolve_ecosystem
from repo_coord.lib.exceptions import CoordinationError
from repo_coord.models.ecosystem import EcosystemConfig
from repo_coord.services.coordination_planner import CoordinationPlanner


# Rich console for formatting output
console = Console()
logger = logging.getLogger(__name__)


class CLIError(Exception):
    """Base exception for CLI errors."""
    pass


class CLIContext:
    """
    Context object holding shared CLI state and services.

    Manages configuration, the loaded ecosystem and the planner instance
    used by a CLI command.
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        env_file: Optional[str] = None,
        ecosystem_file: Optional[str] = None,
        verbose: bool = False
    ):
        """
        Initialize CLI context.

        Args:
            config_file: Path to configuration file
            env_file: Path to environment file
            ecosystem_file: Path to ecosystem YAML, overriding the configured one
            verbose: Enable verbose logging
        """
        self.config_file = config_file
        self.env_file = env_file
        self.ecosystem_file = ecosystem_file
        self.verbose = verbose
        self._config: Optional[Config] = None
        self._ecosystem: Optional[EcosystemConfig] = None
        self._services: Dict[str, Any] = {}

    def initialize(self) -> None:
        """Initialize CLI context with configuration and services."""
        config_manager = get_config_manager(self.config_file, self.env_file)
        self._config = config_manager.load_config()

        # Console logs stay quiet unless asked for, so command output remains parseable
        setup_logging(self._config, console_level=logging.DEBUG if self.verbose else logging.WARNING)

        ecosystem_file = self.ecosystem_file or self._config.planner.ecosystem_file
        self._ecosystem = resolve_ecosystem(ecosystem_file)

        self._services["planner"] = CoordinationPlanner(self._ecosystem)
        logger.info("CLI context initialized successfully")

    @property
    def config(self) -> Config:
        """Get configuration."""
        if not self._config:
            raise CLIError("Configuration not loaded")
        return self._config

    @property
    def ecosystem(self) -> EcosystemConfig:
        """Get the loaded ecosystem."""
        if not self._ecosystem:
            raise CLIError("Ecosystem not loaded")
        return self._ecosystem

    def get_service(self, service_name: str) -> Any:
        """
        Get a service by name.

        Raises:
            CLIError: If service not found
        """
        service = self._services.get(service_name)
        if not service:
            raise CLIError(f"Service '{service_name}' not available")
        return service

    def output_format(self, requested: Optional[str]) -> str:
        """Resolve the output format from the command option or configuration."""
        return (requested or self.config.planner.default_output_format).lower()


def handle_cli_errors(f):
    """Decorator to handle CLI errors gracefully."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except CoordinationError as e:
            print_error(f"{e.kind}: {e.message}")
            for key, value in e.details.items():
                if value:
                    console.print(f"  {key}: {value}")
            sys.exit(1)
        except CLIError as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            sys.exit(130)
    return wrapper


# Output formatting utilities
def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print error message."""
    console.print(f"[red]✗[/red] {message}")


def print_info(message: str) -> None:
    """Print info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_table(data: list, headers: list, title: Optional[str] = None) -> None:
    """
    Print data as a formatted table.

    Args:
        data: List of row data
        headers: List of column headers
        title: Optional table title
    """
    table = Table(title=title)

    for header in headers:
        table.add_column(header, justify="left")

    for row in data:
        table.add_row(*[str(cell) for cell in row])

    console.print(table)


def print_panel(content: str, title: Optional[str] = None, style: str = "blue") -> None:
    """
    Print content in a panel.

    Args:
        content: Content to display
        title: Optional panel title
        style: Panel style
    """
    panel = Panel(content, title=title, border_style=style)
    console.print(panel)


# Common CLI options
def add_common_options(f):
    """Add common CLI options to a command."""
    f = click.option(
        "--config",
        type=click.Path(exists=True),
        help="Path to configuration file"
    )(f)
    f = click.option(
        "--env-file",
        type=click.Path(exists=True),
        help="Path to environment file"
    )(f)
    f = click.option(
        "--ecosystem",
        type=click.Path(exists=True, dir_okay=False),
        help="Path to ecosystem YAML (built-in ecosystem if omitted)"
    )(f)
    f = click.option(
        "--verbose", "-v",
        is_flag=True,
        help="Enable verbose logging"
    )(f)
    return f


def setup_cli_context(
    config_file: Optional[str],
    env_file: Optional[str],
    ecosystem_file: Optional[str],
    verbose: bool
) -> CLIContext:
    """
    Create and initialize a CLI context from the common options.

    Args:
        config_file: Path to configuration file
        env_file: Path to environment file
        ecosystem_file: Path to ecosystem YAML
        verbose: Enable verbose logging
    """
    context = CLIContext(config_file, env_file, ecosystem_file, verbose)
    context.initialize()
    return context
