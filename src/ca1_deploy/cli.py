"""
ca1-deploy — CLI Interface.

Click + Rich command line for provisioning and tearing down the CA1
environment. ``provision`` and ``teardown`` are also installed as the
stand-alone commands ``ca1-provision`` and ``ca1-teardown``.
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import Any, Dict, Optional

import click
from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ca1_deploy.__version__ import __version__
from ca1_deploy.config import DeployConfig
from ca1_deploy.core.base_client import ProvisioningClient
from ca1_deploy.core.credentials import PromptCredentialSource
from ca1_deploy.core.desired_state import ProvisionResult, RunStatus
from ca1_deploy.core.exceptions import DeployError
from ca1_deploy.core.reconciler import Reconciler
from ca1_deploy.utils.logger import console, setup_logging

logger = logging.getLogger("ca1-deploy.cli")


def _fail(message: str, hint: str = "") -> None:
    """Print a one-line diagnostic (plus hint) and exit with status 1."""
    console.print(f"❌ {message}", style="error", markup=False)
    if hint:
        console.print(f"   {hint}", style="hint", markup=False)
    sys.exit(1)


def build_client(config: DeployConfig) -> ProvisioningClient:
    """Run preflight checks and return an Azure client for the resolved subscription."""
    from ca1_deploy.core.auth_manager import AuthManager
    from ca1_deploy.core.preflight import Preflight

    credential = Preflight(lambda: AuthManager.get_azure_credential(config.azure)).run()
    subscription_id = AuthManager.resolve_subscription_id(credential, config.azure)

    from ca1_deploy.providers.azure.client import AzureProvisioningClient

    return AzureProvisioningClient.from_credential(credential, subscription_id)


def _context_config(ctx: click.Context) -> DeployConfig:
    """Config from the group, or loaded here when run as a stand-alone command."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        config = DeployConfig.load()
        setup_logging(level=config.log_level)
        ctx.obj["config"] = config
    return ctx.obj["config"]


# ── Main CLI Group ─────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="ca1-deploy")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to YAML config file")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]), default=None)
@click.option("--log-file", type=click.Path(), default=None, help="Log file path")
@click.option("--json-log", is_flag=True, help="Write the log file as JSON lines")
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str],
        log_file: Optional[str], json_log: bool) -> None:
    """ca1-deploy — provision and tear down the CA1 Azure environment."""
    ctx.ensure_object(dict)

    ctx.obj["config"] = DeployConfig.load(config, log_level=log_level)
    setup_logging(level=ctx.obj["config"].log_level, log_file=log_file, json_log=json_log)


# ── Provision Command ──────────────────────────────────────────────────────────


@cli.command()
@click.option("--location", "-l", default=None, help="Azure region (default: norwayeast)")
@click.option("--admin-username", "-u", default=None, help="VM admin user (default: ca1admin)")
@click.option("--bootstrap-file", type=click.Path(dir_okay=False), default=None,
              help="cloud-init file (default: vm_init.yml)")
@click.option("--report", type=click.Path(dir_okay=False), help="Save a JSON report to this file")
@click.pass_context
def provision(ctx: click.Context, location: Optional[str], admin_username: Optional[str],
              bootstrap_file: Optional[str], report: Optional[str]) -> None:
    """Create whatever part of the environment is missing."""
    config = _context_config(ctx)
    overrides: Dict[str, Any] = {
        "location": location,
        "admin_username": admin_username,
        "bootstrap_file": bootstrap_file,
    }
    config = config.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    desired = config.desired_state()

    console.print(Panel(
        f"[bold]Provisioning resource group {desired.resource_group}[/bold]\n"
        f"[dim]Location: {desired.location}  |  Admin: {desired.admin_username}[/dim]",
        title="🚀 CA1 Provision",
        border_style="cyan",
    ))

    try:
        client = build_client(config)
        result = Reconciler(client, desired).provision(PromptCredentialSource())
    except DeployError as e:
        _fail(str(e), e.hint)
    except click.Abort:
        raise
    except Exception as e:
        logger.debug("Provisioning aborted by provider error", exc_info=True)
        _fail(f"Provisioning failed: {e}")

    _display_provision_result(result)
    if report:
        _save_report(result, "provision", report)


def _display_provision_result(result: ProvisionResult) -> None:
    table = Table(box=box.ROUNDED, header_style="bold cyan", title="Resources")
    table.add_column("Kind", width=24)
    table.add_column("Name", width=16)
    table.add_column("Outcome", width=10)
    for step in result.steps:
        table.add_row(
            step.kind.label,
            step.name,
            Text(step.outcome.value, style=f"outcome.{step.outcome.value}"),
        )
    console.print(table)

    if result.status is RunStatus.NO_OP:
        console.print("✨ [success]VM already exists, nothing to do.[/success]")
    else:
        console.print(f"✅ [success]Environment provisioned ({result.created_count} created).[/success]")

    conn = result.connection
    if conn is None:
        console.print("⚠️  Public IP has no address yet; check the portal.", style="warning")
        return

    console.print(Panel(
        f"Public IP: [bold]{conn.public_ip}[/bold]\n"
        f"SSH:       [bold]{conn.ssh_command}[/bold]\n"
        f"HTTP:      [bold]{conn.http_url}[/bold]",
        title="🔌 Connect",
        border_style="green",
    ))


# ── Teardown Command ───────────────────────────────────────────────────────────


@cli.command()
@click.option("--location", "-l", default=None, help="Accepted for symmetry with provision; unused")
@click.option("--report", type=click.Path(dir_okay=False), help="Save a JSON report to this file")
@click.pass_context
def teardown(ctx: click.Context, location: Optional[str], report: Optional[str]) -> None:
    """Delete the resource group and everything in it."""
    config = _context_config(ctx)
    desired = config.desired_state()
    if location:
        logger.debug(f"Ignoring --location {location}; teardown deletes by name")

    try:
        client = build_client(config)
        result = Reconciler(client, desired).teardown()
    except DeployError as e:
        _fail(str(e), e.hint)
    except Exception as e:
        logger.debug("Teardown aborted by provider error", exc_info=True)
        _fail(f"Teardown failed: {e}")

    if result.status is RunStatus.NO_OP:
        console.print(f"✨ [success]Resource group {result.resource_group} not found, nothing to tear down.[/success]")
    else:
        console.print(f"🗑️  [success]Resource group {result.resource_group} deleted.[/success]")

    if report:
        _save_report(result, "teardown", report)


def _save_report(result: Any, operation: str, report: str) -> None:
    from ca1_deploy.reporters.json_reporter import JSONReporter

    path = JSONReporter().generate(result, operation, filename=report)
    console.print(f"📄 Report saved: [link]{path}[/link]")


# ── Version Command ────────────────────────────────────────────────────────────


@cli.command()
def version() -> None:
    """Display version and Azure SDK availability."""
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Key", style="bold cyan")
    table.add_column("Value")

    table.add_row("Version", __version__)
    table.add_row("Python", sys.version.split()[0])
    table.add_row("Platform", sys.platform)

    from ca1_deploy.core.preflight import REQUIRED_MODULES

    for name in REQUIRED_MODULES:
        try:
            importlib.import_module(name)
            table.add_row(name, "✅")
        except ImportError:
            table.add_row(name, "❌")

    console.print(table)


# ── Init Command ───────────────────────────────────────────────────────────────


SAMPLE_CONFIG = """# ca1-deploy configuration
# Values here are overridden by CA1_* environment variables and CLI options.

location: norwayeast
admin_username: ca1admin
bootstrap_file: vm_init.yml
log_level: INFO

azure:
  method: cli  # cli, default, managed-identity, service-principal
  subscription_id: null  # null = AZURE_SUBSCRIPTION_ID or first enabled subscription
"""


@cli.command()
@click.option("--output", "-o", default="ca1-deploy.yaml", help="Config file output path")
def init(output: str) -> None:
    """Generate a sample configuration file."""
    with open(output, "w", encoding="utf-8") as f:
        f.write(SAMPLE_CONFIG)

    console.print(f"✅ Configuration file created: [bold]{output}[/bold]")
    console.print("[dim]Pass it with 'ca1-deploy --config FILE provision'.[/dim]")


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


def provision_main() -> None:
    """Entry point for ca1-provision."""
    provision(obj={})


def teardown_main() -> None:
    """Entry point for ca1-teardown."""
    teardown(obj={})


if __name__ == "__main__":
    main()
