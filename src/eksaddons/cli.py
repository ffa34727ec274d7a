"""CLI interface for eks-addons.

This module provides the `check` and `update` commands. `update` only plans
changes unless --approve is given.
"""

import argparse
import logging
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from eksaddons import __version__
from eksaddons.addons.manager import AddonManager
from eksaddons.cluster.kubectl_manager import KubectlManager
from eksaddons.config import AddonsConfig
from eksaddons.utils.errors import AddonsError

console = Console()

EXIT_OK = 0
EXIT_OUTDATED = 1
EXIT_ERROR = 2


def setup_logging(log_level: str = "info") -> None:
    """Setup logging with Rich handler.

    Args:
        log_level: Logging level (debug, info, warning, error, critical)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=console,
                show_time=False,
                show_path=False,
                rich_tracebacks=True,
            )
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="eksaddons",
        description="Keep EKS cluster add-ons in step with the control-plane version",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--kubeconfig", type=str, help="Path to kubeconfig file")
    parser.add_argument("--context", type=str, help="Kubeconfig context to use")
    parser.add_argument(
        "--config",
        type=str,
        dest="addons_file",
        help="YAML file with per-addon settings",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output, including current and updated objects",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"eks-addons {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("check", "Report whether addons match the control-plane version"),
        ("update", "Update addons to match the control-plane version"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "-k",
            "--control-plane-version",
            required=True,
            help="Cluster control-plane version (e.g. 1.27)",
        )
        sub.add_argument(
            "--addons",
            default="kube-proxy",
            help="Comma-separated addon names (default: kube-proxy)",
        )
        if name == "update":
            sub.add_argument(
                "--approve",
                action="store_true",
                help="Apply the changes, otherwise only plan them",
            )

    return parser


def _addon_names(value: str) -> list[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def _render_results(title: str, summary: dict[str, Any]) -> None:
    """Render per-addon results as a table."""
    table = Table(title=title)
    table.add_column("Addon", style="cyan")
    table.add_column("Status")
    table.add_column("Message")

    for name, result in summary["results"].items():
        if not result.get("success"):
            status = "[red]failed[/red]"
        elif result.get("pending") or result.get("up_to_date") is False:
            status = "[yellow]outdated[/yellow]"
        else:
            status = "[green]ok[/green]"
        table.add_row(name, status, result.get("message", ""))

    console.print(table)
    console.print(summary["message"])


def run_command(args: argparse.Namespace, config: AddonsConfig) -> int:
    """Run the selected command against the cluster.

    Args:
        args: Parsed arguments
        config: Loaded configuration

    Returns:
        Process exit code
    """
    client = KubectlManager(
        kubeconfig_path=config.get_kubeconfig_path(),
        context=config.context,
        timeout=config.kubectl_timeout,
    )
    manager = AddonManager(client, config.addon_settings)
    names = _addon_names(args.addons)
    version = args.control_plane_version

    if args.command == "check":
        summary = manager.check_addons(names, version)
        _render_results(f"Addons for control plane {version}", summary)
        if not summary["success"]:
            return EXIT_ERROR
        return EXIT_OUTDATED if summary["outdated"] else EXIT_OK

    dry_run = not args.approve
    summary = manager.update_addons(names, version, dry_run=dry_run)
    _render_results(f"Addon updates for control plane {version}", summary)
    if summary["pending"]:
        console.print(
            "[yellow]no changes were applied, run again with '--approve' to apply "
            "the changes[/yellow]"
        )
    return EXIT_OK if summary["success"] else EXIT_ERROR


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = AddonsConfig(
            kubeconfig=args.kubeconfig,
            context=args.context,
            addons_file=args.addons_file,
        )
        if args.verbose:
            config.log_level = "debug"
        config.validate()
    except AddonsError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return EXIT_ERROR

    setup_logging(config.log_level)
    logging.debug(f"Using kubeconfig {config.get_kubeconfig_path() or '<default>'}")

    try:
        return run_command(args, config)
    except AddonsError as e:
        console.print(f"[red]Error: {e}[/red]")
        return EXIT_ERROR


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
