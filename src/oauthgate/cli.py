"""oauthgate CLI - Command line interface."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.table import Table

console = Console()


def configure_logging(log_level: str) -> None:
    import structlog

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
    )


def _load_config(config_file: str | None):
    from oauthgate.core.config import OAuthGateConfig, get_config

    if config_file:
        return OAuthGateConfig.from_file(config_file)
    return get_config()


@click.group()
def main() -> None:
    """OAuth redirect gateway."""


@main.command()
@click.option(
    "--config", "-c",
    "config_file",
    type=click.Path(exists=True),
    help="Path to YAML or TOML config file",
)
@click.option("--host", default=None, help="Bind address (overrides config)")
@click.option("--port", "-p", type=int, default=None, help="Bind port (overrides config)")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level (overrides config)",
)
def serve(
    config_file: str | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
) -> None:
    """Serve the /connect/{service} redirect endpoint."""
    from aiohttp import web

    from oauthgate.server.app import create_app

    try:
        config = _load_config(config_file)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(log_level or config.log_level)

    if not config.firewalls:
        raise click.ClickException("No firewalls configured")

    app = create_app(config)
    bind_host = host or config.host
    bind_port = port or config.port

    console.print(f"Serving OAuth redirects on http://{bind_host}:{bind_port}", style="green")
    web.run_app(app, host=bind_host, port=bind_port, print=None)


@main.command()
@click.option(
    "--config", "-c",
    "config_file",
    type=click.Path(exists=True),
    help="Path to YAML or TOML config file",
)
def routes(config_file: str | None) -> None:
    """List firewalls and the resource owners they offer."""
    try:
        config = _load_config(config_file)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    table = Table(title="Firewalls")
    table.add_column("Firewall", style="cyan")
    table.add_column("Pattern")
    table.add_column("Resource owners")
    table.add_column("Check path")

    for firewall in config.firewalls:
        table.add_row(
            firewall.name,
            firewall.pattern or "*",
            ", ".join(firewall.resource_owners) or "-",
            firewall.check_path,
        )

    console.print(table)
    if config.whitelisted_domains:
        console.print(f"Whitelisted domains: {', '.join(config.whitelisted_domains)}")
    else:
        console.print("Whitelisted domains: none (relative target paths only)", style="yellow")


if __name__ == "__main__":
    main()
