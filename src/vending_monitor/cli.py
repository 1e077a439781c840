"""CLI entry point for the stock-monitoring network."""

from __future__ import annotations

import click

from .core.enums import LogFormat


@click.group()
def main() -> None:
    """Vending machine stock monitor."""


@main.command()
@click.option("--config", default="configs/demo.toml", help="Config file path")
@click.option("--events", type=int, default=None, help="Number of events to generate")
@click.option("--seed", type=int, default=None, help="Random seed")
@click.option(
    "--log-format",
    type=click.Choice([f.value for f in LogFormat]),
    default=None,
    help="Log output format",
)
def simulate(
    config: str,
    events: int | None,
    seed: int | None,
    log_format: str | None,
) -> None:
    """Publish random sales and refills and report final stock."""
    from .core.errors import ConfigError
    from .main import run

    overrides: dict = {}
    if events is not None:
        overrides.setdefault("simulation", {})["events"] = events
    if seed is not None:
        overrides.setdefault("simulation", {})["seed"] = seed
    if log_format:
        overrides.setdefault("observability", {})["log_format"] = log_format

    try:
        report = run(config_path=config, overrides=overrides)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Published {report.events_published} events (run {report.run_id})")
    for machine in report.machines:
        click.echo(f"  {machine.id}: stock={machine.stock_level} state={machine.state.value}")
    for tag, count in sorted(report.derived_counts.items()):
        click.echo(f"  {tag}: {count}")
    if report.error_counts:
        click.echo(f"  handler errors: {report.error_counts}", err=True)


@main.command()
@click.option("--config", default="configs/demo.toml", help="Config file path")
def machines(config: str) -> None:
    """List configured machines."""
    from .core.config import load_settings

    settings = load_settings(config_path=config)
    for machine in settings.machines:
        click.echo(f"{machine.id}\t{machine.initial_stock}")


if __name__ == "__main__":
    main()
