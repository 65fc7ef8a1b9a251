#!/usr/bin/env python3
# PATH: cli.py
"""
RELAY command line.

Relayer-side helpers that need no running executor:

  relay order-hash ORDER_JSON           struct hash + digest of an order
  relay check TRADE_JSON ROUTE_JSON     offline validation (exit 1 on reject)
  relay show-config                     effective settings after env overrides
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from config import ExecutorSettings, load_settings
from core.exceptions import ConfigError, RelayError
from core.logging import get_logger, setup_logging
from core.models import Order, RouteData, Trade
from core.signing import SignatureDomain
from execution.validation import validate_offline

logger = get_logger(__name__)


def _read_json(path: str) -> Dict[str, Any]:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path} is not valid JSON: {exc}") from exc


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Executor YAML (default: config/executor.yaml)",
)
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help=".env file with RELAY_* overrides",
)
@click.option(
    "--log-level",
    "-l",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level (overrides settings)",
)
@click.pass_context
def relay(
    ctx: click.Context,
    config_path: Optional[str],
    env_file: Optional[str],
    log_level: Optional[str],
) -> None:
    """RELAY settlement tooling."""
    try:
        settings = load_settings(config_path, env_file=env_file)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(level=log_level or settings.log_level, json_format=settings.json_logs)
    ctx.obj = settings


@relay.command("order-hash")
@click.argument("order_json", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def order_hash(settings: ExecutorSettings, order_json: str) -> None:
    """Print the typed-data hash and signing digest of an order."""
    data = _read_json(order_json)
    try:
        order = Order.from_dict(data.get("order", data))
    except (KeyError, TypeError, ValueError) as exc:
        raise click.ClickException(f"Invalid order: {exc}") from exc
    except RelayError as exc:
        raise click.ClickException(str(exc)) from exc

    domain = SignatureDomain(settings.chain_id, settings.executor)
    click.echo(json.dumps({
        "order_hash": domain.order_hash(order),
        "digest": domain.order_digest(order),
        "domain_separator": domain.domain_separator(),
        "chain_id": settings.chain_id,
        "verifying_contract": settings.executor,
    }, indent=2))


@relay.command("check")
@click.argument("trade_json", type=click.Path(exists=True, dir_okay=False))
@click.argument("route_json", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def check(settings: ExecutorSettings, trade_json: str, route_json: str) -> None:
    """
    Validate a trade and route without executor state.

    Runs structure, consistency, route shape, intermediate trust and
    protocol checks. Expiry, nonce and signatures are left to settlement.
    """
    trade_data, route_data = _read_json(trade_json), _read_json(route_json)
    whitelist = set(settings.whitelist)

    try:
        trade = Trade.from_dict(trade_data)
        route = RouteData.from_dict(route_data)
        trade_type = validate_offline(trade, route, lambda token: token in whitelist)
    except (KeyError, TypeError, ValueError) as exc:
        raise click.ClickException(f"Malformed input: {exc}") from exc
    except RelayError as exc:
        logger.debug("Offline check rejected", extra={"context": exc.to_dict()})
        click.echo(json.dumps(exc.to_dict(), default=str))
        sys.exit(1)

    click.echo(f"OK {trade_type.value}")


@relay.command("show-config")
@click.pass_obj
def show_config(settings: ExecutorSettings) -> None:
    """Print effective settings as JSON."""
    click.echo(json.dumps(settings.to_dict(), indent=2))


def main() -> None:
    relay(obj=None)


if __name__ == "__main__":
    main()
