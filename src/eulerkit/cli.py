"""
eulerkit CLI

Command-line access to the Euler batch codec.

Commands:
  modules  - Show the module registry for a chain
  encode   - Encode a batch file into Euler batch items
  decode   - Decode raw results against a batch file
  call     - Encode, execute (JSON-RPC batch of eth_call) and decode a batch
  txopts   - Show transaction overrides from the environment

Batch files look like::

    {
      "allowError": false,
      "items": [
        {"contract": "markets", "method": "underlyingToEToken", "args": ["0x..."]},
        {"contract": "eToken", "address": "0x...", "method": "totalSupply"}
      ]
    }
"""

from __future__ import annotations

import dataclasses
import json
import sys
from pathlib import Path
from typing import Any, Optional

import click

from .chain.rpc import RpcProvider
from .client import Euler
from .config import EulerConfig
from .contracts.batch import CallDescriptor, DecodedResult
from .errors import EulerError
from .log import setup_logging
from .schemas import (
    BATCH_SCHEMA,
    RESULTS_SCHEMA,
    SchemaValidationError,
    load_json,
    validate_instance,
)


# ============ Constants ============

VERSION = "0.1.0"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="eulerkit")
@click.option("--env-file", type=click.Path(dir_okay=False, path_type=Path), help=".env file to read")
@click.option("--chain-id", type=int, default=None, help="Chain ID (default: CHAIN_ID or 1)")
@click.option(
    "--interfaces",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="euler-interfaces checkout (default: EULER_INTERFACES_DIR)",
)
@click.option("--rpc-url", default=None, help="JSON-RPC endpoint (default: EULER_RPC_URL)")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    env_file: Optional[Path],
    chain_id: Optional[int],
    interfaces: Optional[Path],
    rpc_url: Optional[str],
    verbose: bool,
) -> None:
    """eulerkit - Euler protocol batch encoder/decoder."""
    setup_logging("DEBUG" if verbose else "WARNING")

    try:
        config = EulerConfig.from_env(env_file)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    overrides: dict[str, Any] = {}
    if chain_id is not None:
        overrides["chain_id"] = chain_id
    if interfaces is not None:
        overrides["interfaces_root"] = interfaces
    if rpc_url is not None:
        overrides["rpc_url"] = rpc_url
    ctx.obj = dataclasses.replace(config, **overrides)


# ============ Registry ============


@cli.command()
@click.pass_obj
def modules(config: EulerConfig) -> None:
    """Show the module registry for the selected chain."""
    euler = _client(config)
    registry = euler.registry

    click.echo(f"Chain ID:        {registry.chain_id}")
    if registry.is_empty:
        click.secho("  No Euler deployment known for this chain.", fg="yellow")
        return

    click.echo(f"Reference asset: {registry.reference_asset}")
    click.echo("")
    click.echo("Modules:")
    for name in sorted(registry.abis):
        address = registry.addresses.get(name)
        marker = "*" if name in euler.contracts else " "
        click.echo(f"  {marker} {name:<20} {address or '(per token)'}")
    click.echo("")
    click.echo("  * loaded as singleton")


# ============ Batches ============


@cli.command()
@click.argument("batch_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def encode(config: EulerConfig, batch_file: Path) -> None:
    """Encode BATCH_FILE into Euler batch items (JSON)."""
    descriptors, allow_error = _load_batch(batch_file)
    euler = _client(config)

    try:
        items = euler.build_batch(descriptors, allow_error=allow_error)
    except EulerError as exc:
        _fail(exc)

    click.echo(json.dumps([item.to_dict() for item in items], indent=2))


@cli.command()
@click.argument("batch_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("results_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def decode(config: EulerConfig, batch_file: Path, results_file: Path) -> None:
    """Decode RESULTS_FILE (raw results, JSON) against BATCH_FILE."""
    descriptors, allow_error = _load_batch(batch_file)
    raw = _load_validated(results_file, RESULTS_SCHEMA)
    euler = _client(config)

    try:
        results = euler.decode_batch(
            descriptors, raw, allow_error=allow_error, raise_on_error=False
        )
    except EulerError as exc:
        _fail(exc)

    _print_results(results)


@cli.command()
@click.argument("batch_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def call(config: EulerConfig, batch_file: Path) -> None:
    """Execute BATCH_FILE against the node and print decoded results."""
    descriptors, allow_error = _load_batch(batch_file)
    euler = _client(config, RpcProvider(config.rpc_url))

    try:
        results = euler.call_batch(
            descriptors, allow_error=allow_error, raise_on_error=False
        )
    except EulerError as exc:
        _fail(exc)

    _print_results(results)


# ============ Transactions ============


@cli.command()
@click.pass_obj
def txopts(config: EulerConfig) -> None:
    """Show transaction overrides (TX_FEE_MUL, TX_NONCE, TX_GAS_LIMIT)."""
    provider = RpcProvider(config.rpc_url) if config.tx.fee_multiplier is not None else None
    euler = _client(config, provider)

    try:
        opts = euler.tx_opts()
    except (EulerError, ValueError) as exc:
        _fail(exc)

    click.echo(json.dumps(opts, indent=2, sort_keys=True))


# ============ Helper Functions ============


def _client(config: EulerConfig, provider: Any = None) -> Euler:
    try:
        return Euler(provider, config=config)
    except (FileNotFoundError, EulerError) as exc:
        _fail(exc)


def _load_validated(path: Path, schema: dict[str, Any]) -> Any:
    try:
        payload = load_json(path)
        validate_instance(payload, schema)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path}: invalid JSON: {exc}") from exc
    except SchemaValidationError as exc:
        click.secho(f"ERROR: {path}: {exc}", fg="red", err=True)
        for line in exc.errors:
            click.echo(f"  - {line}", err=True)
        sys.exit(1)
    return payload


def _load_batch(path: Path) -> tuple[list[CallDescriptor], bool]:
    payload = _load_validated(path, BATCH_SCHEMA)
    descriptors = [CallDescriptor.from_dict(item) for item in payload["items"]]
    return descriptors, bool(payload.get("allowError", False))


def _print_results(results: list[DecodedResult]) -> None:
    rendered = []
    for result in results:
        entry: dict[str, Any] = {
            "index": result.index,
            "method": result.method,
            "success": result.success,
        }
        if result.error is None:
            entry["value"] = _jsonable(result.value)
        else:
            entry["error"] = str(result.error)
        rendered.append(entry)
    click.echo(json.dumps(rendered, indent=2))


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _fail(exc: Exception) -> None:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(getattr(exc, "exit_code", 1))


# ============ Entry Points ============


def main() -> None:
    """eulerkit CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
