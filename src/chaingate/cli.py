"""
chaingate CLI

Operator front end over the chaingate library.

Commands:
  endpoint  - Resolve a provider RPC URL
  wallet    - Create, import and check wallets
  sign      - Sign a message (EIP-191)
  verify    - Recover the signer of a message
  balance   - Show an address balance
  block     - Show the head block number or a block
  tx        - Show a transaction
  wait      - Wait for a transaction to confirm
  ipfs      - Add and fetch IPFS content
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import click

from .anamnesis.ipfs import add_file_to_ipfs, get_file_from_ipfs
from .config import load_settings
from .errors import GatewayError
from .pneuma.endpoints import NETWORKS, PROVIDERS, get_provider_url
from .pneuma.rpc import (
    get_balance,
    get_block_details,
    get_block_number,
    get_transaction,
    wait_for_transaction,
)
from .sigil.wallet import (
    generate_mnemonic,
    generate_random_wallet,
    generate_wallet_from_seed,
    import_wallet_from_private_key,
    is_valid_address,
    sign_message,
    verify_signed_message,
)

VERSION = "0.1.0"


# ============ Helpers ============


def _fail(message: str, exit_code: int = 1) -> NoReturn:
    click.secho(f"ERROR: {message}", fg="red", err=True)
    sys.exit(exit_code)


def _run(coro: Any) -> Any:
    """Run a coroutine, turning chaingate errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except GatewayError as exc:
        _fail(str(exc), exc.exit_code)


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, default=str))


def _resolve_rpc_url(rpc_url: Optional[str]) -> str:
    if rpc_url:
        return rpc_url
    try:
        return load_settings().rpc_url()
    except ValueError as exc:
        _fail(str(exc), getattr(exc, "exit_code", 1))


rpc_url_option = click.option(
    "--rpc-url",
    envvar="CHAINGATE_RPC_URL",
    default=None,
    help="JSON-RPC endpoint (default: resolved from CHAINGATE_* settings)",
)


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="chaingate")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """chaingate - EVM chain and IPFS helpers."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============ Endpoint ============


@cli.command()
@click.argument("provider", type=click.Choice(PROVIDERS))
@click.argument("api_key")
@click.argument("chain_id", type=int)
def endpoint(provider: str, api_key: str, chain_id: int) -> None:
    """Resolve the RPC URL for PROVIDER on CHAIN_ID."""
    try:
        click.echo(get_provider_url(provider, api_key, chain_id))
    except GatewayError as exc:
        supported = ", ".join(f"{cid} ({name})" for cid, name in NETWORKS.items())
        _fail(f"{exc}. Supported: {supported}", exc.exit_code)


# ============ Wallet ============


@cli.group()
def wallet() -> None:
    """Create, import and check wallets."""


@wallet.command("new")
@click.option("--mnemonic/--no-mnemonic", default=True, help="Derive from a new seed phrase")
def wallet_new(mnemonic: bool) -> None:
    """Generate a new wallet. Keys are printed, never stored."""
    if mnemonic:
        phrase = generate_mnemonic()
        material = generate_wallet_from_seed(phrase)
        click.echo(f"Mnemonic:    {phrase}")
    else:
        material = generate_random_wallet()
    click.echo(f"Address:     {material.address}")
    click.echo(f"Private key: {material.private_key}")


@wallet.command("import")
@click.option("--private-key", prompt=True, hide_input=True, help="0x-prefixed private key")
def wallet_import(private_key: str) -> None:
    """Show the address for a private key."""
    try:
        material = import_wallet_from_private_key(private_key)
    except ValueError as exc:
        _fail(f"Invalid private key: {exc}")
    click.echo(f"Address: {material.address}")


@wallet.command("check")
@click.argument("address")
def wallet_check(address: str) -> None:
    """Check that ADDRESS is well formed (and correctly checksummed)."""
    if is_valid_address(address):
        click.secho("valid", fg="green")
    else:
        click.secho("invalid", fg="red")
        sys.exit(1)


# ============ Signing ============


@cli.command()
@click.argument("message")
@click.option(
    "--private-key",
    envvar="CHAINGATE_PRIVATE_KEY",
    prompt=True,
    hide_input=True,
    help="0x-prefixed private key",
)
def sign(message: str, private_key: str) -> None:
    """Sign MESSAGE with EIP-191 personal_sign."""
    click.echo(sign_message(private_key, message))


@cli.command()
@click.argument("message")
@click.argument("signature")
def verify(message: str, signature: str) -> None:
    """Recover the address that signed MESSAGE."""
    click.echo(verify_signed_message(message, signature))


# ============ Chain Reads ============


@cli.command()
@click.argument("address")
@rpc_url_option
def balance(address: str, rpc_url: Optional[str]) -> None:
    """Show the native balance of ADDRESS in ether."""
    url = _resolve_rpc_url(rpc_url)
    click.echo(_run(get_balance(address, url)))


@cli.command()
@click.argument("number", required=False, type=int)
@rpc_url_option
def block(number: Optional[int], rpc_url: Optional[str]) -> None:
    """Show the head block number, or block NUMBER with its transactions."""
    url = _resolve_rpc_url(rpc_url)
    if number is None:
        click.echo(_run(get_block_number(url)))
    else:
        _echo_json(_run(get_block_details(number, url)))


@cli.command()
@click.argument("tx_hash")
@rpc_url_option
def tx(tx_hash: str, rpc_url: Optional[str]) -> None:
    """Show transaction TX_HASH."""
    url = _resolve_rpc_url(rpc_url)
    _echo_json(_run(get_transaction(tx_hash, url)))


@cli.command()
@click.argument("tx_hash")
@click.option("--confirmations", "-c", default=1, show_default=True, type=int)
@rpc_url_option
def wait(tx_hash: str, confirmations: int, rpc_url: Optional[str]) -> None:
    """Block until TX_HASH has enough confirmations, then print the receipt."""
    url = _resolve_rpc_url(rpc_url)
    _echo_json(_run(wait_for_transaction(tx_hash, url, confirmations)))


# ============ IPFS ============


@cli.group()
def ipfs() -> None:
    """Add and fetch IPFS content."""


async def _ipfs_add(data: bytes) -> str:
    async with load_settings().ipfs_client() as client:
        return await add_file_to_ipfs(client, data)


async def _ipfs_cat(cid: str) -> bytes:
    async with load_settings().ipfs_client() as client:
        return await get_file_from_ipfs(client, cid)


@ipfs.command("add")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def ipfs_add(path: Path) -> None:
    """Add the file at PATH and print its CID."""
    click.echo(_run(_ipfs_add(path.read_bytes())))


@ipfs.command("cat")
@click.argument("cid")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path))
def ipfs_cat(cid: str, output: Optional[Path]) -> None:
    """Fetch CID to stdout or to --output."""
    data = _run(_ipfs_cat(cid))
    if output:
        output.write_bytes(data)
        click.echo(f"Wrote {len(data)} bytes to {output}")
    else:
        click.echo(data, nl=False)


# ============ Entry Points ============


def main() -> None:
    """chaingate CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
