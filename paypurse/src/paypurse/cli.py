"""
Payment purse CLI - inspect, resync and spend the account's coin inventory.
"""

from __future__ import annotations

import asyncio
import sys

import typer
from loguru import logger
from pydantic import ValidationError

from paypurse.config import Settings
from paypurse.crypto import CryptoError, address_to_locking_script
from paypurse.errors import PurseError
from paypurse.wallet.service import PayPurse
from paypurse.wallet.transaction import Transaction, TxOutput

app = typer.Typer(
    name="paypurse",
    help="Payment purse coin inventory management",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def _load_purse(wif: str | None, redis_url: str | None) -> PayPurse:
    try:
        settings = Settings()
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(1)
    setup_logging(settings.log_level)
    overrides = {}
    if wif:
        overrides["wif"] = wif
    if redis_url:
        overrides["redis_url"] = redis_url
    if overrides:
        settings = settings.model_copy(update=overrides)

    if not settings.wif:
        logger.error("WIF required. Use --wif or the WIF env var")
        raise typer.Exit(1)

    try:
        return PayPurse.from_settings(settings)
    except (CryptoError, PurseError) as e:
        logger.error(f"Failed to initialize purse: {e}")
        raise typer.Exit(1)


async def _run(purse: PayPurse, action) -> None:
    try:
        await action(purse)
    finally:
        await purse.close()


@app.command()
def info(
    wif: str = typer.Option(None, "--wif", envvar="WIF", help="Owner private key (WIF)"),
    redis_url: str = typer.Option(None, "--redis-url", envvar="REDIS_URL"),
) -> None:
    """Show the owner address and the balance of the selection window."""
    purse = _load_purse(wif, redis_url)

    async def show(p: PayPurse) -> None:
        balance, count = await p.balance()
        typer.echo(f"Address: {p.address}")
        typer.echo(f"Balance: {balance:,} sats in {count} coin(s)")

    try:
        asyncio.run(_run(purse, show))
    except PurseError as e:
        logger.error(f"Failed to read balance: {e}")
        raise typer.Exit(1)


@app.command()
def refresh(
    wif: str = typer.Option(None, "--wif", envvar="WIF", help="Owner private key (WIF)"),
    redis_url: str = typer.Option(None, "--redis-url", envvar="REDIS_URL"),
) -> None:
    """Replace the local inventory with the remote unspent set."""
    purse = _load_purse(wif, redis_url)

    async def resync(p: PayPurse) -> None:
        balance, count = await p.refresh_balance()
        typer.echo(f"Resynced {p.address}: {balance:,} sats in {count} coin(s)")

    try:
        asyncio.run(_run(purse, resync))
    except PurseError as e:
        logger.error(f"Resync failed: {e}")
        raise typer.Exit(1)


@app.command()
def observe(
    tx_hex: str = typer.Argument(..., help="Raw transaction hex"),
    wif: str = typer.Option(None, "--wif", envvar="WIF", help="Owner private key (WIF)"),
    redis_url: str = typer.Option(None, "--redis-url", envvar="REDIS_URL"),
) -> None:
    """Apply a transaction to the inventory (spent inputs out, our outputs in)."""
    try:
        tx = Transaction.from_hex(tx_hex)
    except PurseError as e:
        logger.error(f"{e}")
        raise typer.Exit(1)

    purse = _load_purse(wif, redis_url)

    async def apply(p: PayPurse) -> None:
        await p.update_from_tx(tx)
        typer.echo(f"Observed {tx.txid()}")

    try:
        asyncio.run(_run(purse, apply))
    except PurseError as e:
        logger.error(f"Failed to apply transaction: {e}")
        raise typer.Exit(1)


@app.command()
def pay(
    address: str = typer.Argument(..., help="Destination P2PKH address"),
    amount: int = typer.Argument(..., min=1, help="Amount in satoshis"),
    wif: str = typer.Option(None, "--wif", envvar="WIF", help="Owner private key (WIF)"),
    redis_url: str = typer.Option(None, "--redis-url", envvar="REDIS_URL"),
) -> None:
    """Fund and sign a payment, printing the raw transaction (not broadcast)."""
    try:
        locking_script = address_to_locking_script(address)
    except CryptoError as e:
        logger.error(f"{e}")
        raise typer.Exit(1)

    purse = _load_purse(wif, redis_url)
    tx = Transaction(outputs=[TxOutput(satoshis=amount, locking_script=locking_script)])

    async def fund(p: PayPurse) -> None:
        await p.fund_and_sign(tx)
        typer.echo(tx.to_hex())

    try:
        asyncio.run(_run(purse, fund))
    except PurseError as e:
        logger.error(f"Funding failed: {e}")
        raise typer.Exit(1)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
