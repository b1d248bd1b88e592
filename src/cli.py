"""CLI interface for the trade ledger.

Commands:
    market                    List quoted stocks
    buy SYMBOL QUANTITY       Buy shares at the current quote
    sell SYMBOL QUANTITY      Sell shares at the current quote
    portfolio                 Show holdings, valuation and balance
    history                   Show executed trades
"""

import logging
from pathlib import Path

import click
from alembic import command
from alembic.config import Config

from src.api_client import APIError, ClientError, NetworkError, QuoteAPIClient
from src.config import ConfigError, Settings, load_settings
from src.database import Database, DatabaseError, SQLiteError
from src.market import Market, QuoteSource, default_market
from src.models.account import Account
from src.models.snapshot import SnapshotError
from src.persistence import AccountStore
from src.reporting import format_history, format_portfolio
from src.trading import buy_at_market, sell_at_market

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"

logger = logging.getLogger(__name__)


def ensure_database_initialized(db_path: str) -> None:
    """Bring the database schema up to date with Alembic migrations."""
    alembic_config = Config(str(ALEMBIC_INI))
    alembic_config.set_main_option(
        "sqlalchemy.url", f"sqlite:///{Path(db_path).resolve()}"
    )
    command.upgrade(alembic_config, "head")


class Session:
    """Account, store and quote source shared by one CLI invocation."""

    def __init__(self, settings: Settings, user: str, quote_source: QuoteSource):
        ensure_database_initialized(settings.db_path)
        self.store = AccountStore(
            Database(db_path=settings.db_path, encryption_key=settings.db_encryption_key)
        )
        self.quote_source = quote_source

        snapshot = self.store.load(user)
        if snapshot is None:
            logger.info(f"Opening account {user} with {settings.starting_balance:.2f}")
            self.account = Account(user, settings.starting_balance)
        else:
            self.account = Account.from_snapshot(snapshot)

    def save(self) -> None:
        self.store.save(self.account.snapshot())


def _quote_source(settings: Settings) -> QuoteSource:
    if settings.quote_api_url:
        return QuoteAPIClient(settings.quote_api_url)
    return default_market()


@click.group()
@click.option(
    "--user",
    default="default",
    show_default=True,
    help="Account to trade with. Created with STARTING_BALANCE on first use.",
)
@click.pass_context
def cli(ctx, user: str):
    """Trade ledger CLI - paper trading against quoted prices."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["user"] = user


def _open_session(ctx) -> Session:
    try:
        settings = load_settings()
        return Session(settings, ctx.obj["user"], _quote_source(settings))
    except (ConfigError, DatabaseError, SnapshotError) as e:
        raise click.ClickException(str(e)) from e


@cli.command()
def market():
    """List quoted stocks."""
    try:
        source = _quote_source(load_settings())
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if not isinstance(source, Market):
        click.echo("Listing is only available for the built-in market.", err=True)
        return
    click.echo("Market Stocks:")
    for quote in source.quotes():
        click.echo(str(quote))


def _trade(ctx, side: str, symbol: str, quantity: int) -> None:
    session = _open_session(ctx)
    operation = buy_at_market if side == "buy" else sell_at_market

    try:
        result = operation(session.account, session.quote_source, symbol, quantity)
    except (NetworkError, APIError, ClientError) as e:
        click.echo(f"✗ Quote lookup failed: {str(e)}", err=True)
        ctx.exit(1)

    if not result:
        click.echo(f"✗ {result.message}", err=True)
        ctx.exit(1)

    try:
        session.save()
    except (DatabaseError, SQLiteError) as e:
        raise click.ClickException(f"Trade not saved: {str(e)}") from e
    click.echo(f"✓ {result.message}")
    click.echo(f"Available balance: ${session.account.balance:.2f}")


@cli.command()
@click.argument("symbol")
@click.argument("quantity", type=int)
@click.pass_context
def buy(ctx, symbol: str, quantity: int):
    """Buy QUANTITY shares of SYMBOL at the current quote."""
    _trade(ctx, "buy", symbol, quantity)


@cli.command()
@click.argument("symbol")
@click.argument("quantity", type=int)
@click.pass_context
def sell(ctx, symbol: str, quantity: int):
    """Sell QUANTITY shares of SYMBOL at the current quote."""
    _trade(ctx, "sell", symbol, quantity)


@cli.command()
@click.pass_context
def portfolio(ctx):
    """Show holdings valued at current quotes."""
    session = _open_session(ctx)
    try:
        click.echo(format_portfolio(session.account, session.quote_source))
    except (NetworkError, APIError, ClientError) as e:
        click.echo(f"✗ Quote lookup failed: {str(e)}", err=True)
        ctx.exit(1)


@cli.command()
@click.pass_context
def history(ctx):
    """Show executed trades, oldest first."""
    session = _open_session(ctx)
    click.echo(format_history(session.account))


if __name__ == "__main__":
    cli()
