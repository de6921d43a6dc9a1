"""Typer CLI interface for lotledger."""

from datetime import date, time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from uuid import uuid4

import typer

from lotledger.config import get_settings
from lotledger.exceptions import LedgerError
from lotledger.logging_config import setup_logging
from lotledger.models.enums import AccountKind, Currency, MovementDirection, TradeSide

app = typer.Typer(
    name="lotledger",
    help="FIFO lot ledger with realized gain tracking.",
)
lot_app = typer.Typer(help="Inspect and correct individual lots.")
app.add_typer(lot_app, name="lot")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """FIFO lot ledger with realized gain tracking."""
    setup_logging("DEBUG" if verbose else get_settings().log_level)


# --- Helpers ---


def _db_option() -> Path:
    return typer.Option(None, "--db", help="Path to the SQLite database file")


def _open_engine(db: Path | None):
    """Open (creating if needed) the database and load its ledger."""
    from lotledger.db.repository import LedgerRepository
    from lotledger.db.schema import create_schema
    from lotledger.engines.bookkeeping import BookkeepingEngine

    settings = get_settings()
    db = db or settings.db_path
    db.parent.mkdir(parents=True, exist_ok=True)
    conn = create_schema(db)
    engine = BookkeepingEngine(
        LedgerRepository(conn),
        default_commission_pct=settings.default_commission_pct,
        commission_defaults=settings.commission_defaults(),
        reference_currency=settings.reference_currency,
    )
    return conn, engine


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _parse_amount(raw: str, name: str = "amount") -> Decimal:
    try:
        value = Decimal(raw.replace(",", "."))
    except InvalidOperation:
        _fail(f"Invalid {name}: {raw!r}")
    if not value.is_finite() or value <= 0:
        _fail(f"Invalid {name}: {raw!r} (must be greater than zero)")
    return value


def _parse_rate_arg(raw: str) -> Decimal:
    from lotledger.ingestion.parsers import parse_rate

    rate = parse_rate(raw)
    if rate is None:
        _fail(f"Invalid rate: {raw!r} (positive number, up to three decimals)")
    return rate


def _parse_commission_arg(raw: str | None) -> Decimal | None:
    from lotledger.ingestion.parsers import MAX_COMMISSION_PCT, parse_commission

    if raw is None:
        return None
    pct = parse_commission(raw)
    if pct is None:
        _fail(f"Invalid commission: {raw!r} (between 0 and {MAX_COMMISSION_PCT}%)")
    return pct


def _stamp(raw_date: str | None, raw_time: str | None) -> tuple[date, time]:
    """Explicit date/time when given, the civil clock otherwise."""
    from lotledger.timezone import civil_stamp

    event_date, event_time = civil_stamp(offset_hours=get_settings().utc_offset_hours)
    try:
        if raw_date is not None:
            event_date = date.fromisoformat(raw_date)
            event_time = time(0, 0)
        if raw_time is not None:
            event_time = time.fromisoformat(raw_time)
    except ValueError as exc:
        _fail(f"Invalid date or time: {exc}")
    return event_date, event_time


def _fmt(value: Decimal | None) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


def _echo_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        typer.echo(f"Warning: {warning}", err=True)


# --- History commands ---


@app.command(name="import")
def import_cmd(
    file: Path = typer.Argument(..., help="JSON history export to import"),
    db: Path | None = _db_option(),
) -> None:
    """Import trades and movements from a JSON file and rebuild the ledger."""
    from lotledger.ingestion.manual import ManualAdapter

    adapter = ManualAdapter()
    try:
        result = adapter.parse(file)
    except (FileNotFoundError, LedgerError) as exc:
        _fail(str(exc))
    _echo_warnings(adapter.validate(result))

    conn, engine = _open_engine(db)
    try:
        summary = engine.import_history(result.history)
    finally:
        conn.close()

    _echo_warnings(summary["skipped"])
    _echo_warnings(engine.warnings)
    typer.echo(f"Imported {result.source}:")
    typer.echo(f"  Trades:     {summary['trades']}")
    typer.echo(f"  Movements:  {summary['movements']}")
    typer.echo(f"  Held:       {_fmt(engine.available_quantity())}")


@app.command()
def trade(
    side: TradeSide = typer.Argument(..., help="buy or sell"),
    amount: str = typer.Argument(..., help="Money paid (buy) or received (sell)"),
    rate: str = typer.Argument(..., help="Price of one unit in the trade currency"),
    currency: Currency = typer.Option(Currency.UYU, "--currency", "-c", help="Trade currency"),
    commission: str | None = typer.Option(
        None, "--commission", help="Platform commission in percent (default from settings)"
    ),
    bank_commission: str = typer.Option("0", "--bank-commission", help="Bank fee on a buy"),
    bank: str | None = typer.Option(None, "--bank", help="Bank account used"),
    trade_date: str | None = typer.Option(None, "--date", help="Trade date (YYYY-MM-DD)"),
    trade_time: str | None = typer.Option(None, "--time", help="Trade time (HH:MM)"),
    force: bool = typer.Option(False, "--force", help="Record a sale even if inventory is short"),
    db: Path | None = _db_option(),
) -> None:
    """Record a buy or sell and print its gain."""
    from lotledger.models.history import Trade

    parsed_amount = _parse_amount(amount)
    parsed_rate = _parse_rate_arg(rate)
    pct = _parse_commission_arg(commission)
    try:
        fee = Decimal(bank_commission.replace(",", "."))
    except InvalidOperation:
        _fail(f"Invalid bank commission: {bank_commission!r}")
    event_date, event_time = _stamp(trade_date, trade_time)

    conn, engine = _open_engine(db)
    try:
        preview = engine.ledger.quote(side, parsed_amount, parsed_rate, currency, pct)
        if side == TradeSide.SELL and not force and not engine.can_consume(preview.net_quantity):
            _fail(
                f"Insufficient inventory: need {_fmt(preview.net_quantity)}, "
                f"hold {_fmt(engine.available_quantity())} (use --force to record anyway)"
            )
        record = Trade(
            id=str(uuid4()),
            side=side,
            trade_date=event_date,
            trade_time=event_time,
            amount=parsed_amount,
            rate=parsed_rate,
            currency=currency,
            commission_pct=pct,
            bank_commission=fee,
            bank=bank,
        )
        gain = engine.record_trade(record)
    except LedgerError as exc:
        _fail(str(exc))
    except ValueError as exc:
        _fail(f"Invalid trade: {exc}")
    finally:
        conn.close()

    _echo_warnings(engine.warnings)
    typer.echo(f"Recorded {side.value} {record.id}")
    typer.echo(f"  Units:  {_fmt(preview.net_quantity)}")
    typer.echo(f"  Gain:   {_fmt(gain)}")
    typer.echo(f"  Held:   {_fmt(engine.available_quantity())}")


@app.command()
def move(
    direction: MovementDirection = typer.Argument(..., help="inflow or outflow"),
    amount: str = typer.Argument(..., help="Units (asset) or money (bank) moved"),
    account: AccountKind = typer.Option(AccountKind.ASSET, "--account", help="asset or bank"),
    reference_rate: str | None = typer.Option(
        None, "--rate", help="Unit cost for an asset inflow (default: last purchase rate)"
    ),
    bank: str | None = typer.Option(None, "--bank", help="Bank account used"),
    description: str | None = typer.Option(None, "--description", "-d"),
    move_date: str | None = typer.Option(None, "--date", help="Movement date (YYYY-MM-DD)"),
    move_time: str | None = typer.Option(None, "--time", help="Movement time (HH:MM)"),
    force: bool = typer.Option(False, "--force", help="Record an outflow even if inventory is short"),
    db: Path | None = _db_option(),
) -> None:
    """Record a deposit or withdrawal."""
    from lotledger.models.history import Movement

    parsed_amount = _parse_amount(amount)
    rate = _parse_rate_arg(reference_rate) if reference_rate is not None else None
    event_date, event_time = _stamp(move_date, move_time)

    conn, engine = _open_engine(db)
    try:
        if (
            account == AccountKind.ASSET
            and direction == MovementDirection.OUTFLOW
            and not force
            and not engine.can_consume(parsed_amount)
        ):
            _fail(
                f"Insufficient inventory: need {_fmt(parsed_amount)}, "
                f"hold {_fmt(engine.available_quantity())} (use --force to record anyway)"
            )
        record = Movement(
            id=str(uuid4()),
            direction=direction,
            account=account,
            movement_date=event_date,
            movement_time=event_time,
            amount=parsed_amount,
            reference_rate=rate,
            bank=bank,
            description=description,
        )
        engine.record_movement(record)
    except LedgerError as exc:
        _fail(str(exc))
    finally:
        conn.close()

    _echo_warnings(engine.warnings)
    typer.echo(f"Recorded {account.value} {direction.value} {record.id}")
    typer.echo(f"  Held:   {_fmt(engine.available_quantity())}")


@app.command(name="delete-trade")
def delete_trade(
    trade_id: str = typer.Argument(..., help="Trade ID"),
    db: Path | None = _db_option(),
) -> None:
    """Delete a trade and rebuild the ledger."""
    conn, engine = _open_engine(db)
    try:
        engine.delete_trade(trade_id)
    except LedgerError as exc:
        _fail(str(exc))
    finally:
        conn.close()
    _echo_warnings(engine.warnings)
    typer.echo(f"Deleted trade {trade_id}")


@app.command(name="delete-movement")
def delete_movement(
    movement_id: str = typer.Argument(..., help="Movement ID"),
    db: Path | None = _db_option(),
) -> None:
    """Delete a movement; asset movements rebuild the ledger."""
    conn, engine = _open_engine(db)
    try:
        engine.delete_movement(movement_id)
    except LedgerError as exc:
        _fail(str(exc))
    finally:
        conn.close()
    _echo_warnings(engine.warnings)
    typer.echo(f"Deleted movement {movement_id}")


@app.command()
def recalc(db: Path | None = _db_option()) -> None:
    """Rebuild every lot and gain from the full history."""
    conn, engine = _open_engine(db)
    try:
        run = engine.recalculate(reason="manual")
    finally:
        conn.close()

    _echo_warnings(engine.warnings)
    typer.echo("Recalculation complete:")
    typer.echo(f"  Trades:      {run.trades}")
    typer.echo(f"  Movements:   {run.movements}")
    typer.echo(f"  Active lots: {run.lots}")
    typer.echo(f"  Held:        {_fmt(run.total_quantity)}")
    typer.echo(f"  Total gain:  {_fmt(run.total_gain)}")


# --- Read-only commands ---


@app.command()
def inventory(db: Path | None = _db_option()) -> None:
    """Show active lots in FIFO order."""
    from rich.console import Console
    from rich.table import Table

    from lotledger.timezone import format_date, format_time

    conn, engine = _open_engine(db)
    try:
        lots = engine.ledger.active_lots()
        summary = engine.summary()
    finally:
        conn.close()

    console = Console()
    if not lots:
        console.print("[dim]No active lots.[/dim]")
        return

    cheapest_id = summary.cheapest_lot.id if summary.cheapest_lot else None
    tbl = Table(title="Inventory", show_header=True)
    tbl.add_column("Lot", style="cyan")
    tbl.add_column("Acquired")
    tbl.add_column("Unit cost", justify="right")
    tbl.add_column("Original", justify="right")
    tbl.add_column("Remaining", justify="right", style="green")
    for lot in lots:
        marker = " *" if lot.id == cheapest_id else ""
        tbl.add_row(
            f"{lot.id}{marker}",
            f"{format_date(lot.acquired_date)} {format_time(lot.acquired_time)}",
            str(lot.unit_cost),
            _fmt(lot.original_quantity),
            _fmt(lot.remaining_quantity),
        )
    console.print(tbl)
    console.print(f"Held: [bold]{_fmt(summary.total_quantity)}[/bold]")
    console.print(f"Cost: {_fmt(summary.inventory_cost)}")
    console.print(f"Average unit cost: {_fmt(summary.average_unit_cost)}")
    if summary.cheapest_lot:
        console.print(f"[dim]* cheapest lot @ {summary.cheapest_lot.unit_cost}[/dim]")


@app.command()
def history(db: Path | None = _db_option()) -> None:
    """List recorded trades and movements."""
    from rich.console import Console
    from rich.table import Table

    from lotledger.timezone import format_date, format_time

    conn, engine = _open_engine(db)
    conn.close()

    console = Console()
    trades = Table(title="Trades", show_header=True)
    for column in ("ID", "Side", "Date", "Amount", "Rate", "Gain"):
        trades.add_column(column)
    for record in engine.history.trades:
        trades.add_row(
            record.id,
            record.side.value,
            f"{format_date(record.trade_date)} {format_time(record.trade_time)}",
            f"{_fmt(record.amount)} {record.currency.value}",
            str(record.rate),
            _fmt(record.gain),
        )
    console.print(trades)

    movements = Table(title="Movements", show_header=True)
    for column in ("ID", "Direction", "Account", "Date", "Amount"):
        movements.add_column(column)
    for record in engine.history.movements:
        movements.add_row(
            record.id,
            record.direction.value,
            record.account.value,
            f"{format_date(record.movement_date)} {format_time(record.movement_time)}",
            _fmt(record.amount),
        )
    console.print(movements)


@app.command()
def quote(
    side: TradeSide = typer.Argument(..., help="buy or sell"),
    amount: str = typer.Argument(..., help="Money paid (buy) or received (sell)"),
    rate: str = typer.Argument(..., help="Price of one unit"),
    currency: Currency = typer.Option(Currency.UYU, "--currency", "-c"),
    commission: str | None = typer.Option(None, "--commission", help="Commission in percent"),
) -> None:
    """Show the units a trade would move, without recording it."""
    from lotledger.engines.ledger import quote_trade

    pct = _parse_commission_arg(commission)
    if pct is None:
        pct = get_settings().commission_defaults()[currency]
    result = quote_trade(side, _parse_amount(amount), _parse_rate_arg(rate), pct, currency)

    label = "Receive" if side == TradeSide.BUY else "Deliver"
    typer.echo(f"Gross units:  {_fmt(result.quantity)}")
    typer.echo(f"Commission:   {_fmt(result.commission)} ({result.commission_pct}%)")
    typer.echo(f"{label}:      {_fmt(result.net_quantity)}")


# --- Lot commands ---


@lot_app.command("add")
def lot_add(
    quantity: str = typer.Argument(..., help="Units in the lot"),
    unit_cost: str = typer.Argument(..., help="Cost of one unit"),
    lot_date: str | None = typer.Option(None, "--date", help="Acquisition date (YYYY-MM-DD)"),
    lot_id: str | None = typer.Option(None, "--id", help="Lot ID (default: random)"),
    db: Path | None = _db_option(),
) -> None:
    """Add a lot by hand. It is lost on the next full recalculation."""
    from lotledger.models.lot import Lot

    units = _parse_amount(quantity, "quantity")
    cost = _parse_amount(unit_cost, "unit cost")
    acquired_date, acquired_time = _stamp(lot_date, None)

    conn, engine = _open_engine(db)
    try:
        lot = engine.add_lot(Lot(
            id=lot_id or str(uuid4()),
            acquired_date=acquired_date,
            acquired_time=acquired_time,
            unit_cost=cost,
            original_quantity=units,
            remaining_quantity=units,
        ))
    finally:
        conn.close()
    _echo_warnings(engine.warnings)
    typer.echo(f"Added lot {lot.id}: {_fmt(lot.remaining_quantity)} @ {lot.unit_cost}")


@lot_app.command("edit")
def lot_edit(
    lot_id: str = typer.Argument(..., help="Lot ID"),
    unit_cost: str | None = typer.Option(None, "--cost", help="New unit cost"),
    remaining: str | None = typer.Option(None, "--remaining", help="New remaining quantity"),
    lot_date: str | None = typer.Option(None, "--date", help="New acquisition date (YYYY-MM-DD)"),
    db: Path | None = _db_option(),
) -> None:
    """Correct a lot in place. Edits are lost on the next full recalculation."""
    cost = _parse_amount(unit_cost, "unit cost") if unit_cost is not None else None
    units = None
    if remaining is not None:
        try:
            units = Decimal(remaining.replace(",", "."))
        except InvalidOperation:
            _fail(f"Invalid quantity: {remaining!r}")
        if units < 0:
            _fail(f"Invalid quantity: {remaining!r} (must not be negative)")
    new_date = None
    if lot_date is not None:
        try:
            new_date = date.fromisoformat(lot_date)
        except ValueError as exc:
            _fail(f"Invalid date: {exc}")

    conn, engine = _open_engine(db)
    try:
        lot = engine.edit_lot(
            lot_id, unit_cost=cost, remaining_quantity=units, acquired_date=new_date
        )
    except LedgerError as exc:
        _fail(str(exc))
    finally:
        conn.close()
    _echo_warnings(engine.warnings)
    typer.echo(
        f"Updated lot {lot.id}: {_fmt(lot.remaining_quantity)} of "
        f"{_fmt(lot.original_quantity)} @ {lot.unit_cost}"
    )


@lot_app.command("delete")
def lot_delete(
    lot_id: str = typer.Argument(..., help="Lot ID"),
    db: Path | None = _db_option(),
) -> None:
    """Delete a lot. It comes back on the next full recalculation if history implies it."""
    conn, engine = _open_engine(db)
    try:
        engine.delete_lot(lot_id)
    except LedgerError as exc:
        _fail(str(exc))
    finally:
        conn.close()
    _echo_warnings(engine.warnings)
    typer.echo(f"Deleted lot {lot_id}")


if __name__ == "__main__":
    app()
