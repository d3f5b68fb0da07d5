"""Softee CLI."""
import functools
from pathlib import Path
from typing import Optional, Tuple
import click
from loguru import logger

from .core.clock import ManualClock, SystemClock
from .core.config import get_data_dir, load_config, setup_logging
from .core.errors import SofteeError
from .core.sandbox import SANDBOX_FILE, Sandbox


def handle_errors(command):
    """Turn ledger and sandbox errors into a clean CLI failure."""
    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except (SofteeError, KeyError, PermissionError, ValueError) as e:
            logger.error(f"{command.__name__} failed: {e}")
            raise click.ClickException(str(e))
    return wrapper


def open_sandbox(ctx: click.Context) -> Sandbox:
    path = ctx.obj["path"]
    if not path.exists():
        raise click.ClickException(f"No sandbox at {path}. Run 'softee init' first.")
    return Sandbox.load(path, clock=ctx.obj["clock"])


def format_items(item_ids) -> str:
    return ", ".join(str(i) for i in item_ids) if item_ids else "-"


@click.group()
@click.version_option(package_name="softee")
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Sandbox directory (default: $SOFTEE_DATA_DIR or ~/.softee)')
@click.option('--now', type=int, help='Pretend the current unix time is NOW')
@click.option('--log-level', help='Log level (default: $SOFTEE_LOG_LEVEL or INFO)')
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path], now: Optional[int], log_level: Optional[str]):
    """Softee: soft staking ledger sandbox."""
    setup_logging(log_level)
    data_dir = data_dir or get_data_dir()
    ctx.obj = {
        "path": data_dir / SANDBOX_FILE,
        "clock": ManualClock(now) if now is not None else SystemClock(),
    }


@cli.command()
@click.option('--controller', required=True, help='Address allowed to configure the ledger')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              help='YAML file with initial ledger settings')
@click.option('--symbol', default='SOFT', help='Reward coin symbol')
@click.option('--force', is_flag=True, help='Overwrite an existing sandbox')
@click.pass_context
@handle_errors
def init(ctx: click.Context, controller: str, config_path: Optional[Path], symbol: str, force: bool):
    """Create a new sandbox."""
    path = ctx.obj["path"]
    if path.exists() and not force:
        raise click.ClickException(f"Sandbox already exists at {path}. Use --force to replace it.")
    config = load_config(config_path) if config_path else None
    sandbox = Sandbox.create(controller, path=path, clock=ctx.obj["clock"], config=config, symbol=symbol)
    sandbox.save()
    click.echo(f"Created sandbox at {path} controlled by {controller}")


@cli.command()
@click.argument('holder')
@click.option('--count', default=1, help='Number of items to mint')
@click.pass_context
@handle_errors
def mint(ctx: click.Context, holder: str, count: int):
    """Mint collection items to HOLDER."""
    sandbox = open_sandbox(ctx)
    minted = sandbox.collection.mint(holder, count)
    sandbox.save()
    click.echo(f"Minted {format_items(minted)} to {holder}")


@cli.command()
@click.argument('item_id', type=int)
@click.argument('to')
@click.option('--as', 'sender', required=True, help='Current holder of the item')
@click.pass_context
@handle_errors
def transfer(ctx: click.Context, item_id: int, to: str, sender: str):
    """Transfer ITEM_ID to another holder."""
    sandbox = open_sandbox(ctx)
    sandbox.collection.transfer(sender, to, item_id)
    sandbox.save()
    click.echo(f"Transferred item {item_id} from {sender} to {to}")


@cli.command()
@click.argument('item_id', type=int)
@click.pass_context
@handle_errors
def burn(ctx: click.Context, item_id: int):
    """Burn ITEM_ID."""
    sandbox = open_sandbox(ctx)
    sandbox.collection.burn(item_id)
    sandbox.save()
    click.echo(f"Burned item {item_id}")


@cli.command()
@click.argument('amount', type=int)
@click.pass_context
@handle_errors
def fund(ctx: click.Context, amount: int):
    """Add AMOUNT reward coin to the pool."""
    sandbox = open_sandbox(ctx)
    balance = sandbox.fund(amount)
    sandbox.save()
    click.echo(f"Pool balance: {balance} {sandbox.coin.symbol}")


@cli.command()
@click.argument('item_ids', nargs=-1, type=int, required=True)
@click.option('--as', 'caller', required=True, help='Holder staking the items')
@click.pass_context
@handle_errors
def stake(ctx: click.Context, item_ids: Tuple[int, ...], caller: str):
    """Stake ITEM_IDS held by the caller."""
    sandbox = open_sandbox(ctx)
    sandbox.ledger.stake(caller, item_ids)
    sandbox.save()
    click.echo(f"Staked: {format_items(sandbox.ledger.filter_staked(item_ids))}")


@cli.command()
@click.argument('item_ids', nargs=-1, type=int, required=True)
@click.option('--as', 'caller', required=True, help='Holder unstaking the items')
@click.pass_context
@handle_errors
def unstake(ctx: click.Context, item_ids: Tuple[int, ...], caller: str):
    """Unstake ITEM_IDS held by the caller."""
    sandbox = open_sandbox(ctx)
    sandbox.ledger.unstake(caller, item_ids)
    sandbox.save()
    click.echo(f"Still staked: {format_items(sandbox.ledger.filter_staked(item_ids))}")


@cli.command()
@click.argument('item_ids', nargs=-1, type=int, required=True)
@click.option('--as', 'caller', required=True, help='Holder collecting the reward')
@click.pass_context
@handle_errors
def harvest(ctx: click.Context, item_ids: Tuple[int, ...], caller: str):
    """Harvest reward accrued on ITEM_IDS."""
    sandbox = open_sandbox(ctx)
    amount = sandbox.ledger.harvest(caller, item_ids)
    sandbox.save()
    click.echo(f"Harvested {amount} {sandbox.coin.symbol}")


@cli.command()
@click.argument('holder')
@click.pass_context
@handle_errors
def staked(ctx: click.Context, holder: str):
    """List items HOLDER has staked."""
    sandbox = open_sandbox(ctx)
    click.echo(f"Staked by {holder}: {format_items(sandbox.ledger.staked(holder))}")


@cli.command()
@click.pass_context
@handle_errors
def status(ctx: click.Context):
    """Show ledger settings and totals."""
    sandbox = open_sandbox(ctx)
    ledger = sandbox.ledger
    symbol = sandbox.coin.symbol

    click.echo("\nLedger Status:")
    click.echo("-" * 50)
    click.echo(f"{'Controller':<25}{ledger.controller}")
    click.echo(f"{'Staking':<25}{'open' if ledger.staking_opened else 'closed'}")
    click.echo(f"{'Harvest':<25}{'open' if ledger.harvest_opened else 'closed'}")
    click.echo(f"{'Harvest rate':<25}{ledger.harvest_rate} {symbol}/s")
    click.echo(f"{'Harvest threshold':<25}{ledger.harvest_time_threshold}s")
    click.echo(f"{'Withdraw timelock':<25}{ledger.coin_withdraw_timelock}")
    click.echo(f"{'Distributed':<25}{ledger.distributed} {symbol}")
    click.echo(f"{'Pool balance':<25}{sandbox.pool_balance} {symbol}")
    click.echo(f"{'Stake records':<25}{len(ledger.vault)}")


@cli.group()
def admin():
    """Controller-only ledger settings."""
    pass


def admin_command(name: str, takes_value: bool = False, help_text: str = ""):
    """Build an ``admin`` subcommand that calls one ledger setter."""
    def run(ctx: click.Context, caller: Optional[str], value: Optional[int] = None):
        sandbox = open_sandbox(ctx)
        caller = caller or sandbox.ledger.controller
        setter = getattr(sandbox.ledger, name)
        result = setter(caller, value) if takes_value else setter(caller)
        sandbox.save()
        return sandbox, result

    def command(ctx, caller, value=None):
        sandbox, result = run(ctx, caller, value)
        if name == "withdraw_coin":
            click.echo(f"Withdrew {result} {sandbox.coin.symbol}")
        else:
            click.echo(f"{name.replace('_', ' ')}: done")

    command.__name__ = name
    command = handle_errors(command)
    command = click.pass_context(command)
    command = click.option('--as', 'caller', help='Caller address (default: the controller)')(command)
    if takes_value:
        command = click.argument('value', type=int)(command)
    return admin.command(name=name.replace('_', '-'), help=help_text)(command)


admin_command("set_harvest_rate", True, "Set reward per second per staked item.")
admin_command("set_harvest_time_threshold", True, "Set seconds required between harvests.")
admin_command("set_coin_withdraw_timelock", True, "Move the coin withdrawal deadline later.")
admin_command("open_staking", help_text="Allow staking.")
admin_command("close_staking", help_text="Stop new staking.")
admin_command("open_harvest", help_text="Allow harvesting.")
admin_command("close_harvest", help_text="Stop harvesting.")
admin_command("withdraw_coin", help_text="Send the reward pool to the controller.")


if __name__ == "__main__":
    cli()
