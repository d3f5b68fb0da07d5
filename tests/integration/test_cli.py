"""Integration tests for the softee CLI against an on-disk sandbox."""
import json
import pytest
from click.testing import CliRunner
from softee.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    """Run a CLI command against a sandbox in a temporary directory."""
    def run(*args, now=None):
        base = ['--data-dir', str(tmp_path), '--log-level', 'WARNING']
        if now is not None:
            base += ['--now', str(now)]
        return runner.invoke(cli, base + list(args))
    return run


@pytest.fixture
def sandbox(invoke):
    """Sandbox with three items for alice and an open, funded ledger."""
    assert invoke('init', '--controller', 'admin', now=1000).exit_code == 0
    assert invoke('mint', 'alice', '--count', '3', now=1000).exit_code == 0
    assert invoke('fund', '100000').exit_code == 0
    for args in (
        ('admin', 'set-harvest-rate', '5'),
        ('admin', 'set-harvest-time-threshold', '60'),
        ('admin', 'open-staking'),
        ('admin', 'open-harvest'),
    ):
        result = invoke(*args)
        assert result.exit_code == 0, result.output
    return invoke


def test_stake_and_harvest(sandbox, tmp_path):
    """Walk through staking and harvesting from the command line."""
    result = sandbox('stake', '--as', 'alice', '0', '1', '2', now=1000)
    assert result.exit_code == 0
    assert "Staked: 0, 1, 2" in result.output

    result = sandbox('harvest', '--as', 'alice', '0', '1', '2', now=1100)
    assert result.exit_code == 0
    assert "Harvested 1500 SOFT" in result.output

    result = sandbox('harvest', '--as', 'alice', '0', '1', '2', now=1101)
    assert "Harvested 0 SOFT" in result.output

    result = sandbox('status')
    assert "1500 SOFT" in result.output
    assert "98500 SOFT" in result.output

    state = json.loads((tmp_path / "sandbox.json").read_text())
    assert state["ledger"]["distributed"] == 1500
    assert state["coin"]["balances"]["alice"] == 1500


def test_transfer_unstakes(sandbox):
    """Moving an item drops it from the sender's stakes."""
    sandbox('stake', '--as', 'alice', '0', '1', now=1000)
    result = sandbox('transfer', '0', 'bob', '--as', 'alice', now=1200)
    assert result.exit_code == 0

    result = sandbox('staked', 'alice')
    assert "Staked by alice: 1" in result.output
    result = sandbox('staked', 'bob')
    assert "Staked by bob: -" in result.output


def test_batch_skips_foreign_items(sandbox):
    sandbox('mint', 'bob', now=1000)
    result = sandbox('stake', '--as', 'alice', '0', '3', now=1000)
    assert result.exit_code == 0
    assert "Staked: 0" in result.output


def test_closed_staking_fails(sandbox):
    """A closed gate is reported as a CLI error; unstake still works."""
    sandbox('stake', '--as', 'alice', '0', now=1000)
    sandbox('admin', 'close-staking')

    result = sandbox('stake', '--as', 'alice', '1', now=1000)
    assert result.exit_code != 0
    assert "Staking is closed" in result.output

    result = sandbox('unstake', '--as', 'alice', '0', now=1000)
    assert result.exit_code == 0
    assert "Still staked: -" in result.output


def test_admin_requires_controller(sandbox):
    result = sandbox('admin', 'set-harvest-rate', '1', '--as', 'mallory')
    assert result.exit_code != 0
    assert "not the controller" in result.output


def test_withdraw_timelock(sandbox):
    """Withdrawal waits for the timelock, then drains the pool."""
    assert sandbox('admin', 'set-coin-withdraw-timelock', '5000').exit_code == 0

    result = sandbox('admin', 'set-coin-withdraw-timelock', '4000')
    assert result.exit_code != 0

    result = sandbox('admin', 'withdraw-coin', now=4999)
    assert result.exit_code != 0

    result = sandbox('admin', 'withdraw-coin', now=5000)
    assert result.exit_code == 0
    assert "Withdrew 100000 SOFT" in result.output


def test_requires_init(invoke):
    result = invoke('mint', 'alice')
    assert result.exit_code != 0
    assert "softee init" in result.output


def test_init_from_config(invoke, tmp_path):
    config = tmp_path / "ledger.yaml"
    config.write_text("harvest_rate: 9\nstaking_opened: true\n")

    result = invoke('init', '--controller', 'admin', '--config', str(config))
    assert result.exit_code == 0
    result = invoke('status')
    assert "9 SOFT/s" in result.output

    result = invoke('init', '--controller', 'admin')
    assert result.exit_code != 0
    assert "--force" in result.output
