"""
CLI integration tests using Click's test runner.

Chain reads are served by the fake JSON-RPC node; nothing touches the network.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from chaingate.cli import cli
from chaingate.sigil.wallet import sign_message

from conftest import ADDRESS, PRIVATE_KEY, RPC_URL, FakeNode


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


class TestVersion:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "chaingate" in result.output


class TestEndpoint:
    def test_resolves(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["endpoint", "infura", "KEY", "1"])
        assert result.exit_code == 0
        assert result.output.strip() == "https://mainnet.infura.io/v3/KEY"

    def test_unknown_network(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["endpoint", "infura", "KEY", "31337"])
        assert result.exit_code == 2
        assert "not supported" in result.output

    def test_unknown_provider_rejected_by_choice(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["endpoint", "ankr", "KEY", "1"])
        assert result.exit_code != 0


class TestWallet:
    def test_new_with_mnemonic(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["wallet", "new"])
        assert result.exit_code == 0
        assert "Mnemonic:" in result.output
        assert "Private key: 0x" in result.output

    def test_new_random(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["wallet", "new", "--no-mnemonic"])
        assert result.exit_code == 0
        assert "Mnemonic:" not in result.output

    def test_import(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["wallet", "import"], input=PRIVATE_KEY + "\n")
        assert result.exit_code == 0
        assert ADDRESS in result.output

    def test_check(self, runner: CliRunner) -> None:
        assert runner.invoke(cli, ["wallet", "check", ADDRESS]).exit_code == 0
        assert runner.invoke(cli, ["wallet", "check", "0x1234"]).exit_code == 1


class TestSigning:
    def test_sign(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["sign", "hello", "--private-key", PRIVATE_KEY])
        assert result.exit_code == 0
        assert result.output.strip() == sign_message(PRIVATE_KEY, "hello")

    def test_verify(self, runner: CliRunner) -> None:
        signature = sign_message(PRIVATE_KEY, "hello")
        result = runner.invoke(cli, ["verify", "hello", signature])
        assert result.exit_code == 0
        assert result.output.strip() == ADDRESS


class TestChainCommands:
    def test_balance(self, runner: CliRunner, node: FakeNode) -> None:
        node.on("eth_getBalance", hex(25 * 10**17))
        result = runner.invoke(cli, ["balance", ADDRESS, "--rpc-url", RPC_URL])
        assert result.exit_code == 0
        assert result.output.strip() == "2.5"

    def test_block_number(self, runner: CliRunner, node: FakeNode) -> None:
        node.on("eth_blockNumber", "0x2a")
        result = runner.invoke(cli, ["block", "--rpc-url", RPC_URL])
        assert result.output.strip() == "42"

    def test_rpc_error_exit_code(self, runner: CliRunner, node: FakeNode) -> None:
        result = runner.invoke(cli, ["tx", "0x" + "00" * 32, "--rpc-url", RPC_URL])
        assert result.exit_code == 4
        assert "RPC error" in result.output

    def test_missing_endpoint(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch, tmp_path
    ) -> None:
        monkeypatch.setattr("chaingate.config.CHAINGATE_ENV", tmp_path / ".env")
        for key in ("CHAINGATE_RPC_URL", "CHAINGATE_API_KEY"):
            monkeypatch.delenv(key, raising=False)
        result = runner.invoke(cli, ["balance", ADDRESS])
        assert result.exit_code == 1
        assert "No RPC endpoint configured" in result.output
