"""Tests for the Fraxtal JSON-RPC reader against a mocked web3 client."""
import pytest

from yieldforge.fraxtal.provider import FraxtalProvider, NetworkUnavailableError

from .conftest import WALLET_ADDRESS


def provider(w3, private_key=""):
    return FraxtalProvider(
        rpc_url="http://fraxtal.test",
        chain_id=2522,
        explorer_url="https://explorer.test/",
        private_key=private_key,
        w3=w3,
    )


class TestReads:
    def test_single_reads(self, make_w3):
        p = provider(make_w3(gas_price=7, block_number=99))
        assert p.chain_id() == 2522
        assert p.block_number() == 99
        assert p.gas_price_wei() == 7

    def test_failed_read_raises(self, make_w3):
        p = provider(make_w3(fail=("gas_price",)))
        with pytest.raises(NetworkUnavailableError, match="eth_gasPrice"):
            p.gas_price_wei()


class TestNetworkStatus:
    def test_without_wallet(self, make_w3):
        status = provider(make_w3()).network_status()
        assert status.chain_id == 2522
        assert status.block_number == 1_234_567
        assert status.gas_price_wei == "1000000000"
        assert status.wallet_configured is False
        assert status.wallet_address is None
        assert status.wallet_balance is None

    def test_with_wallet(self, make_w3):
        status = provider(make_w3(), private_key="0x01").network_status()
        assert status.wallet_configured is True
        assert status.wallet_address == WALLET_ADDRESS
        assert status.wallet_balance == "2 FRAX"

    def test_failed_balance_only_omits_balance(self, make_w3):
        p = provider(make_w3(fail=("get_balance",)), private_key="0x01")
        status = p.network_status()
        assert status.wallet_configured is True
        assert status.wallet_balance is None

    @pytest.mark.parametrize("read", ["chain_id", "block_number", "gas_price"])
    def test_any_chain_read_failure_fails_status(self, make_w3, read):
        with pytest.raises(NetworkUnavailableError):
            provider(make_w3(fail=(read,))).network_status()

    def test_chain_id_mismatch_is_reported_not_fatal(self, make_w3):
        status = provider(make_w3(chain_id=252)).network_status()
        assert status.chain_id == 252


def test_explorer_links(make_w3):
    p = provider(make_w3())
    assert p.explorer_link("tx", "0xabc") == "https://explorer.test/tx/0xabc"
    assert p.explorer_link("block", "1") == "https://explorer.test"
