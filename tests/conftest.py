import random

import pytest
from eth_utils import to_checksum_address

from nethermind.clearsign import ClearSigner, SignerConfig
from nethermind.clearsign.decoding import CalldataCodec, SignatureRegistry
from nethermind.clearsign.formats import FieldFormatter

from tests.utils import FakeChainReader


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address():
        return to_checksum_address(random.randbytes(20).hex())

    return _generate_random_address


@pytest.fixture(name="codec")
def fixture_codec() -> CalldataCodec:
    return CalldataCodec(SignatureRegistry())


@pytest.fixture(name="chain_reader")
def fixture_chain_reader() -> FakeChainReader:
    return FakeChainReader()


@pytest.fixture(name="formatter")
def fixture_formatter(chain_reader) -> FieldFormatter:
    return FieldFormatter(chain_reader)


@pytest.fixture(name="signer")
def fixture_signer() -> ClearSigner:
    """Offline signer: no chain reads and no verified source lookups"""
    return ClearSigner(config=SignerConfig(use_sourcify_fallback=False))


@pytest.fixture(name="erc20_descriptor")
def fixture_erc20_descriptor():
    def _descriptor(address: str, intent: str = "Custom transfer", chain_id: int = 1) -> dict:
        return {
            "context": {
                "$id": "Custom Token",
                "contract": {"deployments": [{"chainId": chain_id, "address": address}]},
            },
            "metadata": {"owner": "Custom Protocol"},
            "display": {
                "formats": {
                    "transfer(address to, uint256 amount)": {
                        "intent": intent,
                        "fields": [
                            {"path": "amount", "label": "Value", "format": "tokenAmount"},
                            {"path": "to", "label": "Destination", "format": "addressName"},
                        ],
                    }
                }
            },
        }

    return _descriptor
