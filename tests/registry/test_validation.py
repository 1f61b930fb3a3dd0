import pytest

from nethermind.clearsign.registry import validate_descriptor
from nethermind.clearsign.types import Descriptor
from tests.utils import USDC

TRANSFER_PATH = 'display.formats["transfer(address to, uint256 amount)"]'


def test_valid_descriptor(erc20_descriptor):
    result = validate_descriptor(erc20_descriptor(USDC))

    assert result.valid
    assert result.errors == []


def test_descriptor_instance_is_validated(erc20_descriptor):
    assert validate_descriptor(Descriptor.from_dict(erc20_descriptor(USDC))).valid


@pytest.mark.parametrize("document", [None, [], "descriptor"])
def test_non_object_descriptor(document):
    result = validate_descriptor(document)

    assert not result.valid
    assert result.errors[0].message == "Descriptor must be an object"


def test_missing_sections():
    result = validate_descriptor({})

    assert not result.valid
    assert [e.path for e in result.errors] == ["context", "display"]


def test_eip712_context_without_contract(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["context"] = {"eip712": {"domain": {"name": "Permit2"}}}

    assert validate_descriptor(document).valid


def test_context_without_binding(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["context"] = {"$id": "Unbound"}

    result = validate_descriptor(document)

    assert [e.path for e in result.errors] == ["context"]


def test_empty_deployments(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["context"]["contract"]["deployments"] = []

    result = validate_descriptor(document)

    assert not result.valid
    assert [e.path for e in result.errors] == ["context.contract.deployments"]


def test_invalid_deployment_entries(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["context"]["contract"]["deployments"] = [
        {"chainId": "1", "address": USDC},
        {"chainId": 1, "address": "0x1234"},
    ]

    result = validate_descriptor(document)

    assert [e.path for e in result.errors] == [
        "context.contract.deployments[0].chainId",
        "context.contract.deployments[1].address",
    ]


def test_empty_formats(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["display"]["formats"] = {}

    result = validate_descriptor(document)

    assert [e.path for e in result.errors] == ["display.formats"]


def test_field_errors_are_all_collected(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["display"]["formats"]["transfer(address to, uint256 amount)"]["fields"] = [
        {"path": "amount", "format": "tokenAmount"},
        {"path": "", "label": "Destination", "format": "percentage"},
    ]

    result = validate_descriptor(document)

    assert not result.valid
    assert [e.path for e in result.errors] == [
        f"{TRANSFER_PATH}.fields[0].label",
        f"{TRANSFER_PATH}.fields[1].path",
        f"{TRANSFER_PATH}.fields[1].format",
    ]
    assert "tokenAmount" in result.errors[2].message
    assert "fields[0].label" in result.summary()


def test_format_without_fields(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["display"]["formats"]["transfer(address to, uint256 amount)"] = {"intent": "Send"}

    result = validate_descriptor(document)

    assert [e.path for e in result.errors] == [f"{TRANSFER_PATH}.fields"]


def test_invalid_metadata(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["metadata"] = {"owner": 42, "info": "https://example.com"}

    result = validate_descriptor(document)

    assert [e.path for e in result.errors] == ["metadata.owner", "metadata.info"]
