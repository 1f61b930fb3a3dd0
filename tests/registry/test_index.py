from nethermind.clearsign.decoding import SignatureRegistry, compute_selector
from nethermind.clearsign.registry import CommunityRegistry, DescriptorIndex
from nethermind.clearsign.types import Descriptor
from tests.utils import USDC, WETH


def _index(community: CommunityRegistry | None = None) -> DescriptorIndex:
    return DescriptorIndex(SignatureRegistry(), community=community)


def test_find_builtin_by_selector_and_signature():
    index = _index()

    by_selector = index.find("0xA9059CBB")
    by_canonical = index.find("transfer(address,uint256)")
    by_named = index.find("transfer(address recipient, uint256 value)")

    assert by_selector is not None
    assert by_selector.descriptor.context.id == "ERC20"
    assert by_selector.format.intent == "Send tokens"
    assert by_selector == by_canonical == by_named
    assert [p.name for p in by_selector.parameters] == ["to", "amount"]


def test_find_misses():
    index = _index()

    assert index.find("0xdeadbeef") is None
    assert index.find("doesNotExist(uint256)") is None
    assert index.find("broken(") is None


def test_erc20_shadows_erc721_on_colliding_signatures():
    index = _index()

    assert index.find("approve(address,uint256)").format.intent == "Approve spending"
    assert index.find("transferFrom(address,address,uint256)").format.intent == "Transfer tokens (on behalf)"
    assert index.find("safeTransferFrom(address,address,uint256)").format.intent == "Transfer NFT"
    assert index.find("setApprovalForAll(address,bool)").descriptor.context.id == "ERC721"


def test_weth_formats_match_on_signature():
    index = _index()

    deposit = index.find("deposit()")
    withdraw = index.find(compute_selector("withdraw(uint256)"))

    assert deposit.format.intent == "Wrap ETH"
    assert deposit.format.fields == ()
    assert withdraw.format.intent == "Unwrap ETH"
    assert withdraw.descriptor.owner == "WETH"


def test_custom_descriptor_takes_precedence(erc20_descriptor):
    index = _index()

    results = index.extend(erc20_descriptor(USDC))

    assert [r.valid for r in results] == [True]
    match = index.find("transfer(address,uint256)")
    assert match.format.intent == "Custom transfer"
    assert match.descriptor.owner == "Custom Protocol"
    assert [f.label for f in match.format.fields] == ["Value", "Destination"]

    # Other builtin formats are untouched
    assert index.find("approve(address,uint256)").format.intent == "Approve spending"


def test_community_tier_sits_between_custom_and_builtin(erc20_descriptor):
    community_doc = erc20_descriptor(USDC, intent="Community transfer")
    index = _index(CommunityRegistry.from_descriptors([community_doc]))

    assert index.find("0xa9059cbb").format.intent == "Community transfer"

    index.extend(erc20_descriptor(USDC, intent="Custom transfer"))
    assert index.find("0xa9059cbb").format.intent == "Custom transfer"


def test_extend_is_idempotent(erc20_descriptor):
    index = _index()
    descriptor = erc20_descriptor(USDC)

    index.extend(descriptor)
    first = index.find("transfer(address,uint256)")
    index.extend(descriptor)
    second = index.find("transfer(address,uint256)")

    assert index.get_stats()["custom"] == 1
    assert first == second


def test_extend_accepts_descriptor_instances(erc20_descriptor):
    index = _index()

    index.extend([Descriptor.from_dict(erc20_descriptor(USDC))])

    assert index.find("transfer(address,uint256)").format.intent == "Custom transfer"


def test_extend_accepts_eip712_descriptor_instances(erc20_descriptor):
    document = erc20_descriptor(USDC, intent="Permit transfer")
    document["context"] = {"$id": "Permit2", "eip712": {"domain": {"name": "Permit2"}}}
    index = _index()

    from_document = index.extend(document)
    from_instance = index.extend(Descriptor.from_dict(document))

    assert [r.valid for r in from_document] == [True]
    assert [r.valid for r in from_instance] == [True]
    assert index.get_stats()["custom"] == 1
    assert index.find("transfer(address,uint256)").format.intent == "Permit transfer"


def test_extend_accepts_tuples(erc20_descriptor):
    index = _index()

    results = index.extend((erc20_descriptor(USDC), erc20_descriptor(WETH, intent="Send WETH")))

    assert [r.valid for r in results] == [True, True]
    assert index.get_stats()["custom"] == 2


def test_extend_reports_unreadable_field_params(erc20_descriptor):
    document = erc20_descriptor(USDC)
    document["display"]["formats"]["transfer(address to, uint256 amount)"]["fields"][0]["params"] = ["abc"]
    index = _index()

    results = index.extend(document)

    assert [r.valid for r in results] == [False]
    assert results[0].errors[0].path == ""
    assert index.get_stats()["custom"] == 0


def test_extend_skips_invalid_descriptors(erc20_descriptor):
    index = _index()

    results = index.extend([{"context": {}, "display": {}}, erc20_descriptor(USDC)])

    assert [r.valid for r in results] == [False, True]
    assert {e.path for e in results[0].errors} == {"context", "display"}
    assert index.get_stats()["custom"] == 1


def test_extend_registers_signatures(erc20_descriptor):
    index = _index()
    descriptor = erc20_descriptor(USDC)
    descriptor["display"]["formats"]["stake(uint256 amount, uint256 duration)"] = {
        "intent": "Stake",
        "fields": [{"path": "amount", "label": "Amount", "format": "tokenAmount"}],
    }

    index.extend(descriptor)

    registered = index.signatures.get_by_selector(compute_selector("stake(uint256,uint256)"))
    assert registered is not None
    assert [p.name for p in registered.parameters] == ["amount", "duration"]
    assert index.find("stake(uint256,uint256)").format.intent == "Stake"


def test_find_by_address(erc20_descriptor):
    index = _index()
    index.extend(erc20_descriptor(USDC))

    assert index.find_by_address(USDC.lower(), 1).owner == "Custom Protocol"
    assert index.find_by_address(USDC, 10) is None
    assert index.find_by_address(WETH, 1).context.id == "WETH"


def test_stats(erc20_descriptor):
    index = _index(CommunityRegistry.from_descriptors([erc20_descriptor(USDC)]))

    stats = index.get_stats()

    assert stats["custom"] == 0
    assert stats["builtin"] == 3
    assert stats["external"] == {"protocols": 1, "descriptors": 1, "selectors": 1, "addresses": 1}
    assert len(index.get_all()) == 4
