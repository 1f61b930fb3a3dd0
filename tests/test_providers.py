import pytest
from aiohttp import test_utils, web

from nethermind.clearsign.exceptions import ExternalLookupFailure
from nethermind.clearsign.providers import (
    SourcifyClient,
    Web3ChainReader,
    chain_name_to_id,
    extract_contract_name,
    get_chain_name,
    get_default_rpc,
)

VERIFIED = "0x1111111111111111111111111111111111111111"
INVALID_JSON = "0x2222222222222222222222222222222222222222"
SERVER_ERROR = "0x3333333333333333333333333333333333333333"

TOKEN_ABI = [
    {"type": "function", "name": "transfer", "inputs": []},
    {"type": "function", "name": "approve", "inputs": []},
    {"type": "function", "name": "balanceOf", "inputs": []},
]


async def sourcify_handler(request: web.Request) -> web.Response:
    assert request.query["fields"] == "abi"

    match request.match_info["address"]:
        case "0x1111111111111111111111111111111111111111":
            return web.json_response(
                {"match": "exact_match", "chainId": request.match_info["chain_id"], "abi": TOKEN_ABI}
            )
        case "0x2222222222222222222222222222222222222222":
            return web.Response(text="<html>maintenance</html>", content_type="text/html")
        case "0x3333333333333333333333333333333333333333":
            return web.Response(status=500, text="Internal Server Error")
        case _:
            return web.json_response({"error": "Contract not found"}, status=404)


@pytest.fixture(name="sourcify_app")
def fixture_sourcify_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/server/v2/contract/{chain_id}/{address}", sourcify_handler)
    return app


@pytest.mark.parametrize(
    "name, chain_id",
    [("ethereum", 1), ("Mainnet", 1), ("arbitrum", 42161), ("BASE", 8453), ("137", 137)],
)
def test_chain_name_to_id(name, chain_id):
    assert chain_name_to_id(name) == chain_id


def test_unknown_chain_name():
    with pytest.raises(ValueError, match="Unknown chain name"):
        chain_name_to_id("dogechain")


def test_chain_helpers():
    assert get_chain_name(42161) == "Arbitrum One"
    assert get_chain_name(999) == "Chain 999"
    assert get_default_rpc(1) == "https://eth.llamarpc.com"
    assert get_default_rpc(999) is None


@pytest.mark.parametrize(
    "abi, name",
    [
        ([{"type": "function", "name": "stake"}, {"type": "function", "name": "withdraw"}], "Staking Contract"),
        ([{"type": "function", "name": "swapExactTokensForTokens"}], "DEX Contract"),
        (TOKEN_ABI, "Token Contract"),
        ([{"type": "function", "name": "safeTransferFrom"}, {"type": "function", "name": "tokenURI"}], "NFT Contract"),
        ([{"type": "function", "name": "execute"}], None),
        (None, None),
    ],
)
def test_extract_contract_name(abi, name):
    assert extract_contract_name(abi) == name


def test_contract_url():
    client = SourcifyClient("https://sourcify.dev/server/")

    assert client.contract_url(1, VERIFIED) == f"https://sourcify.dev/server/v2/contract/1/{VERIFIED}?fields=abi"


@pytest.mark.asyncio
async def test_sourcify_verified_contract(sourcify_app):
    async with test_utils.TestServer(sourcify_app) as server:
        client = SourcifyClient(str(server.make_url("/server")))
        source = await client.fetch(1, VERIFIED)

    assert source.verified
    assert source.match == "exact_match"
    assert source.abi == TOKEN_ABI
    assert source.name == "Token Contract"


@pytest.mark.asyncio
async def test_sourcify_unverified_contract(sourcify_app):
    async with test_utils.TestServer(sourcify_app) as server:
        client = SourcifyClient(str(server.make_url("/server")))
        source = await client.fetch(1, "0x4444444444444444444444444444444444444444")

    assert not source.verified
    assert source.abi is None


@pytest.mark.asyncio
@pytest.mark.parametrize("address", [INVALID_JSON, SERVER_ERROR])
async def test_sourcify_errors(sourcify_app, address):
    async with test_utils.TestServer(sourcify_app) as server:
        client = SourcifyClient(str(server.make_url("/server")))
        with pytest.raises(ExternalLookupFailure):
            await client.fetch(1, address)


@pytest.mark.asyncio
async def test_sourcify_connection_error():
    client = SourcifyClient("http://127.0.0.1:1", timeout=2)

    with pytest.raises(ExternalLookupFailure):
        await client.fetch(1, VERIFIED)


@pytest.mark.asyncio
async def test_web3_reader_without_rpc():
    reader = Web3ChainReader(use_public_rpcs=False)

    assert reader.get_web3(1) is None
    assert await reader.token_metadata(1, VERIFIED) is None
    assert await reader.reverse_name(1, VERIFIED) is None


def test_web3_reader_connections_are_cached():
    reader = Web3ChainReader(rpc_urls={1: "http://localhost:8545"}, use_public_rpcs=False)

    assert reader.get_web3(1) is reader.get_web3(1)
    assert reader.get_web3(10) is None
