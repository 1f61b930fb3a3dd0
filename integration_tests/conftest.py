import os

import pytest
from dotenv import load_dotenv

from nethermind.clearsign.providers.sourcify import SOURCIFY_API_URL


@pytest.fixture
def sourcify_url() -> str:
    load_dotenv()
    return os.environ.get("SOURCIFY_URL", SOURCIFY_API_URL)


@pytest.fixture
def eth_rpc_url() -> str:
    load_dotenv()
    return os.environ["ETH_JSON_RPC"]
