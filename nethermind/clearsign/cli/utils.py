import json
import logging
import os
from logging import Logger
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("cli")


def cli_logger_config(instrument_logger: Logger) -> Console:
    rich_console = Console()
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(logging.INFO)
    return rich_console


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


def load_json_documents(paths: tuple[str, ...] | list[str]) -> list[tuple[str, Any]]:
    """
    Loads descriptor documents from JSON files.  A file can hold a single document or a list of documents.

    :return: list of ``(source_label, document)`` pairs, one per document
    """
    documents = []
    for path in paths:
        with open(path, "r") as json_file:
            contents = json.load(json_file)

        if isinstance(contents, list):
            documents.extend((f"{Path(path).name}[{index}]", doc) for index, doc in enumerate(contents))
        else:
            documents.append((Path(path).name, contents))
    return documents


def load_abi(path: str) -> list[dict[str, Any]]:
    """Loads a JSON ABI.  Accepts a bare ABI list, or a compiler artifact with an ``abi`` key"""
    with open(path, "r") as abi_file:
        contents = json.load(abi_file)

    if isinstance(contents, dict) and isinstance(contents.get("abi"), list):
        return contents["abi"]
    if isinstance(contents, list):
        return contents

    raise click.BadParameter(f"{path} does not contain a JSON ABI")


# -------------------------------------------------------
#    Connections & Data Sources
# -------------------------------------------------------
json_rpc_option = click.option(
    "--json-rpc",
    "-rpc",
    "json_rpc",
    default=os.environ.get("JSON_RPC"),
    help="RPC url used for token metadata & reverse names.  If not provided, will use the JSON_RPC "
    "environment variable, then a public RPC for the chain",
)
sourcify_url_option = click.option(
    "--sourcify-url",
    "sourcify_url",
    default=os.environ.get("SOURCIFY_URL", "https://sourcify.dev/server"),
    show_default=True,
    help="Sourcify server used to fetch verified ABIs.  Can be set with the SOURCIFY_URL environment variable",
)
offline_option = click.option(
    "--offline",
    is_flag=True,
    default=False,
    help="Decode without any network requests.  Disables the Sourcify fallback and on-chain token metadata",
)

# -------------------------------------------------------
#    Required Parameters as Option Flag
# -------------------------------------------------------
chain_option = click.option(
    "--chain",
    "-c",
    "chain",
    default="ethereum",
    show_default=True,
    help="Chain name (ethereum, arbitrum, optimism, base, polygon) or chain id",
)
descriptor_option = click.option(
    "--descriptor",
    "-d",
    "descriptor_files",
    type=click.Path(exists=True, dir_okay=False),
    multiple=True,
    help="ERC-7730 descriptor JSON file to register before decoding.  Can be passed multiple times",
)
community_option = click.option(
    "--community-registry",
    "community_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Community registry bundle JSON, consulted after custom descriptors and before builtin descriptors",
)
json_output_option = click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Print the result as JSON",
)
