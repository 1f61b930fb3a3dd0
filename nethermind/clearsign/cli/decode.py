import logging

import click

from nethermind.clearsign.cli.utils import (
    chain_option,
    community_option,
    descriptor_option,
    group_options,
    json_output_option,
    json_rpc_option,
    offline_option,
    sourcify_url_option,
)

# isort: skip_file
# pylint: disable=too-many-arguments,import-outside-toplevel,too-many-locals

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("cli")

SEVERITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "cyan"}
CONFIDENCE_STYLES = {"high": "green", "medium": "yellow", "low": "red"}


@click.command("decode")
@click.option("--to", "to_address", required=True, help="Destination contract address")
@click.option("--data", "calldata", required=True, help="Hex encoded calldata")
@click.option("--value", "value", default=None, help="Native value in wei, decimal or 0x hex")
@click.option("--from", "sender", default=None, help="Sender address")
@group_options(
    chain_option,
    json_rpc_option,
    sourcify_url_option,
    descriptor_option,
    community_option,
    offline_option,
    json_output_option,
)
def decode_command(
    to_address: str,
    calldata: str,
    value: str | None,
    sender: str | None,
    chain: str,
    json_rpc: str | None,
    sourcify_url: str,
    descriptor_files: tuple[str, ...],
    community_file: str | None,
    offline: bool,
    json_output: bool,
):
    """Decodes a transaction into a human-readable description"""
    import json

    from rich.markup import escape
    from rich.panel import Panel
    from rich.table import Table

    from nethermind.clearsign import ClearSigner, MalformedCalldata, SignerConfig, TransactionInput
    from nethermind.clearsign.cli.utils import cli_logger_config, load_json_documents
    from nethermind.clearsign.providers import SourcifyClient, chain_name_to_id
    from nethermind.clearsign.registry import CommunityRegistry

    console = cli_logger_config(root_logger)
    root_logger.setLevel(logging.WARNING)

    try:
        chain_id = chain_name_to_id(chain)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--chain") from e

    config = SignerConfig.from_env(chain_id=chain_id, sourcify_url=sourcify_url)
    if offline:
        config.use_sourcify_fallback = False
        config.rpc_url = None
    else:
        config.rpc_url = json_rpc or config.rpc_url
        config.use_public_rpcs = config.rpc_url is None

    signer = ClearSigner(
        config=config,
        source_lookup=(
            SourcifyClient(config.sourcify_url, timeout=config.request_timeout)
            if config.use_sourcify_fallback
            else None
        ),
        community=CommunityRegistry.from_file(community_file) if community_file else None,
    )

    for label, document in load_json_documents(descriptor_files):
        for result in signer.extend(document):
            if not result.valid:
                logger.warning(f"Skipping invalid descriptor {label}:\n{result.summary()}")

    tx = TransactionInput(to=to_address, data=calldata, chain_id=chain_id, value=value, sender=sender)
    try:
        decoded = signer.decode_sync(tx)
    except MalformedCalldata as e:
        logger.error(e)
        raise SystemExit(1) from e

    if json_output:
        click.echo(json.dumps(decoded.to_dict(), indent=2))
        return

    confidence_style = CONFIDENCE_STYLES[decoded.confidence.value]
    console.print(
        Panel(
            f"[bold]{escape(decoded.intent)}[/bold]\n"
            f"[dim]{escape(decoded.signature)}[/dim]  "
            f"[{confidence_style}]{decoded.confidence.value} confidence[/{confidence_style}] "
            f"via {decoded.source.value}"
        )
    )

    field_table = Table(box=None)
    field_table.add_column("Field", style="bold")
    field_table.add_column("Value")
    field_table.add_column("Format", style="dim")
    for field in decoded.fields:
        field_table.add_row(escape(field.label), escape(field.value), field.format.value)
    console.print(field_table)

    for warning in decoded.warnings:
        style = SEVERITY_STYLES[warning.severity.value]
        console.print(f"[{style}]Warning ({warning.severity.value}): {escape(warning.message)}[/{style}]")

    if decoded.metadata.protocol or decoded.metadata.contract_name:
        console.print(
            f"[dim]Contract: {decoded.metadata.contract_name or '-'}  Protocol: {decoded.metadata.protocol or '-'}"
        )
