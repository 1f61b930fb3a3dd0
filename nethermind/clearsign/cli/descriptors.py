import logging

import click

from nethermind.clearsign.cli.utils import chain_option, group_options

# isort: skip_file
# pylint: disable=too-many-arguments,import-outside-toplevel

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("cli")


@click.command("validate")
@click.argument("descriptor_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def validate_command(descriptor_files: tuple[str, ...]):
    """Validates ERC-7730 descriptor JSON files"""
    from rich.markup import escape

    from nethermind.clearsign.cli.utils import cli_logger_config, load_json_documents
    from nethermind.clearsign.registry import validate_descriptor

    console = cli_logger_config(root_logger)

    invalid = 0
    for label, document in load_json_documents(descriptor_files):
        result = validate_descriptor(document)
        if result.valid:
            console.print(f"[green]Valid[/green]  {escape(label)}")
            continue

        invalid += 1
        console.print(f"[red]Invalid[/red]  {escape(label)}")
        for issue in result.errors:
            console.print(f"    [bold]{escape(issue.path or '(root)')}[/bold]: {escape(issue.message)}")

    if invalid:
        console.print(f"[red]{invalid} invalid descriptor{'s' if invalid > 1 else ''}")
        raise SystemExit(1)


@click.command("generate")
@click.argument("abi_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--address", "-a", "address", required=True, help="Contract address of the deployment")
@click.option("--owner", default=None, help="Protocol display name")
@click.option("--url", default=None, help="Protocol website")
@click.option(
    "--function",
    "-f",
    "functions",
    multiple=True,
    help="Only generate formats for this function.  Can be passed multiple times",
)
@click.option("--include-read-only", is_flag=True, default=False, help="Generate formats for view & pure functions")
@click.option("--output", "-o", "output", type=click.Path(writable=True, dir_okay=False), default=None)
@group_options(chain_option)
def generate_command(
    abi_file: str,
    address: str,
    owner: str | None,
    url: str | None,
    functions: tuple[str, ...],
    include_read_only: bool,
    output: str | None,
    chain: str,
):
    """Generates an ERC-7730 descriptor from a contract ABI"""
    import json

    from nethermind.clearsign.cli.utils import cli_logger_config, load_abi
    from nethermind.clearsign.generate import generate_descriptor
    from nethermind.clearsign.providers import chain_name_to_id
    from nethermind.clearsign.registry import validate_descriptor

    console = cli_logger_config(root_logger)

    try:
        chain_id = chain_name_to_id(chain)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--chain") from e

    descriptor = generate_descriptor(
        chain_id=chain_id,
        address=address,
        abi=load_abi(abi_file),
        owner=owner,
        url=url,
        functions=list(functions) if functions else None,
        skip_read_only=not include_read_only,
    )

    validation = validate_descriptor(descriptor)
    if not validation.valid:
        logger.warning(f"Generated descriptor does not pass validation:\n{validation.summary()}")

    descriptor_json = json.dumps(descriptor.to_dict(), indent=2)
    if output is None:
        click.echo(descriptor_json)
        return

    with open(output, "w") as output_file:
        output_file.write(descriptor_json)
    console.print(f"[green]Wrote descriptor with {len(descriptor.formats)} formats to {output}")


@click.command("signatures")
@click.option("--search", "-s", "search", default=None, help="Only list signatures containing this text")
def signatures_command(search: str | None):
    """Lists the function signatures that can be decoded without a descriptor"""
    from rich.table import Table

    from nethermind.clearsign.cli.utils import cli_logger_config
    from nethermind.clearsign.decoding import SignatureRegistry

    console = cli_logger_config(root_logger)

    signature_table = Table(box=None)
    signature_table.add_column("Selector", style="bold")
    signature_table.add_column("Signature")
    for signature in SignatureRegistry().all_signatures():
        if search and search.lower() not in signature.signature.lower():
            continue
        signature_table.add_row(signature.selector, signature.signature)

    console.print(signature_table)
