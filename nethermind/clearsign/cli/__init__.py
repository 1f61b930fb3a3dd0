import click

from nethermind.clearsign.cli.decode import decode_command
from nethermind.clearsign.cli.descriptors import generate_command, signatures_command, validate_command


@click.group()
def clearsign_cli():
    """Command Line Interface for Nethermind ClearSign"""


# Adding Commands
clearsign_cli.add_command(decode_command, name="decode")
clearsign_cli.add_command(validate_command, name="validate")
clearsign_cli.add_command(generate_command, name="generate")
clearsign_cli.add_command(signatures_command, name="signatures")
