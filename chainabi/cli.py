"""Command-line interface for encoding, decoding and inspecting ABIs."""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from chainabi.chain import ABI
from chainabi.proto.serialization import SerializationError
from chainabi.serializer import decode, encode, stringify

logger = logging.getLogger(__name__)


def _load_abi(path: str) -> ABI:
    """Load an ABI file, either JSON or the binary form."""
    raw = Path(path).read_bytes()
    if raw.lstrip()[:1] == b"{":
        return ABI.from_value(raw.decode("utf-8"))
    return ABI.from_value(raw)


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
def cli() -> None:
    """chainabi ABI serialization tools."""


@cli.command("encode")
@click.option("--abi", "-a", "abi_file", required=True, help="ABI file (JSON or binary)")
@click.option("--type", "-t", "type_name", required=True, help="Type to encode as")
@click.option("--json", "-j", "json_text", default=None, help="JSON value (default: stdin)")
def encode_command(abi_file: str, type_name: str, json_text: str | None) -> None:
    """Encode a JSON value to hex."""
    if json_text is None:
        json_text = click.get_text_stream("stdin").read()
    try:
        abi = _load_abi(abi_file)
        data = encode(json.loads(json_text), type_name, abi=abi)
    except (SerializationError, json.JSONDecodeError) as e:
        _fail(e)
    click.echo(data.hex())


@cli.command("decode")
@click.option("--abi", "-a", "abi_file", required=True, help="ABI file (JSON or binary)")
@click.option("--type", "-t", "type_name", required=True, help="Type to decode as")
@click.option("--data", "-d", "hex_data", default=None, help="Hex encoded data (default: stdin)")
@click.option("--indent", type=int, default=None, help="Indent the JSON output")
def decode_command(abi_file: str, type_name: str, hex_data: str | None, indent: int | None) -> None:
    """Decode hex data to JSON."""
    if hex_data is None:
        hex_data = click.get_text_stream("stdin").read()
    try:
        abi = _load_abi(abi_file)
        value = decode(type_name, data=hex_data.strip(), abi=abi)
    except SerializationError as e:
        _fail(e)
    click.echo(stringify(value, indent=indent))


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="ABI file (JSON or binary)")
@click.option("--json", "output_json", is_flag=True, help="Output the ABI as JSON")
@click.option("--hex", "output_hex", is_flag=True, help="Output the binary ABI as hex")
def info(input_file: str, output_json: bool, output_hex: bool) -> None:
    """Display the types an ABI declares."""
    try:
        abi = _load_abi(input_file)
        # Surfaces circular aliases and bases
        for node in abi.resolve_all().values():
            target = node.resolve_alias()
            if target.fields is not None:
                logger.debug("%s has %d fields", target.name, len(target.all_fields))
    except SerializationError as e:
        _fail(e)

    if output_json:
        print(json.dumps(abi.to_dict(), indent=2))
    elif output_hex:
        print(abi.to_bytes().hex())
    else:
        _output_plain(abi)


def _output_plain(abi: ABI) -> None:
    """Output ABI contents using rich text formatting."""
    console = Console()

    console.print(f"[bold cyan]ABI[/bold cyan] [dim]{abi.version}[/dim]")
    console.print()

    if abi.types:
        console.print("[bold cyan]Aliases[/bold cyan]")
        alias_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        alias_table.add_column("Name", style="white")
        alias_table.add_column("Type", style="yellow")
        for alias in abi.types:
            alias_table.add_row(alias.new_type_name, alias.type)
        console.print(alias_table)
        console.print()

    if abi.structs:
        console.print("[bold cyan]Structs[/bold cyan]")
        struct_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        struct_table.add_column("Name", style="white")
        struct_table.add_column("Base", style="dim")
        struct_table.add_column("Fields", style="yellow")
        for struct in abi.structs:
            fields = ", ".join(f"{f.name}: {f.type}" for f in struct.fields)
            struct_table.add_row(struct.name, struct.base, fields)
        console.print(struct_table)
        console.print()

    if abi.variants:
        console.print("[bold cyan]Variants[/bold cyan]")
        variant_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        variant_table.add_column("Name", style="white")
        variant_table.add_column("Types", style="yellow")
        for variant in abi.variants:
            variant_table.add_row(variant.name, " | ".join(variant.types))
        console.print(variant_table)
        console.print()

    if abi.actions:
        console.print("[bold cyan]Actions[/bold cyan]")
        action_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        action_table.add_column("Name", style="white")
        action_table.add_column("Type", style="yellow")
        for action in abi.actions:
            action_table.add_row(action.name, action.type)
        console.print(action_table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
