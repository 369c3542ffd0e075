"""transferpy CLI - Main commands."""
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from transferpy.core.config import TransferConfig
from transferpy.core.exceptions import TransferError

app = typer.Typer(
    name="transferpy",
    help="Upload (and optionally encrypt) files to transfer.sh style services",
    add_completion=False
)
keys_app = typer.Typer(help="Manage the local keyring")
app.add_typer(keys_app, name="keys")

console = Console()
state = {"config_path": None, "verbose": False}


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def load_config() -> TransferConfig:
    from transferpy import setup_logging

    try:
        config = TransferConfig.load(state["config_path"])
    except TransferError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if not state["verbose"]:
        setup_logging(config.log_level)
    return config


def make_client(passphrase: Optional[str] = None):
    """Build a client; the passphrase, if any, is handed to symmetric encryption."""
    from transferpy import TransferClient

    config = load_config()
    try:
        return TransferClient(
            config,
            passphrase_provider=(lambda: passphrase) if passphrase else ask_passphrase,
            notifier=console.print
        )
    except TransferError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def ask_passphrase() -> str:
    return typer.prompt("Passphrase", hide_input=True)


def report_error(error: Exception) -> None:
    detail = getattr(error, 'detail', None)
    console.print(f"[red]{error}[/red]")
    if detail:
        console.print(f"[dim]{detail}[/dim]")


@app.callback()
def main_options(
    config: Path = typer.Option(None, "--config", "-c", help="Config file (JSON)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Global options."""
    from transferpy import setup_logging

    state["config_path"] = config
    state["verbose"] = verbose
    if verbose:
        logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s: %(message)s")
        setup_logging(logging.DEBUG)


async def finish(submission, label: str):
    """Wait for a submission (spinner for background jobs) and report it."""
    from transferpy.core.upload import UploadHandle

    if isinstance(submission, UploadHandle):
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True
        ) as progress:
            progress.add_task(f"Uploading {label}", total=None)
            result = await submission
    else:
        result = submission

    if not result.ok:
        detail = getattr(result.error, 'detail', None)
        if detail:
            console.print(f"[dim]{detail}[/dim]")
        raise typer.Exit(1)
    return result


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    name: str = typer.Option(None, "--name", "-n", help="Remote file name"),
    encrypt: bool = typer.Option(False, "--encrypt", "-e", help="Encrypt before upload"),
    recipient: List[str] = typer.Option(None, "--recipient", "-r", help="Key reference or fingerprint (repeatable)"),
    background: bool = typer.Option(False, "--background", "-b", help="Run the upload as a background job"),
):
    """Upload a file."""
    recipients = recipient or []
    passphrase = None
    if encrypt and not recipients:
        passphrase = typer.prompt("Passphrase", hide_input=True, confirmation_prompt=True)

    async def do_upload():
        client = make_client(passphrase)
        if encrypt or recipients:
            submission = await client.encrypt_and_upload(file_path, recipients, name, background=background)
        else:
            submission = await client.upload_file(file_path, name, background=background)
        await finish(submission, file_path.name)

    run_async(do_upload())


@app.command()
def paste(
    name: str = typer.Option(None, "--name", "-n", help="Remote file name"),
    encrypt: bool = typer.Option(False, "--encrypt", "-e", help="Encrypt before upload"),
    recipient: List[str] = typer.Option(None, "--recipient", "-r", help="Key reference or fingerprint (repeatable)"),
):
    """Upload data read from stdin."""
    data = sys.stdin.buffer.read()
    recipients = recipient or []
    passphrase = None
    if encrypt and not recipients:
        # stdin is taken by the data, so the passphrase comes from the terminal
        passphrase = typer.prompt("Passphrase", hide_input=True, confirmation_prompt=True)

    async def do_paste():
        client = make_client(passphrase)
        if encrypt or recipients:
            submission = await client.encrypt_and_upload(data, recipients, name)
        else:
            submission = await client.upload_bytes(data, name)
        await finish(submission, name or "stdin")

    run_async(do_paste())


@app.command()
def decrypt(
    file_path: Path = typer.Argument(..., help="Encrypted file", exists=True, dir_okay=False),
    output: Path = typer.Option(None, "--output", "-o", help="Output file (default: stdout)"),
    key: List[str] = typer.Option(None, "--key", "-k", help="Only try this key (reference or fingerprint, repeatable)"),
):
    """Decrypt a file produced by 'upload --encrypt' or 'paste --encrypt'."""
    from transferpy.core.crypto import EncryptionService
    from transferpy.core.keyring import DirectoryKeyring, KeyringIndex

    config = load_config()
    index = KeyringIndex(DirectoryKeyring(config.keyring_path), config.key_reference_separator)
    service = EncryptionService(index, passphrase_provider=ask_passphrase)

    try:
        private_keys = None
        if key:
            index.ensure_loaded()
            private_keys = [record for record in map(index.lookup, key) if record is not None]
            if not private_keys:
                console.print("[red]None of the given keys is in the keyring[/red]")
                raise typer.Exit(1)
        plaintext = service.decrypt(file_path.read_bytes(), private_keys=private_keys)
    except TransferError as e:
        report_error(e)
        raise typer.Exit(1)

    if output:
        output.write_bytes(plaintext)
        console.print(f"[green]Decrypted to {output}[/green]")
    else:
        sys.stdout.buffer.write(plaintext)


@app.command()
def last():
    """Show the URL of the last successful upload."""
    from transferpy.core.upload import ResultSink

    url = ResultSink(state_file=load_config().state_file).last_url
    if not url:
        console.print("[yellow]No upload recorded yet[/yellow]")
        raise typer.Exit(1)
    console.print(url)


@app.command()
def agent():
    """Show the upload agent that will be used."""
    from transferpy.core.agent import detect_agent_spec

    config = load_config()
    try:
        spec = detect_agent_spec(config.agent_command, config.agent_arguments)
    except TransferError as e:
        report_error(e)
        raise typer.Exit(1)

    console.print(f"[bold]Command:[/bold] {spec.command}")
    console.print(f"[bold]Variant:[/bold] {spec.variant.value}")
    console.print(f"[bold]Arguments:[/bold] {' '.join(spec.arguments)}")


@keys_app.command("list")
def keys_list():
    """List keyring identities."""
    from transferpy.core.keyring import DirectoryKeyring, KeyringIndex

    config = load_config()
    index = KeyringIndex(DirectoryKeyring(config.keyring_path), config.key_reference_separator)
    try:
        index.refresh()
    except TransferError as e:
        report_error(e)
        raise typer.Exit(1)

    table = Table()
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Fingerprint")
    table.add_column("Secret")
    table.add_column("Status")
    for record in sorted(index.records(), key=lambda r: (r.name, r.email)):
        table.add_row(
            record.name,
            record.email,
            record.fingerprint,
            "yes" if record.has_secret else "",
            "[red]revoked[/red]" if record.revoked else "[green]ok[/green]"
        )
    console.print(table)


@keys_app.command("refresh")
def keys_refresh():
    """Re-read the keyring and print every reference string."""
    from transferpy.core.keyring import DirectoryKeyring, KeyringIndex

    config = load_config()
    index = KeyringIndex(DirectoryKeyring(config.keyring_path), config.key_reference_separator)
    try:
        index.refresh()
    except TransferError as e:
        report_error(e)
        raise typer.Exit(1)

    for reference in sorted(index.all_references()):
        console.print(reference)


@keys_app.command("generate")
def keys_generate(
    name: str = typer.Argument(..., help="Display name"),
    email: str = typer.Argument(..., help="Email address"),
    key_size: int = typer.Option(3072, "--key-size", help="RSA key size in bits"),
):
    """Generate a key pair into the keyring."""
    from transferpy.core.keyring import DirectoryKeyring, KeyRecord

    config = load_config()
    with console.status("Generating key..."):
        record = KeyRecord.generate(name, email, key_size=key_size)
    DirectoryKeyring(config.keyring_path).save(record)
    console.print(f"[green]Created {record.reference(config.key_reference_separator)}[/green]")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
