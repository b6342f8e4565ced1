"""CLI interface for SmallSync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .config import Config
from .confirm import (
    AssumeYesConfirmationGate,
    ConfirmationGate,
    ConsoleConfirmationGate,
)
from .engine import TransferEngine
from .exceptions import (
    SmallSyncConfigError,
    SmallSyncConnectError,
    SmallSyncError,
)
from .models import BatchResult, Entry, RemoteCredentials, TransferDirection
from .output import OutputFormatter
from .registry import EntryRegistry
from .remote import create_remote_store
from .utils import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

COMMAND_ALIASES = {
    "a": "add",
    "l": "list",
    "u": "upload",
    "up": "upload",
    "d": "download",
    "down": "download",
}


class AliasedGroup(click.Group):
    """Click group that also accepts the short command aliases."""

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        return super().get_command(ctx, COMMAND_ALIASES.get(cmd_name, cmd_name))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[Optional[str], Optional[click.Command], list[str]]:
        _, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, args


def _load_config(ctx: Any) -> Config:
    """Load the config once per invocation; config errors end the command."""
    if ctx.obj.get("config") is None:
        out: OutputFormatter = ctx.obj["out"]
        try:
            ctx.obj["config"] = Config(ctx.obj.get("config_path")).load()
        except SmallSyncConfigError as e:
            out.error(str(e))
            ctx.exit(1)
    return ctx.obj["config"]


def _add_entry_interactive(
    ctx: Any,
    name: Optional[str] = None,
    local: Optional[str] = None,
    remote: Optional[str] = None,
) -> Entry:
    """Prompt for any missing entry field, then save the entry."""
    out: OutputFormatter = ctx.obj["out"]
    registry = EntryRegistry(_load_config(ctx))

    if not name:
        name = click.prompt("Input entry name")
    if not local:
        local = click.prompt("Input local filepath")
    if not remote:
        remote = click.prompt("Input Server filepath")

    entry = Entry(name=name, local_path=local, remote_path=remote)
    try:
        registry.upsert(entry)
    except SmallSyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    out.success(f"\nEntry {entry.name} saved!")
    return entry


@click.group(cls=AliasedGroup)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="SMALLSYNC_CONFIG",
    help="Config file (default: ~/.config/smallsync/config.yaml)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option()
@click.pass_context
def main(
    ctx: Any,
    config_path: Optional[Path],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """SmallSync - sync single files with a WebDAV server."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj.setdefault("config", None)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("smallsync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.pass_context
def test(ctx: Any) -> None:
    """Test the connection to the remote server."""
    out: OutputFormatter = ctx.obj["out"]
    config = _load_config(ctx)

    ok = True
    if not config.is_configured():
        out.error("Server path not configured, run 'smallsync server' first")
        ok = False
    else:
        try:
            store = create_remote_store(config.remote_type, timeout=DEFAULT_TIMEOUT)
            session = store.connect(config.get_credentials())
        except SmallSyncConfigError as e:
            out.error(str(e))
            ctx.exit(1)
        except SmallSyncConnectError as e:
            out.error(str(e))
            ok = False
        else:
            out.success("Test: Server connected successfully!")
            try:
                out.print(str(session.stat("/")))
            except SmallSyncError as e:
                out.warning(f"Cannot stat server root: {e}")
            finally:
                session.close()

    if out.json_output:
        out.output_json({"connected": ok})
    else:
        out.print(f"test server: {ok}")
    if not ok:
        ctx.exit(1)


@main.command()
@click.option("--server-path", help="WebDAV server URL")
@click.option("--username", help="WebDAV username")
@click.option("--password", help="WebDAV password")
@click.pass_context
def server(
    ctx: Any,
    server_path: Optional[str],
    username: Optional[str],
    password: Optional[str],
) -> None:
    """Configure the remote server.

    Prompts for any value not given as an option and saves it to the
    config file.
    """
    out: OutputFormatter = ctx.obj["out"]
    config = _load_config(ctx)

    if not server_path:
        server_path = click.prompt("Input Server path")
    if not username:
        username = click.prompt("Input Server username")
    if not password:
        password = click.prompt("Input Server password", hide_input=True)

    config.set_credentials(
        RemoteCredentials(
            endpoint=server_path,
            username=username,
            password=password,
            remote_type=config.remote_type,
        )
    )
    try:
        config.save()
    except SmallSyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    out.success("\nServer config saved!")


@main.command()
@click.option("--name", "-n", help="Entry name")
@click.option("--local", "-l", help="Local file path")
@click.option("--remote", "-r", help="Remote file path")
@click.pass_context
def add(
    ctx: Any, name: Optional[str], local: Optional[str], remote: Optional[str]
) -> None:
    """Add a remote/local entry for sync (alias: a).

    An existing entry with the same name is replaced.
    """
    _add_entry_interactive(ctx, name=name, local=local, remote=remote)


@main.command("list")
@click.option("--table", "-t", "as_table", is_flag=True, help="Show as a table")
@click.pass_context
def list_entries(ctx: Any, as_table: bool) -> None:
    """List all the entries (alias: l)."""
    out: OutputFormatter = ctx.obj["out"]
    registry = EntryRegistry(_load_config(ctx))

    entries = registry.all()
    if out.json_output:
        out.output_json([entry.to_dict() for entry in entries])
        return

    if not entries:
        out.warning("no entries, add one now!")
        _add_entry_interactive(ctx)
        return

    if as_table:
        out.output_table(
            ["Entry", "Local", "Remote"],
            [[entry.name, entry.local_path, entry.remote_path] for entry in entries],
        )
        return

    for entry in entries:
        out.print(f"Entry[{entry.name}]: {entry.local_path} <--> {entry.remote_path}")


def _run_transfer(
    ctx: Any, direction: TransferDirection, entry_name: Optional[str], yes: bool
) -> None:
    out: OutputFormatter = ctx.obj["out"]
    config = _load_config(ctx)
    registry = EntryRegistry(config)

    if len(registry) == 0:
        out.warning("no entries, add one now!")
        _add_entry_interactive(ctx)
        return

    try:
        store = create_remote_store(config.remote_type, timeout=DEFAULT_TIMEOUT)
    except SmallSyncConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    gate: ConfirmationGate = (
        AssumeYesConfirmationGate() if yes else ConsoleConfirmationGate()
    )
    engine = TransferEngine(
        registry=registry,
        store=store,
        credentials=config.get_credentials(),
        gate=gate,
        output=out,
    )
    result: BatchResult = engine.run_batch(direction, entry_name or "")

    if out.json_output:
        out.output_json(result.to_dict())
    else:
        out.summary(f"{direction.past_tense} {result.succeeded}/{result.total}.")


@main.command()
@click.argument("entry", required=False, default=None)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts")
@click.pass_context
def upload(ctx: Any, entry: Optional[str], yes: bool) -> None:
    """Upload entries (aliases: u, up).

    ENTRY: Name of the entry to upload (all entries if omitted)
    """
    _run_transfer(ctx, TransferDirection.UPLOAD, entry, yes)


@main.command()
@click.argument("entry", required=False, default=None)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts")
@click.pass_context
def download(ctx: Any, entry: Optional[str], yes: bool) -> None:
    """Download entries (aliases: d, down).

    ENTRY: Name of the entry to download (all entries if omitted)
    """
    _run_transfer(ctx, TransferDirection.DOWNLOAD, entry, yes)


if __name__ == "__main__":
    main()
