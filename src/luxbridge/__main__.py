"""LuxBridge auth entry point.

Commands:
  serve            Run the HTTP server (default)
  sweep-sessions   Delete expired sessions
  register-client  Register an OAuth client and print its credentials
  clear-sessions   Drop sessions, codes and OAuth tokens (keeps clients)
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from rich.console import Console
from rich.table import Table

from luxbridge import __version__
from luxbridge.config import Settings, get_settings
from luxbridge.errors import LuxBridgeError
from luxbridge.logging_setup import setup_logging
from luxbridge.store import open_store

logger = logging.getLogger(__name__)
console = Console()


def run_server(settings: Settings, host: str, port: int, reload: bool = False) -> None:
    import uvicorn

    console.print(f"[bold]LuxBridge auth[/bold] {__version__} on http://{host}:{port}")
    if reload:
        uvicorn.run(
            "luxbridge.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_config=None,
        )
        return

    from luxbridge.api.app import create_app

    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


async def _with_store(settings: Settings, operation):
    store = open_store(settings.store_url)
    try:
        await store.ping()
        return await operation(store)
    finally:
        await store.close()


def cmd_sweep(settings: Settings, args: argparse.Namespace) -> int:
    from luxbridge.maintenance import sweep_sessions

    removed = asyncio.run(_with_store(settings, sweep_sessions))
    console.print(f"Removed {removed} expired session(s)")
    return 0


def cmd_register_client(settings: Settings, args: argparse.Namespace) -> int:
    from luxbridge.maintenance import register_client

    client = asyncio.run(
        _with_store(
            settings,
            lambda store: register_client(
                store, args.name, args.redirect_uri, public=args.public
            ),
        )
    )

    table = Table(title="OAuth client registered", show_header=False)
    table.add_row("client_name", client.name)
    table.add_row("client_id", client.client_id)
    table.add_row("client_secret", client.client_secret or "(public client)")
    table.add_row("redirect_uris", "\n".join(client.redirect_uris))
    console.print(table)
    if client.client_secret:
        console.print("[yellow]Store the secret now; it cannot be retrieved again.[/yellow]")
    return 0


def cmd_clear_sessions(settings: Settings, args: argparse.Namespace) -> int:
    from luxbridge.maintenance import clear_ephemeral

    if not args.yes:
        answer = console.input("Delete all sessions, codes and OAuth tokens? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            console.print("Aborted")
            return 1

    removed = asyncio.run(_with_store(settings, clear_ephemeral))
    for pattern, count in removed.items():
        console.print(f"{pattern:<18} {count}")
    console.print(f"Cleared {sum(removed.values())} key(s); client registrations kept")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="luxbridge",
        description="LuxBridge auth server and maintenance tools",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Override LUXBRIDGE_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None, help="Bind address (default: LUXBRIDGE_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: LUXBRIDGE_PORT)")
    serve.add_argument("--dev", action="store_true", help="Auto-reload on code changes")

    sub.add_parser("sweep-sessions", help="Delete expired sessions")

    register = sub.add_parser("register-client", help="Register an OAuth client")
    register.add_argument("--name", required=True, help="Client display name")
    register.add_argument(
        "--redirect-uri",
        action="append",
        required=True,
        help="Allowed redirect URI (repeatable)",
    )
    register.add_argument(
        "--public", action="store_true", help="Register a public client with no secret"
    )

    clear = sub.add_parser("clear-sessions", help="Drop sessions, codes and OAuth tokens")
    clear.add_argument("--yes", "-y", action="store_true", help="Skip the confirmation prompt")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level)

    command = args.command or "serve"
    try:
        if command == "serve":
            run_server(
                settings,
                host=getattr(args, "host", None) or settings.host,
                port=getattr(args, "port", None) or settings.port,
                reload=getattr(args, "dev", False),
            )
            return 0
        if command == "sweep-sessions":
            return cmd_sweep(settings, args)
        if command == "register-client":
            return cmd_register_client(settings, args)
        if command == "clear-sessions":
            return cmd_clear_sessions(settings, args)
    except LuxBridgeError as exc:
        logger.error("%s: %s", exc.code, exc.message)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
