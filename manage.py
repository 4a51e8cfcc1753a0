#!/usr/bin/env python3
"""
ScentLedger management CLI.

Usage:
    python manage.py migrate     Apply pending database migrations
    python manage.py start       Start the API server in the background
    python manage.py stop        Graceful shutdown
    python manage.py status      Check if server is running
    python manage.py reconcile   Compare shipment aggregates with a full recompute
"""

import argparse
import asyncio
import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


class ServerProcess:
    """Background uvicorn process tracked through a pid file."""

    def __init__(self, pid_file: Path):
        self.pid_file = pid_file

    @property
    def pid(self) -> int | None:
        """Recorded PID if that process is still alive; stale files are removed."""
        try:
            pid = int(self.pid_file.read_text().strip())
        except (FileNotFoundError, ValueError):
            return None
        if self.alive(pid):
            return pid
        self.forget()
        return None

    @staticmethod
    def alive(pid: int) -> bool:
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True
        return True

    def launch(self, host: str, port: int) -> int:
        proc = subprocess.Popen(
            [sys.executable, "-m", "uvicorn", "scentledger.api.main:app",
             "--host", host, "--port", str(port)],
            cwd=ROOT_DIR,
            start_new_session=True,
        )
        self.pid_file.write_text(str(proc.pid))
        return proc.pid

    def shutdown(self, pid: int, grace: float = 3.0) -> bool:
        """SIGTERM, then wait up to `grace` seconds. True once the process is gone."""
        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            pass
        deadline = time.monotonic() + grace
        while self.alive(pid) and time.monotonic() < deadline:
            time.sleep(0.1)
        self.forget()
        return not self.alive(pid)

    def forget(self) -> None:
        self.pid_file.unlink(missing_ok=True)


server = ServerProcess(ROOT_DIR / ".scentledger.pid")


def port_taken(host: str, port: int) -> bool:
    probe_host = "127.0.0.1" if host in ("", "0.0.0.0") else host
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.settimeout(0.5)
        return probe.connect_ex((probe_host, port)) == 0


def _load_settings():
    from scentledger.config import configure_logging, get_settings

    settings = get_settings()
    configure_logging()
    return settings


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply migrations, or report status / integrity."""
    from scentledger.infrastructure.storage.sqlite.migrations.migrator import (
        get_migration_status,
        initialize_database,
        verify_schema_integrity,
    )

    _load_settings()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            print(f"Database exists:    {status['exists']}")
            print(f"Current version:    {status.get('current_version') or 'none'}")
            print(f"Pending migrations: {status.get('pending_migrations', [])}")
            return 0

        if args.verify:
            failed = 0
            for check in await verify_schema_integrity(args.db_path):
                print(f"[{check['status']}] {check['check']}")
                if check["status"] != "PASS":
                    failed += 1
                    for key, value in check.items():
                        if key not in ("check", "status"):
                            print(f"       {key}: {value}")
            return 1 if failed else 0

        results = await initialize_database(
            args.db_path, create_backup_before=not args.no_backup
        )
        if not results:
            print("Database is up to date.")
        for result in results:
            label = "SUCCESS" if result.success else "FAILED"
            print(f"[{label}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        return 0 if all(r.success for r in results) else 1

    sys.exit(asyncio.run(run()))


def cmd_start(args: argparse.Namespace) -> None:
    """Launch uvicorn in its own session and remember the PID."""
    settings = _load_settings()
    host = args.host or settings.api.host
    port = args.port or settings.api.port

    running = server.pid
    if running is not None:
        sys.exit(f"ScentLedger is already running as PID {running}; run 'stop' first.")
    if port_taken(host, port):
        sys.exit(f"Something is already listening on port {port}.")

    pid = server.launch(host, port)
    print(f"ScentLedger API started as PID {pid} on {host}:{port}")
    print(f"Interactive docs at http://{host}:{port}/docs")


def cmd_stop(args: argparse.Namespace) -> None:
    pid = server.pid
    if pid is None:
        print("ScentLedger is not running.")
        return
    if server.shutdown(pid):
        print(f"Stopped PID {pid}.")
    else:
        print(f"PID {pid} did not exit after SIGTERM; check it manually.")


def cmd_status(args: argparse.Namespace) -> None:
    pid = server.pid
    print(f"ScentLedger is running as PID {pid}." if pid else "ScentLedger is not running.")


def cmd_reconcile(args: argparse.Namespace) -> None:
    """Recompute shipment aggregates from allocation records."""
    from scentledger.application.use_cases import ReconcileShipmentUseCase
    from scentledger.infrastructure.storage.sqlite import close_pool

    _load_settings()

    async def run() -> int:
        try:
            results = await ReconcileShipmentUseCase().execute(
                shipment_id=args.shipment_id, write=args.write
            )
        finally:
            await close_pool()

        drifted = [r for r in results if r.drift]
        for r in drifted:
            action = "fixed" if r.written else "drift"
            fields = ", ".join(f"{k}={v:+.2f}" for k, v in r.drift.items())
            print(f"[{action}] shipment {r.shipment_id}: {fields}")
        print(f"Checked {len(results)} shipment(s), {len(drifted)} drifted.")
        return 1 if drifted and not args.write else 0

    sys.exit(asyncio.run(run()))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="ScentLedger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_migrate = sub.add_parser("migrate", help="Apply database migrations")
    p_migrate.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_migrate.add_argument("--status", action="store_true", help="Show migration status")
    p_migrate.add_argument("--verify", action="store_true", help="Verify schema integrity")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    p_migrate.set_defaults(func=cmd_migrate)

    p_start = sub.add_parser("start", help="Start the API server")
    p_start.add_argument("--host", default=None, help="Bind host (default from settings)")
    p_start.add_argument("--port", type=int, default=None, help="Bind port (default from settings)")
    p_start.set_defaults(func=cmd_start)

    p_stop = sub.add_parser("stop", help="Stop the server")
    p_stop.set_defaults(func=cmd_stop)

    p_status = sub.add_parser("status", help="Check if server is running")
    p_status.set_defaults(func=cmd_status)

    p_reconcile = sub.add_parser("reconcile", help="Reconcile shipment aggregates")
    p_reconcile.add_argument("--shipment-id", type=int, default=None, help="Only this shipment")
    p_reconcile.add_argument("--write", action="store_true", help="Store recomputed aggregates")
    p_reconcile.set_defaults(func=cmd_reconcile)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
