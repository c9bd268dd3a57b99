#!/usr/bin/env python3
"""
Warehouse ledger management CLI.

Usage:
    python manage.py serve         Run migrations & start the API server
    python manage.py migrate       Apply pending database migrations
    python manage.py status        Show applied and pending migrations
    python manage.py verify        Check schema integrity and cached stock
    python manage.py recalculate   Rebuild cached stock from the ledger
"""

import argparse
import asyncio
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from warehouse.infrastructure.storage.sqlite.migrations.migrator import initialize_database

    results = asyncio.run(
        initialize_database(args.db_path, create_backup_before=not args.no_backup)
    )
    if not results:
        print("Database is up to date.")
    for result in results:
        status = "SUCCESS" if result.success else "FAILED"
        print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    if any(not r.success for r in results):
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    """Show migration status."""
    from warehouse.infrastructure.storage.sqlite.migrations.migrator import get_migration_status

    status = asyncio.run(get_migration_status(args.db_path))
    print(f"Database exists: {status['exists']}")
    print(f"Current version: {status.get('current_version', 'N/A')}")
    print(f"Applied migrations: {status.get('applied_migrations', [])}")
    print(f"Pending migrations: {status.get('pending_migrations', [])}")


def cmd_verify(args: argparse.Namespace) -> None:
    """Run integrity checks, including cached stock against the ledger."""
    from warehouse.infrastructure.storage.sqlite.migrations.migrator import verify_schema_integrity

    checks = asyncio.run(verify_schema_integrity(args.db_path))
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
        if check.get("drifted_materials"):
            print(f"         drifted: {check['drifted_materials']} (run `recalculate`)")
    if any(c["status"] != "PASS" for c in checks):
        sys.exit(1)


def cmd_recalculate(args: argparse.Namespace) -> None:
    """Recompute every material's cached stock from its movements."""
    from warehouse.application.services import get_stock_reconciler
    from warehouse.core.entities.tenancy import Scope
    from warehouse.infrastructure.storage.sqlite import close_pool

    async def run() -> None:
        try:
            reconciler = await get_stock_reconciler()
            repairs = await reconciler.recalculate_all(Scope(owner_id=args.owner_id))
        finally:
            await close_pool()

        changed = [r for r in repairs if r.changed]
        for repair in changed:
            print(f"  #{repair.material_id} {repair.name}: {repair.previous} -> {repair.current}")
        print(f"Checked {len(repairs)} materials, repaired {len(changed)}.")

    asyncio.run(run())


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the API server in the foreground."""
    uvicorn_cmd = [
        sys.executable, "-m", "uvicorn",
        "warehouse.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        uvicorn_cmd.append("--reload")
    elif args.workers and args.workers > 1:
        uvicorn_cmd += ["--workers", str(args.workers)]

    print(f"Starting server on {args.host}:{args.port}...")
    print(f"  API docs:  http://{args.host}:{args.port}/docs (debug only)")

    try:
        subprocess.run(uvicorn_cmd, cwd=str(ROOT_DIR), check=False)
    except KeyboardInterrupt:
        print("\nServer stopped.")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Warehouse ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.add_argument("--workers", type=int, default=1, help="Number of uvicorn workers")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_status.set_defaults(func=cmd_status)

    # verify
    p_verify = sub.add_parser("verify", help="Check schema integrity and cached stock")
    p_verify.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_verify.set_defaults(func=cmd_verify)

    # recalculate
    p_recalc = sub.add_parser("recalculate", help="Rebuild cached stock from the ledger")
    p_recalc.add_argument(
        "--owner-id", type=int, default=None, help="Limit to one tenant (default: all tenants)"
    )
    p_recalc.set_defaults(func=cmd_recalculate)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
