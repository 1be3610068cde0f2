#!/usr/bin/env python3
"""
Reminder engine management CLI.

Usage:
    python manage.py migrate               Apply pending database migrations
    python manage.py status                Show migration status
    python manage.py verify                Check schema integrity
    python manage.py serve                 Start the API server
    python manage.py evaluate [--dry-run]  Run one recurring reminder pass (cron entry)
"""

import argparse
import asyncio
import json
import sys


def cmd_migrate(args: argparse.Namespace) -> None:
    from src.infrastructure.storage.sqlite.migrations import initialize_database

    results = asyncio.run(initialize_database(create_backup_before=not args.no_backup))
    if not results:
        print("Database is up to date.")
        return
    for result in results:
        state = "SUCCESS" if result.success else "FAILED"
        print(f"[{state}] {result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"  Error: {result.error}")
    if not all(r.success for r in results):
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    from src.infrastructure.storage.sqlite.migrations import get_migration_status

    status = asyncio.run(get_migration_status())
    print(f"Database exists: {status['exists']}")
    print(f"Current version: {status.get('current_version') or 'N/A'}")
    print(f"Applied migrations: {status.get('applied_migrations', [])}")
    print(f"Pending migrations: {status.get('pending_migrations', [])}")


def cmd_verify(args: argparse.Namespace) -> None:
    from src.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    checks = asyncio.run(verify_schema_integrity())
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
        for key, value in check.items():
            if key not in ("check", "status") and value:
                print(f"  {key}: {value}")
    if any(c["status"] != "PASS" for c in checks):
        sys.exit(1)


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from src.config import get_settings

    settings = get_settings()
    host = args.host or settings.api.host
    port = args.port or settings.api.port
    print(f"Starting server on {host}:{port}...")
    uvicorn.run(
        "src.api.main:app",
        host=host,
        port=port,
        reload=args.reload,
    )


async def _evaluate(dry_run: bool) -> dict:
    from src.application.dto.requests import EvaluateRecurringRulesRequest
    from src.application.use_cases import EvaluateRecurringRulesUseCase
    from src.infrastructure.storage.sqlite import close_pool
    from src.infrastructure.storage.sqlite.migrations import initialize_database

    await initialize_database(create_backup_before=False)
    try:
        use_case = EvaluateRecurringRulesUseCase()
        result = await use_case.execute(
            EvaluateRecurringRulesRequest(dry_run=dry_run),
            service_call=True,
        )
        return use_case.to_response(result).model_dump(mode="json")
    finally:
        await close_pool()


def cmd_evaluate(args: argparse.Namespace) -> None:
    """Per-rule and per-employee errors are part of the summary, not a failed run."""
    from src.config import configure_logging, get_logger

    configure_logging()
    logger = get_logger("manage")

    try:
        summary = asyncio.run(_evaluate(args.dry_run))
    except Exception as e:
        logger.exception("recurring_evaluation_failed", error=str(e))
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(summary, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Reminder engine management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.set_defaults(func=cmd_status)

    # verify
    p_verify = sub.add_parser("verify", help="Check schema integrity")
    p_verify.set_defaults(func=cmd_verify)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # evaluate
    p_eval = sub.add_parser("evaluate", help="Run one recurring reminder pass")
    p_eval.add_argument(
        "--dry-run",
        action="store_true",
        help="Count what would be sent without writing anything",
    )
    p_eval.set_defaults(func=cmd_evaluate)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
