"""getback-admin: inspect and repair the reconciliation log."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from dotenv import load_dotenv

from getback.application.context import AppContext, make_app_context
from getback.application.reconciliation import resolve_orphan
from getback.config.settings import resolve_settings

load_dotenv()


def _build_context(db: str) -> AppContext:
    settings = resolve_settings()
    if db.strip():
        settings = settings.model_copy(update={"store_backend": "sqlite", "db_path": Path(db.strip())})
    return make_app_context(settings)


def _list_orphans(ctx: AppContext, include_resolved: bool) -> int:
    records = ctx.reconciliation_log.list_orphans(include_resolved=include_resolved)
    report = {
        "count": len(records),
        "orphans": [record.model_dump(mode="json") for record in records],
    }
    print(json.dumps(report, ensure_ascii=False, indent=2))
    return 0


def _resolve(ctx: AppContext, orphan_id: int) -> int:
    def _failed(failure) -> int:
        print(json.dumps({"orphan_id": orphan_id, "error": failure.message}, ensure_ascii=False))
        return 1

    def _ok(outcome: str) -> int:
        print(json.dumps({"orphan_id": orphan_id, "outcome": outcome}, ensure_ascii=False))
        return 0

    return resolve_orphan(ctx, orphan_id).case_of(left=_failed, right=_ok)


def main(argv: list[str] | None = None, ctx: AppContext | None = None) -> int:
    parser = argparse.ArgumentParser(prog="getback-admin", description="Reconciliation log maintenance")
    parser.add_argument("--db", default="", help="SQLite DB path (defaults to GETBACK_DB_PATH)")
    commands = parser.add_subparsers(dest="command", required=True)

    orphans = commands.add_parser("orphans", help="List trip writes missing their user-list append")
    orphans.add_argument("--all", action="store_true", help="Include resolved records")

    resolve = commands.add_parser("resolve", help="Re-apply the missing append for one record")
    resolve.add_argument("orphan_id", type=int)

    args = parser.parse_args(argv)
    context = ctx or _build_context(str(args.db))
    if args.command == "orphans":
        return _list_orphans(context, bool(args.all))
    return _resolve(context, args.orphan_id)


if __name__ == "__main__":
    raise SystemExit(main())
