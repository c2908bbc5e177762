import argparse
import json
import sys
from datetime import datetime, timezone

from vipgate.application.services.legacy_import import import_legacy_users
from vipgate.core.app_factory import build_container
from vipgate.core.config import Settings
from vipgate.core.logging import configure_logging
from vipgate.core.security import PasswordHasher
from vipgate.domain.errors import AccountError


def _format_ts(value) -> str:
    if not value:
        return "-"
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def main() -> int:
    parser = argparse.ArgumentParser(description="Manage VIP Gate accounts directly in the store.")
    sub = parser.add_subparsers(dest="action", required=True)

    create = sub.add_parser("create", help="Create an account")
    create.add_argument("username")
    create.add_argument("password")
    create.add_argument("--days", type=int, required=True)

    renew = sub.add_parser("renew", help="Add days to an account")
    renew.add_argument("username")
    renew.add_argument("--days", type=int, required=True)

    delete = sub.add_parser("delete", help="Delete an account")
    delete.add_argument("username")

    sub.add_parser("list", help="List every account")

    legacy = sub.add_parser("import-legacy", help="Import a users.json export of the old worker")
    legacy.add_argument("path")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")

    args = parser.parse_args()
    configure_logging(args.log_level)
    settings = Settings()
    container = build_container(settings)
    service = container.entitlement_service

    try:
        if args.action == "create":
            account = service.create(args.username, args.password, args.days)
            print("Created:", account.username, "expires:", _format_ts(account.expires_at))
        elif args.action == "renew":
            account = service.renew(args.username, args.days)
            print("Renewed:", account.username, "expires:", _format_ts(account.expires_at))
        elif args.action == "delete":
            removed = service.delete(args.username)
            print("Deleted:" if removed else "Not found:", args.username)
        elif args.action == "list":
            for summary in service.list_accounts():
                state = "expired" if summary.expired else "active"
                print(
                    f"{summary.username:<24} {state:<8} expires={_format_ts(summary.expires_at)} "
                    f"trial_days={summary.trial_days or '-'} device={summary.bound_device_id or '-'}"
                )
        else:
            try:
                with open(args.path, encoding="utf-8") as handle:
                    records = json.load(handle)
            except (OSError, ValueError) as exc:
                print("Error: cannot read", args.path, "-", exc, file=sys.stderr)
                return 1
            if not isinstance(records, list):
                print("Error: expected a JSON array of users", file=sys.stderr)
                return 1
            report = import_legacy_users(
                records,
                container.account_repository,
                PasswordHasher(rounds=settings.password_hash_rounds),
            )
            print(f"Imported {len(report.imported)}, skipped {len(report.skipped)}, invalid {report.invalid}")
    except AccountError as exc:
        print("Error:", exc.message, file=sys.stderr)
        return 1
    finally:
        container.store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
