"""
nspass.cli - Command-Line Interface

Drives the console's table pages from a terminal: every resource action
goes through a CollectionOrchestrator, so the output matches what the
console would show. Results are printed as JSON on stdout; notifications
go to stderr.

Usage:
    python -m nspass.cli routes list --page 2 --page-size 20
    python -m nspass.cli egress create --data '{"egressName": "hk-01"}'
    python -m nspass.cli forward-rules update 7 --data '{"name": "web"}'
    python -m nspass.cli users delete 12
    python -m nspass.cli routes batch-delete 1 2 3
    python -m nspass.cli config show
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import asdict
from typing import Any

from nspass.client.config import ApiConfig
from nspass.client.http import HttpClient
from nspass.client.session import SessionGuard
from nspass.client.storage import JsonFileSessionStore
from nspass.collection.notifications import Notification, NotificationCenter
from nspass.collection.orchestrator import CollectionOrchestrator
from nspass.exceptions import NspassError
from nspass.services.adapter import AdapterPresets
from nspass.services.egress import EgressService
from nspass.services.forward_rules import ForwardRuleService
from nspass.services.routes import RouteService
from nspass.services.users import UserService
from nspass.settings import NspassSettings, get_settings

logger = logging.getLogger(__name__)

# resource name -> (service class, adapter preset)
RESOURCES: dict[str, tuple[type, Callable[[Any], Any]]] = {
    "routes": (RouteService, AdapterPresets.routes),
    "egress": (EgressService, AdapterPresets.egress),
    "forward-rules": (ForwardRuleService, AdapterPresets.forward_rules),
    "users": (UserService, AdapterPresets.users),
}


def _json_arg(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e.msg}") from e


def _item_id(value: str) -> int | str:
    """Numeric ids are sent as numbers, anything else verbatim."""
    return int(value) if value.isdigit() else value


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str, ensure_ascii=False))


async def _print_notification(notification: Notification) -> None:
    print(f"[{notification.level}] {notification.message}", file=sys.stderr)


def _load_settings(args: argparse.Namespace) -> NspassSettings:
    settings = get_settings()
    overrides: dict[str, Any] = {}
    if getattr(args, "base_url", None):
        overrides["api_base_url"] = args.base_url.rstrip("/")
    if getattr(args, "log_level", None):
        overrides["log_level"] = args.log_level.upper()
    return settings.model_copy(update=overrides) if overrides else settings


def _build_orchestrator(args: argparse.Namespace) -> CollectionOrchestrator:
    """Wire settings -> ApiConfig -> HttpClient -> service -> adapter -> orchestrator."""
    settings = _load_settings(args)
    config = ApiConfig.from_settings(settings)
    guard = SessionGuard(JsonFileSessionStore(settings.session_file), settings.sign_in_path)
    client = HttpClient(config, guard, timeout_seconds=config.timeout_for(args.resource))

    service_cls, preset = RESOURCES[args.resource]
    notifier = NotificationCenter()
    notifier.register(_print_notification)
    return CollectionOrchestrator(
        preset(service_cls(client)),
        notifier=notifier,
        page_size=getattr(args, "page_size", None) or settings.default_page_size,
        immediate=False,
        name=args.resource,
    )


async def _list(args: argparse.Namespace) -> int:
    """Load one page of a resource."""
    async with _build_orchestrator(args) as table:
        if args.search:
            await table.handle_search({"search": args.search})
            if args.page and args.page != 1:
                await table.handle_page_change(args.page, args.page_size)
        else:
            await table.handle_page_change(args.page or 1, args.page_size)
        state = table.state

    _emit(
        {
            "data": state.data,
            "pagination": state.pagination.model_dump(by_alias=True),
            "error": state.error.message if state.error else None,
        }
    )
    return 1 if state.error else 0


async def _create(args: argparse.Namespace) -> int:
    async with _build_orchestrator(args) as table:
        result = await table.create(args.data)
    _emit(asdict(result))
    return 0 if result.success else 1


async def _update(args: argparse.Namespace) -> int:
    async with _build_orchestrator(args) as table:
        result = await table.update(args.id, args.data)
    _emit(asdict(result))
    return 0 if result.success else 1


async def _delete(args: argparse.Namespace) -> int:
    async with _build_orchestrator(args) as table:
        result = await table.delete(args.id)
    _emit(asdict(result))
    return 0 if result.success else 1


async def _batch_delete(args: argparse.Namespace) -> int:
    async with _build_orchestrator(args) as table:
        result = await table.batch_delete(args.ids)
    _emit(asdict(result))
    return 0 if result.success else 1


async def _config_show(args: argparse.Namespace) -> int:
    """Print the effective client configuration."""
    settings = _load_settings(args)
    config = ApiConfig.from_settings(settings)
    _emit(
        {
            "env": settings.env,
            "base_url": config.base_url,
            "timeout_seconds": config.timeout_seconds,
            "auth_endpoints": list(config.auth_endpoints),
            "session_file": str(settings.session_file),
            "sign_in_path": settings.sign_in_path,
            "default_page_size": settings.default_page_size,
            "log_level": settings.log_level,
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="nspass",
        description="nspass - proxy console data layer",
    )
    parser.add_argument("--base-url", help="Backend base URL (overrides NSPASS_API_BASE_URL)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (overrides NSPASS_LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="resource", help="Available commands")

    # ── resource command groups ──
    for resource in RESOURCES:
        res_parser = subparsers.add_parser(resource, help=f"Manage {resource}")
        res_sub = res_parser.add_subparsers(dest="action", help=f"{resource} actions")

        # list
        list_p = res_sub.add_parser("list", help=f"List {resource}")
        list_p.add_argument("--page", type=int, default=1, help="Page number (1-based)")
        list_p.add_argument("--page-size", type=int, help="Items per page")
        list_p.add_argument("--search", help="Free-text search")
        list_p.set_defaults(func=_list)

        # create
        create_p = res_sub.add_parser("create", help="Create an item")
        create_p.add_argument("--data", type=_json_arg, required=True, help="JSON body")
        create_p.set_defaults(func=_create)

        # update
        update_p = res_sub.add_parser("update", help="Update an item")
        update_p.add_argument("id", type=_item_id, help="Item id")
        update_p.add_argument("--data", type=_json_arg, required=True, help="JSON body")
        update_p.set_defaults(func=_update)

        # delete
        delete_p = res_sub.add_parser("delete", help="Delete an item")
        delete_p.add_argument("id", type=_item_id, help="Item id")
        delete_p.set_defaults(func=_delete)

        # batch-delete
        batch_p = res_sub.add_parser("batch-delete", help="Delete several items")
        batch_p.add_argument("ids", type=_item_id, nargs="+", help="Item ids")
        batch_p.set_defaults(func=_batch_delete)

    # ── config command group ──
    config_parser = subparsers.add_parser("config", help="Inspect configuration")
    config_sub = config_parser.add_subparsers(dest="action", help="Config actions")
    show_p = config_sub.add_parser("show", help="Show effective configuration")
    show_p.set_defaults(func=_config_show)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, args.log_level or get_settings().log_level, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        exit_code = asyncio.run(args.func(args))
    except NspassError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
