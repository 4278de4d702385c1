"""
TC CLI - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- Authentication from a session id or from credentials in the environment
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any

from tc_cli.core.client import CLIError, RawExchange, ValidationError
from tc_cli.core.endpoints import object_url
from tc_cli.core.result import Result
from tc_cli.core.types import ObjectRef
from tc_cli.sdk import TCClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (LLM/machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: CLIError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def result_value(result: Result) -> Any:
    """Unwrap a result, printing the error and exiting on failure."""
    if not result.ok:
        error_output(result.error)
    return result.value


def raw_output(exchange: RawExchange) -> None:
    """Print a raw exchange to stderr."""
    print(f"<<< {exchange.endpoint} HTTP {exchange.status}", file=sys.stderr)
    if exchange.body:
        print(exchange.text, file=sys.stderr)


def ref_arg(value: str) -> ObjectRef:
    """Parse uid[:className[:type]]."""
    parts = value.split(":")
    if not parts[0] or len(parts) > 3:
        raise argparse.ArgumentTypeError(f"expected uid[:className[:type]], got {value!r}")
    class_name = parts[1] if len(parts) > 1 else ""
    return ObjectRef(uid=parts[0], class_name=class_name, type=parts[2] if len(parts) > 2 else class_name)


def ensure_session(client: TCClient, args: argparse.Namespace) -> None:
    """Log in with TC_USER/TC_PASSWORD unless a session id is already set."""
    if client.is_authenticated:
        return
    user = args.user or os.environ.get("TC_USER")
    password = os.environ.get("TC_PASSWORD")
    if not user or password is None:
        error_output(ValidationError("No session. Set TC_SESSION_ID, or TC_USER and TC_PASSWORD"))
    result_value(client.session.login(user, password))


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_login(client: TCClient, args: argparse.Namespace) -> None:
    """Log in and print the session id."""
    user = args.user or os.environ.get("TC_USER")
    password = os.environ.get("TC_PASSWORD")
    if not user or password is None:
        error_output(ValidationError("TC_USER and TC_PASSWORD required"))
    session = result_value(client.session.login(user, password))
    info = session.server_info
    success_output(
        {
            "session_id": session.token,
            "reused": session.reused,
            "server_version": info.display_version if info else None,
            "message": "Export TC_SESSION_ID to reuse this session.",
        }
    )


def cmd_session_info(client: TCClient, args: argparse.Namespace) -> None:
    """Show session information."""
    ensure_session(client, args)
    info = result_value(client.session.info())
    success_output(
        {
            "server_version": info.server_version,
            "user": asdict(info.user),
            "group": asdict(info.group),
            "role": asdict(info.role),
            "site": asdict(info.site),
            "privileged": info.privileged,
            "extra_info": info.extra_info,
        }
    )


def cmd_props_get(client: TCClient, args: argparse.Namespace) -> None:
    """Get properties of one object."""
    ensure_session(client, args)
    ref = args.object
    props = result_value(client.data.get_properties(ref.uid, ref.class_name, ref.type, args.attributes))
    success_output({"uid": ref.uid, **props})


def cmd_home_folder(client: TCClient, args: argparse.Namespace) -> None:
    """Get a user's home folder UID."""
    ensure_session(client, args)
    user_uid = args.user_uid
    if not user_uid:
        info = result_value(client.session.info())
        user_uid = info.user.uid
    success_output({"user": user_uid, "home_folder": result_value(client.data.get_user_home_folder(user_uid))})


def cmd_folder_expand(client: TCClient, args: argparse.Namespace) -> None:
    """Expand a folder and list its contents."""
    ensure_session(client, args)
    ref = args.folder
    entries = result_value(
        client.data.expand_folder(
            ref.uid,
            class_name=ref.class_name or "Folder",
            type=ref.type or "Fnd0HomeFolder",
            attributes=args.attributes or ["object_name"],
            expand_item_revisions=args.item_revisions,
            latest_n_revisions=args.latest,
        )
    )
    success_output({"data": entries, "total_count": len(entries)})


def cmd_folder_create(client: TCClient, args: argparse.Namespace) -> None:
    """Create a folder."""
    ensure_session(client, args)
    folder = result_value(client.data.create_folder(args.name, args.container, description=args.description))
    success_output({"created": folder is not None, "folder": asdict(folder) if folder else None})


def cmd_item_create(client: TCClient, args: argparse.Namespace) -> None:
    """Create an item."""
    ensure_session(client, args)
    created = result_value(
        client.data.create_item(args.name, args.type, args.container, description=args.description)
    )
    success_output({"created": created is not None, **(asdict(created) if created else {})})


def cmd_item_get(client: TCClient, args: argparse.Namespace) -> None:
    """Look up an item by item id."""
    ensure_session(client, args)
    found = result_value(client.data.get_item_from_id(args.item_id, args.rev or []))
    success_output({"found": found is not None, **(asdict(found) if found else {})})


def cmd_relation_create(client: TCClient, args: argparse.Namespace) -> None:
    """Create a relation between two objects."""
    ensure_session(client, args)
    relation = result_value(client.data.create_relation(args.primary, args.secondary, args.relation_type))
    success_output({"created": relation is not None, "relation": asdict(relation) if relation else None})


def cmd_queries_list(client: TCClient, args: argparse.Namespace) -> None:
    """List saved queries."""
    ensure_session(client, args)
    queries = result_value(client.queries.list())
    success_output({"data": [q.to_dict() for q in queries], "total_count": len(queries)})


def cmd_queries_find(client: TCClient, args: argparse.Namespace) -> None:
    """Find saved queries by name/description."""
    ensure_session(client, args)
    queries = result_value(client.queries.find(args.name, args.description))
    success_output({"data": [q.to_dict() for q in queries], "total_count": len(queries)})


def cmd_revrules_list(client: TCClient, args: argparse.Namespace) -> None:
    """List revision rules."""
    ensure_session(client, args)
    rules = result_value(client.structure.revision_rules())
    success_output(
        {
            "data": [
                {
                    "uid": rule.rev_rule.uid,
                    "className": rule.rev_rule.class_name,
                    "type": rule.rev_rule.type,
                    "hasValueStatus": rule.has_value_status,
                    "overrideFolders": [folder.to_python() for folder in rule.override_folders],
                }
                for rule in rules
            ],
            "total_count": len(rules),
        }
    )


def cmd_bom_create(client: TCClient, args: argparse.Namespace) -> None:
    """Open a BOM window on an item."""
    ensure_session(client, args)
    window = result_value(client.structure.create_bom_window(args.item_uid, rev_rule=args.rev_rule))
    if window is None:
        success_output({"created": False})
        return
    success_output({"created": True, "bom_window": window.window.uid, "bom_line": window.top_line.uid})


def cmd_bom_add(client: TCClient, args: argparse.Namespace) -> None:
    """Add an item revision under a BOM line."""
    ensure_session(client, args)
    response = result_value(client.structure.add_children(args.parent_line, args.item_rev_uid))
    created = response.service_data.created if response.service_data else []
    success_output(
        {
            "lines": [line.line.uid for line in response.item_lines],
            "created": created,
        }
    )


def cmd_bom_save(client: TCClient, args: argparse.Namespace) -> None:
    """Save BOM windows."""
    ensure_session(client, args)
    service_data = result_value(client.structure.save_bom_windows(args.windows))
    success_output({"updated": service_data.updated})


def cmd_bom_close(client: TCClient, args: argparse.Namespace) -> None:
    """Close BOM windows."""
    ensure_session(client, args)
    deleted = result_value(client.structure.close_bom_windows(args.windows))
    success_output({"deleted": deleted})


def cmd_open_url(_client: TCClient, args: argparse.Namespace) -> None:
    """Print the Active Workspace link for an object."""
    awc_url = args.awc_url or os.environ.get("TC_AWC_URL")
    if not awc_url:
        error_output(ValidationError("Active Workspace URL required. Set TC_AWC_URL or use --awc-url"))
    success_output({"uid": args.uid, "url": object_url(awc_url, args.uid)})


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:  # noqa: PLR0915
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="TC CLI - Command-line interface for Teamcenter JSON REST services",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Authentication:
  TC_SESSION_ID        Reuse an existing JSESSIONID
  TC_USER/TC_PASSWORD  Log in for each invocation otherwise

Examples:
  tc login
  tc props get <uid>:ItemRevision -a object_name -a item_revision_id
  tc folder expand <folder_uid> -a object_name | jq '.data[].object_name'
  tc queries find --name 'Item*'
""",
    )
    parser.add_argument("--url", help="Web tier base URL (overrides TC_BASE_URL)")
    parser.add_argument("--session", help="Session id (overrides TC_SESSION_ID)")
    parser.add_argument("--user", "-u", help="Login name (overrides TC_USER)")
    parser.add_argument("--raw", action="store_true", help="Print every HTTP exchange to stderr")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Session ==========
    login = subparsers.add_parser("login", help="Log in and print the session id")
    login.set_defaults(func=cmd_login)

    session = subparsers.add_parser("session", help="Session information")
    session.set_defaults(func=lambda _c, _a: session.print_help())
    session_sub = session.add_subparsers(dest="subcommand")
    s_info = session_sub.add_parser("info", help="Show session info")
    s_info.set_defaults(func=cmd_session_info)

    # ========== Properties ==========
    props = subparsers.add_parser("props", help="Object properties")
    props.set_defaults(func=lambda _c, _a: props.print_help())
    props_sub = props.add_subparsers(dest="subcommand")
    pr_get = props_sub.add_parser("get", help="Get object properties")
    pr_get.add_argument("object", type=ref_arg, help="uid[:className[:type]]")
    pr_get.add_argument("--attribute", "-a", dest="attributes", action="append", required=True, help="Attribute name")
    pr_get.set_defaults(func=cmd_props_get)

    home = subparsers.add_parser("home-folder", help="Get a user's home folder")
    home.add_argument("user_uid", nargs="?", help="User UID (defaults to the logged-in user)")
    home.set_defaults(func=cmd_home_folder)

    # ========== Folders ==========
    folder = subparsers.add_parser("folder", help="Expand and create folders")
    folder.set_defaults(func=lambda _c, _a: folder.print_help())
    folder_sub = folder.add_subparsers(dest="subcommand")

    f_expand = folder_sub.add_parser("expand", help="List folder contents with properties")
    f_expand.add_argument("folder", type=ref_arg, help="uid[:className[:type]]")
    f_expand.add_argument("--attribute", "-a", dest="attributes", action="append", help="Attribute name")
    f_expand.add_argument("--item-revisions", action="store_true", help="Expand item revisions")
    f_expand.add_argument("--latest", type=int, default=0, help="Latest N revisions")
    f_expand.set_defaults(func=cmd_folder_expand, attributes=None)

    f_create = folder_sub.add_parser("create", help="Create a folder")
    f_create.add_argument("name", help="Folder name")
    f_create.add_argument("container", type=ref_arg, help="Container uid[:className[:type]]")
    f_create.add_argument("--description", "-d", default="", help="Folder description")
    f_create.set_defaults(func=cmd_folder_create)

    # ========== Items ==========
    item = subparsers.add_parser("item", help="Create and look up items")
    item.set_defaults(func=lambda _c, _a: item.print_help())
    item_sub = item.add_subparsers(dest="subcommand")

    i_create = item_sub.add_parser("create", help="Create an item")
    i_create.add_argument("name", help="Item name")
    i_create.add_argument("container", type=ref_arg, help="Container uid[:className[:type]]")
    i_create.add_argument("--type", "-t", default="Item", help="Item type")
    i_create.add_argument("--description", "-d", default="", help="Item description")
    i_create.set_defaults(func=cmd_item_create)

    i_get = item_sub.add_parser("get", help="Look up an item by id")
    i_get.add_argument("item_id", help="Item id")
    i_get.add_argument("--rev", "-r", action="append", help="Revision id")
    i_get.set_defaults(func=cmd_item_get)

    # ========== Relations ==========
    relation = subparsers.add_parser("relation", help="Relate objects")
    relation.set_defaults(func=lambda _c, _a: relation.print_help())
    relation_sub = relation.add_subparsers(dest="subcommand")
    r_create = relation_sub.add_parser("create", help="Create a relation")
    r_create.add_argument("primary", type=ref_arg, help="Primary uid[:className[:type]]")
    r_create.add_argument("secondary", type=ref_arg, help="Secondary uid[:className[:type]]")
    r_create.add_argument("relation_type", help="Relation type, e.g. IMAN_specification")
    r_create.set_defaults(func=cmd_relation_create)

    # ========== Saved Queries ==========
    queries = subparsers.add_parser("queries", help="Saved queries")
    queries.set_defaults(func=lambda _c, _a: queries.print_help())
    queries_sub = queries.add_subparsers(dest="subcommand")
    q_list = queries_sub.add_parser("list", help="List all saved queries")
    q_list.set_defaults(func=cmd_queries_list)
    q_find = queries_sub.add_parser("find", help="Find saved queries")
    q_find.add_argument("--name", "-n", default="*", help="Name pattern")
    q_find.add_argument("--description", "-d", default="*", help="Description pattern")
    q_find.set_defaults(func=cmd_queries_find)

    # ========== Structure ==========
    revrules = subparsers.add_parser("revrules", help="Revision rules")
    revrules.set_defaults(func=lambda _c, _a: revrules.print_help())
    revrules_sub = revrules.add_subparsers(dest="subcommand")
    rr_list = revrules_sub.add_parser("list", help="List revision rules")
    rr_list.set_defaults(func=cmd_revrules_list)

    bom = subparsers.add_parser("bom", help="BOM windows")
    bom.set_defaults(func=lambda _c, _a: bom.print_help())
    bom_sub = bom.add_subparsers(dest="subcommand")

    b_create = bom_sub.add_parser("create", help="Open a BOM window on an item")
    b_create.add_argument("item_uid", help="Item UID")
    b_create.add_argument("--rev-rule", default="", help="Revision rule UID")
    b_create.set_defaults(func=cmd_bom_create)

    b_add = bom_sub.add_parser("add", help="Add an item revision under a BOM line")
    b_add.add_argument("parent_line", help="Parent BOM line UID")
    b_add.add_argument("item_rev_uid", help="Item revision UID")
    b_add.set_defaults(func=cmd_bom_add)

    b_save = bom_sub.add_parser("save", help="Save BOM windows")
    b_save.add_argument("windows", type=ref_arg, nargs="+", help="Window uid[:className[:type]]")
    b_save.set_defaults(func=cmd_bom_save)

    b_close = bom_sub.add_parser("close", help="Close BOM windows")
    b_close.add_argument("windows", type=ref_arg, nargs="*", help="Window uid[:className[:type]]")
    b_close.set_defaults(func=cmd_bom_close)

    # ========== Links ==========
    open_url = subparsers.add_parser("open-url", help="Active Workspace link for an object")
    open_url.add_argument("uid", help="Object UID")
    open_url.add_argument("--awc-url", help="Active Workspace URL (overrides TC_AWC_URL)")
    open_url.set_defaults(func=cmd_open_url)

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Create client
    client = TCClient(base_url=args.url, session_id=args.session, on_raw=raw_output if args.raw else None)

    # Run command (all subparsers have default funcs that print help)
    try:
        args.func(client, args)
    except CLIError as e:
        error_output(e)


if __name__ == "__main__":
    main()
