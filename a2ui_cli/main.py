"""Main entry point for the A2UI CLI."""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx

from a2ui.kernel import BatchRejected, SurfaceStore, apply_live, import_batch, parse_messages_json, render_text, validate
from a2ui_cli import __version__
from a2ui_cli.client import ApiClient
from a2ui_cli.config import Config

COMMANDS = ("validate", "view", "push", "save", "designs", "push-design", "devices")
FILE_COMMANDS = ("validate", "view", "push", "save")
ID_COMMANDS = ("push-design",)


def print_help():
    """Print help message."""
    print(f"""
A2UI CLI v{__version__}

Usage:
  a2ui [options] <command> [FILE | ID]

Commands:
  validate FILE     Check a message batch (JSON array or JSON-lines)
  view FILE         Fold a batch into a surface and print its outline
  push FILE         Send a batch to connected devices
  save FILE         Store a complete batch as a design
  designs           List stored designs
  push-design ID    Send a stored design to every connected device
  devices           List connected devices

Options:
  --live            validate: apply message by message, skipping broken ones
  --device ID       push: send to one device instead of all
  --id ID           save: design id (default: the createSurface surfaceId)
  --data FILE       push-design: JSON object merged into the design's data model
  --api-url URL     Override API endpoint (default: http://localhost:8000)
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  A2UI_API_URL      Override API endpoint (same as --api-url)

Examples:
  a2ui validate designs/tile_hello.a2ui.json
  a2ui view designs/tile_hello.a2ui.json
  a2ui push designs/tile_hello.a2ui.json --device phone-1
  a2ui save designs/tile_hello.a2ui.json
  a2ui push-design tile_hello --data overlay.json
  a2ui devices --api-url http://localhost:9000
""")


def _option_value(args: list[str], i: int, what: str) -> str:
    if i + 1 < len(args):
        return args[i + 1]
    print(f"Error: {args[i]} requires {what}")
    sys.exit(1)


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None (one of COMMANDS)
        file: str | None
        design_id: str | None (push-design ID, or save --id)
        data_file: str | None
        live: bool
        device_id: str | None
        api_url: str | None
        show_help: bool
        show_version: bool
    """
    result = {
        "command": None,
        "file": None,
        "design_id": None,
        "data_file": None,
        "live": False,
        "device_id": None,
        "api_url": None,
        "show_help": False,
        "show_version": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in COMMANDS and result["command"] is None:
            result["command"] = arg
        elif arg == "--api-url":
            result["api_url"] = _option_value(args, i, "a URL")
            i += 1
        elif arg == "--device":
            result["device_id"] = _option_value(args, i, "an ID")
            i += 1
        elif arg == "--id":
            result["design_id"] = _option_value(args, i, "an ID")
            i += 1
        elif arg == "--data":
            result["data_file"] = _option_value(args, i, "a FILE")
            i += 1
        elif arg == "--live":
            result["live"] = True
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'a2ui --help' for usage.")
            sys.exit(1)
        elif result["command"] in FILE_COMMANDS and result["file"] is None:
            result["file"] = arg
        elif result["command"] in ID_COMMANDS and result["design_id"] is None:
            result["design_id"] = arg
        else:
            print(f"Unknown command: {arg}")
            print("Run 'a2ui --help' for usage.")
            sys.exit(1)

        i += 1

    return result


def _read_text(path: str) -> str:
    try:
        return Path(path).read_text()
    except OSError as e:
        print(f"Error: could not read {path}: {e.strerror}")
        sys.exit(1)


def load_messages(path: str) -> list[Any]:
    """Read a batch from disk. Exits with status 1 if it can't be read or parsed."""
    text = _read_text(path)
    try:
        return parse_messages_json(text)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        print(f"Error: {path} is not valid JSON: {e}")
        sys.exit(1)


def load_overlay(path: str) -> dict:
    """Read a data-model overlay (one JSON object) from disk."""
    text = _read_text(path)
    try:
        overlay = json.loads(text)
    except json.JSONDecodeError as e:
        print(f"Error: {path} is not valid JSON: {e}")
        sys.exit(1)
    if not isinstance(overlay, dict):
        print(f"Error: {path} must hold a JSON object")
        sys.exit(1)
    return overlay


def print_errors(errors) -> None:
    for error in errors:
        print(f"  {error}")


# ============================================================================
# Commands
# ============================================================================


def cmd_validate(messages: list[Any], live: bool) -> bool:
    if not live:
        errors = validate(messages, complete=True)
        if errors:
            print(f"Invalid: {len(errors)} error(s)")
            print_errors(errors)
            return False
        print(f"OK: {len(messages)} message(s)")
        return True

    result = apply_live(SurfaceStore(), messages)
    print_errors(result.errors)
    if result.skipped:
        print(f"Invalid: {len(result.skipped)} of {len(messages)} message(s) skipped")
        return False
    print(f"OK: {len(result.applied)} message(s) applied")
    return True


def cmd_view(messages: list[Any]) -> bool:
    try:
        result = import_batch(SurfaceStore(), messages)
    except BatchRejected as e:
        print(f"Invalid: {len(e.errors)} error(s)")
        print_errors(e.errors)
        return False

    if result.errors:
        print(f"Warning: {len(result.errors)} referential problem(s)")
        print_errors(result.errors)

    if result.surface is None:
        print("No surface left after this batch.")
        return False

    print(render_text(result.surface))
    return True


def cmd_push(client: ApiClient, messages: list[Any], device_id: str | None) -> bool:
    pushed = client.push(messages, device_id=device_id)
    target = device_id or "all devices"
    print(f"Pushed {len(messages)} message(s) to {target} ({pushed} delivered)")
    return True


def cmd_save(client: ApiClient, messages: list[Any], design_id: str | None) -> bool:
    design = client.save_design(messages, design_id=design_id)
    print(f"Saved design {design['id']} ({len(design['messages'])} message(s))")
    return True


def cmd_designs(client: ApiClient) -> bool:
    designs = client.list_designs()
    if not designs:
        print("No designs stored.")
        return True
    for design in designs:
        print(f"  {design['id']:<24} {len(design['messages']):>3} msgs  {design['updated_at']}")
    return True


def cmd_push_design(client: ApiClient, design_id: str, data_model: dict | None) -> bool:
    pushed = client.push_design(design_id, data_model=data_model)
    print(f"Pushed design {design_id} to all devices ({pushed} delivered)")
    return True


def cmd_devices(client: ApiClient) -> bool:
    devices = client.list_devices()
    if not devices:
        print("No devices connected.")
        return True
    for device in devices:
        print(f"  {device['id']:<24} {device['platform']:<10} {device['connected_at']}")
    return True


def report_http_error(e: httpx.HTTPError, api_url: str) -> None:
    if isinstance(e, httpx.HTTPStatusError):
        try:
            body = e.response.json()
        except json.JSONDecodeError:
            body = {}
        print(f"Error: {e.response.status_code} {body.get('detail', e.response.reason_phrase)}")
        for error in body.get("errors", []):
            print(f"  [{error['path']}] {error['message']}")
    else:
        print(f"Error: could not reach {api_url} ({e})")


def run(args: dict, transport: httpx.BaseTransport | None = None) -> int:
    """Run a parsed command. Returns the process exit code."""
    command = args["command"]
    messages = load_messages(args["file"]) if command in FILE_COMMANDS else []

    if command == "validate":
        return 0 if cmd_validate(messages, args["live"]) else 1
    if command == "view":
        return 0 if cmd_view(messages) else 1

    data_model = load_overlay(args["data_file"]) if command == "push-design" and args["data_file"] else None

    config = Config(api_url_override=args["api_url"])
    client = ApiClient(config.api_url, transport=transport)
    try:
        if command == "push":
            ok = cmd_push(client, messages, args["device_id"])
        elif command == "save":
            ok = cmd_save(client, messages, args["design_id"])
        elif command == "designs":
            ok = cmd_designs(client)
        elif command == "push-design":
            ok = cmd_push_design(client, args["design_id"], data_model)
        else:
            ok = cmd_devices(client)
    except httpx.HTTPError as e:
        report_http_error(e, config.api_url)
        ok = False
    finally:
        client.close()
    return 0 if ok else 1


def main():
    """Main entry point."""
    args = parse_args(sys.argv[1:])

    # Handle help and version first
    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"a2ui {__version__}")
        return

    if args["command"] is None:
        print_help()
        sys.exit(1)

    if args["command"] in FILE_COMMANDS and args["file"] is None:
        print(f"Error: {args['command']} requires a FILE")
        sys.exit(1)

    if args["command"] in ID_COMMANDS and args["design_id"] is None:
        print(f"Error: {args['command']} requires a design ID")
        sys.exit(1)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
