"""
Guest agent OCI CLI.

Usage:
    guestagent hooks list TYPE [--hook-path DIR]       # Discover hooks of one type
    guestagent hooks scan [--hook-path DIR]            # Discover prestart/poststart/poststop
    guestagent spec write CONTAINER_ID SPEC_FILE       # Persist a spec to config.json
    guestagent spec path CONTAINER_ID                  # Print the canonical config path
    guestagent bundle check CONTAINER_ID SPEC_FILE     # Resolve the bundle directory
    guestagent config show                             # Show current config
    guestagent config set KEY VALUE                    # Set a config value
    guestagent config get KEY                          # Get a config value
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Optional

from guestagent.config import (
    CONFIG_KEYS,
    _load_yaml_config,
    get_config_path,
    get_settings,
    save_yaml_config,
)
from guestagent.core.bundle import (
    BundlePathSwitcher,
    SpecPersister,
    canonical_config_path,
)
from guestagent.core.hooks import (
    LoggingEventSink,
    RecordingEventSink,
    find_hooks,
    scan_guest_hooks,
)
from guestagent.lib.logger import setup_logging
from guestagent.lib.typed_errors import GuestAgentError
from guestagent.models.spec import ContainerId, Spec


# --- Helpers ---


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _hook_path(args: argparse.Namespace) -> Path:
    """Resolve the hook root from --hook-path or settings."""
    raw: Optional[str] = getattr(args, "hook_path", None)
    if raw:
        return Path(raw)
    settings = get_settings()
    if not settings.guest_hooks_enabled:
        _fail("No hook path given and guest_hook_path is not configured")
    return settings.guest_hook_path


def _base_path() -> Path:
    return get_settings().oci_config_base_path


# --- Hook commands ---


def cmd_hooks(args: argparse.Namespace) -> None:
    """Hook discovery: list, scan."""
    action = getattr(args, "action", None)

    if action == "list":
        _hooks_list(_hook_path(args), args.hook_type, verbose=args.verbose)
    elif action == "scan":
        _hooks_scan(_hook_path(args))
    else:
        print("Usage: guestagent hooks {list|scan}")


def _hooks_list(hook_root: Path, hook_type: str, verbose: bool = False) -> None:
    # --verbose prints the events; otherwise they go to the log
    recorder = RecordingEventSink() if verbose else None
    hooks = find_hooks(hook_root, hook_type, sink=recorder or LoggingEventSink())
    result = {"hooks": [h.to_dict() for h in hooks]}
    if recorder is not None:
        result["events"] = recorder.to_dicts()
    print(json.dumps(result, indent=2))


def _hooks_scan(hook_root: Path) -> None:
    guest_hooks = scan_guest_hooks(hook_root)
    print(json.dumps(guest_hooks.model_dump(by_alias=True, exclude_none=True), indent=2))


# --- Spec commands ---


def cmd_spec(args: argparse.Namespace) -> None:
    """Spec persistence: write, path."""
    action = getattr(args, "action", None)

    try:
        if action == "write":
            spec = Spec.from_file(Path(args.spec_file))
            path = SpecPersister(_base_path()).persist(spec, ContainerId(args.container_id))
            print(path)
        elif action == "path":
            print(canonical_config_path(ContainerId(args.container_id), _base_path()))
        else:
            print("Usage: guestagent spec {write|path}")
    except (GuestAgentError, OSError) as e:
        _fail(str(e))


# --- Bundle commands ---


def cmd_bundle(args: argparse.Namespace) -> None:
    """Bundle checks."""
    action = getattr(args, "action", None)

    if action != "check":
        print("Usage: guestagent bundle check CONTAINER_ID SPEC_FILE")
        return

    try:
        spec = Spec.from_file(Path(args.spec_file))
        bundle = BundlePathSwitcher(_base_path()).resolve(spec, ContainerId(args.container_id))
    except (GuestAgentError, OSError) as e:
        _fail(str(e))
    print(bundle)


# --- Config commands ---


def cmd_config(args: argparse.Namespace) -> None:
    """Config management: show, set, get."""
    action = getattr(args, "action", None)

    if action == "show":
        _config_show()
    elif action == "set":
        _config_set(args.key, args.value)
    elif action == "get":
        _config_get(args.key)
    else:
        print("Usage: guestagent config {show|set|get}")


def _config_show() -> None:
    """Show config file values and the effective settings."""
    config = _load_yaml_config()

    print(f"\nConfig: {get_config_path()}")
    print("-" * 40)

    if not config:
        print("  (empty, using defaults)")
    for key, value in config.items():
        env_val = os.environ.get(key.upper()) or os.environ.get(key)
        override = f" (overridden by env: {key.upper()})" if env_val else ""
        print(f"  {key}: {value}{override}")

    settings = get_settings()
    print("\nEffective:")
    for key in sorted(CONFIG_KEYS):
        print(f"  {key}: {getattr(settings, key)}")


def _config_set(key: str, value: str) -> None:
    """Set a config value."""
    if key not in CONFIG_KEYS:
        print(f"Unknown key: {key}")
        print(f"Valid keys: {', '.join(sorted(CONFIG_KEYS))}")
        sys.exit(1)

    config = _load_yaml_config()

    if key == "debug":
        value = value.lower() in ("true", "1", "yes")
    elif key == "log_level":
        value = value.upper()

    config[key] = value
    save_yaml_config(config)
    print(f"Set {key} = {value}")


def _config_get(key: str) -> None:
    """Get a single config value."""
    config = _load_yaml_config()

    env_val = os.environ.get(key.upper()) or os.environ.get(key)
    if env_val:
        print(env_val)
        return

    if key in config:
        print(config[key])
    else:
        print(f"Key '{key}' not set in config.yaml")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guestagent",
        description="Guest agent OCI spec, bundle and hook tooling",
    )
    parser.add_argument("--log-level", help="Override log level")
    subparsers = parser.add_subparsers(dest="command")

    # hooks subcommand
    hooks_parser = subparsers.add_parser("hooks", help="Guest hook discovery")
    hooks_sub = hooks_parser.add_subparsers(dest="action")
    list_parser = hooks_sub.add_parser("list", help="Discover hooks of one type")
    list_parser.add_argument("hook_type", help="Hook type, e.g. prestart")
    list_parser.add_argument("--hook-path", help="Hook root directory")
    list_parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Include discovery events in the output",
    )
    scan_parser = hooks_sub.add_parser("scan", help="Discover all guest hook types")
    scan_parser.add_argument("--hook-path", help="Hook root directory")

    # spec subcommand
    spec_parser = subparsers.add_parser("spec", help="OCI spec persistence")
    spec_sub = spec_parser.add_subparsers(dest="action")
    write_parser = spec_sub.add_parser("write", help="Persist a spec to config.json")
    write_parser.add_argument("container_id", help="Container id")
    write_parser.add_argument("spec_file", help="Path to an OCI config.json")
    path_parser = spec_sub.add_parser("path", help="Print the canonical config path")
    path_parser.add_argument("container_id", help="Container id")

    # bundle subcommand
    bundle_parser = subparsers.add_parser("bundle", help="OCI bundle checks")
    bundle_sub = bundle_parser.add_subparsers(dest="action")
    check_parser = bundle_sub.add_parser("check", help="Resolve the bundle directory")
    check_parser.add_argument("container_id", help="Container id")
    check_parser.add_argument("spec_file", help="Path to an OCI config.json")

    # config subcommand
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_sub = config_parser.add_subparsers(dest="action")
    config_sub.add_parser("show", help="Show current config")
    config_set_parser = config_sub.add_parser("set", help="Set a config value")
    config_set_parser.add_argument("key", help="Config key")
    config_set_parser.add_argument("value", help="Config value")
    config_get_parser = config_sub.add_parser("get", help="Get a config value")
    config_get_parser.add_argument("key", help="Config key")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level)

    if args.command == "hooks":
        cmd_hooks(args)
    elif args.command == "spec":
        cmd_spec(args)
    elif args.command == "bundle":
        cmd_bundle(args)
    elif args.command == "config":
        cmd_config(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
