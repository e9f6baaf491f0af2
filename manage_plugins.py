#!/usr/bin/env python3
"""Plugin management CLI tool.

Works directly on the plugin store; running displays are not notified.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Ensure project root is in path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from hub.constants import META_FILE, PLUGINS_DIR, SCRIPT_FILE, STYLE_FILE
from hub.errors import HubError
from hub.plugins.registry import PluginRegistry
from hub.plugins.style import StyleRegistry


def get_registry() -> PluginRegistry:
    """Create a PluginRegistry instance."""
    return PluginRegistry(PLUGINS_DIR)


def get_styles() -> StyleRegistry:
    """Create a StyleRegistry instance."""
    return StyleRegistry(STYLE_FILE)


def _run(coro):
    """Run a registry operation, exiting with status 1 on a hub error."""
    try:
        return asyncio.run(coro)
    except HubError as e:
        print(f"Error: {e}")
        sys.exit(1)


def _parse_value(raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def cmd_list(args):
    """List all stored plugins."""
    plugins = get_registry().get_all()

    if not plugins:
        print("No plugins found.")
        return

    print(f"{'Name':<30} {'Version':<12} {'Enabled':<8} {'Configs'}")
    print("-" * 70)

    for p in plugins:
        configs = p.configs or []
        enabled = next((c.value for c in configs if c.name == "enabled"), False)
        print(f"{p.name:<30} {p.version:<12} {'Yes' if enabled else 'No':<8} {len(configs)}")


def cmd_info(args):
    """Show detailed plugin information."""
    plugin = get_registry().get(args.name)
    if not plugin:
        print(f"Plugin '{args.name}' not found.")
        sys.exit(1)

    print(f"Plugin: {plugin.name}")
    print(f"  Version:     {plugin.version}")
    print(f"  Description: {plugin.description or ''}")
    print(f"  URL:         {plugin.url or ''}")
    print(f"  Script:      {plugin.script.url}")
    print("  Configs:")
    for c in plugin.configs or []:
        print(f"    {c.name:<20} {c.type:<10} value={json.dumps(c.value)} default={json.dumps(c.default)}")


def cmd_add(args):
    """Add (or replace) a plugin from a meta file or URL."""
    source = args.source
    if source.startswith(("http://", "https://")):
        data = {"url": source}
    else:
        path = Path(source)
        if not path.exists():
            print(f"Path does not exist: {path}")
            sys.exit(1)
        with open(path, encoding="utf-8") as f:
            data = {"meta": json.load(f)}

    outcome = _run(get_registry().add_plugin(data))
    print(f"Plugin '{outcome.envelope.data['name']}' added.")


def cmd_remove(args):
    """Remove a plugin."""
    _run(get_registry().remove_plugin({"name": args.name}))
    print(f"Plugin '{args.name}' removed.")


def cmd_config(args):
    """Set config values: config <name> key=value ..."""
    configs = []
    for pair in args.values:
        key, sep, raw = pair.partition("=")
        if not sep:
            print(f"Expected key=value, got: {pair}")
            sys.exit(1)
        configs.append({"name": key, "value": _parse_value(raw)})

    outcome = _run(get_registry().config_plugin({"name": args.name, "configs": configs}))
    print(f"Configuration updated for plugin '{args.name}':")
    for c in outcome.envelope.data["configs"]:
        print(f"  {c['name']} = {json.dumps(c['value'])}")


def cmd_style_set(args):
    """Set the custom stylesheet from a CSS file or URL."""
    source = args.source
    if source.startswith(("http://", "https://")):
        data = {"url": source}
    else:
        data = {"inline": Path(source).read_text(encoding="utf-8")}
    _run(get_styles().set_style(data))
    print(f"Stylesheet written to {STYLE_FILE}")


def cmd_style_remove(args):
    """Remove the custom stylesheet."""
    _run(get_styles().remove_style())
    print("Stylesheet removed.")


def cmd_doctor(args):
    """Run health checks on the plugin store."""
    issues = []

    if not PLUGINS_DIR.exists():
        print(f"Plugin directory missing: {PLUGINS_DIR} (created on first add)")
        return

    registry = get_registry()
    loaded = {p.name for p in registry.get_all()}

    for item in sorted(PLUGINS_DIR.iterdir()):
        if not item.is_dir():
            continue
        if not (item / META_FILE).exists():
            issues.append(f"Plugin '{item.name}': {META_FILE} missing")
        elif item.name not in loaded:
            issues.append(f"Plugin '{item.name}': {META_FILE} is not valid plugin metadata")
        if not (item / SCRIPT_FILE).exists():
            issues.append(f"Plugin '{item.name}': {SCRIPT_FILE} missing")

    if issues:
        print(f"Found {len(issues)} issue(s):")
        for i, issue in enumerate(issues, 1):
            print(f"  {i}. {issue}")
        sys.exit(1)
    else:
        print(f"All checks passed. {len(loaded)} plugin(s) found.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Display Hub Plugin Manager")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list
    subparsers.add_parser("list", help="List all plugins")

    # info
    info_parser = subparsers.add_parser("info", help="Show plugin details")
    info_parser.add_argument("name", help="Plugin name")

    # add
    add_parser = subparsers.add_parser("add", help="Add a plugin from a meta.json file or URL")
    add_parser.add_argument("source", help="Path to meta JSON or http(s) URL")

    # remove
    remove_parser = subparsers.add_parser("remove", help="Remove a plugin")
    remove_parser.add_argument("name", help="Plugin name")

    # config
    config_parser = subparsers.add_parser("config", help="Set plugin config values")
    config_parser.add_argument("name", help="Plugin name")
    config_parser.add_argument("values", nargs="+", help="key=value pairs (values parsed as JSON when possible)")

    # style
    style_parser = subparsers.add_parser("style-set", help="Set the custom stylesheet")
    style_parser.add_argument("source", help="Path to CSS file or http(s) URL")
    subparsers.add_parser("style-remove", help="Remove the custom stylesheet")

    # doctor
    subparsers.add_parser("doctor", help="Run health checks")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "list": cmd_list,
        "info": cmd_info,
        "add": cmd_add,
        "remove": cmd_remove,
        "config": cmd_config,
        "style-set": cmd_style_set,
        "style-remove": cmd_style_remove,
        "doctor": cmd_doctor,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
