from __future__ import annotations

import argparse
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict


def load_config() -> Dict[str, Any]:
    """
    Load configuration from:
    1. ~/.mitmconf.toml
    2. ./mitmconf.toml

    The local file overrides the global one. Returns a dictionary of
    configuration values.
    """
    paths = [
        Path.home() / ".mitmconf.toml",
        Path("mitmconf.toml"),
    ]

    config: Dict[str, Any] = {}
    for path in paths:
        if path.exists():
            try:
                with path.open("rb") as f:
                    _deep_update(config, tomllib.load(f))
            except (OSError, tomllib.TOMLDecodeError) as e:
                print(f"warning: failed to load config {path}: {e}", file=sys.stderr)

    return config


def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and key in target and isinstance(target[key], dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


def flatten_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten sections into option destinations.

    Example config:
    [global]
    iface = "eth0"

    [proxy]
    proxy_port = 9090

    Keys at the top level and in ``[global]`` apply first, other sections
    override them in file order.
    """
    defaults: Dict[str, Any] = {}
    for key, value in config.items():
        if not isinstance(value, dict):
            defaults[key] = value
    defaults.update(config.get("global", {}))
    for section, values in config.items():
        if section == "global":
            continue
        if isinstance(values, dict):
            defaults.update(values)
    return defaults


def apply_config(parser: argparse.ArgumentParser, config: Dict[str, Any]) -> None:
    """
    Apply configuration values to the argument parser defaults.

    Options are declared with a suppressed default, so values set here
    show up in the parsed namespace exactly like options given on the
    command line.
    """
    parser.set_defaults(**flatten_config(config))
