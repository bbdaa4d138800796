"""Turn an argument list into validated ``Options`` and a ``Context``.

``parse_options`` runs the option table, the implication pass and the
global checks; ``build_context`` derives the targets, spoofers and
redirections the runtime collaborators consume.
"""
from __future__ import annotations

import sys
from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from mitmconf import network, updates
from mitmconf.addresses import is_ipv4
from mitmconf.config import apply_config, load_config
from mitmconf.errors import ConfigError
from mitmconf.log import get_logger, setup_logging
from mitmconf.models import NetworkInfo, Redirection, SpooferReference, Target
from mitmconf.options import Options, expand_path
from mitmconf.resolvers import to_redirections, to_spoofers, to_targets
from mitmconf.schema import (
    PSEUDO_FLAGS,
    apply_implications,
    build_parser,
    load_proxy_module,
    scan_proxy_module,
)

logger = get_logger("pipeline")


class Context(BaseModel):
    model_config = ConfigDict(frozen=True)

    options: Options
    network: NetworkInfo
    gateway: Optional[str] = None
    targets: tuple[Target, ...] = ()
    spoofers: tuple[SpooferReference, ...] = ()
    redirections: tuple[Redirection, ...] = ()


def assign_options(supplied: Dict[str, Any], accept_extra: bool = False) -> Options:
    """Literal assignment of parsed values, then the implication pass."""
    options = Options()
    extra: Dict[str, Any] = {}
    for dest, value in supplied.items():
        if dest in PSEUDO_FLAGS:
            continue
        if dest in Options.model_fields:
            setattr(options, dest, value)
        elif accept_extra:
            extra[dest] = value
        else:
            logger.warning("Unknown configuration key ignored: %s", dest)
    if extra:
        options.module_options = extra
    # A flag switched off in a config file implies nothing.
    enabled = [dest for dest, value in supplied.items() if value is not False]
    return apply_implications(enabled, options)


def check_options(options: Options) -> None:
    """Global checks, in order; each one aborts the run."""
    if not network.is_privileged():
        raise ConfigError("This software must run as root.")

    if not options.iface:
        options.iface = network.default_route_iface()
    if not options.iface:
        raise ConfigError("No default interface found, please specify one with the -I argument.")

    if options.gateway is not None:
        if not is_ipv4(options.gateway):
            raise ConfigError(
                f"The specified gateway '{options.gateway}' is not a valid IPv4 address."
            )
        logger.debug("Targetting manually specified gateway %s", options.gateway)

    if options.check_updates:
        updates.check_updates()
        raise SystemExit(0)


def parse_options(argv: Optional[Sequence[str]] = None, use_config: bool = True) -> Options:
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    module_path = scan_proxy_module(argv)
    module = load_proxy_module(module_path) if module_path else None

    parser = build_parser(module)
    if use_config:
        apply_config(parser, load_config())
    supplied = vars(parser.parse_args(argv))

    logfile = supplied.get("logfile")
    setup_logging(
        debug=bool(supplied.get("debug")),
        silent=bool(supplied.get("silent")),
        logfile=expand_path(logfile) if logfile else None,
    )
    options = assign_options(supplied, accept_extra=module is not None)
    check_options(options)
    return options


def build_context(options: Options, net: Optional[NetworkInfo] = None) -> Context:
    targets = to_targets(options)
    if net is None:
        net = network.interface_info(options.iface)
    gateway = options.gateway or net.gateway
    if gateway is None:
        logger.warning("Could not detect the gateway address.")
    return Context(
        options=options,
        network=net,
        gateway=gateway,
        targets=tuple(targets),
        spoofers=tuple(to_spoofers(options)),
        redirections=tuple(to_redirections(options, net)),
    )


def parse(argv: Optional[Sequence[str]] = None) -> Context:
    return build_context(parse_options(argv))
