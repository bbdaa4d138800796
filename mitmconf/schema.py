from __future__ import annotations

import argparse
import importlib.util
import os
from types import ModuleType
from typing import Any, Dict, Iterable, Optional

from mitmconf import __version__
from mitmconf.errors import ConfigError
from mitmconf.log import get_logger
from mitmconf.options import Options, expand_path
from mitmconf.registry import PARSERS, available_spoofers

logger = get_logger("schema")

# Destinations that only trigger implications and have no Options field.
PSEUDO_FLAGS = frozenset({"no_spoofing"})

IMPLICATIONS: Dict[str, Dict[str, Any]] = {
    "local": {"sniffer": True},
    "sniffer_src": {"sniffer": True},
    "sniffer_pcap": {"sniffer": True},
    "sniffer_filter": {"sniffer": True},
    "parsers": {"sniffer": True},
    "custom_parser": {"sniffer": True, "parsers": ["CUSTOM"]},
    "proxy_https": {"proxy": True},
    "proxy_port": {"proxy": True},
    "proxy_https_port": {"proxy": True, "proxy_https": True},
    "proxy_pem_file": {"proxy": True, "proxy_https": True},
    "proxy_module": {"proxy": True},
    "httpd_port": {"httpd": True},
    "httpd_path": {"httpd": True},
    "no_spoofing": {"spoofer": "NONE"},
}


class OptionParser(argparse.ArgumentParser):
    """ArgumentParser that raises ``ConfigError`` instead of exiting."""

    def error(self, message: str):  # type: ignore[override]
        raise ConfigError(message)


def _flag(parser, *names: str, dest: str, help: str) -> None:
    parser.add_argument(*names, dest=dest, action="store_true", default=argparse.SUPPRESS, help=help)


def _value(parser, *names: str, dest: str, metavar: str, help: str, type=str) -> None:
    parser.add_argument(
        *names, dest=dest, metavar=metavar, type=type, default=argparse.SUPPRESS, help=help
    )


def build_parser(module: Optional[ModuleType] = None) -> OptionParser:
    """Build the option table.

    When a proxy ``module`` is given, its ``register_options`` hook is
    called with a dedicated argument group so it can add its own options.
    """
    defaults = Options.model_construct()
    parser = OptionParser(
        prog="mitmconf",
        usage="%(prog)s [options]",
        description="Resolve and validate a man-in-the-middle session configuration.",
        epilog="Options without a value can also be set in ~/.mitmconf.toml or ./mitmconf.toml.",
        allow_abbrev=False,
    )
    parser.add_argument("--version", action="version", version=f"mitmconf {__version__}")

    main = parser.add_argument_group("specific options")
    _value(main, "-G", "--gateway", dest="gateway", metavar="ADDRESS",
           help="Manually specify the gateway address, if not specified the current gateway will be retrieved and used.")
    _value(main, "-I", "--interface", dest="iface", metavar="IFACE",
           help="Network interface name, default: the interface of the default route.")
    _value(main, "-S", "--spoofer", dest="spoofer", metavar="NAME",
           help=f"Spoofer module to use, available: {', '.join(available_spoofers())} - default: {defaults.spoofer}")
    _value(main, "-T", "--target", dest="target", metavar="ADDRESS1,ADDRESS2",
           help="Target IP or MAC addresses, if not specified the whole subnet will be targeted.")
    _value(main, "--ignore", dest="ignore", metavar="ADDRESS1,ADDRESS2",
           help="Ignore these addresses if found while searching for targets.")
    _value(main, "-O", "--log", dest="logfile", metavar="LOG_FILE",
           help="Log all messages into a file as well as the shell.")
    _flag(main, "-D", "--debug", dest="debug", help="Enable debug logging.")
    _flag(main, "--silent", dest="silent",
          help="Suppress every message which is not an error or a warning.")
    _flag(main, "--no-discovery", dest="arpcache",
          help="Do not actively search for hosts, just use the current ARP cache.")
    _flag(main, "--no-spoofing", dest="no_spoofing", help="Disable spoofing, alias for --spoofer NONE.")
    _flag(main, "--no-target-nbns", dest="no_target_nbns", help="Disable target NBNS hostname resolution.")
    _flag(main, "--half-duplex", dest="half_duplex",
          help="Enable half-duplex MITM, for routers that are not vulnerable.")
    _flag(main, "--kill", dest="kill",
          help="Instead of forwarding packets, make targets connections to be killed.")
    _value(main, "--packet-throttle", dest="packet_throttle", metavar="NUMBER", type=float,
           help="Number of seconds (can be a decimal number) to wait between each packet to be sent.")
    _flag(main, "--check-updates", dest="check_updates",
          help="Check if any update is available and then exit.")

    sniffing = parser.add_argument_group("sniffing")
    _flag(sniffing, "-X", "--sniffer", dest="sniffer", help="Enable sniffer.")
    _flag(sniffing, "-L", "--local", dest="local",
          help="Parse packets coming from/to the address of this computer (implies -X).")
    _value(sniffing, "--sniffer-source", dest="sniffer_src", metavar="FILE",
           help="Load packets from the specified PCAP file instead of the interface (implies -X).")
    _value(sniffing, "--sniffer-pcap", dest="sniffer_pcap", metavar="FILE",
           help="Save all packets to the specified PCAP file (implies -X).")
    _value(sniffing, "--sniffer-filter", dest="sniffer_filter", metavar="EXPRESSION",
           help="Configure the sniffer to use this BPF filter (implies -X).")
    _value(sniffing, "-P", "--parsers", dest="parsers", metavar="PARSERS",
           help=f"Comma separated list of packet parsers to enable, '*' for all (implies -X), "
                f"available: {', '.join(PARSERS)} - default: *")
    _value(sniffing, "--custom-parser", dest="custom_parser", metavar="EXPRESSION",
           help="Use a custom regular expression to capture and show sniffed data (implies -X).")

    proxying = parser.add_argument_group("proxying")
    _flag(proxying, "--proxy", dest="proxy", help="Enable HTTP proxy and redirect all HTTP requests to it.")
    _flag(proxying, "--proxy-https", dest="proxy_https",
          help="Enable HTTPS proxy and redirect all HTTPS requests to it.")
    _value(proxying, "--proxy-port", dest="proxy_port", metavar="PORT", type=int,
           help=f"Set HTTP proxy port, default to {defaults.proxy_port}.")
    _value(proxying, "--proxy-https-port", dest="proxy_https_port", metavar="PORT", type=int,
           help=f"Set HTTPS proxy port, default to {defaults.proxy_https_port}.")
    _value(proxying, "--proxy-pem", dest="proxy_pem_file", metavar="FILE",
           help="Use a custom PEM certificate file for the HTTPS proxy.")
    _value(proxying, "--proxy-module", dest="proxy_module", metavar="MODULE",
           help="Python proxy module to load.")
    _value(proxying, "--custom-proxy", dest="custom_proxy", metavar="ADDRESS",
           help="Use a custom HTTP upstream proxy instead of the builtin one.")
    _value(proxying, "--custom-proxy-port", dest="custom_proxy_port", metavar="PORT", type=int,
           help=f"Specify a port for the custom HTTP upstream proxy, default to {defaults.custom_proxy_port}.")
    _value(proxying, "--custom-https-proxy", dest="custom_https_proxy", metavar="ADDRESS",
           help="Use a custom HTTPS upstream proxy instead of the builtin one.")
    _value(proxying, "--custom-https-proxy-port", dest="custom_https_proxy_port", metavar="PORT", type=int,
           help=f"Specify a port for the custom HTTPS upstream proxy, default to {defaults.custom_https_proxy_port}.")

    serving = parser.add_argument_group("http server")
    _flag(serving, "--httpd", dest="httpd", help="Enable HTTP server.")
    _value(serving, "--httpd-port", dest="httpd_port", metavar="PORT", type=int,
           help=f"Set HTTP server port, default to {defaults.httpd_port}.")
    _value(serving, "--httpd-path", dest="httpd_path", metavar="PATH",
           help="Set HTTP server path, default to the current directory.")

    if module is not None:
        register = getattr(module, "register_options", None)
        if register is None:
            logger.debug("proxy module %s registers no options", module.__name__)
        else:
            register(parser.add_argument_group("proxy module options"))
    return parser


def scan_proxy_module(argv: Iterable[str]) -> Optional[str]:
    """Return the ``--proxy-module`` path of ``argv``, without parsing anything else."""
    prescan = OptionParser(add_help=False, allow_abbrev=False)
    prescan.add_argument("--proxy-module", dest="proxy_module", default=None)
    known, _ = prescan.parse_known_args(list(argv))
    return known.proxy_module


def load_proxy_module(path: str) -> ModuleType:
    path = expand_path(path)
    if not os.path.isfile(path):
        raise ConfigError(f"Proxy module not found: {path}")
    name = os.path.splitext(os.path.basename(path))[0]
    spec = importlib.util.spec_from_file_location(f"mitmconf_proxy_{name}", path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Proxy module cannot be loaded: {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ConfigError(f"Proxy module {path} failed to load: {exc}") from exc
    logger.debug("loaded proxy module %s", path)
    return module


def apply_implications(supplied: Iterable[str], options: Options) -> Options:
    """Force the features implied by the supplied options.

    Runs after literal assignment, so option order never matters and a
    base flag can never switch off an implied feature.
    """
    supplied = set(supplied)
    for dest, implied in IMPLICATIONS.items():
        if dest not in supplied:
            continue
        for field, value in implied.items():
            setattr(options, field, value)
    return options
