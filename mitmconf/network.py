from __future__ import annotations

import ctypes
import os
import re
from typing import Optional

from scapy.all import conf, get_if_addr, get_if_hwaddr, get_if_list  # type: ignore

from mitmconf.log import get_logger
from mitmconf.models import NetworkInfo

logger = get_logger("network")


def is_privileged() -> bool:
    if hasattr(os, "geteuid"):
        return os.geteuid() == 0
    try:
        return ctypes.windll.shell32.IsUserAnAdmin() != 0  # type: ignore[attr-defined]
    except (AttributeError, OSError):
        return False


def _parse_route() -> tuple[Optional[str], Optional[str]]:
    try:
        route = conf.route.route("0.0.0.0")
    except Exception:
        return None, None
    iface = None
    gateway = None
    for item in route:
        if isinstance(item, str) and item in get_if_list():
            iface = item
        elif isinstance(item, str) and re.match(r"^\d+\.\d+\.\d+\.\d+$", item):
            if item != "0.0.0.0":
                gateway = item
    return iface, gateway


def default_route_iface() -> Optional[str]:
    iface, _ = _parse_route()
    return iface


def default_gateway_ip() -> Optional[str]:
    _, gateway = _parse_route()
    return gateway


def interface_info(iface: str) -> NetworkInfo:
    try:
        ip = get_if_addr(iface)
    except Exception:
        logger.warning("could not read the address of %s", iface)
        ip = None
    try:
        mac = get_if_hwaddr(iface)
    except Exception:
        logger.warning("could not read the hardware address of %s", iface)
        mac = None
    if ip == "0.0.0.0":
        ip = None
    return NetworkInfo(iface=iface, ip=ip, mac=mac, gateway=default_gateway_ip())
