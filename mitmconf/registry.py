from __future__ import annotations

from typing import Dict, Optional

from mitmconf.errors import ConfigError
from mitmconf.models import SpooferReference

# Names are matched exactly; order of registration is the order shown in --help.
SPOOFERS: Dict[str, SpooferReference] = {}

PARSERS = (
    "COOKIE",
    "CREDITCARD",
    "CUSTOM",
    "DHCP",
    "DICT",
    "FTP",
    "HTTPAUTH",
    "HTTPS",
    "IRC",
    "MAIL",
    "MYSQL",
    "NNTP",
    "NTLMSS",
    "PGSQL",
    "POST",
    "REDIS",
    "RLOGIN",
    "SNMP",
    "SNPP",
    "URL",
    "WHATSAPP",
)


def register_spoofer(name: str, description: str = "") -> SpooferReference:
    reference = SpooferReference(name=name, description=description)
    SPOOFERS[name] = reference
    return reference


def get_spoofer(name: str) -> SpooferReference:
    reference: Optional[SpooferReference] = SPOOFERS.get(name)
    if reference is None:
        raise ConfigError(f"Invalid spoofer name specified: {name}.")
    return reference


def available_spoofers() -> list[str]:
    return list(SPOOFERS)


def parse_parsers(value: str | list[str]) -> list[str]:
    """Normalise a parser selection: ``*`` anywhere selects every parser."""
    if isinstance(value, str):
        names = [item.strip().upper() for item in value.split(",") if item.strip()]
    else:
        names = [str(item).strip().upper() for item in value]
    if not names:
        raise ConfigError("No parser specified.")
    if "*" in names:
        return ["*"]
    for name in names:
        if name not in PARSERS:
            raise ConfigError(f"Invalid parser name '{name}'.")
    return names


register_spoofer("ARP", "ARP cache poisoning of targets and gateway")
register_spoofer("ICMP", "ICMP redirect spoofing")
register_spoofer("DNS", "DNS reply spoofing")
register_spoofer("NONE", "no spoofing")
