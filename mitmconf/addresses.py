from __future__ import annotations

import re
from typing import Callable

from mitmconf.errors import ConfigError
from mitmconf.log import get_logger

logger = get_logger("addresses")

_OCTET = r"(?:25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9][0-9]|[0-9])"
_IPV4_RE = re.compile(rf"{_OCTET}(?:\.{_OCTET}){{3}}")
_MAC_RE = re.compile(r"[0-9a-fA-F]{2}([:-])[0-9a-fA-F]{2}(?:\1[0-9a-fA-F]{2}){4}")


def is_ipv4(value: object) -> bool:
    if not isinstance(value, str):
        return False
    return _IPV4_RE.fullmatch(value) is not None


def is_mac(value: object) -> bool:
    if not isinstance(value, str):
        return False
    return _MAC_RE.fullmatch(value) is not None


def is_target(value: object) -> bool:
    return is_ipv4(value) or is_mac(value)


def split_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def filter_addresses(
    raw: str,
    predicate: Callable[[str], bool],
    error: str,
    warning: str = "Not a valid address: %s",
) -> list[str]:
    """Keep the entries of a comma separated list that pass ``predicate``.

    Invalid entries are dropped with ``warning`` logged for each; a ``ConfigError`` with
    ``error`` as message is raised only when no entry is valid. Order and
    duplicates are preserved.
    """
    entries = split_list(raw)
    valid = [entry for entry in entries if predicate(entry)]
    if not valid:
        raise ConfigError(error)
    for entry in entries:
        if not predicate(entry):
            logger.warning(warning, entry)
    return valid
