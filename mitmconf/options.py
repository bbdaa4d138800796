from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mitmconf.addresses import filter_addresses, is_ipv4
from mitmconf.errors import ConfigError
from mitmconf.log import get_logger
from mitmconf.registry import parse_parsers

logger = get_logger("options")

PORT_FIELDS = (
    "proxy_port",
    "proxy_https_port",
    "custom_proxy_port",
    "custom_https_proxy_port",
    "httpd_port",
)

PATH_FIELDS = (
    "logfile",
    "sniffer_src",
    "sniffer_pcap",
    "proxy_pem_file",
    "proxy_module",
    "httpd_path",
)


def expand_path(value: str) -> str:
    return os.path.abspath(os.path.expanduser(value))


class Options(BaseModel):
    """Every setting of a run.

    Assignments are validated field by field. List fields (``ignore``)
    are best-effort: invalid entries are dropped with a warning and only an
    entirely invalid list is an error. Scalar fields (upstream proxy
    addresses, ports, packet throttle) are strict: any invalid value raises
    ``ConfigError`` and the previous value is kept.
    """

    model_config = ConfigDict(validate_assignment=True)

    gateway: Optional[str] = None
    iface: Optional[str] = None
    spoofer: str = "ARP"
    half_duplex: bool = False
    target: Optional[str] = None
    logfile: Optional[str] = None
    silent: bool = False
    debug: bool = False
    arpcache: bool = False
    no_target_nbns: bool = False
    kill: bool = False
    packet_throttle: float = 0.0

    ignore: Optional[List[str]] = None

    sniffer: bool = False
    sniffer_pcap: Optional[str] = None
    sniffer_filter: Optional[str] = None
    sniffer_src: Optional[str] = None
    parsers: List[str] = Field(default_factory=lambda: ["*"])
    custom_parser: Optional[str] = None
    local: bool = False

    proxy: bool = False
    proxy_https: bool = False
    proxy_port: int = 8080
    proxy_https_port: int = 8083
    proxy_pem_file: Optional[str] = None
    proxy_module: Optional[str] = None
    module_options: Dict[str, Any] = Field(default_factory=dict)

    custom_proxy: Optional[str] = None
    custom_proxy_port: int = 8080
    custom_https_proxy: Optional[str] = None
    custom_https_proxy_port: int = 8083

    httpd: bool = False
    httpd_port: int = 8081
    httpd_path: str = Field(default="./", validate_default=True)

    check_updates: bool = False

    @field_validator("ignore", mode="before")
    @classmethod
    def _check_ignore(cls, value: Union[str, List[str], None]) -> Optional[List[str]]:
        if value is None:
            return None
        if not isinstance(value, str):
            value = ",".join(value)
        valid = filter_addresses(value, is_ipv4, "Invalid ignore addresses specified.")
        logger.info("Ignoring %s .", ", ".join(valid))
        return valid

    @field_validator("custom_proxy")
    @classmethod
    def _check_custom_proxy(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_ipv4(value):
            raise ConfigError("Invalid custom HTTP upstream proxy address specified.")
        return value

    @field_validator("custom_https_proxy")
    @classmethod
    def _check_custom_https_proxy(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_ipv4(value):
            raise ConfigError("Invalid custom HTTPS upstream proxy address specified.")
        return value

    @field_validator("packet_throttle")
    @classmethod
    def _check_packet_throttle(cls, value: float) -> float:
        if not value > 0.0:
            raise ConfigError("Invalid packet throttle value specified.")
        return value

    @field_validator(*PORT_FIELDS)
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ConfigError(f"Invalid port {value} specified.")
        return value

    @field_validator(*PATH_FIELDS)
    @classmethod
    def _expand_path(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return expand_path(value)

    @field_validator("parsers", mode="before")
    @classmethod
    def _check_parsers(cls, value: Union[str, List[str]]) -> List[str]:
        return parse_parsers(value)

    @field_validator("custom_parser")
    @classmethod
    def _check_custom_parser(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        try:
            re.compile(value)
        except re.error as exc:
            raise ConfigError(f"Invalid custom parser expression: {exc}") from exc
        return value

    def should_discover_hosts(self) -> bool:
        return not self.arpcache

    def has_proxy_module(self) -> bool:
        return self.proxy_module is not None

    def has_spoofer(self) -> bool:
        return self.spoofer not in ("NONE", "none")

    def has_http_sniffer_enabled(self) -> bool:
        return self.sniffer and ("*" in self.parsers or "URL" in self.parsers)

    def ignore_ip(self, ip: str) -> bool:
        return self.ignore is not None and ip in self.ignore
