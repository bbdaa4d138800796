from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from mitmconf.addresses import is_ipv4, is_mac
from mitmconf.errors import ConfigError


class Target(BaseModel):
    model_config = ConfigDict(frozen=True)

    ip: Optional[str] = None
    mac: Optional[str] = None

    @classmethod
    def parse(cls, address: str) -> "Target":
        if is_ipv4(address):
            return cls(ip=address)
        if is_mac(address):
            return cls(mac=address)
        raise ConfigError(f"Invalid target specified: {address}")

    @property
    def address(self) -> str:
        return self.ip or self.mac or ""


class SpooferReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""

    @property
    def is_noop(self) -> bool:
        return self.name == "NONE"


class Redirection(BaseModel):
    model_config = ConfigDict(frozen=True)

    interface: Optional[str]
    protocol: str
    src_port: int
    dst_address: str
    dst_port: int


class NetworkInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    iface: str
    ip: Optional[str] = None
    mac: Optional[str] = None
    gateway: Optional[str] = None

