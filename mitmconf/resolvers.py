from __future__ import annotations

from typing import Optional

from mitmconf.addresses import filter_addresses, is_target, split_list
from mitmconf.errors import ConfigError
from mitmconf.models import NetworkInfo, Redirection, SpooferReference, Target
from mitmconf.options import Options
from mitmconf.registry import get_spoofer


def to_targets(options: Options) -> list[Target]:
    """Parse ``options.target``; an empty list means the whole subnet."""
    if options.target is None:
        return []
    valid = filter_addresses(
        options.target,
        is_target,
        "Invalid target specified.",
        warning="Invalid target specified: %s",
    )
    return [Target.parse(address) for address in valid]


def to_spoofers(options: Options) -> list[SpooferReference]:
    names = split_list(options.spoofer)
    if not names:
        raise ConfigError("No spoofer specified.")
    return [get_spoofer(name) for name in names]


def to_redirections(options: Options, network: NetworkInfo) -> list[Redirection]:
    redirections = []
    local_ip: Optional[str] = network.ip

    if options.proxy or options.proxy_https:
        if local_ip is None:
            raise ConfigError(f"Could not determine the address of {network.iface}.")

    if options.proxy:
        redirections.append(
            Redirection(
                interface=options.iface,
                protocol="TCP",
                src_port=80,
                dst_address=local_ip,
                dst_port=options.proxy_port,
            )
        )

    if options.proxy_https:
        redirections.append(
            Redirection(
                interface=options.iface,
                protocol="TCP",
                src_port=443,
                dst_address=local_ip,
                dst_port=options.proxy_https_port,
            )
        )

    if options.custom_proxy:
        redirections.append(
            Redirection(
                interface=options.iface,
                protocol="TCP",
                src_port=80,
                dst_address=options.custom_proxy,
                dst_port=options.custom_proxy_port,
            )
        )

    if options.custom_https_proxy:
        redirections.append(
            Redirection(
                interface=options.iface,
                protocol="TCP",
                src_port=443,
                dst_address=options.custom_https_proxy,
                dst_port=options.custom_https_proxy_port,
            )
        )

    return redirections
