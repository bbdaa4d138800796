from __future__ import annotations

import sys
from typing import Optional

from mitmconf.errors import ConfigError
from mitmconf.pipeline import Context, parse


def describe(ctx: Context) -> list[str]:
    options = ctx.options
    net = ctx.network
    lines = [
        f"interface   {net.iface} ip={net.ip or 'unknown'} mac={net.mac or 'unknown'}",
        f"gateway     {ctx.gateway or 'unknown'}",
    ]
    if ctx.targets:
        lines.append(f"targets     {', '.join(t.address for t in ctx.targets)}")
    else:
        lines.append("targets     whole subnet")
    if options.ignore:
        lines.append(f"ignore      {', '.join(options.ignore)}")
    lines.append(f"spoofers    {', '.join(s.name for s in ctx.spoofers)}")
    if options.sniffer:
        source = options.sniffer_src or net.iface
        lines.append(f"sniffer     source={source} parsers={','.join(options.parsers)}")
        if options.sniffer_filter:
            lines.append(f"            filter={options.sniffer_filter}")
        if options.sniffer_pcap:
            lines.append(f"            pcap={options.sniffer_pcap}")
    for rule in ctx.redirections:
        lines.append(
            f"redirect    {rule.protocol}/{rule.src_port} -> {rule.dst_address}:{rule.dst_port}"
            f" on {rule.interface}"
        )
    if options.httpd:
        lines.append(f"httpd       port={options.httpd_port} path={options.httpd_path}")
    if options.kill:
        lines.append("kill        connections of targets will be dropped")
    if options.packet_throttle:
        lines.append(f"throttle    {options.packet_throttle}s")
    return lines


def main(argv: Optional[list[str]] = None) -> int:
    try:
        ctx = parse(argv)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    for line in describe(ctx):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
