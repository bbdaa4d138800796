"""Tests for mitmconf.pipeline (global checks, config files, context)."""
from __future__ import annotations

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from mitmconf.errors import ConfigError
from mitmconf.models import NetworkInfo
from mitmconf.options import Options
from mitmconf.pipeline import assign_options, build_context, check_options, parse, parse_options


class TestGlobalChecks:
    def test_requires_root(self):
        """The privilege check runs before anything else."""
        with patch("mitmconf.network.is_privileged", return_value=False), patch(
            "mitmconf.network.default_route_iface", return_value=None
        ):
            with pytest.raises(ConfigError, match="root"):
                check_options(Options(gateway="bogus"))

    def test_interface_is_auto_detected(self, host_env):
        options = Options()
        check_options(options)
        assert options.iface == "eth0"

    def test_explicit_interface_is_kept(self, host_env):
        options = Options(iface="wlan0")
        check_options(options)
        assert options.iface == "wlan0"

    def test_no_interface(self):
        with patch("mitmconf.network.is_privileged", return_value=True), patch(
            "mitmconf.network.default_route_iface", return_value=None
        ):
            with pytest.raises(ConfigError, match="interface"):
                check_options(Options(gateway="bogus"))

    def test_invalid_gateway(self, host_env):
        with pytest.raises(ConfigError, match="gateway"):
            check_options(Options(gateway="10.0.0.300"))

    def test_check_updates_exits_successfully(self, host_env):
        with patch("mitmconf.updates.check_updates") as check:
            with pytest.raises(SystemExit) as exc:
                check_options(Options(check_updates=True))
        assert exc.value.code == 0
        check.assert_called_once()

    def test_gateway_checked_before_update(self, host_env):
        with patch("mitmconf.updates.check_updates") as check:
            with pytest.raises(ConfigError):
                check_options(Options(gateway="nope", check_updates=True))
        check.assert_not_called()


class TestParseOptions:
    def test_parse_with_implications(self, isolated_config, host_env):
        options = parse_options(["--proxy-https-port", "9443", "-T", "10.0.0.1"])
        assert options.proxy and options.proxy_https
        assert options.proxy_https_port == 9443
        assert options.target == "10.0.0.1"
        assert options.iface == "eth0"

    def test_config_file_counts_as_supplied(self, isolated_config, host_env):
        (isolated_config / "mitmconf.toml").write_text(
            '[global]\niface = "wlan0"\n\n[proxy]\nproxy_https_port = 9443\n'
        )
        options = parse_options([])
        assert options.iface == "wlan0"
        assert options.proxy is True
        assert options.proxy_https is True
        assert options.proxy_https_port == 9443

    def test_false_flags_in_config_imply_nothing(self, isolated_config, host_env):
        """A flag switched off in a config file must not enable anything."""
        (isolated_config / "mitmconf.toml").write_text(
            "[global]\nproxy_https = false\nlocal = false\nno_spoofing = false\n"
        )
        options = parse_options([])
        assert options.proxy is False
        assert options.proxy_https is False
        assert options.sniffer is False
        assert options.local is False
        assert options.spoofer == "ARP"
        assert options.has_spoofer()

    def test_command_line_overrides_config_file(self, isolated_config, host_env):
        (isolated_config / "mitmconf.toml").write_text('iface = "wlan0"\n')
        assert parse_options(["-I", "eth1"]).iface == "eth1"

    def test_config_file_can_be_skipped(self, isolated_config, host_env):
        (isolated_config / "mitmconf.toml").write_text('iface = "wlan0"\n')
        assert parse_options([], use_config=False).iface == "eth0"

    def test_unknown_config_key_is_ignored(self, isolated_config, host_env):
        (isolated_config / "mitmconf.toml").write_text('colour = "red"\n')
        options = parse_options([])
        assert options.module_options == {}

    def test_help_exits_before_validation(self, isolated_config):
        with patch("mitmconf.network.is_privileged", return_value=False):
            with pytest.raises(SystemExit) as exc:
                parse_options(["--help"])
        assert exc.value.code == 0

    def test_invalid_custom_proxy(self, isolated_config, host_env):
        with pytest.raises(ConfigError, match="upstream"):
            parse_options(["--custom-proxy", "300.1.1.1"])

    def test_proxy_module_end_to_end(self, isolated_config, host_env):
        module = isolated_config / "mod.py"
        module.write_text(
            "def register_options(group):\n"
            "    group.add_argument('--replace', dest='replace', default='none')\n"
        )
        options = parse_options(["--proxy-module", str(module), "--replace", "foo"])
        assert options.proxy is True
        assert options.module_options == {"replace": "foo"}

    def test_assign_skips_pseudo_flags(self):
        options = assign_options({"no_spoofing": True})
        assert options.spoofer == "NONE"
        assert options.module_options == {}


class TestContext:
    def test_build_context(self, net):
        options = Options(
            iface="eth0",
            target="10.0.0.2,bad",
            spoofer="ARP",
            proxy=True,
            custom_https_proxy="10.0.0.9",
        )
        ctx = build_context(options, net)
        assert ctx.gateway == "192.168.1.1"
        assert [t.address for t in ctx.targets] == ["10.0.0.2"]
        assert [s.name for s in ctx.spoofers] == ["ARP"]
        assert [(r.src_port, r.dst_address) for r in ctx.redirections] == [
            (80, "192.168.1.5"),
            (443, "10.0.0.9"),
        ]

    def test_explicit_gateway_wins(self, net):
        ctx = build_context(Options(iface="eth0", gateway="192.168.1.254"), net)
        assert ctx.gateway == "192.168.1.254"

    def test_network_is_queried_when_missing(self, net):
        with patch("mitmconf.network.interface_info", return_value=net) as info:
            ctx = build_context(Options(iface="eth0"))
        info.assert_called_once_with("eth0")
        assert ctx.network == net

    def test_context_is_immutable(self, net):
        ctx = build_context(Options(iface="eth0"), net)
        with pytest.raises(ValidationError):
            ctx.gateway = "10.0.0.1"

    def test_parse(self, isolated_config, host_env, net):
        with patch("mitmconf.network.interface_info", return_value=net):
            ctx = parse(["-T", "10.0.0.7", "--no-spoofing", "--proxy"])
        assert [t.address for t in ctx.targets] == ["10.0.0.7"]
        assert ctx.spoofers[0].is_noop
        assert len(ctx.redirections) == 1
        assert ctx.network.iface == "eth0"
