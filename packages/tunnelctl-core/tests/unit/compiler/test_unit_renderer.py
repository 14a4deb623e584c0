"""Unit tests for systemd unit rendering."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from tunnelctl_core.compiler.capabilities import derive_sandbox
from tunnelctl_core.compiler.compiler import Compiler
from tunnelctl_core.compiler.models import (
    Capability,
    CompilationMetadata,
    CompiledUnits,
    UnitDescriptor,
)
from tunnelctl_core.compiler.unit_renderer import (
    quote_exec_argument,
    render_unit_file,
    write_unit_files,
)
from tunnelctl_core.schemas import TunnelSpec


def make_unit(**overrides: object) -> UnitDescriptor:
    fields: dict[str, object] = {
        "name": "wstunnel-server-wg",
        "description": "wstunnel server - wg",
        "command": ("wstunnel", "server", "wss://0.0.0.0:8080"),
    }
    fields.update(overrides)
    return UnitDescriptor.model_validate(fields)


class TestQuoteExecArgument:
    """Tests for ExecStart= quoting."""

    @pytest.mark.parametrize(
        "argument",
        [
            "wss://0.0.0.0:443",
            "tcp://1212:google.com:443",
            "socks5://[::1]:1212",
            "tcp://2:n.lan:4?proxy_protocol",
            "alice:${HTTP_PASSWORD}",
            "--restrict-to",
        ],
    )
    def test_safe_arguments_unquoted(self, argument: str) -> None:
        """Common tunnel arguments need no quoting."""
        assert quote_exec_argument(argument) == argument

    def test_space_quoted(self) -> None:
        """Whitespace forces double quotes."""
        assert quote_exec_argument("X-Name:a b") == '"X-Name:a b"'

    def test_percent_escaped(self) -> None:
        """systemd specifiers are escaped."""
        assert quote_exec_argument("50%") == "50%%"

    def test_quotes_and_backslashes_escaped(self) -> None:
        """Embedded quotes and backslashes are escaped inside quotes."""
        assert quote_exec_argument('a"b\\c') == '"a\\"b\\\\c"'

    def test_empty_argument(self) -> None:
        """An empty argument is kept as an empty quoted string."""
        assert quote_exec_argument("") == '""'

    def test_control_characters_escaped(self) -> None:
        """Newlines, tabs and other control characters become C escapes."""
        assert quote_exec_argument("a\nb\rc\td\x01e\x7f") == '"a\\nb\\rc\\td\\x01e\\x7f"'


class TestRenderUnitFile:
    """Tests for render_unit_file()."""

    def test_minimal_unit(self) -> None:
        """The fixed sections and sandbox settings are always present."""
        content = render_unit_file(make_unit())
        lines = content.splitlines()

        assert lines[0] == "[Unit]"
        assert "Description=wstunnel server - wg" in lines
        assert "Requires=network.target network-online.target" in lines
        assert "After=network.target network-online.target" in lines
        assert "[Service]" in lines
        assert "Type=exec" in lines
        assert "ExecStart=wstunnel server wss://0.0.0.0:8080" in lines
        assert "DynamicUser=yes" in lines
        assert "PrivateTmp=yes" in lines
        assert "NoNewPrivileges=yes" in lines
        assert "RestrictNamespaces=uts ipc pid user cgroup" in lines
        assert "ProtectSystem=strict" in lines
        assert "ProtectHome=yes" in lines
        assert "PrivateDevices=yes" in lines
        assert "RestrictSUIDSGID=yes" in lines
        assert content.endswith("\n")

    def test_restart_policy(self) -> None:
        """Restart backoff is rendered in systemd units."""
        lines = render_unit_file(make_unit()).splitlines()
        assert "Restart=on-failure" in lines
        assert "RestartSec=2" in lines
        assert "RestartSteps=20" in lines
        assert "RestartMaxDelaySec=5min" in lines

    def test_no_install_section_by_default(self) -> None:
        """Units not started on boot have no [Install] section."""
        assert "[Install]" not in render_unit_file(make_unit())

    def test_install_section(self) -> None:
        """wanted_by produces an [Install] section."""
        content = render_unit_file(make_unit(wanted_by=("multi-user.target",)))
        assert content.endswith("[Install]\nWantedBy=multi-user.target\n")

    def test_capabilities(self) -> None:
        """Capabilities become AmbientCapabilities."""
        unit = make_unit(capabilities=(Capability.NET_ADMIN, Capability.BIND_LOW_PORT))
        assert (
            "AmbientCapabilities=CAP_NET_ADMIN CAP_NET_BIND_SERVICE"
            in render_unit_file(unit).splitlines()
        )

    def test_no_capabilities_line_when_empty(self) -> None:
        """No AmbientCapabilities line without capabilities."""
        assert "AmbientCapabilities" not in render_unit_file(make_unit())

    def test_supplementary_groups(self) -> None:
        """Certificate groups become SupplementaryGroups."""
        unit = make_unit(sandbox=derive_sandbox(["acme"]))
        assert "SupplementaryGroups=acme" in render_unit_file(unit).splitlines()

    def test_environment(self) -> None:
        """Environment assignments are quoted; files are listed."""
        unit = make_unit(
            environment={"RUST_LOG": "INFO"},
            environment_files=("/run/secrets/wstunnel.env",),
        )
        lines = render_unit_file(unit).splitlines()
        assert 'Environment="RUST_LOG=INFO"' in lines
        assert "EnvironmentFile=/run/secrets/wstunnel.env" in lines

    def test_exec_start_quotes_arguments(self) -> None:
        """Arguments with spaces are quoted in ExecStart."""
        unit = make_unit(
            command=("wstunnel", "client", "--http-headers", "X-A:a b", "wss://h"),
        )
        assert (
            'ExecStart=wstunnel client --http-headers "X-A:a b" wss://h'
            in render_unit_file(unit).splitlines()
        )

    def test_newline_in_argument_cannot_add_directives(self) -> None:
        """A header value with newlines stays on the ExecStart= line."""
        spec = TunnelSpec.model_validate(
            {
                "clients": {
                    "wg": {
                        "connect_target": "wss://h:8443",
                        "local_to_remote": ["tcp://1:a:2"],
                        "custom_headers": {
                            "X-A": "v\nUser=root\nExecStartPre=/bin/touch /tmp/owned",
                        },
                    }
                }
            }
        )
        unit = Compiler().compile(spec).units["wstunnel-client-wg"]
        content = render_unit_file(unit)

        assert "\nUser=root" not in content
        assert "\nExecStartPre=" not in content
        exec_lines = [line for line in content.splitlines() if line.startswith("ExecStart")]
        assert len(exec_lines) == 1
        assert '"X-A:v\\nUser=root\\nExecStartPre=/bin/touch /tmp/owned"' in exec_lines[0]

    def test_newline_in_environment_escaped(self) -> None:
        """Environment values are escaped the same way."""
        unit = make_unit(environment={"RUST_LOG": "INFO\nUser=root"})
        lines = render_unit_file(unit).splitlines()
        assert 'Environment="RUST_LOG=INFO\\nUser=root"' in lines
        assert "User=root" not in lines


class TestWriteUnitFiles:
    """Tests for write_unit_files()."""

    def test_writes_one_file_per_unit(self, tmp_path: Path) -> None:
        """Each unit is written as <name>.service."""
        compiled = CompiledUnits(
            metadata=CompilationMetadata(
                compiled_at=datetime.now(timezone.utc),
                tunnelctl_version="0.1.0",
            ),
            units={
                "wstunnel-server-wg": make_unit(),
                "wstunnel-client-wg": make_unit(
                    name="wstunnel-client-wg",
                    command=("wstunnel", "client", "wss://h"),
                ),
            },
        )
        output = tmp_path / "units"
        written = write_unit_files(compiled, output)

        assert written == [
            output / "wstunnel-server-wg.service",
            output / "wstunnel-client-wg.service",
        ]
        assert written[1].read_text().startswith("[Unit]\n")
        assert sorted(p.name for p in output.iterdir()) == [
            "wstunnel-client-wg.service",
            "wstunnel-server-wg.service",
        ]

    def test_failed_write_leaves_directory_unchanged(self, tmp_path: Path) -> None:
        """A write error part way through replaces no unit file."""
        compiled = CompiledUnits(
            metadata=CompilationMetadata(
                compiled_at=datetime.now(timezone.utc),
                tunnelctl_version="0.1.0",
            ),
            units={
                "wstunnel-server-wg": make_unit(),
                "wstunnel-client-wg": make_unit(
                    name="wstunnel-client-wg",
                    command=("wstunnel", "client", "wss://h"),
                ),
            },
        )
        output = tmp_path / "units"
        output.mkdir()
        (output / "wstunnel-server-wg.service").write_text("previous\n")
        # Blocks the staging file of the second unit
        (output / "wstunnel-client-wg.service.tmp").mkdir()

        with pytest.raises(OSError):
            write_unit_files(compiled, output)

        assert (output / "wstunnel-server-wg.service").read_text() == "previous\n"
        assert not (output / "wstunnel-server-wg.service.tmp").exists()
        assert not (output / "wstunnel-client-wg.service").exists()
