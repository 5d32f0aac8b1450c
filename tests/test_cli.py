"""Tests for fivem_utility.cli (main, server commands, docker subcommands)."""

from pathlib import Path
from unittest.mock import patch

import pytest

from fivem_utility.artifacts.server import Artifact
from fivem_utility.cli.main import main
from fivem_utility.cli.parse_common import FlagError, parse_flags, pop_switch, wants_help


def _exit_code(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


class TestParseCommon:
    def test_parse_flags_and_rest(self) -> None:
        opts, rest = parse_flags(
            ["build", "--variant", "slim", "extra"],
            ("variant", "--variant", None, None),
            ("tag", "--tag", "latest", None),
        )
        assert opts == {"variant": "slim", "tag": "latest"}
        assert rest == ["build", "extra"]

    def test_pop_switch(self) -> None:
        assert pop_switch(["--push", "x"], "--push") == (True, ["x"])
        assert pop_switch(["x"], "--push") == (False, ["x"])

    def test_inline_value_and_last_wins(self) -> None:
        opts, rest = parse_flags(
            ["--tag=v1", "verify", "--tag", "v2"],
            ("tag", "--tag", None, None),
        )
        assert opts == {"tag": "v2"}
        assert rest == ["verify"]

    def test_flag_without_value(self) -> None:
        with pytest.raises(FlagError, match="--tag needs a value"):
            parse_flags(["build", "--tag"], ("tag", "--tag", None, None))

    def test_wants_help(self) -> None:
        assert wants_help(["build", "-h"])
        assert not wants_help(["build", "--push"])


class TestMain:
    def test_no_subcommand(self, capsys) -> None:
        assert _exit_code([]) == 1
        assert "You must specify a subcommand" in capsys.readouterr().err

    def test_version_flag(self, capsys) -> None:
        assert _exit_code(["--version"]) == 0
        assert capsys.readouterr().out.startswith("fivem-utility ")

    def test_unknown_argument_for_server_command(self) -> None:
        assert _exit_code(["verify", "--bogus"]) == 2


class TestServerCommands:
    def test_verify_ok(self, write_cfg, capsys) -> None:
        cfg = write_cfg("server.cfg", "sv_maxclients 10\n")
        assert _exit_code(["-c", str(cfg), "verify"]) == 0
        assert "found no errors" in capsys.readouterr().err

    def test_verify_reports_error(self, write_cfg, capsys) -> None:
        cfg = write_cfg("server.cfg", "sv_maxclients ten\n")
        assert _exit_code(["-c", str(cfg), "verify"]) == 1
        assert "error(s) were found: Max clients is not a number!" in capsys.readouterr().err

    def test_print_parse_failure(self, tmp_path: Path, capsys) -> None:
        assert _exit_code(["-c", str(tmp_path / "missing.cfg"), "print"]) == 1
        assert "Maybe run `verify`" in capsys.readouterr().err

    def test_print_ok(self, write_cfg, capsys) -> None:
        cfg = write_cfg("server.cfg", 'sv_hostname "^1Red Server"\nstart chat\n')
        assert _exit_code(["-c", str(cfg), "print"]) == 0
        out = capsys.readouterr().out
        assert "Red Server" in out
        assert "└─ chat" in out

    def test_resource_usage(self, write_cfg, tmp_path: Path, capsys) -> None:
        cfg = write_cfg("server.cfg", "start chat\nstart ghost\n")
        (tmp_path / "resources" / "chat").mkdir(parents=True)
        (tmp_path / "resources" / "[extra]" / "unused").mkdir(parents=True)
        rc = _exit_code(["-c", str(cfg), "-r", str(tmp_path / "resources"), "resource-usage"])
        assert rc == 0
        captured = capsys.readouterr()
        assert "[  FOUND  ] chat @" in captured.out
        assert "[ MISSING ] ghost" in captured.err
        assert "[  EXTRA  ] unused @" in captured.err

    def test_resource_usage_missing_dir(self, write_cfg, tmp_path: Path) -> None:
        cfg = write_cfg("server.cfg", "start chat\n")
        assert _exit_code(["-c", str(cfg), "-r", str(tmp_path / "nope"), "resource-usage"]) == 1

    def test_version_server(self, capsys) -> None:
        afs = [Artifact(url="https://x/1-ab/", num=1, hash="ab")]
        with patch("fivem_utility.cli.server_cmd.get_artifacts", return_value=afs) as m:
            assert _exit_code(["version-server", "-w"]) == 0
        assert m.call_args[0][0].endswith("build_server_windows/master/")
        assert capsys.readouterr().out == "1\thttps://x/1-ab/\n"


class TestDockerCommands:
    def test_missing_subcommand(self) -> None:
        assert _exit_code(["docker"]) == 1

    def test_unknown_subcommand(self) -> None:
        assert _exit_code(["docker", "frobnicate"]) == 1

    @pytest.mark.parametrize("argv", [["docker", "--help"], ["docker", "-h"], ["docker", "build", "--help"]])
    def test_help_lists_subcommands(self, argv: list[str], capsys) -> None:
        assert _exit_code(argv) == 0
        out = capsys.readouterr().out
        assert out.startswith("usage: fivem-utility docker")
        assert "generate-dockerfile, build, export-artifact, verify" in out

    def test_flag_missing_value(self, tmp_path: Path, capsys) -> None:
        assert _exit_code(["docker", "build", "--project-root", str(tmp_path), "--tag"]) == 1
        assert "--tag needs a value" in capsys.readouterr().err

    def test_variants_lists_default(self, tmp_path: Path, capsys) -> None:
        assert _exit_code(["docker", "variants", "--project-root", str(tmp_path)]) == 0
        out = capsys.readouterr().out
        assert "* slim" in out
        assert "distroless" in out

    def test_generate_all_variants(self, tmp_path: Path) -> None:
        rc = _exit_code(
            ["docker", "generate-dockerfile", "--variant", "all", "--project-root", str(tmp_path)]
        )
        assert rc == 0
        names = sorted(p.name for p in (tmp_path / "docker").iterdir())
        assert names == [
            "Dockerfile.distroless",
            "Dockerfile.pinned",
            "Dockerfile.slim",
            "Dockerfile.standard",
        ]

    def test_unknown_variant(self, tmp_path: Path, capsys) -> None:
        rc = _exit_code(["docker", "build", "--variant", "nope", "--project-root", str(tmp_path)])
        assert rc == 1
        assert "Unknown variant: nope" in capsys.readouterr().err

    def test_build_passes_flags(self, tmp_path: Path) -> None:
        with patch("fivem_utility.cli.docker_cmd.run_build_image", return_value=0) as m:
            rc = _exit_code(
                [
                    "docker",
                    "build",
                    "--variant",
                    "pinned",
                    "--tag",
                    "v2",
                    "--dry-run",
                    "--project-root",
                    str(tmp_path),
                ]
            )
        assert rc == 0
        config, variants, root = m.call_args[0]
        assert [v.name for v in variants] == ["pinned"]
        assert root == tmp_path.resolve()
        assert m.call_args[1] == {"tag": "v2", "push": False, "dry_run": True}

    def test_build_uses_configured_default_variant(self, tmp_path: Path) -> None:
        (tmp_path / "fivem-packaging.yaml").write_text("default_variant: distroless\n")
        with patch("fivem_utility.cli.docker_cmd.run_build_image", return_value=0) as m:
            _exit_code(["docker", "build", "--project-root", str(tmp_path)])
        assert [v.name for v in m.call_args[0][1]] == ["distroless"]

    def test_invalid_packaging_config(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "fivem-packaging.yaml").write_text("nonsense: true\n")
        assert _exit_code(["docker", "variants", "--project-root", str(tmp_path)]) == 1
        assert "Invalid packaging config" in capsys.readouterr().err

    def test_malformed_packaging_yaml(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "fivem-packaging.yaml").write_text("variants: [unclosed\n")
        assert _exit_code(["docker", "variants", "--project-root", str(tmp_path)]) == 1
        assert "Invalid packaging config: Malformed YAML" in capsys.readouterr().err

    def test_variant_settings_must_be_mapping(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "fivem-packaging.yaml").write_text("variants:\n  alpine: 5\n")
        assert _exit_code(["docker", "build", "--project-root", str(tmp_path)]) == 1
        assert "Variant alpine must be a mapping" in capsys.readouterr().err

    def test_verify_default_image_per_variant(self, tmp_path: Path) -> None:
        with patch("fivem_utility.cli.docker_cmd.run_verify_image", return_value=0) as m:
            rc = _exit_code(
                ["docker", "verify", "--variant", "all", "--tag", "v1", "--project-root", str(tmp_path)]
            )
        assert rc == 0
        images = [c[0][0] for c in m.call_args_list]
        assert images == [
            "fivem-utility:v1-standard",
            "fivem-utility:v1-slim",
            "fivem-utility:v1-pinned",
            "fivem-utility:v1-distroless",
        ]

    def test_export_artifact(self, tmp_path: Path) -> None:
        with patch("fivem_utility.cli.docker_cmd.export_artifact", return_value=0) as m:
            rc = _exit_code(
                ["docker", "export-artifact", "--dest", "bins", "--project-root", str(tmp_path)]
            )
        assert rc == 0
        assert m.call_args[0][3] == Path("bins")
