"""Tests for the command-line interface."""

from click.testing import CliRunner

from epistery_host.cli import cli


def test_agents_discover(agents_root, make_agent):
    make_agent("adnet", manifest={"name": "@geistm/adnet-agent", "version": "2.1.0"})
    make_agent("nameless", manifest={"version": "0.1.0"})

    result = CliRunner().invoke(cli, ["agents", "discover", "--path", str(agents_root)], obj={})

    assert result.exit_code == 0
    assert "adnet" in result.output
    assert "2.1.0" in result.output
    assert "missing" in result.output


def test_agents_discover_empty(tmp_path):
    result = CliRunner().invoke(cli, ["agents", "discover", "--path", str(tmp_path / "none")], obj={})

    assert result.exit_code == 0
    assert "No agents found" in result.output


def test_init_writes_config():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["init"], obj={})

        assert result.exit_code == 0
        with open("epistery-host.yaml") as f:
            assert "agents:" in f.read()


def test_start_with_missing_config(tmp_path):
    result = CliRunner().invoke(cli, ["-c", str(tmp_path / "nope.yaml"), "start"], obj={})

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_agents_discover_flags_unusable_names(agents_root, make_agent):
    make_agent("at", manifest={"name": "@"})

    result = CliRunner().invoke(cli, ["agents", "discover", "--path", str(agents_root)], obj={})

    assert result.exit_code == 0
    assert "invalid name" in result.output
