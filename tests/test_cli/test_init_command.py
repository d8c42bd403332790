"""Tests for the init CLI command."""

from pathlib import Path

import yaml
from click.testing import CliRunner

from ts_validator.cli.commands.init import init
from ts_validator.cli.main import cli


class TestInitCommand:
    """Tests for the init CLI command."""

    def test_init_help(self):
        """Init command should show help."""
        runner = CliRunner()
        result = runner.invoke(init, ["--help"])

        assert result.exit_code == 0
        assert "Initialize ts-validator configuration" in result.output

    def test_init_creates_config_file(self):
        """Init command should create configuration file."""
        runner = CliRunner()

        with runner.isolated_filesystem():
            result = runner.invoke(init)

            assert result.exit_code == 0
            assert Path(".ts-validator.yaml").exists()
            assert "Created configuration file" in result.output

    def test_init_config_contains_defaults(self):
        """Created config should be loadable YAML with default settings."""
        runner = CliRunner()

        with runner.isolated_filesystem():
            runner.invoke(init)

            data = yaml.safe_load(Path(".ts-validator.yaml").read_text(encoding="utf-8"))
            assert data["scan"]["rules"] == "zod-strict"
            assert "ignore" in data

    def test_init_does_not_overwrite_existing(self):
        """Init should not overwrite existing config without --force."""
        runner = CliRunner()

        with runner.isolated_filesystem():
            Path(".ts-validator.yaml").write_text("existing: true", encoding="utf-8")

            result = runner.invoke(init)

            assert result.exit_code == 1
            assert "already exists" in result.output

            content = Path(".ts-validator.yaml").read_text(encoding="utf-8")
            assert "existing: true" in content

    def test_init_force_overwrites(self):
        """Init --force should overwrite existing config."""
        runner = CliRunner()

        with runner.isolated_filesystem():
            Path(".ts-validator.yaml").write_text("existing: true", encoding="utf-8")

            result = runner.invoke(init, ["--force"])

            assert result.exit_code == 0
            content = Path(".ts-validator.yaml").read_text(encoding="utf-8")
            assert "existing: true" not in content
            assert "rules: zod-strict" in content

    def test_init_through_main_group(self):
        runner = CliRunner()

        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init"])

            assert result.exit_code == 0
            assert Path(".ts-validator.yaml").exists()
