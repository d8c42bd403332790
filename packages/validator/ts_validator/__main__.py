"""Entry point for running ts-validator as a module."""

from ts_validator.cli.main import cli

if __name__ == "__main__":
    cli()
