"""Command-line interface for fcdeploy."""

from fcdeploy.cli.main import cli

__all__ = ["cli"]
