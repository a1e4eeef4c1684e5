"""
tfbackend CLI - Command line interface for tfbackend.

Usage:
    tfbackend serve                              # Serve ./data on port 9944
    tfbackend serve --data-dir /var/lib/tfstate --port 8080
    tfbackend serve --config /etc/tfbackend/config.yaml
"""

import click

from .serve import serve_command


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx):
    """tfbackend - HTTP remote state backend with advisory locking."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(serve_command, name="serve")


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
