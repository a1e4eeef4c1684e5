"""
tfbackend serve command - Run the state backend HTTP server.

Configuration is read from --config (YAML) when given, otherwise from the
environment (DATA_DIR, HOST, PORT, AUTH_USERNAME, AUTH_PASSWORD, LOG_LEVEL).
Command line options override either source.
"""

import logging

import click
import uvicorn

from ..api_server import create_app
from ..config import LOG_LEVELS, BackendConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def load_config(config_path, **overrides) -> BackendConfig:
    """Build the effective configuration: file or environment, then overrides."""
    if config_path:
        cfg = BackendConfig.from_yaml(config_path)
    else:
        cfg = BackendConfig.from_env()
    cfg = cfg.with_overrides(**overrides)
    cfg.validate()
    return cfg


@click.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML config file")
@click.option("--data-dir", type=str, default=None, help="Storage root (default: ./data)")
@click.option("--host", type=str, default=None, help="Bind host (default: 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Bind port (default: 9944)")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None, help="Log level (default: info)")
def serve_command(config_path, data_dir, host, port, log_level):
    """Start the state backend server.

    Example:
        tfbackend serve --data-dir ./data --port 9944

        # With basic auth
        AUTH_USERNAME=tf AUTH_PASSWORD=secret tfbackend serve
    """
    try:
        cfg = load_config(
            config_path,
            data_dir=data_dir,
            host=host,
            port=port,
            log_level=log_level.lower() if log_level else None,
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    logging.basicConfig(level=cfg.log_level.upper(), format=LOG_FORMAT)

    logger.info("Storing data in '%s'", cfg.data_dir)
    try:
        cfg.ensure_data_dir()
    except OSError as e:
        raise click.ClickException(f"Failed to create storage root directory: {e}")

    app = create_app(cfg)

    click.echo(f"Starting tfbackend on {cfg.host}:{cfg.port}")
    click.echo(f"  States: {cfg.states_dir}")
    click.echo(f"  Locks:  {cfg.locks_dir}")
    click.echo(f"  Auth:   {'enabled' if cfg.auth_enabled else 'disabled'}")

    uvicorn.run(
        app,
        host=cfg.host,
        port=cfg.port,
        log_level=cfg.log_level,
    )
