#!/usr/bin/env python3
"""
Thing Commander - an interactive console for remotely controlling IoT gateways.

This is the main entry point that:
1. Collects connection parameters from flags, prompting for any missing ones
2. Connects to the MQTT broker
3. Opens an interactive shell bound to one gateway
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import DEFAULT_CONFIG_DIR, ConsoleConfig
from .core.session import generate_session_id
from .mqtt_operations import MQTTOperations
from .persistent_shell import start_interactive_shell
from .utils.config_manager import ConfigManager
from .utils.debug_logger import debug_log
from .utils.exceptions import InvalidArgumentError
from .utils.logger import log_crash, setup_logging
from .utils.validators import validate_broker_url


BANNER_WIDTH = 71


def _broker_endpoint(value: str) -> str:
    """click value processor for broker endpoints."""
    try:
        validate_broker_url(value)
    except InvalidArgumentError as e:
        raise click.BadParameter(str(e))
    return value


def _validate_broker_option(ctx, param, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return _broker_endpoint(value)


def show_banner():
    click.echo(click.style("-" * BANNER_WIDTH, fg='white'))
    click.echo(click.style("Thing Commander", fg='blue', bold=True) +
               click.style(f"v{__version__}".rjust(BANNER_WIDTH - len("Thing Commander")), fg='yellow'))
    click.echo(click.style("-" * BANNER_WIDTH, fg='white'))
    click.echo()


def prompt_missing_args(config_manager: ConfigManager, broker_endpoint: Optional[str],
                        gateway: Optional[str], username: Optional[str],
                        password: Optional[str]):
    """Prompt for every connection parameter not given on the command line."""
    prefix = click.style("[connection] ", fg='yellow')
    if not broker_endpoint:
        broker_endpoint = click.prompt(prefix + click.style("Broker endpoint", fg='blue'),
                                       default=config_manager.get_broker(),
                                       value_proc=_broker_endpoint)
    if not gateway:
        gateway = click.prompt(prefix + click.style("Gateway", fg='blue'),
                               default=config_manager.get_gateway())
    if not username:
        username = click.prompt(prefix + click.style("Username", fg='blue'),
                                default=config_manager.get_username())
    if not password:
        password = click.prompt(prefix + click.style("Password", fg='blue'), hide_input=True)
    return broker_endpoint, gateway, username, password


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--session-id', default=None,
              help='An id to associate with the command session (generated if omitted)')
@click.option('--broker-endpoint', default=None, callback=_validate_broker_option,
              help='URL of the mqtt broker, e.g. mqtts://broker.example.com:8883. '
                   'Prompted for if not specified')
@click.option('--gateway', default=None,
              help='The name of the gateway to manage. Prompted for if not specified')
@click.option('--username', default=None,
              help='Username for the mqtt broker. Prompted for if not specified')
@click.option('--password', default=None,
              help='Password for the mqtt broker. Prompted for if not specified')
@click.option('--config-dir', default=str(DEFAULT_CONFIG_DIR),
              help=f'Configuration directory (default: {DEFAULT_CONFIG_DIR})')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.version_option(__version__, prog_name='thing-commander')
@debug_log
def main(session_id: Optional[str], broker_endpoint: Optional[str], gateway: Optional[str],
         username: Optional[str], password: Optional[str], config_dir: str, debug: bool):
    """
    Thing Commander - remote control for IoT gateways over MQTT

    Examples:
        thing-commander --broker-endpoint mqtts://broker.example.com --gateway gw1
        thing-commander --session-id ops-42 --username alice
    """
    try:
        config_path = Path(config_dir).expanduser().resolve()
        config_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        click.echo(click.style(f"✗ Error creating config directory: {str(e)}", fg='red'))
        click.echo("Please specify a different config directory using --config-dir")
        sys.exit(1)

    log_system = setup_logging(str(config_path), "DEBUG" if debug else "INFO")
    app_logger = log_system.app_logger
    client = None

    try:
        show_banner()
        config_manager = ConfigManager(config_path)
        broker_endpoint, gateway, username, password = prompt_missing_args(
            config_manager, broker_endpoint, gateway, username, password)

        config = ConsoleConfig(
            broker_endpoint=broker_endpoint,
            gateway=gateway,
            username=username,
            password=password,
            session_id=session_id or generate_session_id(),
            config_dir=str(config_path)
        ).validate()
        config_manager.remember_connection(broker_endpoint, gateway, username)

        app_logger.info(f"Session {config.session_id}: gateway {gateway} via {broker_endpoint}")

        client = MQTTOperations(broker_endpoint, config.client_id, username, password)
        client.connect()
        click.echo(click.style(
            f"Client connected to mqtt broker: [{config.client_id}] [{broker_endpoint}]", fg='white'))

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            request_count = loop.run_until_complete(start_interactive_shell(client, config))
        finally:
            loop.close()
        app_logger.info(f"Session {config.session_id} ended after {request_count} requests")

    except click.Abort:
        click.echo()
    except Exception as e:
        log_crash(e, context="main_function")
        app_logger.error(f"Critical error in main function: {str(e)}")
        click.echo(click.style("Unhandled error occurred. Terminating program.", fg='red'), err=True)
        click.echo(click.style(str(e), fg='red'), err=True)
        sys.exit(1)
    finally:
        if client is not None:
            click.echo(click.style(f"Terminating client: [{client.client_id}]", fg='white'))
            client.disconnect()
            click.echo(click.style(f"Client terminated: [{client.client_id}]", fg='white'))
        log_system.cleanup()

    click.echo(click.style("goodbye", fg='green'))


if __name__ == '__main__':
    main()
