"""
Persistent Interactive Shell for Thing Commander.

The shell reads one command at a time, resolves it through the dispatch table
and publishes the resulting request. Gateway output arrives on the MQTT
network thread and is printed as soon as it is received.
"""

import asyncio
import logging
import os
import readline
import threading
import time
from pathlib import Path
from typing import List, Optional

import click

from .config import ConsoleConfig
from .core.commander import Commander
from .core.inbound import classify_message
from .core.session import INBOUND_ROLE, Session, topic_for
from .core.tokens import tokenize
from .dispatch import QUIT_COMMANDS, KeyedEntry, build_dispatch_table
from .utils.exceptions import CommanderError, UnknownCommandError
from .utils.logger import get_logger_or_none

logger = logging.getLogger("thing_commander.shell")

HISTORY_LIMIT = 1000
HISTORY_DISPLAY = 20

NAMESPACE_TITLES = {
    'con': 'CONNECTOR Commands',
    'agent': 'AGENT Commands',
    'sys': 'SYSTEM Commands'
}

# Keyed argument names whose values never reach history or logs
SECRET_KEYS = frozenset({'password', 'apikey'})


def redact(tokens: List[str]) -> List[str]:
    """Mask the values of secret key=value tokens."""
    redacted = []
    for token in tokens:
        key, separator, _ = token.partition('=')
        if separator and key.replace('_', '').lower() in SECRET_KEYS:
            token = f"{key}=***"
        redacted.append(token)
    return redacted


class ConsoleWriter:
    """Serializes console output from the shell and the MQTT network thread."""

    def __init__(self):
        self._lock = threading.Lock()

    def echo(self, message: str = '', fg: Optional[str] = None, bold: bool = False):
        text = click.style(message, fg=fg, bold=bold) if fg or bold else message
        with self._lock:
            click.echo(text)


class PersistentShell:
    """Interactive shell for commanding one gateway."""

    def __init__(self, client, config: ConsoleConfig, writer: Optional[ConsoleWriter] = None):
        self.client = client
        self.config = config
        self.session = Session(config.session_id)
        self.commander = Commander(client, config.gateway, config.username, self.session)
        self.dispatch_table = build_dispatch_table(self.commander)
        self.writer = writer or ConsoleWriter()
        self.running = False
        self.closed: Optional[asyncio.Future] = None

        self.config_dir = Path(config.config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.history_file = self.config_dir / 'command_history.txt'
        self.command_history: List[str] = []
        self._initialize_command_history()

        self.builtin_handlers = {
            'help': self._handle_help,
            'history': self._handle_history,
        }

    def _initialize_command_history(self):
        """Load persisted history into readline."""
        try:
            if self.history_file.exists():
                self.command_history = [
                    line.strip() for line in self.history_file.read_text().splitlines()
                    if line.strip()
                ][-HISTORY_LIMIT:]
                logger.debug(f"Loaded {len(self.command_history)} commands from history")
            readline.set_history_length(HISTORY_LIMIT)
            for command in self.command_history:
                readline.add_history(command)
        except OSError as e:
            logger.debug(f"Could not load command history: {str(e)}")
            self.command_history = []

    def _add_to_history(self, command: str):
        """Add a command to history and persist it."""
        command = command.strip()
        if not command:
            return
        self.command_history.append(command)
        self.command_history = self.command_history[-HISTORY_LIMIT:]
        try:
            self.history_file.write_text(''.join(f"{cmd}\n" for cmd in self.command_history))
        except OSError as e:
            logger.debug(f"Could not save command history: {str(e)}")

    def _setup_completion(self):
        readline.set_completer(self.complete)
        readline.set_completer_delims(' \t\n')
        readline.parse_and_bind('tab: complete')

    def complete(self, text: str, state: int) -> Optional[str]:
        """readline completer over the dispatch table."""
        matches = self.dispatch_table.complete(text)
        if state < len(matches):
            return matches[state]
        return None

    def subscribe(self):
        """Subscribe to everything the gateway reports."""
        topic = topic_for(INBOUND_ROLE, self.config.username, self.config.gateway)
        self.client.subscribe(topic, callback=self.on_message)
        logger.debug(f"Listening for gateway output on {topic}")

    def on_message(self, topic: str, payload):
        """Print one inbound message. Runs on the MQTT network thread."""
        try:
            message = classify_message(topic, payload)
        except (UnicodeDecodeError, TypeError) as e:
            logger.debug(f"Unparseable message on {topic}: {str(e)}")
            self.writer.echo(f"Unable to parse message from broker: {str(e)}", fg='red')
            return
        self.writer.echo(message.text, fg=message.color)

    async def run(self):
        """Run the interactive shell until the operator quits."""
        self.closed = asyncio.get_running_loop().create_future()
        self.running = True
        self.subscribe()
        self._setup_completion()
        self._show_welcome()
        logger.debug("Interactive shell started")

        while self.running:
            try:
                command_line = input(self.get_prompt())
            except (EOFError, KeyboardInterrupt):
                self.writer.echo()
                self._close()
                break

            command_line = command_line.strip()
            if not command_line:
                continue
            await self._execute_command(command_line)

        return await self.closed

    def _close(self):
        self.running = False
        if self.closed is not None and not self.closed.done():
            self.closed.set_result(self.session.request_counter)
        logger.debug(f"Shell closed after {self.session.request_counter} requests")

    def _show_welcome(self):
        self.writer.echo()
        self.writer.echo(f"Managing gateway: {self.config.gateway}", fg='cyan', bold=True)
        self.writer.echo(f"Session: {self.session.session_id}")
        self.writer.echo("Type 'help' for the command reference, 'quit' to leave.", fg='yellow')
        self.writer.echo()

    async def _execute_command(self, command_line: str):
        """Tokenize, resolve and run one shell line."""
        tokens = tokenize(command_line)
        if not tokens:
            return
        safe_line = ' '.join(redact(tokens))
        self._add_to_history(safe_line)
        log_system = get_logger_or_none()
        if log_system:
            log_system.log_shell_interaction(safe_line)

        command = tokens[0]

        if command in QUIT_COMMANDS:
            self._close()
            return
        if command in self.builtin_handlers:
            await self.builtin_handlers[command](tokens[1:])
            return

        started = time.monotonic()
        success = False
        try:
            request_id = self.dispatch_table.invoke(tokens)
            success = True
            logger.debug(f"{command} published as request {request_id}")
        except UnknownCommandError as e:
            logger.debug(f"Unknown command: {e.command}")
            self.writer.echo(str(e), fg='red')
        except CommanderError as e:
            logger.debug(f"{command} failed: {str(e)}")
            self.writer.echo(str(e), fg='red')
        except Exception as e:
            logger.exception(f"Unexpected error running {command}")
            self.writer.echo(f"Error: {str(e)}", fg='red')
        finally:
            if log_system:
                log_system.log_command_execution(command, redact(tokens[1:]), success,
                                                 time.monotonic() - started)

    async def _handle_help(self, args: List[str]):
        """Show the command reference, optionally for one namespace."""
        namespaces = {}
        for name, entry in self.dispatch_table.items():
            namespaces.setdefault(name.split(':', 1)[0], []).append(entry)

        selected = [args[0]] if args and args[0] in namespaces else list(namespaces)

        self.writer.echo()
        self.writer.echo("Thing Commander - Command Reference", fg='blue', bold=True)
        self.writer.echo("=" * 50)
        for namespace in selected:
            self.writer.echo()
            title = NAMESPACE_TITLES.get(namespace, namespace.upper())
            self.writer.echo(f"┌─ {title}", fg='green', bold=True)
            for entry in namespaces[namespace]:
                self.writer.echo(f"  {entry.name:<24}{entry.description}")
                if isinstance(entry, KeyedEntry) or entry.usage != entry.name:
                    self.writer.echo(f"  {'':<24}usage: {entry.usage}")
        self.writer.echo()
        self.writer.echo("┌─ UTILITIES", fg='cyan', bold=True)
        self.writer.echo(f"  {'help [con|agent|sys]':<24}Show this help")
        self.writer.echo(f"  {'history [--clear]':<24}Show or clear command history")
        self.writer.echo(f"  {'q|quit|exit|bye':<24}End the session")
        self.writer.echo()

    async def _handle_history(self, args: List[str]):
        """Show or clear command history."""
        if not args:
            if not self.command_history:
                self.writer.echo("No command history available", fg='yellow')
                return
            self.writer.echo("Command History:", fg='blue', bold=True)
            self.writer.echo("=" * 50)
            for i, command in enumerate(self.command_history[-HISTORY_DISPLAY:], 1):
                self.writer.echo(f"{i:2d}. {command}")
            if len(self.command_history) > HISTORY_DISPLAY:
                self.writer.echo(f"... and {len(self.command_history) - HISTORY_DISPLAY} more commands")

        elif args[0] == '--clear':
            self.command_history = []
            readline.clear_history()
            try:
                if self.history_file.exists():
                    os.remove(self.history_file)
                self.writer.echo("✓ Command history cleared", fg='green')
            except OSError as e:
                self.writer.echo(f"Warning: Could not clear history file: {str(e)}", fg='yellow')
        else:
            self.writer.echo("Unknown option. Use 'history' or 'history --clear'", fg='red')

    def get_prompt(self) -> str:
        return click.style("[tc] ", fg='yellow')


async def start_interactive_shell(client, config: ConsoleConfig) -> int:
    """Start the interactive shell; returns the number of requests issued."""
    shell = PersistentShell(client, config)
    return await shell.run()
