"""
Command dispatch table for the interactive shell.

Each shell command name maps to one entry. Positional entries carry a tuple of
fixed leading arguments; the tokens typed after the command name are appended
to it. Keyed entries carry a default options object; each ``key=value`` token
overrides one field of a fresh copy of it.
"""
import inspect
import types
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Sequence, Tuple, Union

from .core.commander import Commander
from .core.options import KeyedOptions, LeptonOptions
from .core.provisioning import DEV_HOST, PROD_HOST, ProvisioningOptions
from .core.tokens import strip_quotes
from .utils.exceptions import InvalidArgumentError, UnknownCommandError

QUIT_COMMANDS = frozenset({'q', 'quit', 'exit', 'bye'})


@dataclass(frozen=True)
class PositionalEntry:
    name: str
    handler: Callable[..., Any]
    fixed_args: Tuple[Any, ...] = ()
    usage: str = ''
    description: str = ''

    def bind(self, tokens: Sequence[str]) -> Tuple[Any, ...]:
        """Append ``tokens`` to the fixed arguments and check them against the handler."""
        args = tuple(self.fixed_args) + tuple(tokens)
        try:
            inspect.signature(self.handler).bind(*args)
        except TypeError as e:
            raise InvalidArgumentError(f"{self.name}: {e}") from e
        return args

    def invoke(self, tokens: Sequence[str]) -> Any:
        return self.handler(*self.bind(tokens))


@dataclass(frozen=True)
class KeyedEntry:
    name: str
    handler: Callable[[KeyedOptions], Any]
    defaults: KeyedOptions
    usage: str = ''
    description: str = ''

    def bind(self, tokens: Sequence[str]) -> KeyedOptions:
        """Apply ``key=value`` tokens to a copy of the defaults."""
        options = self.defaults.copy()
        for token in tokens:
            key, separator, value = token.partition('=')
            if not separator or not key:
                raise InvalidArgumentError(f"{self.name}: expected key=value, got [{token}]")
            options.set(key, strip_quotes(value))
        return options

    def invoke(self, tokens: Sequence[str]) -> Any:
        return self.handler(self.bind(tokens))


DispatchEntry = Union[PositionalEntry, KeyedEntry]


class DispatchTable(Mapping):
    """Read-only mapping of command name to dispatch entry."""

    def __init__(self, entries: Iterable[DispatchEntry]):
        self._entries: Dict[str, DispatchEntry] = {}
        for entry in entries:
            if entry.name in self._entries:
                raise ValueError(f"Duplicate command name: {entry.name}")
            self._entries[entry.name] = entry

    def __getitem__(self, name: str) -> DispatchEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, name: str) -> DispatchEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownCommandError(name) from None

    def invoke(self, tokens: Sequence[str]) -> Any:
        """Run the command named by the first token with the remaining tokens."""
        if not tokens:
            raise UnknownCommandError('')
        return self.resolve(tokens[0]).invoke(tokens[1:])

    def complete(self, partial: str) -> List[str]:
        """Command names containing ``partial``; nothing for an empty partial."""
        if not partial:
            return []
        return sorted(name for name in self._entries if partial in name)


@dataclass(frozen=True)
class ConnectorFamily:
    base_name: str
    method: Callable[..., Any]
    description: str
    takes_id: bool = True


CONNECTOR_FAMILIES = (
    ConnectorFamily('con:stop', Commander.stop_connector, 'Stop connectors'),
    ConnectorFamily('con:start', Commander.start_connector, 'Start connectors'),
    ConnectorFamily('con:restart', Commander.restart_connector, 'Restart connectors'),
    ConnectorFamily('con:list', Commander.list_connectors, 'List connectors', takes_id=False),
)

# (name suffix, fixed leading arguments)
FAMILY_VARIANTS = (
    ('', ()),
    ('_all', ('all',)),
    ('_cloud', ('cloud',)),
    ('_device', ('device',)),
)


def _family_usage(family: ConnectorFamily, suffix: str) -> str:
    name = family.base_name + suffix
    if suffix == '_all':
        return name
    if suffix:
        return f"{name} [<id>]" if family.takes_id else name
    return f"{name} <category|all> [<id>]" if family.takes_id else f"{name} [<category>]"


def expand_connector_families(commander: Commander) -> List[PositionalEntry]:
    entries = []
    for family in CONNECTOR_FAMILIES:
        handler = types.MethodType(family.method, commander)
        for suffix, fixed_args in FAMILY_VARIANTS:
            scope = fixed_args[0] if fixed_args else None
            description = family.description if scope is None else f"{family.description} ({scope})"
            entries.append(PositionalEntry(
                name=family.base_name + suffix,
                handler=handler,
                fixed_args=fixed_args,
                usage=_family_usage(family, suffix),
                description=description
            ))
    return entries


def build_dispatch_table(commander: Commander) -> DispatchTable:
    """Build the shell's command table for ``commander``."""
    entries: List[DispatchEntry] = list(expand_connector_families(commander))
    entries.extend([
        PositionalEntry('con:send_data', commander.send_data_to_connector,
                        usage="con:send_data <category> <id> '<data>'",
                        description='Send data to a connector'),
        PositionalEntry('con:update_config', commander.update_connector_config,
                        usage="con:update_config <category> <id> '<json>'",
                        description='Create or replace a connector configuration'),
        PositionalEntry('con:delete_config', commander.delete_connector_config,
                        usage='con:delete_config <category> <id>',
                        description='Delete a connector configuration'),
        PositionalEntry('con:update_type', commander.update_connector_type,
                        usage='con:update_type <type> <module-path>',
                        description='Register or replace a connector type'),
        KeyedEntry('con:config_lepton', commander.configure_lepton, LeptonOptions(),
                   usage='con:config_lepton [id=<id>] [spi_device=<dev>] [key=value ...]',
                   description='Configure the Lepton thermal camera connector'),
        PositionalEntry('agent:reset', commander.reset_agent,
                        usage='agent:reset',
                        description='Reset the gateway agent'),
        PositionalEntry('agent:terminate', commander.terminate_agent,
                        usage='agent:terminate',
                        description='Shut down the gateway agent program'),
        PositionalEntry('agent:upgrade', commander.upgrade_agent,
                        usage='agent:upgrade',
                        description='Upgrade the gateway agent program'),
        KeyedEntry('agent:prov_dev', commander.init_agent,
                   ProvisioningOptions(host=DEV_HOST, current_gateway_name=commander.gateway),
                   usage='agent:prov_dev new_gateway_name=<name> username=<user> '
                         'password=<pass> [api_key=<key>] [port=<port>]',
                   description='Provision the gateway against the development cloud'),
        KeyedEntry('agent:prov_prod', commander.init_agent,
                   ProvisioningOptions(host=PROD_HOST, current_gateway_name=commander.gateway),
                   usage='agent:prov_prod new_gateway_name=<name> username=<user> '
                         'password=<pass> [api_key=<key>] [port=<port>]',
                   description='Provision the gateway against the production cloud'),
        PositionalEntry('sys:info', commander.sys_info,
                        usage='sys:info',
                        description='Request gateway system information'),
        PositionalEntry('sys:reboot', commander.reboot_gateway,
                        usage='sys:reboot',
                        description='Reboot the gateway'),
    ])
    return DispatchTable(entries)
