from __future__ import annotations

import argparse
import logging
import os
import pathlib
import typing

import marshmallow as mm
import yaml

from rabbitmq_http.configuration.endpoint import (
    DEFAULT_ENDPOINT,
    ClientConfiguration,
    ClientConfigurationBuilder,
    EndpointSchema,
    Password,
)
from rabbitmq_http.errors import ConfigurationError

__all__ = [
    "ClientConfiguration",
    "ClientConfigurationBuilder",
    "Configuration",
    "DEFAULT_ENDPOINT",
    "EndpointSchema",
    "Password",
    "from_file",
    "from_string",
]

logger = logging.getLogger("rabbitmq_http.configuration")

CONFIGURATION_ENVIRONMENT_VARIABLE = "RABBITMQ_HTTP_CONFIG"


class ConfigSchema(mm.Schema):
    version = mm.fields.Int(required=True)
    environments = mm.fields.Dict(keys=mm.fields.Str(), values=mm.fields.Raw())


class _CommandLineError(Exception):
    pass


class _EnvironmentParser(argparse.ArgumentParser):
    def __init__(self):
        super().__init__(add_help=False)

    def error(self, message):
        raise _CommandLineError(message)


def _environments_from_command_line(
    argv: typing.Optional[typing.Sequence[str]],
    arguments: typing.Iterable[str],
) -> typing.List[str]:
    # First of two passes over the command line: pick out the environments and
    # leave every other option for the application's own parser.
    env_parser = _EnvironmentParser()
    env_parser.add_argument(*arguments, dest="envs", action="append", default=[])
    try:
        known, _ = env_parser.parse_known_args(argv)
    except _CommandLineError:
        return []
    return known.envs


class Configuration:
    """A set of named broker environments read from a YAML document."""

    __slots__ = ("_environments", "_activated", "environment_cmd_args")

    def __init__(self, yaml_dict: dict):
        self._environments: typing.Dict[str, typing.Dict[str, typing.Any]] = (
            yaml_dict.get("environments", {})
        )
        self._activated: typing.List[str] = []
        self.environment_cmd_args: typing.Tuple[str, ...] = ("-e", "--environment")

    @property
    def environments(self) -> typing.FrozenSet[str]:
        return frozenset(self._environments)

    @property
    def active_environments(self) -> typing.Tuple[str, ...]:
        return tuple(self._activated)

    @property
    def endpoint(self) -> ClientConfiguration:
        """Connection settings of the most recently activated environment."""
        if not self._activated:
            raise ConfigurationError(
                "There are no RabbitMQ API credentials configured in your environment"
            )
        return ClientConfiguration.from_dict(self._environments[self._activated[-1]])

    def activate_environment(self, name: str):
        if name not in self._environments:
            raise ValueError(f"Environment '{name}' is not defined")
        logger.debug("Activating environment %s", name)
        self._activated.append(name)

    def activate(
        self,
        envs: typing.Optional[typing.Iterable[str]] = None,
        *,
        default: bool = True,
        argv: typing.Optional[typing.Sequence[str]] = None,
    ) -> typing.Tuple[str, ...]:
        """
        Activate a list of environments in order.

        :param envs: List of environments to activate. If no list is passed,
                     attempt to infer the environments from command line arguments.
        :param default: Attempt to activate environment named 'default' if no
                        environments are specified or can be inferred.
        :param argv: Command line to inspect instead of sys.argv.
        :return: Tuple of environments activated by this function call.
        """
        if envs is None:
            envs = _environments_from_command_line(argv, self.environment_cmd_args)
        envs = list(envs)
        if default and not envs and "default" in self._environments:
            envs = ["default"]
        for environment in envs:
            self.activate_environment(environment)
        return tuple(envs)

    def add_command_line_options(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            *self.environment_cmd_args,
            dest="environment",
            metavar="ENV",
            action="append",
            default=[],
            choices=sorted(self._environments),
            help="Select the broker to talk to. Choices are: "
            + ", ".join(sorted(self._environments)),
        )

    def __str__(self):
        environments = len(self._environments)
        if not self._activated:
            activated = ""
        elif len(self._activated) == 1:
            activated = f", environment '{self._activated[0]}' activated"
        else:
            activated = f", environments {self._activated} activated"
        return f"<RabbitMQHttpConfiguration containing {environments} environments{activated}>"

    __repr__ = __str__


def _read_configuration_yaml(configuration: str) -> dict:
    yaml_dict = yaml.safe_load(configuration)

    if not isinstance(yaml_dict, dict) or "version" not in yaml_dict:
        raise ConfigurationError("Invalid configuration specified")
    if yaml_dict["version"] != 1:
        raise ConfigurationError(
            f"This version does not understand v{yaml_dict['version']} configurations"
        )

    try:
        ConfigSchema().load(yaml_dict, unknown=mm.RAISE)
    except mm.ValidationError as e:
        raise ConfigurationError(f"Invalid YAML configuration: {e}") from None

    environments = yaml_dict.setdefault("environments", {})
    for environment, definition in environments.items():
        if isinstance(definition, str):
            # Environment is an alias to another environment. Ensure the target exists.
            if definition not in environments:
                raise ConfigurationError(
                    f"Invalid YAML configuration: Environment {environment} aliases undefined environment {definition}"
                )
        elif isinstance(definition, dict):
            try:
                EndpointSchema().load(definition, unknown=mm.RAISE)
            except mm.ValidationError as e:
                raise ConfigurationError(
                    f"Invalid YAML configuration: Environment {environment}: {e}"
                ) from None
        else:
            raise ConfigurationError(
                f"Invalid YAML configuration: Environment {environment} is not a string or dictionary"
            )

    # Resolve environment aliases
    environment_aliases = {
        environment
        for environment, definition in environments.items()
        if isinstance(definition, str)
    }
    while environment_aliases:
        for environment in environment_aliases:
            aliased_env = environments[environment]
            if isinstance(environments[aliased_env], str):
                # This environment links to an alias. Skip for now.
                continue
            environments[environment] = environments[aliased_env]
            environment_aliases.remove(environment)
            break
        else:
            raise ConfigurationError(
                f"Invalid YAML configuration: circular environment definitions for {environment_aliases}"
            )

    return yaml_dict


def from_file(
    config_file: typing.Optional[typing.Union[str, os.PathLike]] = None,
) -> Configuration:
    if not config_file:
        config_file = os.environ.get(CONFIGURATION_ENVIRONMENT_VARIABLE)
    if not config_file:
        return Configuration({})
    config_file = pathlib.Path(config_file)
    if not config_file.is_file():
        raise ConfigurationError(f"Configuration file {config_file} not found")
    try:
        return Configuration(_read_configuration_yaml(config_file.read_text()))
    except (ConfigurationError, yaml.MarkedYAMLError) as e:
        raise ConfigurationError(
            f"Error reading configuration file {config_file}: {e}"
        ) from None


def from_string(configuration: str) -> Configuration:
    return Configuration(_read_configuration_yaml(configuration))
