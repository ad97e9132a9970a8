import argparse
import logging
import os
from unittest import mock

import pytest

import rabbitmq_http.configuration
from rabbitmq_http.errors import ConfigurationError

sample_configuration = """
version: 1

environments:
  live:
    base_url: https://rabbitmq.burrow.com:15671/api
    username: carrots
    password: carrots
    timeout: 10
  test:
    base_url: http://localhost:15672/api,http://localhost:15673/api
  default: test
  alias-of-alias: default
  unverified:
    base_url: https://localhost:15671/api
    skip_tls_peer_verification: true
"""


def _assert_configuration_is_empty(rc):
    assert rc.environments == frozenset({})
    assert "0 environments" in str(rc)


def test_return_empty_configuration_if_no_path_specified():
    with mock.patch.dict(os.environ, {"RABBITMQ_HTTP_CONFIG": ""}):
        rc = rabbitmq_http.configuration.from_file()
    _assert_configuration_is_empty(rc)


def test_loading_minimal_valid_configuration():
    rc = rabbitmq_http.configuration.from_string("version: 1")
    _assert_configuration_is_empty(rc)


def test_cannot_load_unversioned_yaml_files():
    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        rabbitmq_http.configuration.from_string("value: 1")


def test_cannot_load_unknown_configuration_file_versions():
    with pytest.raises(ConfigurationError, match="not understand"):
        rabbitmq_http.configuration.from_string("version: 0")


def test_loading_minimal_valid_configuration_from_file(tmp_path):
    config_file = tmp_path.joinpath("config.yml")
    config_file.write_text("version: 1")
    rc = rabbitmq_http.configuration.from_file(os.fspath(config_file))
    _assert_configuration_is_empty(rc)
    rc = rabbitmq_http.configuration.from_file(config_file)
    _assert_configuration_is_empty(rc)
    with mock.patch.dict(os.environ, {"RABBITMQ_HTTP_CONFIG": os.fspath(config_file)}):
        rc = rabbitmq_http.configuration.from_file()
    _assert_configuration_is_empty(rc)


def test_cannot_load_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        rabbitmq_http.configuration.from_file(tmp_path / "missing.yml")


def test_cannot_load_invalid_file(tmp_path):
    config = tmp_path / "invalid.yml"
    config.write_text("x: y: z:")
    with pytest.raises(ConfigurationError, match="invalid.yml"):
        rabbitmq_http.configuration.from_file(config)


def test_loading_sample_configuration():
    rc = rabbitmq_http.configuration.from_string(sample_configuration)

    assert rc.environments == frozenset(
        {"live", "test", "default", "alias-of-alias", "unverified"}
    )
    assert "5 environments" in str(rc)


def test_cannot_load_unknown_top_level_keys():
    with pytest.raises(ConfigurationError, match="Invalid YAML configuration"):
        rabbitmq_http.configuration.from_string(
            """
            version: 1
            graylog:
              host: localhost
            """
        )


def test_cannot_load_environment_without_base_url():
    with pytest.raises(ConfigurationError, match="incomplete"):
        rabbitmq_http.configuration.from_string(
            """
            version: 1
            environments:
              incomplete:
                username: carrots
            """
        )


def test_cannot_load_environment_aliasing_an_undefined_environment():
    with pytest.raises(ConfigurationError, match="undefined environment missing"):
        rabbitmq_http.configuration.from_string(
            """
            version: 1
            environments:
              dangling: missing
            """
        )


def test_cannot_load_circular_environment_aliases():
    with pytest.raises(ConfigurationError, match="circular"):
        rabbitmq_http.configuration.from_string(
            """
            version: 1
            environments:
              chicken: egg
              egg: chicken
            """
        )


def test_cannot_load_environment_of_the_wrong_type():
    with pytest.raises(ConfigurationError, match="not a string or dictionary"):
        rabbitmq_http.configuration.from_string(
            """
            version: 1
            environments:
              listed:
                - base_url
            """
        )


def test_cannot_activate_missing_environment():
    rc = rabbitmq_http.configuration.from_string("version: 1")
    with pytest.raises(ValueError):
        rc.activate_environment("live")
    assert rc.active_environments == ()
    assert "live" not in str(rc)


def test_endpoint_requires_an_active_environment():
    rc = rabbitmq_http.configuration.from_string(sample_configuration)
    with pytest.raises(ConfigurationError, match="no RabbitMQ API credentials"):
        rc.endpoint


def test_activate_one_environment(caplog):
    rc = rabbitmq_http.configuration.from_string(sample_configuration)
    with caplog.at_level(logging.DEBUG, logger="rabbitmq_http.configuration"):
        rc.activate_environment("live")
    assert "Activating environment live" in caplog.text
    assert rc.active_environments == ("live",)
    with pytest.raises(AttributeError):
        rc.active_environments = ("this-should-not-be-writeable",)
    assert "live" in str(rc)

    endpoint = rc.endpoint
    assert endpoint.endpoint == "https://rabbitmq.burrow.com:15671/api"
    assert endpoint.username == "carrots"
    assert endpoint.password.reveal() == "carrots"
    assert endpoint.timeout == 10
    assert endpoint.verify is True


def test_aliases_resolve_to_their_target():
    rc = rabbitmq_http.configuration.from_string(sample_configuration)
    rc.activate_environment("alias-of-alias")
    assert rc.endpoint.endpoints == [
        "http://localhost:15672/api",
        "http://localhost:15673/api",
    ]
    assert rc.endpoint.username == "guest"


def test_last_activated_environment_wins():
    rc = rabbitmq_http.configuration.from_string(sample_configuration)
    rc.activate_environment("live")
    rc.activate_environment("unverified")
    assert rc.active_environments == ("live", "unverified")
    assert rc.endpoint.verify is False


def test_activate_falls_back_to_the_default_environment():
    rc = rabbitmq_http.configuration.from_string(sample_configuration)
    assert rc.activate(argv=[]) == ("default",)
    assert rc.endpoint.endpoint.startswith("http://localhost:15672/api")


def test_activate_without_default():
    rc = rabbitmq_http.configuration.from_string(sample_configuration)
    assert rc.activate(argv=[], default=False) == ()
    assert rc.active_environments == ()


def test_activate_environments_from_command_line():
    rc = rabbitmq_http.configuration.from_string(sample_configuration)
    activated = rc.activate(argv=["--other-option", "-e", "live", "--environment", "unverified"])
    assert activated == ("live", "unverified")


def test_command_line_options_list_the_environments():
    rc = rabbitmq_http.configuration.from_string(sample_configuration)
    parser = argparse.ArgumentParser()
    rc.add_command_line_options(parser)
    args = parser.parse_args(["-e", "live"])
    assert args.environment == ["live"]
    with pytest.raises(SystemExit):
        parser.parse_args(["-e", "nowhere"])
