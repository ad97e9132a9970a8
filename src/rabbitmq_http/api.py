from __future__ import annotations

import logging
from typing import Union

import requests
import requests.auth

from rabbitmq_http.client import BaseAPI, Call, Plan
from rabbitmq_http.configuration import ClientConfiguration, Configuration
from rabbitmq_http.errors import RabbitMQHttpError, ResponseError, TransportError
from rabbitmq_http.paths import join_endpoint

logger = logging.getLogger("rabbitmq_http.api")


class _BasicAuth(requests.auth.AuthBase):
    def __init__(self, configuration: ClientConfiguration):
        self._configuration = configuration

    def __call__(self, request):
        configuration = self._configuration
        request.headers["Authorization"] = configuration.password.basic_authorization(
            configuration.username
        )
        return request


class RabbitMQAPI(BaseAPI):
    """
    Blocking client for the RabbitMQ HTTP management API.

    >>> api = RabbitMQAPI(ClientConfiguration("http://localhost:15672/api"))
    >>> api.list_queues_in("/")
    """

    def __init__(self, configuration: ClientConfiguration):
        self._configuration = configuration
        self._url = configuration.endpoints[0]
        self._session = requests.Session()
        self._session.auth = _BasicAuth(configuration)
        self._session.headers["Accept"] = "application/json"
        self._session.verify = configuration.verify

    @classmethod
    def from_configuration(
        cls, configuration: Union[ClientConfiguration, Configuration]
    ) -> RabbitMQAPI:
        """
        Connect to the first reachable endpoint of a configuration.

        The endpoint may list several comma separated URLs. Each is tried in
        turn until one answers an alarms health check, whatever the answer.
        """
        if isinstance(configuration, Configuration):
            configuration = configuration.endpoint
        for url in configuration.endpoints:
            instance = cls(configuration.with_endpoint(url))
            try:
                instance.health_check_cluster_wide_alarms()
            except TransportError as e:
                logger.warning(f"Could not connect to {url}: {e}")
                instance.close()
                continue
            except ResponseError:
                pass
            return instance
        raise TransportError(
            f"Could not connect to RabbitMQ API: {configuration.endpoint}"
        )

    @property
    def endpoint(self) -> str:
        return self._url

    def close(self):
        self._session.close()

    def __enter__(self) -> RabbitMQAPI:
        return self

    def __exit__(self, *args):
        self.close()

    def __repr__(self):
        return f"<RabbitMQAPI {self._url}>"

    def _execute(self, call: Call):
        url = join_endpoint(self._url, call.path)
        try:
            response = self._session.request(
                call.method,
                url,
                params=call.params,
                json=call.json,
                headers=call.headers,
                timeout=self._configuration.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{call.method} {url} failed: {e}", url) from e
        logger.debug("%s %s returned %d", call.method, url, response.status_code)
        return call.outcome(response.status_code, url, response.text)

    def _perform(self, plan: Plan):
        send, value = plan.send, None
        try:
            while True:
                call = send(value)
                try:
                    value, send = self._execute(call), plan.send
                except RabbitMQHttpError as e:
                    value, send = e, plan.throw
        except StopIteration as e:
            return e.value
        finally:
            plan.close()
