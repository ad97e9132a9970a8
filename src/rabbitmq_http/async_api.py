from __future__ import annotations

import logging
import ssl
from typing import Union

import httpx

from rabbitmq_http.client import BaseAPI, Call, Plan
from rabbitmq_http.configuration import ClientConfiguration, Configuration
from rabbitmq_http.errors import RabbitMQHttpError, ResponseError, TransportError
from rabbitmq_http.paths import join_endpoint

logger = logging.getLogger("rabbitmq_http.async_api")


class _BasicAuth(httpx.Auth):
    def __init__(self, configuration: ClientConfiguration):
        self._configuration = configuration

    def auth_flow(self, request: httpx.Request):
        configuration = self._configuration
        request.headers["Authorization"] = configuration.password.basic_authorization(
            configuration.username
        )
        yield request


def _ssl_verification(configuration: ClientConfiguration):
    verify = configuration.verify
    if isinstance(verify, str):
        return ssl.create_default_context(cafile=verify)
    return verify


class AsyncRabbitMQAPI(BaseAPI):
    """
    Asynchronous client for the RabbitMQ HTTP management API.

    Offers the same operations as RabbitMQAPI, each returning an awaitable.
    """

    def __init__(
        self,
        configuration: ClientConfiguration,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self._configuration = configuration
        self._url = configuration.endpoints[0]
        self._client = httpx.AsyncClient(
            auth=_BasicAuth(configuration),
            headers={"Accept": "application/json"},
            timeout=configuration.timeout,
            verify=_ssl_verification(configuration),
            transport=transport,
        )

    @classmethod
    async def from_configuration(
        cls,
        configuration: Union[ClientConfiguration, Configuration],
        transport: httpx.AsyncBaseTransport = None,
    ) -> AsyncRabbitMQAPI:
        """Connect to the first reachable endpoint of a configuration."""
        if isinstance(configuration, Configuration):
            configuration = configuration.endpoint
        for url in configuration.endpoints:
            instance = cls(configuration.with_endpoint(url), transport=transport)
            try:
                await instance.health_check_cluster_wide_alarms()
            except TransportError as e:
                logger.warning(f"Could not connect to {url}: {e}")
                await instance.aclose()
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

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self) -> AsyncRabbitMQAPI:
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    def __repr__(self):
        return f"<AsyncRabbitMQAPI {self._url}>"

    async def _execute(self, call: Call):
        url = join_endpoint(self._url, call.path)
        try:
            response = await self._client.request(
                call.method,
                url,
                params=call.params,
                json=call.json,
                headers=call.headers,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{call.method} {url} failed: {e}", url) from e
        logger.debug("%s %s returned %d", call.method, url, response.status_code)
        return call.outcome(response.status_code, url, response.text)

    async def _perform(self, plan: Plan):
        send, value = plan.send, None
        try:
            while True:
                call = send(value)
                try:
                    value, send = await self._execute(call), plan.send
                except RabbitMQHttpError as e:
                    value, send = e, plan.throw
        except StopIteration as e:
            return e.value
        finally:
            plan.close()
