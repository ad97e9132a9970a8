"""Typed client for the RabbitMQ HTTP management API."""

from __future__ import annotations

import logging

from rabbitmq_http.api import RabbitMQAPI
from rabbitmq_http.async_api import AsyncRabbitMQAPI
from rabbitmq_http.configuration import ClientConfiguration, ClientConfigurationBuilder
from rabbitmq_http.errors import (
    AccessDenied,
    AuthenticationFailure,
    ClientError,
    ConfigurationError,
    DecodeError,
    HealthCheckFailed,
    IncompatibleError,
    InvalidArgument,
    MultipleMatchingBindings,
    NotFound,
    RabbitMQHttpError,
    ResponseError,
    ServerError,
    TransportError,
)
from rabbitmq_http.pagination import PaginationParams
from rabbitmq_http.transformers import TransformationChain
from rabbitmq_http.uris import TlsClientSettings, UriBuilder

__version__ = "0.1.0"

logging.getLogger("rabbitmq_http").addHandler(logging.NullHandler())

__all__ = [
    "AccessDenied",
    "AsyncRabbitMQAPI",
    "AuthenticationFailure",
    "ClientConfiguration",
    "ClientConfigurationBuilder",
    "ClientError",
    "ConfigurationError",
    "DecodeError",
    "HealthCheckFailed",
    "IncompatibleError",
    "InvalidArgument",
    "MultipleMatchingBindings",
    "NotFound",
    "PaginationParams",
    "RabbitMQAPI",
    "RabbitMQHttpError",
    "ResponseError",
    "ServerError",
    "TlsClientSettings",
    "TransformationChain",
    "TransportError",
    "UriBuilder",
]
