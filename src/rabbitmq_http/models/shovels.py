from __future__ import annotations

import enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from rabbitmq_http.commons import MessageTransferAcknowledgementMode, _OpenEnum
from rabbitmq_http.errors import InvalidArgument
from rabbitmq_http.models.params import RuntimeParameterDefinition

SHOVEL_COMPONENT = "shovel"


class MessagingProtocol(str, enum.Enum):
    amqp091 = "amqp091"
    amqp10 = "amqp10"
    local = "local"


class ShovelType(str, enum.Enum):
    dynamic = "dynamic"
    static = "static"


class ShovelState(_OpenEnum):
    starting = "starting"
    running = "running"
    terminated = "terminated"

    @classmethod
    def _unknown_member_name(cls) -> str:
        return "unknown"


class Amqp091ShovelSourceParams(BaseModel):
    """Where an AMQP 0-9-1 shovel consumes from: a queue, or an exchange."""

    source_uri: str
    source_queue: Optional[str] = None
    source_exchange: Optional[str] = None
    source_exchange_routing_key: Optional[str] = None
    predeclared: bool = False

    @classmethod
    def queue_source(cls, source_uri: str, queue: str, predeclared: bool = False):
        return cls(source_uri=source_uri, source_queue=queue, predeclared=predeclared)

    @classmethod
    def exchange_source(
        cls,
        source_uri: str,
        exchange: str,
        routing_key: Optional[str] = None,
        predeclared: bool = False,
    ):
        return cls(
            source_uri=source_uri,
            source_exchange=exchange,
            source_exchange_routing_key=routing_key,
            predeclared=predeclared,
        )


class Amqp091ShovelDestinationParams(BaseModel):
    destination_uri: str
    destination_queue: Optional[str] = None
    destination_exchange: Optional[str] = None
    destination_exchange_routing_key: Optional[str] = None
    predeclared: bool = False

    @classmethod
    def queue_destination(
        cls, destination_uri: str, queue: str, predeclared: bool = False
    ):
        return cls(
            destination_uri=destination_uri,
            destination_queue=queue,
            predeclared=predeclared,
        )

    @classmethod
    def exchange_destination(
        cls,
        destination_uri: str,
        exchange: str,
        routing_key: Optional[str] = None,
        predeclared: bool = False,
    ):
        return cls(
            destination_uri=destination_uri,
            destination_exchange=exchange,
            destination_exchange_routing_key=routing_key,
            predeclared=predeclared,
        )


class Amqp091ShovelParams(BaseModel):
    name: str
    vhost: str
    acknowledgement_mode: MessageTransferAcknowledgementMode = (
        MessageTransferAcknowledgementMode.when_confirmed
    )
    reconnect_delay: Optional[int] = Field(None, ge=0)
    source: Amqp091ShovelSourceParams
    destination: Amqp091ShovelDestinationParams

    def value(self) -> Dict[str, Any]:
        src, dest = self.source, self.destination
        if (src.source_queue is None) == (src.source_exchange is None):
            raise InvalidArgument("A shovel source needs either a queue or an exchange")
        if (dest.destination_queue is None) == (dest.destination_exchange is None):
            raise InvalidArgument(
                "A shovel destination needs either a queue or an exchange"
            )
        value: Dict[str, Any] = {
            "src-protocol": MessagingProtocol.amqp091.value,
            "dest-protocol": MessagingProtocol.amqp091.value,
            "src-uri": src.source_uri,
            "dest-uri": dest.destination_uri,
            "ack-mode": self.acknowledgement_mode.value,
        }
        optional = {
            "src-queue": src.source_queue,
            "src-exchange": src.source_exchange,
            "src-exchange-key": src.source_exchange_routing_key,
            "dest-queue": dest.destination_queue,
            "dest-exchange": dest.destination_exchange,
            "dest-exchange-key": dest.destination_exchange_routing_key,
            "reconnect-delay": self.reconnect_delay,
        }
        value.update({k: v for k, v in optional.items() if v is not None})
        if src.predeclared:
            value["src-predeclared"] = True
        if dest.predeclared:
            value["dest-predeclared"] = True
        return value

    def to_runtime_parameter(self) -> RuntimeParameterDefinition:
        return RuntimeParameterDefinition(
            name=self.name,
            vhost=self.vhost,
            component=SHOVEL_COMPONENT,
            value=self.value(),
        )


class Amqp10ShovelParams(BaseModel):
    """An AMQP 1.0 shovel. Addresses are used verbatim on both sides."""

    name: str
    vhost: str
    acknowledgement_mode: MessageTransferAcknowledgementMode = (
        MessageTransferAcknowledgementMode.when_confirmed
    )
    reconnect_delay: Optional[int] = Field(None, ge=0)
    source_uri: str
    source_address: str
    destination_uri: str
    destination_address: str

    def value(self) -> Dict[str, Any]:
        value: Dict[str, Any] = {
            "src-protocol": MessagingProtocol.amqp10.value,
            "dest-protocol": MessagingProtocol.amqp10.value,
            "src-uri": self.source_uri,
            "src-address": self.source_address,
            "dest-uri": self.destination_uri,
            "dest-address": self.destination_address,
            "ack-mode": self.acknowledgement_mode.value,
        }
        if self.reconnect_delay is not None:
            value["reconnect-delay"] = self.reconnect_delay
        return value

    def to_runtime_parameter(self) -> RuntimeParameterDefinition:
        return RuntimeParameterDefinition(
            name=self.name,
            vhost=self.vhost,
            component=SHOVEL_COMPONENT,
            value=self.value(),
        )


class Shovel(BaseModel):
    """Status of a shovel as reported by GET /api/shovels."""

    node: str
    name: str
    vhost: Optional[str] = Field(None, description="Not set for static shovels.")
    type: ShovelType
    state: ShovelState
    src_uri: Optional[str] = None
    dest_uri: Optional[str] = None
    src_queue: Optional[str] = None
    dest_queue: Optional[str] = None
    src_address: Optional[str] = None
    dest_address: Optional[str] = None
    src_protocol: Optional[MessagingProtocol] = None
    dest_protocol: Optional[MessagingProtocol] = None

    @field_validator("src_protocol", "dest_protocol", mode="before")
    @classmethod
    def _empty_protocol(cls, value):
        return value or None
