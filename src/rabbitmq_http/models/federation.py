from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from rabbitmq_http.commons import (
    ChannelUseMode,
    FederationResourceCleanupMode,
    MessageTransferAcknowledgementMode,
    QueueType,
)
from rabbitmq_http.errors import IncompatibleError, InvalidArgument
from rabbitmq_http.models.params import RuntimeParameterDefinition
from rabbitmq_http.models.responses import RuntimeParameter

FEDERATION_UPSTREAM_COMPONENT = "federation-upstream"
DEFAULT_FEDERATION_PREFETCH = 1000
DEFAULT_FEDERATION_RECONNECT_DELAY = 5


class QueueFederationParams(BaseModel):
    queue: Optional[str] = Field(
        None, description="Upstream queue name, if it differs from the local one."
    )
    consumer_tag: Optional[str] = None


class ExchangeFederationParams(BaseModel):
    exchange: Optional[str] = Field(
        None, description="Upstream exchange name, if it differs from the local one."
    )
    max_hops: Optional[int] = Field(None, ge=1)
    queue_type: QueueType = QueueType.quorum
    ttl: Optional[int] = Field(
        None, description="Expiry of the upstream queue in milliseconds."
    )
    message_ttl: Optional[int] = None
    resource_cleanup_mode: FederationResourceCleanupMode = (
        FederationResourceCleanupMode.default
    )


class FederationUpstreamParams(BaseModel):
    """
    A federation upstream to declare.

    Exactly one of queue_federation and exchange_federation must be given.
    """

    name: str
    vhost: str
    uri: str
    reconnect_delay: int = DEFAULT_FEDERATION_RECONNECT_DELAY
    trust_user_id: bool = False
    prefetch_count: int = DEFAULT_FEDERATION_PREFETCH
    ack_mode: MessageTransferAcknowledgementMode = (
        MessageTransferAcknowledgementMode.when_confirmed
    )
    bind_using_nowait: bool = False
    channel_use_mode: ChannelUseMode = ChannelUseMode.multiple
    queue_federation: Optional[QueueFederationParams] = None
    exchange_federation: Optional[ExchangeFederationParams] = None

    def __init__(self, **data):
        has_queue = data.get("queue_federation") is not None
        has_exchange = data.get("exchange_federation") is not None
        if has_queue == has_exchange:
            raise InvalidArgument(
                "A federation upstream needs exactly one of queue_federation"
                " and exchange_federation"
            )
        super().__init__(**data)

    @classmethod
    def for_queue_federation(
        cls, vhost: str, name: str, uri: str, params: QueueFederationParams, **kwargs
    ) -> FederationUpstreamParams:
        return cls(vhost=vhost, name=name, uri=uri, queue_federation=params, **kwargs)

    @classmethod
    def for_exchange_federation(
        cls,
        vhost: str,
        name: str,
        uri: str,
        params: ExchangeFederationParams,
        **kwargs,
    ) -> FederationUpstreamParams:
        return cls(
            vhost=vhost, name=name, uri=uri, exchange_federation=params, **kwargs
        )

    def value(self) -> Dict[str, Any]:
        value: Dict[str, Any] = {
            "uri": self.uri,
            "prefetch-count": self.prefetch_count,
            "trust-user-id": self.trust_user_id,
            "reconnect-delay": self.reconnect_delay,
            "ack-mode": self.ack_mode.value,
            "bind-nowait": self.bind_using_nowait,
            "channel-use-mode": self.channel_use_mode.value,
        }
        if self.queue_federation is not None:
            qf = self.queue_federation
            if qf.queue is not None:
                value["queue"] = qf.queue
            if qf.consumer_tag is not None:
                value["consumer-tag"] = qf.consumer_tag
        if self.exchange_federation is not None:
            ef = self.exchange_federation
            value["queue-type"] = ef.queue_type.value
            value["resource-cleanup-mode"] = ef.resource_cleanup_mode.value
            optional = {
                "exchange": ef.exchange,
                "max-hops": ef.max_hops,
                "expires": ef.ttl,
                "message-ttl": ef.message_ttl,
            }
            value.update({k: v for k, v in optional.items() if v is not None})
        return value

    def to_runtime_parameter(self) -> RuntimeParameterDefinition:
        return RuntimeParameterDefinition(
            name=self.name,
            vhost=self.vhost,
            component=FEDERATION_UPSTREAM_COMPONENT,
            value=self.value(),
        )


class FederationUpstream(BaseModel):
    """A federation upstream, projected from its runtime parameter."""

    name: str
    vhost: str
    uri: str
    ack_mode: MessageTransferAcknowledgementMode
    reconnect_delay: Optional[int] = None
    trust_user_id: Optional[bool] = None
    prefetch_count: Optional[int] = None
    bind_using_nowait: bool = False
    channel_use_mode: ChannelUseMode = ChannelUseMode.multiple
    queue: Optional[str] = None
    consumer_tag: Optional[str] = None
    exchange: Optional[str] = None
    max_hops: Optional[int] = None
    queue_type: Optional[QueueType] = None
    expires: Optional[int] = None
    message_ttl: Optional[int] = None
    resource_cleanup_mode: FederationResourceCleanupMode = (
        FederationResourceCleanupMode.default
    )

    @classmethod
    def try_from(cls, parameter: RuntimeParameter) -> FederationUpstream:
        """
        :raises IncompatibleError: if the parameter value lacks ``uri`` or has
                                   an unrecognised ``ack-mode``.
        """
        value = parameter.value
        if "uri" not in value:
            raise IncompatibleError("uri", "federation upstream has no uri")
        ack_mode = value.get(
            "ack-mode", MessageTransferAcknowledgementMode.when_confirmed.value
        )
        try:
            ack_mode = MessageTransferAcknowledgementMode(ack_mode)
        except ValueError:
            raise IncompatibleError(
                "ack-mode", f"unrecognised acknowledgement mode {ack_mode!r}"
            ) from None
        queue_type = value.get("queue-type")
        return cls(
            name=parameter.name,
            vhost=parameter.vhost,
            uri=value["uri"],
            ack_mode=ack_mode,
            reconnect_delay=value.get("reconnect-delay"),
            trust_user_id=value.get("trust-user-id"),
            prefetch_count=value.get("prefetch-count"),
            bind_using_nowait=value.get("bind-nowait", False),
            channel_use_mode=value.get("channel-use-mode", ChannelUseMode.multiple),
            queue=value.get("queue"),
            consumer_tag=value.get("consumer-tag"),
            exchange=value.get("exchange"),
            max_hops=value.get("max-hops"),
            queue_type=QueueType(queue_type) if queue_type else None,
            expires=value.get("expires"),
            message_ttl=value.get("message-ttl"),
            resource_cleanup_mode=value.get(
                "resource-cleanup-mode", FederationResourceCleanupMode.default
            ),
        )


class FederationLink(BaseModel):
    node: str
    vhost: str
    id: str
    uri: str
    status: str
    type: str = Field(..., description="Either exchange or queue.")
    upstream: str
    consumer_tag: Optional[str] = None
    exchange: Optional[str] = None
    upstream_exchange: Optional[str] = None
    queue: Optional[str] = None
    upstream_queue: Optional[str] = None
