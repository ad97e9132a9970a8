from __future__ import annotations

import enum
from typing import Union


class _OpenEnum(str, enum.Enum):
    """
    A string enumeration that accepts values outside of its known members.

    Known values are matched case-insensitively. Anything else is preserved
    verbatim as a pseudo-member, so that it survives a round trip to the broker.
    """

    @classmethod
    def _unknown_member_name(cls) -> str:
        return "unsupported"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        for member in cls:
            if member.value == value.lower():
                return member
        pseudo_member = str.__new__(cls, value)
        pseudo_member._name_ = cls._unknown_member_name()
        pseudo_member._value_ = value
        return pseudo_member

    @property
    def is_known(self) -> bool:
        return self._name_ in type(self)._member_map_

    def __str__(self) -> str:
        return self.value


class QueueType(_OpenEnum):
    classic = "classic"
    quorum = "quorum"
    stream = "stream"
    delayed = "delayed"


class ExchangeType(_OpenEnum):
    fanout = "fanout"
    topic = "topic"
    direct = "direct"
    headers = "headers"
    consistent_hashing = "x-consistent-hash"
    modulus_hash = "x-modulus-hash"
    random = "x-random"
    local_random = "x-local-random"
    jms_topic = "x-jms-topic"
    recent_history = "x-recent-history"
    x_delayed_message = "x-delayed-message"
    message_deduplication = "x-message-deduplication"

    @classmethod
    def _unknown_member_name(cls) -> str:
        return "plugin"


class PolicyTarget(str, enum.Enum):
    """Which types of object a policy applies to."""

    queues = "queues"
    classic_queues = "classic_queues"
    quorum_queues = "quorum_queues"
    streams = "streams"
    exchanges = "exchanges"
    all = "all"

    def does_apply_to(self, other: Union[PolicyTarget, str]) -> bool:
        other = PolicyTarget(other)
        if self is PolicyTarget.all or other is PolicyTarget.all:
            return True
        if self is PolicyTarget.queues:
            return other in _queue_targets
        return self is other

    @classmethod
    def from_queue_type(cls, queue_type: Union[QueueType, str]) -> PolicyTarget:
        return _queue_type_targets.get(QueueType(queue_type), cls.queues)

    def __str__(self) -> str:
        return self.value


_queue_targets = frozenset(
    {
        PolicyTarget.queues,
        PolicyTarget.classic_queues,
        PolicyTarget.quorum_queues,
        PolicyTarget.streams,
    }
)

_queue_type_targets = {
    QueueType.classic: PolicyTarget.classic_queues,
    QueueType.quorum: PolicyTarget.quorum_queues,
    QueueType.stream: PolicyTarget.streams,
    QueueType.delayed: PolicyTarget.queues,
}


class BindingDestinationType(str, enum.Enum):
    queue = "queue"
    exchange = "exchange"

    @property
    def path_abbreviation(self) -> str:
        """The single letter used for this destination type in binding paths."""
        return self.value[0]


class MessageTransferAcknowledgementMode(str, enum.Enum):
    """How federation links and shovels acknowledge transferred messages."""

    immediate = "no-ack"
    when_published = "on-publish"
    when_confirmed = "on-confirm"

    def __str__(self) -> str:
        return self.value


class ChannelUseMode(str, enum.Enum):
    multiple = "multiple"
    separate = "separate"


class FederationResourceCleanupMode(str, enum.Enum):
    default = "default"
    never = "never"


class OverflowBehavior(str, enum.Enum):
    drop_head = "drop-head"
    reject_publish = "reject-publish"
    reject_publish_dlx = "reject-publish-dlx"


class TlsPeerVerificationMode(str, enum.Enum):
    enabled = "verify_peer"
    disabled = "verify_none"


class VirtualHostLimitTarget(str, enum.Enum):
    max_connections = "max-connections"
    max_queues = "max-queues"


class UserLimitTarget(str, enum.Enum):
    max_connections = "max-connections"
    max_channels = "max-channels"


class SupportedProtocol(_OpenEnum):
    clustering = "clustering"
    amqp = "amqp"
    amqp_with_tls = "amqp/ssl"
    stream = "stream"
    stream_with_tls = "stream/ssl"
    mqtt = "mqtt"
    mqtt_with_tls = "mqtt/ssl"
    stomp = "stomp"
    stomp_with_tls = "stomp/ssl"
    amqp_over_websockets = "http/web-amqp"
    amqp_over_websockets_with_tls = "https/web-amqp"
    mqtt_over_websockets = "http/web-mqtt"
    mqtt_over_websockets_with_tls = "https/web-mqtt"
    stomp_over_websockets = "http/web-stomp"
    stomp_over_websockets_with_tls = "https/web-stomp"
    prometheus = "http/prometheus"
    prometheus_with_tls = "https/prometheus"
    http = "http"
    http_with_tls = "https"


class HashingAlgorithm(str, enum.Enum):
    rabbit_password_hashing_sha256 = "rabbit_password_hashing_sha256"
    rabbit_password_hashing_sha512 = "rabbit_password_hashing_sha512"


X_ARGUMENT_KEY_X_QUEUE_TYPE = "x-queue-type"
X_ARGUMENT_KEY_X_OVERFLOW = "x-overflow"
