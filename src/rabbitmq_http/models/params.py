"""Request bodies for the write operations of the management API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rabbitmq_http.commons import (
    X_ARGUMENT_KEY_X_QUEUE_TYPE,
    BindingDestinationType,
    ExchangeType,
    HashingAlgorithm,
    PolicyTarget,
    QueueType,
    UserLimitTarget,
    VirtualHostLimitTarget,
)


class VirtualHostParams(BaseModel):
    name: str = Field(..., description="Virtual host name.")
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    default_queue_type: Optional[QueueType] = Field(
        None, description="Queue type used when clients do not specify one."
    )
    tracing: bool = Field(False, description="Whether message tracing is enabled.")

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"name"}, exclude_none=True)


class UserParams(BaseModel):
    """
    A user to create or update.

    password_hash is produced by rabbitmq_http.password_hashing.hash_password.
    Setting it to "" prevents the user from logging in with a password.
    """

    name: str = Field(..., description="Username")
    password_hash: str = Field(..., description="Hash of the user password.")
    tags: List[str] = Field(default_factory=list)
    hashing_algorithm: Optional[HashingAlgorithm] = None

    def body(self) -> Dict[str, Any]:
        submission = self.model_dump(mode="json", exclude={"name"}, exclude_none=True)
        submission["tags"] = ",".join(submission["tags"])
        return submission


class BulkUserDelete(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    usernames: List[str] = Field(..., alias="users")

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PermissionParams(BaseModel):
    user: str
    vhost: str
    configure: str = Field(..., description="Regular expression, '' denies.")
    read: str = Field(..., description="Regular expression, '' denies.")
    write: str = Field(..., description="Regular expression, '' denies.")

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"user", "vhost"})


class TopicPermissionParams(BaseModel):
    user: str
    vhost: str
    exchange: str
    read: str = Field(..., description="Regular expression over routing keys.")
    write: str = Field(..., description="Regular expression over routing keys.")

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"user", "vhost"})


class QueueParams(BaseModel):
    """
    A queue to declare. The ``x-queue-type`` argument always reflects queue_type.

    >>> QueueParams.quorum_queue("orders").with_max_length(10000).body()["arguments"]
    {'x-queue-type': 'quorum', 'x-max-length': 10000}
    """

    name: str = Field(
        ...,
        description="The name of the queue. An empty name asks the broker to pick one.",
    )
    queue_type: QueueType = QueueType.classic
    durable: bool = Field(
        True, description="Whether or not the queue survives server restarts."
    )
    auto_delete: bool = Field(
        False,
        description="Whether the queue will be deleted automatically when no longer used.",
    )
    exclusive: bool = False
    arguments: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _record_queue_type(self) -> QueueParams:
        self.arguments = {
            X_ARGUMENT_KEY_X_QUEUE_TYPE: self.queue_type.value,
            **{
                k: v
                for k, v in self.arguments.items()
                if k != X_ARGUMENT_KEY_X_QUEUE_TYPE
            },
        }
        return self

    @classmethod
    def quorum_queue(cls, name: str, arguments: Optional[Dict[str, Any]] = None):
        return cls(name=name, queue_type=QueueType.quorum, arguments=arguments or {})

    @classmethod
    def stream(cls, name: str, arguments: Optional[Dict[str, Any]] = None):
        return cls(name=name, queue_type=QueueType.stream, arguments=arguments or {})

    @classmethod
    def durable_classic_queue(
        cls, name: str, arguments: Optional[Dict[str, Any]] = None
    ):
        return cls(name=name, queue_type=QueueType.classic, arguments=arguments or {})

    @classmethod
    def transient_autodelete(
        cls, name: str, arguments: Optional[Dict[str, Any]] = None
    ):
        return cls(
            name=name,
            queue_type=QueueType.classic,
            durable=False,
            auto_delete=True,
            arguments=arguments or {},
        )

    def with_argument(self, key: str, value: Any) -> QueueParams:
        self.arguments[key] = value
        return self

    def with_message_ttl(self, millis: int) -> QueueParams:
        return self.with_argument("x-message-ttl", millis)

    def with_queue_ttl(self, millis: int) -> QueueParams:
        return self.with_argument("x-expires", millis)

    def with_max_length(self, max_length: int) -> QueueParams:
        return self.with_argument("x-max-length", max_length)

    def with_max_length_bytes(self, max_length_bytes: int) -> QueueParams:
        return self.with_argument("x-max-length-bytes", max_length_bytes)

    def with_dead_letter_exchange(self, exchange: str) -> QueueParams:
        return self.with_argument("x-dead-letter-exchange", exchange)

    def with_dead_letter_routing_key(self, routing_key: str) -> QueueParams:
        return self.with_argument("x-dead-letter-routing-key", routing_key)

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"name", "queue_type"})


class StreamParams(BaseModel):
    name: str
    expiration: str = Field(
        ..., description='Retention period, for example "24h" or "7D".'
    )
    max_length_bytes: Optional[int] = Field(None, ge=0)
    max_segment_length_bytes: Optional[int] = Field(None, ge=0)
    arguments: Optional[Dict[str, Any]] = None

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"name"}, exclude_none=True)


class ExchangeParams(BaseModel):
    name: str = Field(..., description="The name of the exchange.")
    type: ExchangeType = Field(..., description="The exchange type")
    durable: bool = Field(
        True, description="Whether or not the exchange survives server restarts."
    )
    auto_delete: bool = False
    internal: bool = Field(
        False,
        description="Whether the exchange is internal, i.e. cannot be directly published to by a client.",
    )
    arguments: Optional[Dict[str, Any]] = None

    @classmethod
    def durable_fanout(cls, name: str, arguments: Optional[Dict[str, Any]] = None):
        return cls(name=name, type=ExchangeType.fanout, arguments=arguments)

    @classmethod
    def durable_topic(cls, name: str, arguments: Optional[Dict[str, Any]] = None):
        return cls(name=name, type=ExchangeType.topic, arguments=arguments)

    @classmethod
    def durable_direct(cls, name: str, arguments: Optional[Dict[str, Any]] = None):
        return cls(name=name, type=ExchangeType.direct, arguments=arguments)

    @classmethod
    def durable_headers(cls, name: str, arguments: Optional[Dict[str, Any]] = None):
        return cls(name=name, type=ExchangeType.headers, arguments=arguments)

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"name"}, exclude_none=True)


class BindingDeletionParams(BaseModel):
    """Identifies a binding by its properties rather than by its properties key."""

    vhost: str
    source: str
    destination: str
    destination_type: BindingDestinationType
    routing_key: str = ""
    arguments: Optional[Dict[str, Any]] = None


class PolicyParams(BaseModel):
    """Sets a policy."""

    model_config = ConfigDict(populate_by_name=True)

    vhost: str
    name: str = Field(..., description="The name of the policy.")
    pattern: str = Field(
        ...,
        description="Regular expression matched against queue or exchange names.",
    )
    apply_to: PolicyTarget = Field(
        default=PolicyTarget.all,
        alias="apply-to",
        description="Which types of object this policy should apply to.",
    )
    priority: int = Field(
        0, description="Higher numbers indicate greater precedence."
    )
    definition: Dict[str, Any] = Field(default_factory=dict)

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"name", "vhost"}, by_alias=True)


class RuntimeParameterDefinition(BaseModel):
    name: str
    vhost: str
    component: str
    value: Dict[str, Any]

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class GlobalRuntimeParameterDefinition(BaseModel):
    name: str
    value: Any

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class EnforcedLimitParams(BaseModel):
    kind: Union[VirtualHostLimitTarget, UserLimitTarget]
    value: int = Field(..., ge=0)

    def body(self) -> Dict[str, Any]:
        return {"value": self.value}


class MessageProperties(BaseModel):
    """AMQP 0-9-1 message properties for diagnostic publishing."""

    model_config = ConfigDict(extra="allow")

    content_type: Optional[str] = None
    delivery_mode: Optional[int] = Field(None, ge=1, le=2)
    priority: Optional[int] = None
    correlation_id: Optional[str] = None
    reply_to: Optional[str] = None
    expiration: Optional[str] = None
    message_id: Optional[str] = None
    headers: Optional[Dict[str, Any]] = None

    def body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
