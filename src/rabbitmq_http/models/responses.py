"""Shapes returned by the read endpoints of the management API."""

from __future__ import annotations

import datetime
import enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    field_validator,
    model_validator,
)

from rabbitmq_http.commons import BindingDestinationType, QueueType, _OpenEnum

HTTP_API_ACCESS_TAGS = frozenset({"management", "monitoring", "policymaker", "administrator"})


class TagList(RootModel[List[str]]):
    """
    User or virtual host tags.

    The broker reports tags either as a list or as a comma separated string.
    """

    @model_validator(mode="before")
    @classmethod
    def _split(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        return value

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __contains__(self, tag: object) -> bool:
        return tag in self.root

    def can_access_http_api(self) -> bool:
        return not HTTP_API_ACCESS_TAGS.isdisjoint(self.root)

    def is_administrator(self) -> bool:
        return "administrator" in self.root

    def can_access_monitoring_endpoints(self) -> bool:
        return "administrator" in self.root or "monitoring" in self.root


class PluginList(RootModel[List[str]]):
    """Plugin names, deduplicated and sorted so that clients observe a stable order."""

    @field_validator("root")
    @classmethod
    def _normalize(cls, plugins: List[str]) -> List[str]:
        return sorted(set(plugins))

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __contains__(self, plugin: object) -> bool:
        return plugin in self.root


class Rate(BaseModel):
    rate: float = 0.0


class MessageStats(BaseModel):
    publish: Optional[int] = Field(None, description="Count of messages published.")
    publish_details: Optional[Rate] = None
    publish_in: Optional[int] = None
    publish_out: Optional[int] = None
    confirm: Optional[int] = Field(None, description="Count of messages confirmed.")
    deliver: Optional[int] = None
    deliver_no_ack: Optional[int] = None
    get: Optional[int] = None
    get_no_ack: Optional[int] = None
    deliver_get: Optional[int] = Field(
        None, description="Sum of all deliveries and basic.get responses."
    )
    deliver_get_details: Optional[Rate] = None
    redeliver: Optional[int] = None
    drop_unroutable: Optional[int] = None
    return_unroutable: Optional[int] = None


class VirtualHostMetadata(BaseModel):
    tags: Optional[TagList] = None
    description: Optional[str] = None
    default_queue_type: Optional[str] = None


class VirtualHost(BaseModel):
    name: str
    tags: Optional[TagList] = None
    description: Optional[str] = None
    default_queue_type: Optional[str] = None
    tracing: Optional[bool] = None
    protected_from_deletion: Optional[bool] = None
    metadata: Optional[VirtualHostMetadata] = None
    messages: Optional[int] = None
    message_stats: Optional[MessageStats] = None


class VirtualHostLimits(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vhost: str
    limits: Dict[str, Any] = Field(default_factory=dict, alias="value")


class UserLimits(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., alias="user")
    limits: Dict[str, Any] = Field(default_factory=dict, alias="value")


class User(BaseModel):
    name: str = Field(..., description="Username")
    tags: TagList = Field(default_factory=lambda: TagList([]))
    password_hash: str = ""
    hashing_algorithm: Optional[str] = None


class CurrentUser(BaseModel):
    name: str
    tags: TagList = Field(default_factory=lambda: TagList([]))


class Permissions(BaseModel):
    user: str
    vhost: str
    configure: str
    read: str
    write: str


class TopicPermission(BaseModel):
    user: str
    vhost: str
    exchange: str
    read: str
    write: str


class OAuthConfiguration(BaseModel):
    model_config = ConfigDict(extra="allow")

    oauth_enabled: bool
    oauth_client_id: Optional[str] = None
    oauth_provider_url: Optional[str] = None


class AuthenticationAttemptStatistics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    protocol: str
    all_attempt_count: int = Field(0, alias="auth_attempts")
    failure_count: int = Field(0, alias="auth_attempts_failed")
    success_count: int = Field(0, alias="auth_attempts_succeeded")


class ClientCapabilities(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authentication_failure_close: bool = False
    basic_nack: bool = Field(False, alias="basic.nack")
    connection_blocked: bool = Field(False, alias="connection.blocked")
    consumer_cancel_notify: bool = False
    exchange_exchange_bindings: bool = False
    publisher_confirms: bool = False


class ClientProperties(BaseModel):
    connection_name: str = ""
    platform: str = ""
    product: str = ""
    version: str = ""
    capabilities: Optional[ClientCapabilities] = None


class Connection(BaseModel):
    """TCP/IP connection statistics."""

    name: str = Field(..., description="Readable name for the connection.")
    node: Optional[str] = None
    state: Optional[str] = None
    protocol: Optional[str] = Field(
        None, description="Version of the protocol in use, e.g. AMQP 0-9-1."
    )
    user: str = Field(..., description="Username associated with the connection.")
    vhost: Optional[str] = None
    connected_at: Optional[datetime.datetime] = Field(
        None, description="Date and time this connection was established."
    )
    host: Optional[str] = Field(None, description="Server hostname or IP address.")
    port: Optional[int] = Field(None, description="Server port.")
    peer_host: Optional[str] = Field(None, description="Client hostname or IP address.")
    peer_port: Optional[int] = Field(None, description="Client port.")
    ssl: Optional[bool] = None
    channel_max: Optional[int] = None
    channels: int = Field(0, description="Number of channels using the connection.")
    client_properties: ClientProperties = Field(default_factory=ClientProperties)

    @field_validator("client_properties", mode="before")
    @classmethod
    def _empty_properties(cls, value):
        # stream connections report [] when there are no properties
        return value or {}


class UserConnection(BaseModel):
    name: str
    node: str
    user: str
    vhost: str


class ConnectionDetails(BaseModel):
    name: str
    peer_host: Optional[str] = None
    peer_port: Optional[int] = None


class ChannelState(_OpenEnum):
    starting = "starting"
    running = "running"
    closing = "closing"
    open = "open"

    @classmethod
    def _unknown_member_name(cls) -> str:
        return "unknown"


class Channel(BaseModel):
    number: int
    name: str
    connection_details: Optional[ConnectionDetails] = None
    node: Optional[str] = None
    vhost: str
    user: Optional[str] = None
    state: Optional[ChannelState] = None
    consumer_count: int = 0
    confirm: bool = Field(False, description="Whether publisher confirms are enabled.")
    prefetch_count: int = 0
    messages_unacknowledged: int = 0
    messages_unconfirmed: int = 0
    message_stats: Optional[MessageStats] = None


class ChannelDetails(BaseModel):
    number: int
    name: str
    connection_name: str
    node: Optional[str] = None
    peer_host: Optional[str] = None
    peer_port: Optional[int] = None
    user: Optional[str] = None


class NameAndVirtualHost(BaseModel):
    name: str
    vhost: str


class Consumer(BaseModel):
    consumer_tag: str
    active: bool = True
    ack_required: bool = Field(
        ..., description="True when deliveries must be acknowledged manually."
    )
    prefetch_count: int = 0
    exclusive: bool = False
    arguments: Dict[str, Any] = Field(default_factory=dict)
    consumer_timeout: Optional[int] = None
    queue: NameAndVirtualHost
    channel_details: Optional[ChannelDetails] = None

    @field_validator("channel_details", mode="before")
    @classmethod
    def _empty_details(cls, value):
        return value or None


class StreamPublisher(BaseModel):
    connection_details: ConnectionDetails
    queue: NameAndVirtualHost
    reference: str = ""
    publisher_id: int
    published: int = 0
    confirmed: int = 0
    errored: int = 0


class StreamConsumer(BaseModel):
    connection_details: ConnectionDetails
    queue: NameAndVirtualHost
    subscription_id: int
    credits: int = 0
    consumed: int = 0
    offset_lag: int = 0
    offset: int = 0
    properties: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _empty_properties(cls, value):
        return value or {}


class QueueInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    vhost: str
    type: str = Field("classic", description="Queue type as reported by the broker.")
    durable: bool = False
    auto_delete: bool = False
    exclusive: bool = False
    arguments: Dict[str, Any] = Field(default_factory=dict)
    node: Optional[str] = None
    state: Optional[str] = None
    leader: Optional[str] = None
    members: Optional[List[str]] = None
    online: Optional[List[str]] = None
    policy: Optional[str] = Field(
        None, description="Effective policy name for the queue."
    )
    memory: Optional[int] = None
    consumers: Optional[int] = Field(None, description="Number of consumers.")
    consumer_utilisation: Optional[float] = None
    exclusive_consumer_tag: Optional[str] = None
    messages: Optional[int] = Field(
        None, description="Sum of ready and unacknowledged messages (queue depth)."
    )
    messages_ready: Optional[int] = None
    messages_unacknowledged: Optional[int] = None
    messages_persistent: Optional[int] = None
    messages_ram: Optional[int] = None
    message_bytes: Optional[int] = None
    message_bytes_ready: Optional[int] = None
    message_bytes_unacknowledged: Optional[int] = None
    message_bytes_persistent: Optional[int] = None
    message_bytes_ram: Optional[int] = None
    head_message_timestamp: Optional[datetime.datetime] = None
    message_stats: Optional[MessageStats] = None

    @field_validator("members", "online", mode="before")
    @classmethod
    def _node_lists(cls, value):
        return value or None

    @property
    def queue_type(self) -> QueueType:
        return QueueType(self.type)


class ExchangeInfo(BaseModel):
    name: str = Field(..., description="The name of the exchange.")
    vhost: str
    type: str = Field(..., description="The exchange type")
    durable: bool = False
    auto_delete: bool = False
    internal: bool = False
    arguments: Dict[str, Any] = Field(default_factory=dict)
    policy: Optional[str] = None
    message_stats: Optional[MessageStats] = None


class BindingInfo(BaseModel):
    vhost: str
    source: str = Field(..., description="The name of the source exchange")
    destination: str = Field(
        ..., description="The name of the queue or exchange the binding leads to"
    )
    destination_type: BindingDestinationType
    routing_key: str = ""
    arguments: Dict[str, Any] = Field(default_factory=dict)
    properties_key: Optional[str] = Field(
        None,
        description="Identifier composed of the routing key and a hash of the arguments",
    )


class RuntimeParameter(BaseModel):
    name: str
    vhost: str
    component: str
    value: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("value", mode="before")
    @classmethod
    def _value_object(cls, value):
        # components without settings report an empty list
        if isinstance(value, list) or value is None:
            return {}
        return value


class GlobalRuntimeParameter(BaseModel):
    name: str
    value: Any = None


class ClusterIdentity(BaseModel):
    name: str


class ClusterTags(dict):
    """Key/value tags attached to the cluster."""


class FeatureFlagState(_OpenEnum):
    enabled = "enabled"
    disabled = "disabled"
    state_changing = "state_changing"
    unavailable = "unavailable"


class FeatureFlagStability(_OpenEnum):
    required = "required"
    stable = "stable"
    experimental = "experimental"


class FeatureFlag(BaseModel):
    name: str
    state: FeatureFlagState
    desc: str = ""
    doc_url: str = ""
    stability: FeatureFlagStability
    provided_by: str = ""

    @property
    def is_enabled(self) -> bool:
        return self.state == FeatureFlagState.enabled


class DeprecationPhase(_OpenEnum):
    permitted_by_default = "permitted_by_default"
    denied_by_default = "denied_by_default"
    disconnected = "disconnected"
    removed = "removed"

    @classmethod
    def _unknown_member_name(cls) -> str:
        return "undefined"


class DeprecatedFeature(BaseModel):
    name: str
    desc: str = ""
    deprecation_phase: DeprecationPhase
    doc_url: str = ""
    provided_by: str = ""
    state: Optional[str] = None


class MessageRouted(BaseModel):
    routed: bool


class GetMessage(BaseModel):
    payload_bytes: int
    redelivered: bool
    exchange: str
    routing_key: str
    message_count: int
    properties: Dict[str, Any] = Field(default_factory=dict)
    payload: str
    payload_encoding: str

    @field_validator("properties", mode="before")
    @classmethod
    def _empty_properties(cls, value):
        return value or {}


class OperatingMode(str, enum.Enum):
    upstream = "upstream"
    downstream = "downstream"


class SchemaDefinitionSyncState(_OpenEnum):
    recover = "recover"
    connected = "connected"
    publisher_initialized = "publisher_initialized"
    syncing = "syncing"
    disconnected = "disconnected"


class SchemaDefinitionSyncStatus(BaseModel):
    node: str
    operating_mode: OperatingMode
    state: SchemaDefinitionSyncState
    upstream_username: Optional[str] = None
    upstream_endpoints: List[str] = Field(default_factory=list)
    last_sync_duration: Optional[int] = None
    last_connection_completion_stamp: Optional[datetime.datetime] = None
    last_sync_request_stamp: Optional[datetime.datetime] = None


class ProbeOutcome(BaseModel):
    """
    Result of probe_reachability.

    ``reached`` is True when the broker authenticated us; ``current_user`` and
    ``duration`` are then set. Otherwise ``error`` holds the exception raised.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    reached: bool
    current_user: Optional[CurrentUser] = None
    duration: Optional[datetime.timedelta] = None
    error: Optional[Exception] = None

