"""
The request pipeline shared by the blocking and the asynchronous client.

Every operation is described here once, as a ``Call`` (a single request) or as
a plan: a generator that yields calls and receives their decoded results.
The facades only differ in how they send a call over the wire.
"""

from __future__ import annotations

import dataclasses
import datetime
import functools
import json
import time
from typing import (
    Any,
    Callable,
    Dict,
    Generator,
    Iterable,
    List,
    Optional,
    Tuple,
    Union,
)

from pydantic import TypeAdapter

from rabbitmq_http.commons import (
    BindingDestinationType,
    PolicyTarget,
    SupportedProtocol,
    UserLimitTarget,
    VirtualHostLimitTarget,
)
from rabbitmq_http.errors import (
    AccessDenied,
    AuthenticationFailure,
    ClientError,
    DecodeError,
    HealthCheckFailed,
    MultipleMatchingBindings,
    NotFound,
    RabbitMQHttpError,
    ServerError,
)
from rabbitmq_http.models.cluster import ClusterNode, NodeMemoryFootprint, Overview
from rabbitmq_http.models.definitions import (
    ClusterDefinitionSet,
    Policy,
    VirtualHostDefinitionSet,
)
from rabbitmq_http.models.federation import (
    FEDERATION_UPSTREAM_COMPONENT,
    FederationLink,
    FederationUpstream,
    FederationUpstreamParams,
)
from rabbitmq_http.models.health import (
    ClusterAlarmCheckDetails,
    NoActivePortListenerDetails,
    NoActiveProtocolListenerDetails,
    QuorumCriticalityCheckDetails,
)
from rabbitmq_http.models.params import (
    BindingDeletionParams,
    BulkUserDelete,
    EnforcedLimitParams,
    ExchangeParams,
    GlobalRuntimeParameterDefinition,
    MessageProperties,
    PermissionParams,
    PolicyParams,
    QueueParams,
    RuntimeParameterDefinition,
    StreamParams,
    TopicPermissionParams,
    UserParams,
    VirtualHostParams,
)
from rabbitmq_http.models.responses import (
    AuthenticationAttemptStatistics,
    BindingInfo,
    Channel,
    ClusterIdentity,
    ClusterTags,
    Connection,
    Consumer,
    CurrentUser,
    DeprecatedFeature,
    ExchangeInfo,
    FeatureFlag,
    FeatureFlagStability,
    FeatureFlagState,
    GetMessage,
    GlobalRuntimeParameter,
    MessageRouted,
    OAuthConfiguration,
    Permissions,
    PluginList,
    ProbeOutcome,
    QueueInfo,
    RuntimeParameter,
    SchemaDefinitionSyncStatus,
    StreamConsumer,
    StreamPublisher,
    TopicPermission,
    User,
    UserConnection,
    UserLimits,
    VirtualHost,
    VirtualHostLimits,
)
from rabbitmq_http.models.shovels import (
    SHOVEL_COMPONENT,
    Amqp10ShovelParams,
    Amqp091ShovelParams,
    Shovel,
)
from rabbitmq_http.pagination import PaginationParams
from rabbitmq_http.paths import path

CLUSTER_TAGS_PARAMETER = "cluster_tags"
DEFAULT_AMQP_PORT = 5672

Decoder = Callable[[Any], Any]
Plan = Generator["Call", Any, Any]


@dataclasses.dataclass
class Call:
    """
    One HTTP request and the policy used to interpret its response.

    ``json`` is the request body; None sends no body. ``decoder`` turns the
    parsed JSON of a successful response into the result; without one the
    body is ignored and the result is None.
    """

    method: str
    path: str
    params: Optional[Dict[str, Any]] = None
    json: Any = None
    headers: Optional[Dict[str, str]] = None
    accept_not_found: bool = False
    decoder: Optional[Decoder] = None
    optional_body: bool = False
    raw_body: bool = False
    failure_details: Optional[Decoder] = None

    def outcome(self, status_code: int, url: str, text: str) -> Any:
        """Classify a response, returning the decoded result or raising."""
        if 200 <= status_code < 300:
            return self._decode(status_code, url, text)
        if status_code == 404 and self.accept_not_found:
            return None
        if status_code == 503 and self.failure_details is not None:
            raise HealthCheckFailed(
                self.path, status_code, url, self._details(text), text
            )
        if status_code == 401:
            raise AuthenticationFailure(status_code, url, text)
        if status_code == 403:
            raise AccessDenied(status_code, url, text)
        if status_code == 404:
            raise NotFound(status_code, url, text)
        if 500 <= status_code < 600:
            raise ServerError(status_code, url, text)
        raise ClientError(status_code, url, text)

    def _decode(self, status_code: int, url: str, text: str) -> Any:
        if self.decoder is None:
            return None
        if self.raw_body:
            return self.decoder(text)
        if not text.strip():
            if self.optional_body:
                return None
            raise DecodeError("Response has no body", status_code, url)
        try:
            body = json.loads(text)
        except ValueError as e:
            raise DecodeError(
                f"Response is not valid JSON: {e}", status_code, url
            ) from e
        try:
            return self.decoder(body)
        except (ValueError, TypeError, KeyError) as e:
            raise DecodeError(
                f"Unexpected response shape: {e}", status_code, url
            ) from e

    def _details(self, text: str) -> Any:
        try:
            return self.failure_details(json.loads(text))
        except (ValueError, TypeError, KeyError):
            return None


def _single(call: Call) -> Plan:
    result = yield call
    return result


def _identity(body: Any) -> Any:
    return body


@functools.lru_cache(maxsize=None)
def _list_of(model) -> Decoder:
    return TypeAdapter(List[model]).validate_python


@functools.lru_cache(maxsize=None)
def _page_of(model) -> Decoder:
    items = _list_of(model)

    def decode(body):
        if isinstance(body, dict):
            body = body["items"]
        return items(body)

    return decode


def _query(pagination: Optional[PaginationParams]) -> Optional[Dict[str, int]]:
    return pagination.to_query_params() if pagination else None


def _reason_header(reason: Optional[str]) -> Optional[Dict[str, str]]:
    return {"X-Reason": reason} if reason else None


_HEALTH_CHECK_ALARMS = "health/checks/alarms"
_HEALTH_CHECK_LOCAL_ALARMS = "health/checks/local-alarms"
_HEALTH_CHECK_QUORUM_CRITICAL = "health/checks/node-is-quorum-critical"


class BaseAPI:
    """
    Every management API operation, independent of the HTTP library in use.

    Subclasses implement ``_perform``, which drives a plan to completion
    and either returns its result or, for the asynchronous client, an
    awaitable of it.
    """

    def _perform(self, plan: Plan):
        raise NotImplementedError()

    def _request(self, call: Call):
        return self._perform(_single(call))

    # Raw access

    def get(self, path: str, params=None, headers=None):
        return self._request(
            Call("GET", path, params, headers=headers, decoder=_identity,
                 optional_body=True)
        )

    def put(self, path: str, json: Any = None, params=None, headers=None):
        return self._request(
            Call("PUT", path, params, json=json if json is not None else {},
                 headers=headers, decoder=_identity, optional_body=True)
        )

    def post(self, path: str, json: Any = None, params=None, headers=None):
        return self._request(
            Call("POST", path, params, json=json if json is not None else {},
                 headers=headers, decoder=_identity, optional_body=True)
        )

    def post_without_body(self, path: str, params=None, headers=None):
        return self._request(
            Call("POST", path, params, headers=headers, decoder=_identity,
                 optional_body=True)
        )

    def delete(self, path: str, params=None, headers=None, idempotently=False):
        return self._request(
            Call("DELETE", path, params, headers=headers,
                 accept_not_found=idempotently)
        )

    def head(self, path: str, params=None, headers=None):
        return self._request(Call("HEAD", path, params, headers=headers))

    # Cluster and nodes

    def overview(self) -> Overview:
        return self._request(Call("GET", "overview", decoder=Overview.model_validate))

    def server_version(self) -> str:
        return self._request(
            Call("GET", "overview", decoder=lambda body: body["rabbitmq_version"])
        )

    def get_cluster_name(self) -> ClusterIdentity:
        return self._request(
            Call("GET", "cluster-name", decoder=ClusterIdentity.model_validate)
        )

    def set_cluster_name(self, name: str):
        return self._request(Call("PUT", "cluster-name", json={"name": name}))

    def get_cluster_tags(self) -> ClusterTags:
        return self._request(
            Call(
                "GET",
                path("global-parameters", CLUSTER_TAGS_PARAMETER),
                decoder=lambda body: ClusterTags(body["value"] or {}),
            )
        )

    def set_cluster_tags(self, tags: Dict[str, Any]):
        return self.upsert_global_runtime_parameter(
            GlobalRuntimeParameterDefinition(name=CLUSTER_TAGS_PARAMETER, value=tags)
        )

    def clear_cluster_tags(self, idempotently: bool = False):
        return self.clear_global_runtime_parameter(
            CLUSTER_TAGS_PARAMETER, idempotently=idempotently
        )

    def _list_nodes_call(self) -> Call:
        return Call("GET", "nodes", decoder=_list_of(ClusterNode))

    def list_nodes(self) -> List[ClusterNode]:
        return self._request(self._list_nodes_call())

    def _get_node_info_call(self, name: str) -> Call:
        return Call("GET", path("nodes", name), decoder=ClusterNode.model_validate)

    def get_node_info(self, name: str) -> ClusterNode:
        return self._request(self._get_node_info_call(name))

    def get_node_memory_footprint(self, name: str) -> NodeMemoryFootprint:
        return self._request(
            Call(
                "GET",
                path("nodes", name, "memory"),
                decoder=NodeMemoryFootprint.model_validate,
            )
        )

    def list_all_cluster_plugins(self) -> PluginList:
        """Plugins enabled on any cluster node, deduplicated and sorted."""
        return self._perform(self._list_all_cluster_plugins())

    def _list_all_cluster_plugins(self) -> Plan:
        nodes = yield self._list_nodes_call()
        plugins = [plugin for node in nodes for plugin in node.enabled_plugins]
        return PluginList(plugins)

    def list_node_plugins(self, name: str) -> PluginList:
        return self._perform(self._list_node_plugins(name))

    def _list_node_plugins(self, name: str) -> Plan:
        node = yield self._get_node_info_call(name)
        return node.enabled_plugins

    def _current_user_call(self) -> Call:
        return Call("GET", "whoami", decoder=CurrentUser.model_validate)

    def probe_reachability(self) -> ProbeOutcome:
        """
        Check that the API is reachable and accepts our credentials.

        This never raises: failures are reported through the outcome.
        """
        return self._perform(self._probe_reachability())

    def _probe_reachability(self) -> Plan:
        started = time.monotonic()
        try:
            user = yield self._current_user_call()
        except RabbitMQHttpError as e:
            return ProbeOutcome(reached=False, error=e)
        return ProbeOutcome(
            reached=True,
            current_user=user,
            duration=datetime.timedelta(seconds=time.monotonic() - started),
        )

    # Virtual hosts

    def list_vhosts(self) -> List[VirtualHost]:
        return self._request(Call("GET", "vhosts", decoder=_list_of(VirtualHost)))

    def list_vhosts_paged(self, pagination: PaginationParams) -> List[VirtualHost]:
        return self._request(
            Call("GET", "vhosts", _query(pagination), decoder=_page_of(VirtualHost))
        )

    def get_vhost(self, name: str) -> VirtualHost:
        return self._request(
            Call("GET", path("vhosts", name), decoder=VirtualHost.model_validate)
        )

    def create_vhost(self, params: VirtualHostParams):
        return self.update_vhost(params)

    def update_vhost(self, params: VirtualHostParams):
        return self._request(
            Call("PUT", path("vhosts", params.name), json=params.body())
        )

    def delete_vhost(self, name: str, idempotently: bool = False):
        return self._request(
            Call("DELETE", path("vhosts", name), accept_not_found=idempotently)
        )

    def enable_vhost_deletion_protection(self, name: str):
        return self._request(
            Call("POST", path("vhosts", name, "deletion", "protection"))
        )

    def disable_vhost_deletion_protection(self, name: str):
        return self._request(
            Call("DELETE", path("vhosts", name, "deletion", "protection"))
        )

    # Users

    def list_users(self) -> List[User]:
        return self._request(Call("GET", "users", decoder=_list_of(User)))

    def list_users_paged(self, pagination: PaginationParams) -> List[User]:
        return self._request(
            Call("GET", "users", _query(pagination), decoder=_page_of(User))
        )

    def list_users_without_permissions(self) -> List[User]:
        return self._request(
            Call("GET", "users/without-permissions", decoder=_list_of(User))
        )

    def get_user(self, name: str) -> User:
        return self._request(
            Call("GET", path("users", name), decoder=User.model_validate)
        )

    def current_user(self) -> CurrentUser:
        return self._request(self._current_user_call())

    def create_user(self, params: UserParams):
        return self._request(
            Call("PUT", path("users", params.name), json=params.body())
        )

    def delete_user(self, name: str, idempotently: bool = False):
        return self._request(
            Call("DELETE", path("users", name), accept_not_found=idempotently)
        )

    def delete_users(self, usernames: Iterable[str]):
        body = BulkUserDelete(usernames=list(usernames)).body()
        return self._request(Call("POST", "users/bulk-delete", json=body))

    # Permissions

    def list_permissions(self) -> List[Permissions]:
        return self._request(
            Call("GET", "permissions", decoder=_list_of(Permissions))
        )

    def list_permissions_in(self, vhost: str) -> List[Permissions]:
        return self._request(
            Call(
                "GET",
                path("vhosts", vhost, "permissions"),
                decoder=_list_of(Permissions),
            )
        )

    def list_permissions_of(self, user: str) -> List[Permissions]:
        return self._request(
            Call("GET", path("users", user, "permissions"), decoder=_list_of(Permissions))
        )

    def get_permissions(self, vhost: str, user: str) -> Permissions:
        return self._request(
            Call(
                "GET",
                path("permissions", vhost, user),
                decoder=Permissions.model_validate,
            )
        )

    def declare_permissions(self, params: PermissionParams):
        return self._request(
            Call("PUT", path("permissions", params.vhost, params.user), json=params.body())
        )

    grant_permissions = declare_permissions

    def grant_full_permissions(self, user: str, vhost: str):
        return self.declare_permissions(
            PermissionParams(user=user, vhost=vhost, configure=".*", read=".*", write=".*")
        )

    def clear_permissions(self, vhost: str, user: str, idempotently: bool = False):
        return self._request(
            Call(
                "DELETE",
                path("permissions", vhost, user),
                accept_not_found=idempotently,
            )
        )

    def list_topic_permissions(self) -> List[TopicPermission]:
        return self._request(
            Call("GET", "topic-permissions", decoder=_list_of(TopicPermission))
        )

    def list_topic_permissions_in(self, vhost: str) -> List[TopicPermission]:
        return self._request(
            Call(
                "GET",
                path("vhosts", vhost, "topic-permissions"),
                decoder=_list_of(TopicPermission),
            )
        )

    def list_topic_permissions_of(self, user: str) -> List[TopicPermission]:
        return self._request(
            Call(
                "GET",
                path("users", user, "topic-permissions"),
                decoder=_list_of(TopicPermission),
            )
        )

    def get_topic_permissions_of(self, vhost: str, user: str) -> List[TopicPermission]:
        return self._request(
            Call(
                "GET",
                path("topic-permissions", vhost, user),
                decoder=_list_of(TopicPermission),
            )
        )

    def declare_topic_permissions(self, params: TopicPermissionParams):
        return self._request(
            Call(
                "PUT",
                path("topic-permissions", params.vhost, params.user),
                json=params.body(),
            )
        )

    def clear_topic_permissions(
        self, vhost: str, user: str, idempotently: bool = False
    ):
        return self._request(
            Call(
                "DELETE",
                path("topic-permissions", vhost, user),
                accept_not_found=idempotently,
            )
        )

    # Connections, channels and consumers

    def list_connections(self) -> List[Connection]:
        return self._request(Call("GET", "connections", decoder=_list_of(Connection)))

    def list_connections_paged(self, pagination: PaginationParams) -> List[Connection]:
        return self._request(
            Call("GET", "connections", _query(pagination), decoder=_page_of(Connection))
        )

    def list_connections_in(self, vhost: str) -> List[Connection]:
        return self._request(
            Call(
                "GET",
                path("vhosts", vhost, "connections"),
                decoder=_list_of(Connection),
            )
        )

    def list_user_connections(self, username: str) -> List[UserConnection]:
        return self._request(
            Call(
                "GET",
                path("connections", "username", username),
                decoder=_list_of(UserConnection),
            )
        )

    def get_connection_info(self, name: str) -> Connection:
        return self._request(
            Call("GET", path("connections", name), decoder=Connection.model_validate)
        )

    def get_stream_connection_info(self, vhost: str, name: str) -> Connection:
        return self._request(
            Call(
                "GET",
                path("stream", "connections", vhost, name),
                decoder=Connection.model_validate,
            )
        )

    def list_stream_connections(self) -> List[Connection]:
        return self._request(
            Call("GET", "stream/connections", decoder=_list_of(Connection))
        )

    def list_stream_connections_in(self, vhost: str) -> List[Connection]:
        return self._request(
            Call(
                "GET",
                path("stream", "connections", vhost),
                decoder=_list_of(Connection),
            )
        )

    def close_connection(
        self, name: str, reason: Optional[str] = None, idempotently: bool = False
    ):
        return self._request(
            Call(
                "DELETE",
                path("connections", name),
                headers=_reason_header(reason),
                accept_not_found=idempotently,
            )
        )

    def close_user_connections(
        self, username: str, reason: Optional[str] = None, idempotently: bool = False
    ):
        return self._request(
            Call(
                "DELETE",
                path("connections", "username", username),
                headers=_reason_header(reason),
                accept_not_found=idempotently,
            )
        )

    def list_channels(self) -> List[Channel]:
        return self._request(Call("GET", "channels", decoder=_list_of(Channel)))

    def list_channels_paged(self, pagination: PaginationParams) -> List[Channel]:
        return self._request(
            Call("GET", "channels", _query(pagination), decoder=_page_of(Channel))
        )

    def list_channels_in(self, vhost: str) -> List[Channel]:
        return self._request(
            Call("GET", path("vhosts", vhost, "channels"), decoder=_list_of(Channel))
        )

    def list_channels_on(self, connection_name: str) -> List[Channel]:
        return self._request(
            Call(
                "GET",
                path("connections", connection_name, "channels"),
                decoder=_list_of(Channel),
            )
        )

    def get_channel_info(self, name: str) -> Channel:
        return self._request(
            Call("GET", path("channels", name), decoder=Channel.model_validate)
        )

    def list_consumers(self) -> List[Consumer]:
        return self._request(Call("GET", "consumers", decoder=_list_of(Consumer)))

    def list_consumers_in(self, vhost: str) -> List[Consumer]:
        return self._request(
            Call("GET", path("consumers", vhost), decoder=_list_of(Consumer))
        )

    def list_stream_publishers(self) -> List[StreamPublisher]:
        return self._request(
            Call("GET", "stream/publishers", decoder=_list_of(StreamPublisher))
        )

    def list_stream_publishers_in(self, vhost: str) -> List[StreamPublisher]:
        return self._request(
            Call(
                "GET",
                path("stream", "publishers", vhost),
                decoder=_list_of(StreamPublisher),
            )
        )

    def list_stream_publishers_of(self, vhost: str, stream: str) -> List[StreamPublisher]:
        return self._request(
            Call(
                "GET",
                path("stream", "publishers", vhost, stream),
                decoder=_list_of(StreamPublisher),
            )
        )

    def list_stream_consumers(self) -> List[StreamConsumer]:
        return self._request(
            Call("GET", "stream/consumers", decoder=_list_of(StreamConsumer))
        )

    def list_stream_consumers_in(self, vhost: str) -> List[StreamConsumer]:
        return self._request(
            Call(
                "GET",
                path("stream", "consumers", vhost),
                decoder=_list_of(StreamConsumer),
            )
        )

    # Queues and streams

    def list_queues(self) -> List[QueueInfo]:
        return self._request(Call("GET", "queues", decoder=_list_of(QueueInfo)))

    def list_queues_paged(self, pagination: PaginationParams) -> List[QueueInfo]:
        return self._request(
            Call("GET", "queues", _query(pagination), decoder=_page_of(QueueInfo))
        )

    def list_queues_in(self, vhost: str) -> List[QueueInfo]:
        return self._request(
            Call("GET", path("queues", vhost), decoder=_list_of(QueueInfo))
        )

    def list_queues_in_paged(
        self, vhost: str, pagination: PaginationParams
    ) -> List[QueueInfo]:
        return self._request(
            Call(
                "GET",
                path("queues", vhost),
                _query(pagination),
                decoder=_page_of(QueueInfo),
            )
        )

    def list_queues_with_details(self) -> List[QueueInfo]:
        return self._request(
            Call("GET", "queues/detailed", decoder=_list_of(QueueInfo))
        )

    def get_queue_info(self, vhost: str, name: str) -> QueueInfo:
        return self._request(
            Call("GET", path("queues", vhost, name), decoder=QueueInfo.model_validate)
        )

    get_stream_info = get_queue_info

    def declare_queue(self, vhost: str, params: QueueParams):
        return self._request(
            Call("PUT", path("queues", vhost, params.name), json=params.body())
        )

    def declare_classic_queue(self, vhost: str, name: str):
        return self.declare_queue(vhost, QueueParams.durable_classic_queue(name))

    def declare_quorum_queue(self, vhost: str, name: str):
        return self.declare_queue(vhost, QueueParams.quorum_queue(name))

    def declare_stream_queue(self, vhost: str, name: str):
        return self.declare_queue(vhost, QueueParams.stream(name))

    def declare_stream(self, vhost: str, params: StreamParams):
        return self._request(
            Call("PUT", path("streams", vhost, params.name), json=params.body())
        )

    def delete_queue(self, vhost: str, name: str, idempotently: bool = False):
        return self._request(
            Call("DELETE", path("queues", vhost, name), accept_not_found=idempotently)
        )

    def delete_stream(self, vhost: str, name: str, idempotently: bool = False):
        return self._request(
            Call("DELETE", path("streams", vhost, name), accept_not_found=idempotently)
        )

    def purge_queue(self, vhost: str, name: str):
        return self._request(Call("DELETE", path("queues", vhost, name, "contents")))

    def rebalance_queue_leaders(self):
        return self._request(Call("POST", "rebalance/queues"))

    # Exchanges

    def list_exchanges(self) -> List[ExchangeInfo]:
        return self._request(Call("GET", "exchanges", decoder=_list_of(ExchangeInfo)))

    def list_exchanges_paged(self, pagination: PaginationParams) -> List[ExchangeInfo]:
        return self._request(
            Call("GET", "exchanges", _query(pagination), decoder=_page_of(ExchangeInfo))
        )

    def list_exchanges_in(self, vhost: str) -> List[ExchangeInfo]:
        return self._request(
            Call("GET", path("exchanges", vhost), decoder=_list_of(ExchangeInfo))
        )

    def get_exchange_info(self, vhost: str, name: str) -> ExchangeInfo:
        return self._request(
            Call(
                "GET",
                path("exchanges", vhost, name),
                decoder=ExchangeInfo.model_validate,
            )
        )

    def declare_exchange(self, vhost: str, params: ExchangeParams):
        return self._request(
            Call("PUT", path("exchanges", vhost, params.name), json=params.body())
        )

    def _delete_exchange_call(self, vhost: str, name: str, idempotently: bool) -> Call:
        return Call(
            "DELETE", path("exchanges", vhost, name), accept_not_found=idempotently
        )

    def delete_exchange(self, vhost: str, name: str, idempotently: bool = False):
        return self._request(self._delete_exchange_call(vhost, name, idempotently))

    def delete_exchanges(
        self, vhost: str, names: Iterable[str], idempotently: bool = False
    ):
        """
        Delete exchanges one after another, stopping at the first failure.

        With ``idempotently`` an exchange that does not exist is skipped; any
        other failure still stops the sequence.
        """
        return self._perform(self._delete_exchanges(vhost, list(names), idempotently))

    def _delete_exchanges(self, vhost: str, names: List[str], idempotently: bool) -> Plan:
        for name in names:
            yield self._delete_exchange_call(vhost, name, idempotently)

    # Bindings

    def list_bindings(self) -> List[BindingInfo]:
        return self._request(Call("GET", "bindings", decoder=_list_of(BindingInfo)))

    def list_bindings_in(self, vhost: str) -> List[BindingInfo]:
        return self._request(
            Call("GET", path("bindings", vhost), decoder=_list_of(BindingInfo))
        )

    def _list_queue_bindings_call(self, vhost: str, queue: str) -> Call:
        return Call(
            "GET", path("queues", vhost, queue, "bindings"), decoder=_list_of(BindingInfo)
        )

    def list_queue_bindings(self, vhost: str, queue: str) -> List[BindingInfo]:
        return self._request(self._list_queue_bindings_call(vhost, queue))

    def _list_exchange_bindings_call(self, vhost: str, exchange: str, vertex: str):
        return Call(
            "GET",
            path("exchanges", vhost, exchange, "bindings", vertex),
            decoder=_list_of(BindingInfo),
        )

    def list_exchange_bindings_with_source(
        self, vhost: str, exchange: str
    ) -> List[BindingInfo]:
        return self._request(self._list_exchange_bindings_call(vhost, exchange, "source"))

    def list_exchange_bindings_with_destination(
        self, vhost: str, exchange: str
    ) -> List[BindingInfo]:
        return self._request(
            self._list_exchange_bindings_call(vhost, exchange, "destination")
        )

    def _bind(
        self,
        vhost: str,
        source: str,
        destination_type: BindingDestinationType,
        destination: str,
        routing_key: Optional[str],
        arguments: Optional[Dict[str, Any]],
    ):
        body: Dict[str, Any] = {}
        if routing_key is not None:
            body["routing_key"] = routing_key
        if arguments is not None:
            body["arguments"] = arguments
        return self._request(
            Call(
                "POST",
                path(
                    "bindings",
                    vhost,
                    "e",
                    source,
                    destination_type.path_abbreviation,
                    destination,
                ),
                json=body,
            )
        )

    def bind_queue(
        self,
        vhost: str,
        queue: str,
        exchange: str,
        routing_key: Optional[str] = None,
        arguments: Optional[Dict[str, Any]] = None,
    ):
        return self._bind(
            vhost, exchange, BindingDestinationType.queue, queue, routing_key, arguments
        )

    def bind_exchange(
        self,
        vhost: str,
        destination: str,
        source: str,
        routing_key: Optional[str] = None,
        arguments: Optional[Dict[str, Any]] = None,
    ):
        return self._bind(
            vhost,
            source,
            BindingDestinationType.exchange,
            destination,
            routing_key,
            arguments,
        )

    def delete_binding(self, params: BindingDeletionParams, idempotently: bool = False):
        """
        Delete the binding matching the source, destination, routing key and
        arguments in ``params``.

        The broker addresses bindings by a properties key, so the binding is
        looked up first.

        :raises NotFound: if nothing matches and ``idempotently`` is not set.
        :raises MultipleMatchingBindings: if more than one binding matches.
        """
        return self._perform(self._delete_binding(params, idempotently))

    def _delete_binding(self, params: BindingDeletionParams, idempotently: bool) -> Plan:
        destination_type = BindingDestinationType(params.destination_type)
        if destination_type is BindingDestinationType.queue:
            listing = self._list_queue_bindings_call(params.vhost, params.destination)
        else:
            listing = self._list_exchange_bindings_call(
                params.vhost, params.destination, "destination"
            )
        bindings = yield listing
        arguments = params.arguments or {}
        matches = [
            b
            for b in bindings
            if b.source == params.source
            and b.routing_key == params.routing_key
            and b.arguments == arguments
        ]
        if not matches:
            if idempotently:
                return None
            raise NotFound(404, listing.path, "")
        if len(matches) > 1:
            raise MultipleMatchingBindings(
                f"{len(matches)} bindings match the given source, routing key and arguments"
            )
        segments = [
            "bindings",
            params.vhost,
            "e",
            params.source,
            destination_type.path_abbreviation,
            params.destination,
        ]
        if matches[0].properties_key is not None:
            segments.append(matches[0].properties_key)
        yield Call("DELETE", path(*segments), accept_not_found=idempotently)

    # Policies

    def _list_policies_in_call(self, collection: str, vhost: str) -> Call:
        return Call("GET", path(collection, vhost), decoder=_list_of(Policy))

    def _delete_policy_call(
        self, collection: str, vhost: str, name: str, idempotently: bool
    ) -> Call:
        return Call(
            "DELETE", path(collection, vhost, name), accept_not_found=idempotently
        )

    def _declare_policy_call(self, collection: str, params: PolicyParams) -> Call:
        return Call("PUT", path(collection, params.vhost, params.name), json=params.body())

    def _declare_policies(self, collection: str, params: List[PolicyParams]) -> Plan:
        for p in params:
            yield self._declare_policy_call(collection, p)

    def _delete_policies_in(self, collection: str, vhost: str, names: List[str]) -> Plan:
        for name in names:
            yield self._delete_policy_call(collection, vhost, name, True)

    def _list_policies_for_target(
        self, collection: str, vhost: str, target: PolicyTarget
    ) -> Plan:
        policies = yield self._list_policies_in_call(collection, vhost)
        return [p for p in policies if PolicyTarget(target).does_apply_to(p.apply_to)]

    def _list_matching_policies(
        self, collection: str, vhost: str, name: str, target: PolicyTarget
    ) -> Plan:
        policies = yield self._list_policies_in_call(collection, vhost)
        return [p for p in policies if p.does_match_name(vhost, name, target)]

    def get_policy(self, vhost: str, name: str) -> Policy:
        return self._request(
            Call("GET", path("policies", vhost, name), decoder=Policy.model_validate)
        )

    def list_policies(self) -> List[Policy]:
        return self._request(Call("GET", "policies", decoder=_list_of(Policy)))

    def list_policies_in(self, vhost: str) -> List[Policy]:
        return self._request(self._list_policies_in_call("policies", vhost))

    def declare_policy(self, params: PolicyParams):
        return self._request(self._declare_policy_call("policies", params))

    def declare_policies(self, params: Iterable[PolicyParams]):
        return self._perform(self._declare_policies("policies", list(params)))

    def delete_policy(self, vhost: str, name: str, idempotently: bool = False):
        return self._request(
            self._delete_policy_call("policies", vhost, name, idempotently)
        )

    def delete_policies_in(self, vhost: str, names: Iterable[str]):
        """Delete the named policies, ignoring any that do not exist."""
        return self._perform(self._delete_policies_in("policies", vhost, list(names)))

    def list_policies_for_target(self, vhost: str, target: PolicyTarget) -> List[Policy]:
        return self._perform(self._list_policies_for_target("policies", vhost, target))

    def list_matching_policies(
        self, vhost: str, name: str, target: PolicyTarget
    ) -> List[Policy]:
        """Policies in ``vhost`` that would apply to the object ``name`` of type ``target``."""
        return self._perform(
            self._list_matching_policies("policies", vhost, name, target)
        )

    def get_operator_policy(self, vhost: str, name: str) -> Policy:
        return self._request(
            Call(
                "GET",
                path("operator-policies", vhost, name),
                decoder=Policy.model_validate,
            )
        )

    def list_operator_policies(self) -> List[Policy]:
        return self._request(Call("GET", "operator-policies", decoder=_list_of(Policy)))

    def list_operator_policies_in(self, vhost: str) -> List[Policy]:
        return self._request(self._list_policies_in_call("operator-policies", vhost))

    def declare_operator_policy(self, params: PolicyParams):
        return self._request(self._declare_policy_call("operator-policies", params))

    def declare_operator_policies(self, params: Iterable[PolicyParams]):
        return self._perform(self._declare_policies("operator-policies", list(params)))

    def delete_operator_policy(self, vhost: str, name: str, idempotently: bool = False):
        return self._request(
            self._delete_policy_call("operator-policies", vhost, name, idempotently)
        )

    def delete_operator_policies_in(self, vhost: str, names: Iterable[str]):
        return self._perform(
            self._delete_policies_in("operator-policies", vhost, list(names))
        )

    def list_operator_policies_for_target(
        self, vhost: str, target: PolicyTarget
    ) -> List[Policy]:
        return self._perform(
            self._list_policies_for_target("operator-policies", vhost, target)
        )

    def list_matching_operator_policies(
        self, vhost: str, name: str, target: PolicyTarget
    ) -> List[Policy]:
        return self._perform(
            self._list_matching_policies("operator-policies", vhost, name, target)
        )

    # Runtime parameters

    def _list_runtime_parameters_call(self, *segments: str) -> Call:
        return Call(
            "GET", path("parameters", *segments), decoder=_list_of(RuntimeParameter)
        )

    def _clear_runtime_parameter_call(
        self, component: str, vhost: str, name: str, idempotently: bool
    ) -> Call:
        return Call(
            "DELETE",
            path("parameters", component, vhost, name),
            accept_not_found=idempotently,
        )

    def list_runtime_parameters(self) -> List[RuntimeParameter]:
        return self._request(self._list_runtime_parameters_call())

    def list_runtime_parameters_of_component(
        self, component: str
    ) -> List[RuntimeParameter]:
        return self._request(self._list_runtime_parameters_call(component))

    def list_runtime_parameters_of_component_in(
        self, component: str, vhost: str
    ) -> List[RuntimeParameter]:
        return self._request(self._list_runtime_parameters_call(component, vhost))

    def get_runtime_parameter(
        self, component: str, vhost: str, name: str
    ) -> RuntimeParameter:
        return self._request(
            Call(
                "GET",
                path("parameters", component, vhost, name),
                decoder=RuntimeParameter.model_validate,
            )
        )

    def upsert_runtime_parameter(self, param: RuntimeParameterDefinition):
        return self._request(
            Call(
                "PUT",
                path("parameters", param.component, param.vhost, param.name),
                json=param.body(),
            )
        )

    def clear_runtime_parameter(
        self, component: str, vhost: str, name: str, idempotently: bool = False
    ):
        return self._request(
            self._clear_runtime_parameter_call(component, vhost, name, idempotently)
        )

    def clear_all_runtime_parameters(self):
        return self._perform(self._clear_runtime_parameters())

    def clear_all_runtime_parameters_of_component(self, component: str):
        return self._perform(self._clear_runtime_parameters(component))

    def _clear_runtime_parameters(self, *component: str) -> Plan:
        parameters = yield self._list_runtime_parameters_call(*component)
        for p in parameters:
            yield self._clear_runtime_parameter_call(p.component, p.vhost, p.name, True)

    def list_global_runtime_parameters(self) -> List[GlobalRuntimeParameter]:
        return self._request(
            Call(
                "GET", "global-parameters", decoder=_list_of(GlobalRuntimeParameter)
            )
        )

    def get_global_runtime_parameter(self, name: str) -> GlobalRuntimeParameter:
        return self._request(
            Call(
                "GET",
                path("global-parameters", name),
                decoder=GlobalRuntimeParameter.model_validate,
            )
        )

    def upsert_global_runtime_parameter(self, param: GlobalRuntimeParameterDefinition):
        return self._request(
            Call("PUT", path("global-parameters", param.name), json=param.body())
        )

    def clear_global_runtime_parameter(self, name: str, idempotently: bool = False):
        return self._request(
            Call(
                "DELETE",
                path("global-parameters", name),
                accept_not_found=idempotently,
            )
        )

    # Limits

    def set_user_limit(self, username: str, limit: EnforcedLimitParams):
        return self._request(
            Call(
                "PUT",
                path("user-limits", username, limit.kind.value),
                json=limit.body(),
            )
        )

    def clear_user_limit(
        self, username: str, kind: UserLimitTarget, idempotently: bool = False
    ):
        return self._request(
            Call(
                "DELETE",
                path("user-limits", username, UserLimitTarget(kind).value),
                accept_not_found=idempotently,
            )
        )

    def list_all_user_limits(self) -> List[UserLimits]:
        return self._request(Call("GET", "user-limits", decoder=_list_of(UserLimits)))

    def list_user_limits(self, username: str) -> List[UserLimits]:
        return self._request(
            Call("GET", path("user-limits", username), decoder=_list_of(UserLimits))
        )

    def set_vhost_limit(self, vhost: str, limit: EnforcedLimitParams):
        return self._request(
            Call(
                "PUT",
                path("vhost-limits", vhost, limit.kind.value),
                json=limit.body(),
            )
        )

    def clear_vhost_limit(
        self, vhost: str, kind: VirtualHostLimitTarget, idempotently: bool = True
    ):
        """Clearing a limit that is not set succeeds unless idempotently=False."""
        return self._request(
            Call(
                "DELETE",
                path("vhost-limits", vhost, VirtualHostLimitTarget(kind).value),
                accept_not_found=idempotently,
            )
        )

    def list_all_vhost_limits(self) -> List[VirtualHostLimits]:
        return self._request(
            Call("GET", "vhost-limits", decoder=_list_of(VirtualHostLimits))
        )

    def list_vhost_limits(self, vhost: str) -> List[VirtualHostLimits]:
        return self._request(
            Call(
                "GET", path("vhost-limits", vhost), decoder=_list_of(VirtualHostLimits)
            )
        )

    # Federation

    def list_federation_upstreams(self) -> List[FederationUpstream]:
        """
        :raises IncompatibleError: if a stored upstream cannot be interpreted.
        """
        return self._request(
            Call(
                "GET",
                path("parameters", FEDERATION_UPSTREAM_COMPONENT),
                decoder=lambda body: [
                    FederationUpstream.try_from(p)
                    for p in _list_of(RuntimeParameter)(body)
                ],
            )
        )

    def get_federation_upstream(self, vhost: str, name: str) -> FederationUpstream:
        return self._request(
            Call(
                "GET",
                path("parameters", FEDERATION_UPSTREAM_COMPONENT, vhost, name),
                decoder=lambda body: FederationUpstream.try_from(
                    RuntimeParameter.model_validate(body)
                ),
            )
        )

    def declare_federation_upstream(self, params: FederationUpstreamParams):
        return self.upsert_runtime_parameter(params.to_runtime_parameter())

    def delete_federation_upstream(
        self, vhost: str, name: str, idempotently: bool = False
    ):
        return self._request(
            self._clear_runtime_parameter_call(
                FEDERATION_UPSTREAM_COMPONENT, vhost, name, idempotently
            )
        )

    def list_federation_links(self) -> List[FederationLink]:
        return self._request(
            Call("GET", "federation-links", decoder=_list_of(FederationLink))
        )

    # Shovels

    def list_shovels(self) -> List[Shovel]:
        return self._request(Call("GET", "shovels", decoder=_list_of(Shovel)))

    def list_shovels_in(self, vhost: str) -> List[Shovel]:
        return self._request(
            Call("GET", path("shovels", vhost), decoder=_list_of(Shovel))
        )

    def declare_amqp091_shovel(self, params: Amqp091ShovelParams):
        return self.upsert_runtime_parameter(params.to_runtime_parameter())

    def declare_amqp10_shovel(self, params: Amqp10ShovelParams):
        return self.upsert_runtime_parameter(params.to_runtime_parameter())

    def delete_shovel(self, vhost: str, name: str, idempotently: bool = False):
        return self._request(
            self._clear_runtime_parameter_call(
                SHOVEL_COMPONENT, vhost, name, idempotently
            )
        )

    # Definitions

    def export_cluster_wide_definitions(self) -> str:
        """The definitions document of the whole cluster, as JSON text."""
        return self._request(
            Call("GET", "definitions", decoder=_identity, raw_body=True)
        )

    def export_cluster_wide_definitions_as_data(self) -> ClusterDefinitionSet:
        return self._request(
            Call("GET", "definitions", decoder=ClusterDefinitionSet.model_validate)
        )

    def export_vhost_definitions(self, vhost: str) -> str:
        return self._request(
            Call("GET", path("definitions", vhost), decoder=_identity, raw_body=True)
        )

    def export_vhost_definitions_as_data(self, vhost: str) -> VirtualHostDefinitionSet:
        return self._request(
            Call(
                "GET",
                path("definitions", vhost),
                decoder=VirtualHostDefinitionSet.model_validate,
            )
        )

    def import_cluster_wide_definitions(self, definitions: Dict[str, Any]):
        return self._request(Call("POST", "definitions", json=definitions))

    def import_vhost_definitions(self, vhost: str, definitions: Dict[str, Any]):
        return self._request(Call("POST", path("definitions", vhost), json=definitions))

    # Health checks

    def _health_check_call(self, check_path: str, details: Decoder) -> Call:
        return Call("GET", check_path, failure_details=details)

    def health_check_cluster_wide_alarms(self):
        """:raises HealthCheckFailed: if any node in the cluster has an alarm in effect."""
        return self._request(
            self._health_check_call(
                _HEALTH_CHECK_ALARMS, ClusterAlarmCheckDetails.model_validate
            )
        )

    def health_check_local_alarms(self):
        return self._request(
            self._health_check_call(
                _HEALTH_CHECK_LOCAL_ALARMS, ClusterAlarmCheckDetails.model_validate
            )
        )

    def health_check_if_node_is_quorum_critical(self):
        return self._request(
            self._health_check_call(
                _HEALTH_CHECK_QUORUM_CRITICAL,
                QuorumCriticalityCheckDetails.model_validate,
            )
        )

    def health_check_port_listener(self, port: int):
        return self._request(
            self._health_check_call(
                path("health", "checks", "port-listener", port),
                NoActivePortListenerDetails.model_validate,
            )
        )

    def health_check_protocol_listener(self, protocol: Union[SupportedProtocol, str]):
        return self._request(
            self._health_check_call(
                path("health", "checks", "protocol-listener", str(protocol)),
                NoActiveProtocolListenerDetails.model_validate,
            )
        )

    def health_checks(
        self, port: int = DEFAULT_AMQP_PORT, protocol: str = "amqp"
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Run every health check.

        :return: A tuple of the successful checks and the failed checks, each
                 keyed by endpoint path. Failures map to their decoded details.
        """
        return self._perform(self._health_checks(port, protocol))

    def _health_checks(self, port: int, protocol: str) -> Plan:
        checks = [
            (_HEALTH_CHECK_ALARMS, ClusterAlarmCheckDetails.model_validate),
            (_HEALTH_CHECK_LOCAL_ALARMS, ClusterAlarmCheckDetails.model_validate),
            (
                _HEALTH_CHECK_QUORUM_CRITICAL,
                QuorumCriticalityCheckDetails.model_validate,
            ),
            (
                path("health", "checks", "port-listener", port),
                NoActivePortListenerDetails.model_validate,
            ),
            (
                path("health", "checks", "protocol-listener", protocol),
                NoActiveProtocolListenerDetails.model_validate,
            ),
        ]
        success: Dict[str, Any] = {}
        failure: Dict[str, Any] = {}
        for check_path, details in checks:
            call = self._health_check_call(check_path, details)
            call.decoder = _identity
            call.optional_body = True
            try:
                success[check_path] = yield call
            except HealthCheckFailed as e:
                failure[check_path] = e.details
        return success, failure

    # Feature flags and deprecations

    def _list_feature_flags_call(self) -> Call:
        return Call("GET", "feature-flags", decoder=_list_of(FeatureFlag))

    def _enable_feature_flag_call(self, name: str) -> Call:
        return Call("PUT", path("feature-flags", name, "enable"), json={"name": name})

    def list_feature_flags(self) -> List[FeatureFlag]:
        return self._request(self._list_feature_flags_call())

    def enable_feature_flag(self, name: str):
        return self._request(self._enable_feature_flag_call(name))

    def enable_all_stable_feature_flags(self):
        """Enable, in listing order, every stable feature flag that is disabled."""
        return self._perform(self._enable_all_stable_feature_flags())

    def _enable_all_stable_feature_flags(self) -> Plan:
        flags = yield self._list_feature_flags_call()
        for flag in flags:
            if (
                flag.stability == FeatureFlagStability.stable
                and flag.state == FeatureFlagState.disabled
            ):
                yield self._enable_feature_flag_call(flag.name)

    def list_all_deprecated_features(self) -> List[DeprecatedFeature]:
        return self._request(
            Call("GET", "deprecated-features", decoder=_list_of(DeprecatedFeature))
        )

    def list_deprecated_features_in_use(self) -> List[DeprecatedFeature]:
        return self._request(
            Call("GET", "deprecated-features/used", decoder=_list_of(DeprecatedFeature))
        )

    # Messages

    def publish_message(
        self,
        vhost: str,
        exchange: str,
        routing_key: str,
        payload: str,
        properties: Optional[MessageProperties] = None,
    ) -> MessageRouted:
        """Publish a message through the API. Meant for diagnostics only."""
        body = {
            "routing_key": routing_key,
            "payload": payload,
            "payload_encoding": "string",
            "properties": properties.body() if properties else {},
        }
        return self._request(
            Call(
                "POST",
                path("exchanges", vhost, exchange, "publish"),
                json=body,
                decoder=MessageRouted.model_validate,
            )
        )

    def get_messages(
        self, vhost: str, queue: str, count: int, ack_mode: str = "ack_requeue_true"
    ) -> List[GetMessage]:
        """
        Fetch up to ``count`` messages. ``ack_mode`` is one of ack_requeue_true,
        ack_requeue_false, reject_requeue_true and reject_requeue_false.
        """
        body = {"count": count, "ackmode": ack_mode, "encoding": "auto"}
        return self._request(
            Call(
                "POST",
                path("queues", vhost, queue, "get"),
                json=body,
                decoder=_list_of(GetMessage),
            )
        )

    # Schema definition sync

    def schema_definition_sync_status(
        self, node: Optional[str] = None
    ) -> SchemaDefinitionSyncStatus:
        segments = ["tanzu", "osr", "schema", "status"]
        if node is not None:
            segments.append(node)
        return self._request(
            Call(
                "GET",
                path(*segments),
                decoder=SchemaDefinitionSyncStatus.model_validate,
            )
        )

    def enable_schema_definition_sync(self, node: Optional[str] = None):
        segments = ["definitions", "sync", "enable"]
        if node is not None:
            segments.append(node)
        return self._request(Call("POST", path(*segments)))

    def disable_schema_definition_sync(self, node: Optional[str] = None):
        segments = ["definitions", "sync", "disable"]
        if node is not None:
            segments.append(node)
        return self._request(Call("POST", path(*segments)))

    # Authentication

    def oauth_configuration(self) -> OAuthConfiguration:
        return self._request(
            Call("GET", "auth", decoder=OAuthConfiguration.model_validate)
        )

    def auth_attempts_statistics(
        self, node: str
    ) -> List[AuthenticationAttemptStatistics]:
        return self._request(
            Call(
                "GET",
                path("auth", "attempts", node),
                decoder=_list_of(AuthenticationAttemptStatistics),
            )
        )
