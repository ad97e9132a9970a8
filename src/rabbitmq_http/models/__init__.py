from rabbitmq_http.models.cluster import (
    ClusterNode,
    NodeMemoryBreakdown,
    NodeMemoryFootprint,
    NodeMemoryTotals,
    Overview,
)
from rabbitmq_http.models.definitions import (
    BindingDefinition,
    ClusterDefinitionSet,
    ExchangeDefinition,
    Policy,
    PolicyDefinition,
    QueueDefinition,
    VirtualHostDefinitionSet,
)
from rabbitmq_http.models.federation import (
    ExchangeFederationParams,
    FederationLink,
    FederationUpstream,
    FederationUpstreamParams,
    QueueFederationParams,
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
    TagList,
    TopicPermission,
    User,
    UserConnection,
    UserLimits,
    VirtualHost,
    VirtualHostLimits,
)
from rabbitmq_http.models.shovels import (
    Amqp10ShovelParams,
    Amqp091ShovelDestinationParams,
    Amqp091ShovelParams,
    Amqp091ShovelSourceParams,
    Shovel,
)

__all__ = [
    "Amqp091ShovelDestinationParams",
    "Amqp091ShovelParams",
    "Amqp091ShovelSourceParams",
    "Amqp10ShovelParams",
    "AuthenticationAttemptStatistics",
    "BindingDefinition",
    "BindingDeletionParams",
    "BindingInfo",
    "BulkUserDelete",
    "Channel",
    "ClusterAlarmCheckDetails",
    "ClusterDefinitionSet",
    "ClusterIdentity",
    "ClusterNode",
    "ClusterTags",
    "Connection",
    "Consumer",
    "CurrentUser",
    "DeprecatedFeature",
    "EnforcedLimitParams",
    "ExchangeDefinition",
    "ExchangeFederationParams",
    "ExchangeInfo",
    "ExchangeParams",
    "FeatureFlag",
    "FederationLink",
    "FederationUpstream",
    "FederationUpstreamParams",
    "GetMessage",
    "GlobalRuntimeParameter",
    "GlobalRuntimeParameterDefinition",
    "MessageProperties",
    "MessageRouted",
    "NoActivePortListenerDetails",
    "NoActiveProtocolListenerDetails",
    "NodeMemoryBreakdown",
    "NodeMemoryFootprint",
    "NodeMemoryTotals",
    "OAuthConfiguration",
    "Overview",
    "PermissionParams",
    "Permissions",
    "PluginList",
    "Policy",
    "PolicyDefinition",
    "PolicyParams",
    "ProbeOutcome",
    "QueueDefinition",
    "QueueFederationParams",
    "QueueInfo",
    "QueueParams",
    "QuorumCriticalityCheckDetails",
    "RuntimeParameter",
    "RuntimeParameterDefinition",
    "SchemaDefinitionSyncStatus",
    "Shovel",
    "StreamConsumer",
    "StreamParams",
    "StreamPublisher",
    "TagList",
    "TopicPermission",
    "TopicPermissionParams",
    "User",
    "UserConnection",
    "UserLimits",
    "UserParams",
    "VirtualHost",
    "VirtualHostDefinitionSet",
    "VirtualHostLimits",
    "VirtualHostParams",
]
