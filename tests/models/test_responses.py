import pytest

from rabbitmq_http.models import (
    Connection,
    Consumer,
    DeprecatedFeature,
    FeatureFlag,
    PluginList,
    QueueInfo,
    RuntimeParameter,
    Shovel,
    TagList,
)


@pytest.mark.parametrize(
    "plugins",
    [
        [],
        ["rabbitmq_management"],
        ["rabbitmq_shovel", "rabbitmq_federation", "rabbitmq_shovel", "rabbitmq_amqp1_0"],
    ],
)
def test_plugin_list_is_sorted_and_unique(plugins):
    plugin_list = PluginList.model_validate(plugins)
    assert list(plugin_list) == sorted(set(plugins))
    assert len(plugin_list) == len(set(plugins))


@pytest.mark.parametrize(
    "tags, http_api, administrator, monitoring",
    [
        ([], False, False, False),
        (["management"], True, False, False),
        (["policymaker"], True, False, False),
        (["monitoring"], True, False, True),
        (["administrator"], True, True, True),
        (["impersonator"], False, False, False),
    ],
)
def test_tag_list_authorization(tags, http_api, administrator, monitoring):
    tag_list = TagList.model_validate(tags)
    assert tag_list.can_access_http_api() is http_api
    assert tag_list.is_administrator() is administrator
    assert tag_list.can_access_monitoring_endpoints() is monitoring


def test_tag_list_accepts_comma_separated_tags():
    tag_list = TagList.model_validate("administrator, management")
    assert list(tag_list) == ["administrator", "management"]
    assert "management" in tag_list
    assert list(TagList.model_validate(None)) == []


def test_stream_connection_with_empty_client_properties():
    connection = Connection.model_validate(
        {"name": "stream-conn", "user": "guest", "client_properties": []}
    )
    assert connection.channels == 0


def test_consumer_with_empty_channel_details():
    consumer = Consumer.model_validate(
        {
            "consumer_tag": "amq.ctag-1",
            "ack_required": True,
            "queue": {"name": "orders", "vhost": "/"},
            "channel_details": [],
        }
    )
    assert consumer.channel_details is None


def test_queue_info_keeps_unknown_fields():
    queue = QueueInfo.model_validate(
        {"name": "orders", "vhost": "/", "type": "quorum", "delivery_limit": 20}
    )
    assert queue.queue_type.name == "quorum"
    assert queue.delivery_limit == 20


def test_runtime_parameter_without_value():
    parameter = RuntimeParameter.model_validate(
        {"name": "p", "vhost": "/", "component": "c", "value": []}
    )
    assert parameter.value == {}


def test_feature_flag_with_unknown_state():
    flag = FeatureFlag.model_validate(
        {"name": "khepri_db", "state": "Enabled", "stability": "beta"}
    )
    assert flag.is_enabled
    assert not flag.stability.is_known
    assert flag.stability.value == "beta"


def test_deprecated_feature_phase():
    feature = DeprecatedFeature.model_validate(
        {"name": "transient_nonexcl_queues", "deprecation_phase": "permitted_by_default"}
    )
    assert feature.deprecation_phase.name == "permitted_by_default"
    unknown = DeprecatedFeature.model_validate(
        {"name": "future", "deprecation_phase": "frozen"}
    )
    assert unknown.deprecation_phase.name == "undefined"


def test_static_shovel_without_protocol():
    shovel = Shovel.model_validate(
        {
            "node": "rabbit@warren",
            "name": "static",
            "type": "static",
            "state": "running",
            "src_protocol": "",
        }
    )
    assert shovel.vhost is None
    assert shovel.src_protocol is None
