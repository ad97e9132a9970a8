from rabbitmq_http.commons import ExchangeType, PolicyTarget
from rabbitmq_http.models import (
    EnforcedLimitParams,
    ExchangeParams,
    PolicyParams,
    QueueParams,
    UserParams,
)


def test_queue_type_argument_follows_queue_type():
    params = QueueParams.quorum_queue("orders", {"x-queue-type": "classic"})
    assert params.body() == {
        "durable": True,
        "auto_delete": False,
        "exclusive": False,
        "arguments": {"x-queue-type": "quorum"},
    }


def test_queue_params_builders():
    params = (
        QueueParams.durable_classic_queue("orders")
        .with_message_ttl(60000)
        .with_max_length(10)
        .with_dead_letter_exchange("dlx")
    )
    assert params.body()["arguments"] == {
        "x-queue-type": "classic",
        "x-message-ttl": 60000,
        "x-max-length": 10,
        "x-dead-letter-exchange": "dlx",
    }


def test_transient_autodelete_queue():
    body = QueueParams.transient_autodelete("tmp").body()
    assert body["durable"] is False
    assert body["auto_delete"] is True


def test_exchange_body():
    params = ExchangeParams.durable_topic("events")
    assert params.type is ExchangeType.topic
    assert params.body() == {
        "type": "topic",
        "durable": True,
        "auto_delete": False,
        "internal": False,
    }


def test_user_tags_are_comma_separated():
    params = UserParams(name="alice", password_hash="", tags=["management", "monitoring"])
    assert params.body() == {"password_hash": "", "tags": "management,monitoring"}


def test_policy_body_uses_hyphenated_apply_to():
    params = PolicyParams(
        vhost="/",
        name="ttl",
        pattern="^orders",
        apply_to=PolicyTarget.quorum_queues,
        definition={"message-ttl": 1000},
    )
    assert params.body() == {
        "pattern": "^orders",
        "apply-to": "quorum_queues",
        "priority": 0,
        "definition": {"message-ttl": 1000},
    }


def test_limit_body():
    assert EnforcedLimitParams(kind="max-connections", value=10).body() == {"value": 10}
