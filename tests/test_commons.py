import pytest

from rabbitmq_http.commons import (
    ExchangeType,
    MessageTransferAcknowledgementMode,
    PolicyTarget,
    QueueType,
)


@pytest.mark.parametrize("target", list(PolicyTarget))
def test_policy_targets_apply_to_themselves_and_to_all(target):
    assert target.does_apply_to(target)
    assert PolicyTarget.all.does_apply_to(target)
    assert target.does_apply_to(PolicyTarget.all)


def test_queues_target_covers_every_queue_type():
    for target in (
        PolicyTarget.queues,
        PolicyTarget.classic_queues,
        PolicyTarget.quorum_queues,
        PolicyTarget.streams,
    ):
        assert PolicyTarget.queues.does_apply_to(target)
    assert not PolicyTarget.queues.does_apply_to(PolicyTarget.exchanges)
    assert not PolicyTarget.streams.does_apply_to(PolicyTarget.quorum_queues)
    assert not PolicyTarget.exchanges.does_apply_to(PolicyTarget.classic_queues)


@pytest.mark.parametrize(
    "queue_type, target",
    [
        (QueueType.classic, PolicyTarget.classic_queues),
        (QueueType.quorum, PolicyTarget.quorum_queues),
        (QueueType.stream, PolicyTarget.streams),
        (QueueType.delayed, PolicyTarget.queues),
        ("x-custom", PolicyTarget.queues),
    ],
)
def test_policy_target_from_queue_type(queue_type, target):
    assert PolicyTarget.from_queue_type(queue_type) is target


@pytest.mark.parametrize("name", ["classic", "quorum", "stream", "delayed"])
def test_queue_type_round_trip(name):
    assert str(QueueType(name)) == name
    assert QueueType(name.upper()) is QueueType(name)


def test_unknown_queue_type_is_preserved():
    queue_type = QueueType("Exotic")
    assert not queue_type.is_known
    assert queue_type.name == "unsupported"
    assert queue_type.value == "Exotic"


def test_plugin_exchange_types():
    assert ExchangeType("x-consistent-hash") is ExchangeType.consistent_hashing
    assert ExchangeType("x-custom").name == "plugin"


@pytest.mark.parametrize(
    "mode, wire",
    [
        (MessageTransferAcknowledgementMode.immediate, "no-ack"),
        (MessageTransferAcknowledgementMode.when_published, "on-publish"),
        (MessageTransferAcknowledgementMode.when_confirmed, "on-confirm"),
    ],
)
def test_acknowledgement_mode_round_trip(mode, wire):
    assert str(mode) == wire
    assert MessageTransferAcknowledgementMode(wire) is mode
