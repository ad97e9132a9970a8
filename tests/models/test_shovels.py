import pytest

from rabbitmq_http.errors import InvalidArgument
from rabbitmq_http.models import (
    Amqp10ShovelParams,
    Amqp091ShovelDestinationParams,
    Amqp091ShovelParams,
    Amqp091ShovelSourceParams,
)


def test_amqp091_queue_to_exchange_shovel():
    params = Amqp091ShovelParams(
        name="s1",
        vhost="/",
        source=Amqp091ShovelSourceParams.queue_source("amqp://a", "orders", predeclared=True),
        destination=Amqp091ShovelDestinationParams.exchange_destination(
            "amqp://b", "orders.archive", routing_key="archived"
        ),
    )
    parameter = params.to_runtime_parameter()
    assert parameter.component == "shovel"
    assert parameter.value == {
        "src-protocol": "amqp091",
        "dest-protocol": "amqp091",
        "src-uri": "amqp://a",
        "dest-uri": "amqp://b",
        "ack-mode": "on-confirm",
        "src-queue": "orders",
        "dest-exchange": "orders.archive",
        "dest-exchange-key": "archived",
        "src-predeclared": True,
    }


def test_amqp091_shovel_needs_a_source():
    params = Amqp091ShovelParams(
        name="s1",
        vhost="/",
        source=Amqp091ShovelSourceParams(source_uri="amqp://a"),
        destination=Amqp091ShovelDestinationParams.queue_destination("amqp://b", "q"),
    )
    with pytest.raises(InvalidArgument):
        params.value()


def test_amqp10_shovel():
    params = Amqp10ShovelParams(
        name="s2",
        vhost="/",
        reconnect_delay=10,
        source_uri="amqp://a",
        source_address="/queues/orders",
        destination_uri="amqp://b",
        destination_address="/queues/archive",
    )
    value = params.value()
    assert value["src-protocol"] == value["dest-protocol"] == "amqp10"
    assert value["src-address"] == "/queues/orders"
    assert value["reconnect-delay"] == 10
