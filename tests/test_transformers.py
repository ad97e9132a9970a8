import pytest

from rabbitmq_http.commons import QueueType
from rabbitmq_http.errors import InvalidArgument
from rabbitmq_http.models import ClusterDefinitionSet
from rabbitmq_http.transformers import StripCmqPolicies, TransformationChain


@pytest.fixture
def definitions():
    return ClusterDefinitionSet.model_validate(
        {
            "rabbitmq_version": "3.13.7",
            "policies": [
                {
                    "name": "mirror-orders",
                    "vhost": "/",
                    "pattern": "^orders\\.",
                    "apply-to": "queues",
                    "priority": 1,
                    "definition": {"ha-mode": "all", "max-length": 1000},
                },
                {
                    "name": "limit-logs",
                    "vhost": "/",
                    "pattern": "^logs$",
                    "apply-to": "queues",
                    "definition": {"max-length": 10},
                },
            ],
            "queues": [
                {"name": "orders.eu", "vhost": "/", "arguments": {}},
                {
                    "name": "orders.us",
                    "vhost": "/",
                    "arguments": {"x-queue-type": "classic"},
                },
                {"name": "orders.ap", "vhost": "other", "arguments": {}},
                {"name": "logs", "vhost": "/", "arguments": {}},
            ],
        }
    )


def test_strip_cmq_policies(definitions):
    result = StripCmqPolicies().transform(definitions)

    assert result is definitions
    assert not any(p.has_cmq_keys() for p in result.policies)
    assert result.find_policy("/", "mirror-orders").definition.get("max-length") == 1000
    assert result.find_queue("/", "orders.eu").queue_type == QueueType.quorum
    assert result.find_queue("/", "orders.us").queue_type == QueueType.quorum
    assert result.find_queue("/", "orders.eu").arguments == {"x-queue-type": "quorum"}
    # the policy is scoped to "/" and "logs" was only matched by a plain policy
    assert result.find_queue("other", "orders.ap").queue_type == QueueType.classic
    assert result.find_queue("/", "logs").queue_type == QueueType.classic


def test_transformation_chain_from_names(definitions):
    chain = TransformationChain.from_names(["strip_cmq_policies"])
    assert len(chain) == 1
    result = chain.apply(definitions)
    assert result.find_queue("/", "orders.eu").queue_type == QueueType.quorum


def test_empty_transformation_chain_leaves_definitions_alone(definitions):
    result = TransformationChain().apply(definitions)
    assert result.find_policy("/", "mirror-orders").has_cmq_keys()


def test_unknown_transformer_name():
    with pytest.raises(InvalidArgument, match="strip_cmq_policies"):
        TransformationChain.from_names(["strip_everything"])
