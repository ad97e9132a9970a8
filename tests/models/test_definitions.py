import pytest

from rabbitmq_http.commons import PolicyTarget, QueueType
from rabbitmq_http.models import ClusterDefinitionSet, Policy, QueueDefinition


@pytest.mark.parametrize(
    "definition, cmq",
    [
        (None, False),
        ({}, False),
        ({"max-length": 100}, False),
        ({"ha-mode": "all"}, True),
        ({"ha-params": 2, "max-length": 100}, True),
        ({"ha-sync-batch-size": 10}, True),
        ({"ha-promote-on-failure": "always"}, True),
    ],
)
def test_policy_cmq_detection(definition, cmq):
    policy = Policy.model_validate(
        {"name": "p", "vhost": "/", "pattern": ".*", "definition": definition}
    )
    assert policy.has_cmq_keys() is cmq


def test_policy_without_cmq_keys():
    policy = Policy.model_validate(
        {
            "name": "p",
            "vhost": "/",
            "pattern": ".*",
            "apply-to": "queues",
            "definition": {"ha-mode": "all", "max-length": 100},
        }
    )
    stripped = policy.without_cmq_keys()
    assert not stripped.has_cmq_keys()
    assert stripped.definition.get("max-length") == 100
    assert policy.has_cmq_keys()


def test_policy_name_matching():
    policy = Policy.model_validate(
        {"name": "p", "vhost": "/", "pattern": "^orders\\.", "apply-to": "queues"}
    )
    assert policy.does_match_name("/", "orders.eu", PolicyTarget.quorum_queues)
    assert not policy.does_match_name("/", "orders.eu", PolicyTarget.exchanges)
    assert not policy.does_match_name("other", "orders.eu", PolicyTarget.queues)
    broken = policy.model_copy(update={"pattern": "(unclosed"})
    assert not broken.does_match_name("/", "orders.eu", PolicyTarget.queues)


def test_queue_definition_without_quorum_queue_incompatible_keys():
    queue = QueueDefinition(
        name="orders",
        vhost="/",
        arguments={
            "x-queue-mode": "lazy",
            "x-max-priority": 10,
            "x-queue-master-locator": "min-masters",
            "x-ha-policy": "all",
            "x-overflow": "reject-publish-dlx",
            "x-max-length": 1000,
        },
    )
    assert queue.has_quorum_queue_incompatible_keys()
    stripped = queue.without_quorum_queue_incompatible_keys()
    assert stripped.arguments == {"x-max-length": 1000}
    assert not stripped.has_quorum_queue_incompatible_keys()
    converted = stripped.with_queue_type(QueueType.quorum)
    assert converted.policy_target is PolicyTarget.quorum_queues


def test_other_overflow_behaviours_are_kept():
    queue = QueueDefinition(name="q", arguments={"x-overflow": "reject-publish"})
    assert queue.without_quorum_queue_incompatible_keys().arguments == {
        "x-overflow": "reject-publish"
    }


def test_cluster_definitions():
    definitions = ClusterDefinitionSet.model_validate(
        {
            "rabbitmq_version": "4.0.5",
            "vhosts": [{"name": "/"}],
            "queues": [
                {"name": "orders", "vhost": "/", "arguments": {"x-queue-type": "quorum"}},
                {"name": "invoices", "vhost": "/", "arguments": {}},
            ],
            "policies": [
                {"name": "qq", "vhost": "/", "pattern": "^ord", "apply-to": "quorum_queues", "definition": {}}
            ],
        }
    )
    assert definitions.server_version == "4.0.5"
    assert definitions.find_queue("/", "invoices").queue_type is QueueType.classic
    policy = definitions.find_policy("/", "qq")
    assert [q.name for q in definitions.queues_matching(policy)] == ["orders"]
    assert definitions.find_exchange("/", "missing") is None


def test_update_queue_type_of_matching():
    definitions = ClusterDefinitionSet.model_validate(
        {
            "queues": [
                {"name": "orders.eu", "vhost": "/", "arguments": {}},
                {"name": "invoices", "vhost": "/", "arguments": {"x-max-length": 5}},
            ],
            "policies": [
                {"name": "p", "vhost": "/", "pattern": "^orders", "apply-to": "queues"}
            ],
        }
    )
    updated = definitions.update_queue_type_of_matching(
        definitions.find_policy("/", "p"), QueueType.quorum
    )
    assert [q.name for q in updated] == ["orders.eu"]
    assert definitions.find_queue("/", "orders.eu").queue_type is QueueType.quorum
    assert definitions.find_queue("/", "invoices").arguments == {"x-max-length": 5}


def test_update_policies():
    definitions = ClusterDefinitionSet.model_validate(
        {
            "policies": [
                {
                    "name": "p",
                    "vhost": "/",
                    "pattern": ".*",
                    "definition": {"ha-mode": "all", "max-length": 1},
                }
            ]
        }
    )
    policies = definitions.update_policies(lambda p: p.without_cmq_keys())
    assert not policies[0].has_cmq_keys()
    assert not definitions.find_policy("/", "p").has_cmq_keys()
