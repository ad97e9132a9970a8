"""
Policies and the objects found in exported definition documents.

Includes the helpers used to prepare definitions of classic mirrored queues
for import as quorum queues.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rabbitmq_http.commons import (
    X_ARGUMENT_KEY_X_OVERFLOW,
    X_ARGUMENT_KEY_X_QUEUE_TYPE,
    OverflowBehavior,
    PolicyTarget,
    QueueType,
)
from rabbitmq_http.models.responses import (
    Permissions,
    RuntimeParameter,
    User,
    VirtualHost,
    VirtualHostMetadata,
)

CMQ_POLICY_KEYS = (
    "ha-mode",
    "ha-params",
    "ha-promote-on-shutdown",
    "ha-promote-on-failure",
    "ha-sync-mode",
    "ha-sync-batch-size",
)
QUORUM_QUEUE_INCOMPATIBLE_POLICY_KEYS = CMQ_POLICY_KEYS + ("queue-mode",)

CMQ_ARGUMENT_KEYS = tuple(f"x-{key}" for key in CMQ_POLICY_KEYS)
QUORUM_QUEUE_INCOMPATIBLE_ARGUMENT_KEYS = CMQ_ARGUMENT_KEYS + (
    "x-queue-mode",
    "x-max-priority",
    "x-queue-master-locator",
)


def _has_any_key(mapping: Optional[Dict[str, Any]], keys: Iterable[str]) -> bool:
    if not mapping:
        return False
    return any(key in mapping for key in keys)


def _without_keys(mapping: Optional[Dict[str, Any]], keys: Iterable[str]):
    if mapping is None:
        return None
    keys = set(keys)
    return {k: v for k, v in mapping.items() if k not in keys}


class PolicyDefinition(BaseModel):
    """The key/value map of a policy. The broker may report it as null."""

    model_config = ConfigDict(frozen=True)

    entries: Optional[Dict[str, Any]] = None

    def __len__(self) -> int:
        return len(self.entries or {})

    def __contains__(self, key: object) -> bool:
        return bool(self.entries) and key in self.entries

    def get(self, key: str, default: Any = None) -> Any:
        return (self.entries or {}).get(key, default)

    def has_cmq_keys(self) -> bool:
        return _has_any_key(self.entries, CMQ_POLICY_KEYS)

    def has_quorum_queue_incompatible_keys(self) -> bool:
        return _has_any_key(self.entries, QUORUM_QUEUE_INCOMPATIBLE_POLICY_KEYS)

    def without_cmq_keys(self) -> PolicyDefinition:
        return PolicyDefinition(entries=_without_keys(self.entries, CMQ_POLICY_KEYS))

    def without_quorum_queue_incompatible_keys(self) -> PolicyDefinition:
        return PolicyDefinition(
            entries=_without_keys(self.entries, QUORUM_QUEUE_INCOMPATIBLE_POLICY_KEYS)
        )


class Policy(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    vhost: Optional[str] = Field(
        None, description="Absent in virtual host definition documents."
    )
    pattern: str
    apply_to: PolicyTarget = Field(PolicyTarget.all, alias="apply-to")
    priority: int = 0
    definition: PolicyDefinition = Field(default_factory=PolicyDefinition)

    @field_validator("definition", mode="before")
    @classmethod
    def _wrap_definition(cls, value):
        if isinstance(value, PolicyDefinition):
            return value
        return {"entries": value}

    def has_cmq_keys(self) -> bool:
        return self.definition.has_cmq_keys()

    def has_quorum_queue_incompatible_keys(self) -> bool:
        return self.definition.has_quorum_queue_incompatible_keys()

    def without_cmq_keys(self) -> Policy:
        return self.model_copy(update={"definition": self.definition.without_cmq_keys()})

    def does_match_name(self, vhost: str, name: str, target: PolicyTarget) -> bool:
        """
        Whether this policy would apply to the object called ``name`` of type
        ``target`` in ``vhost``. A pattern that is not a valid regular
        expression matches nothing.
        """
        if self.vhost != vhost or not self.apply_to.does_apply_to(target):
            return False
        try:
            return re.search(self.pattern, name) is not None
        except re.error:
            return False


class QueueDefinition(BaseModel):
    """A queue as found in a definitions document."""

    name: str
    vhost: Optional[str] = None
    durable: bool = True
    auto_delete: bool = False
    arguments: Dict[str, Any] = Field(default_factory=dict)

    @property
    def queue_type(self) -> QueueType:
        value = self.arguments.get(X_ARGUMENT_KEY_X_QUEUE_TYPE)
        if not isinstance(value, str):
            return QueueType.classic
        return QueueType(value)

    @property
    def policy_target(self) -> PolicyTarget:
        return PolicyTarget.from_queue_type(self.queue_type)

    def has_cmq_keys(self) -> bool:
        return _has_any_key(self.arguments, CMQ_ARGUMENT_KEYS)

    def has_quorum_queue_incompatible_keys(self) -> bool:
        if self.arguments.get(X_ARGUMENT_KEY_X_OVERFLOW) == (
            OverflowBehavior.reject_publish_dlx.value
        ):
            return True
        return any(
            key in QUORUM_QUEUE_INCOMPATIBLE_ARGUMENT_KEYS or _is_ha_argument(key)
            for key in self.arguments
        )

    def without_cmq_keys(self) -> QueueDefinition:
        return self.model_copy(
            update={"arguments": _without_keys(self.arguments, CMQ_ARGUMENT_KEYS)}
        )

    def without_quorum_queue_incompatible_keys(self) -> QueueDefinition:
        arguments = {
            key: value
            for key, value in self.arguments.items()
            if key not in QUORUM_QUEUE_INCOMPATIBLE_ARGUMENT_KEYS
            and not _is_ha_argument(key)
        }
        if arguments.get(X_ARGUMENT_KEY_X_OVERFLOW) == (
            OverflowBehavior.reject_publish_dlx.value
        ):
            del arguments[X_ARGUMENT_KEY_X_OVERFLOW]
        return self.model_copy(update={"arguments": arguments})

    def with_queue_type(self, queue_type: QueueType) -> QueueDefinition:
        return self.model_copy(
            update={
                "arguments": {
                    **self.arguments,
                    X_ARGUMENT_KEY_X_QUEUE_TYPE: QueueType(queue_type).value,
                }
            }
        )


def _is_ha_argument(key: str) -> bool:
    return key.startswith("x-ha-") or key.startswith("ha-")


class ExchangeDefinition(BaseModel):
    name: str
    vhost: Optional[str] = None
    type: str
    durable: bool = True
    auto_delete: bool = False
    internal: bool = False
    arguments: Dict[str, Any] = Field(default_factory=dict)


class BindingDefinition(BaseModel):
    source: str
    vhost: Optional[str] = None
    destination: str
    destination_type: str
    routing_key: str = ""
    arguments: Dict[str, Any] = Field(default_factory=dict)


class VirtualHostRuntimeParameter(BaseModel):
    name: str
    component: str
    value: Any = None


class ClusterDefinitionSet(BaseModel):
    """Definitions of an entire cluster, as exported by GET /api/definitions."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    server_version: Optional[str] = Field(None, alias="rabbitmq_version")
    users: List[User] = Field(default_factory=list)
    virtual_hosts: List[VirtualHost] = Field(default_factory=list, alias="vhosts")
    permissions: List[Permissions] = Field(default_factory=list)
    parameters: List[RuntimeParameter] = Field(default_factory=list)
    policies: List[Policy] = Field(default_factory=list)
    queues: List[QueueDefinition] = Field(default_factory=list)
    exchanges: List[ExchangeDefinition] = Field(default_factory=list)
    bindings: List[BindingDefinition] = Field(default_factory=list)

    def find_policy(self, vhost: str, name: str) -> Optional[Policy]:
        return next(
            (p for p in self.policies if p.vhost == vhost and p.name == name), None
        )

    def find_queue(self, vhost: str, name: str) -> Optional[QueueDefinition]:
        return next(
            (q for q in self.queues if q.vhost == vhost and q.name == name), None
        )

    def find_exchange(self, vhost: str, name: str) -> Optional[ExchangeDefinition]:
        return next(
            (x for x in self.exchanges if x.vhost == vhost and x.name == name), None
        )

    def queues_matching(self, policy: Policy) -> List[QueueDefinition]:
        return [
            q
            for q in self.queues
            if policy.does_match_name(q.vhost, q.name, q.policy_target)
        ]

    def update_policies(self, f: Callable[[Policy], Policy]) -> List[Policy]:
        self.policies = [f(p) for p in self.policies]
        return list(self.policies)

    def update_queues(
        self, f: Callable[[QueueDefinition], QueueDefinition]
    ) -> List[QueueDefinition]:
        self.queues = [f(q) for q in self.queues]
        return list(self.queues)

    def update_queue_type_of_matching(
        self, policy: Policy, queue_type: QueueType
    ) -> List[QueueDefinition]:
        """
        Set x-queue-type on every queue the policy applies to, returning the
        updated queue definitions.
        """
        queues, updated = [], []
        for q in self.queues:
            if policy.does_match_name(q.vhost, q.name, q.policy_target):
                q = q.with_queue_type(queue_type)
                updated.append(q)
            queues.append(q)
        self.queues = queues
        return updated


class VirtualHostDefinitionSet(BaseModel):
    """Definitions of a single virtual host. Objects carry no virtual host name."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    server_version: Optional[str] = Field(None, alias="rabbitmq_version")
    metadata: Optional[VirtualHostMetadata] = None
    parameters: List[VirtualHostRuntimeParameter] = Field(default_factory=list)
    policies: List[Policy] = Field(default_factory=list)
    queues: List[QueueDefinition] = Field(default_factory=list)
    exchanges: List[ExchangeDefinition] = Field(default_factory=list)
    bindings: List[BindingDefinition] = Field(default_factory=list)

    def find_policy(self, name: str) -> Optional[Policy]:
        return next((p for p in self.policies if p.name == name), None)

    def find_queue(self, name: str) -> Optional[QueueDefinition]:
        return next((q for q in self.queues if q.name == name), None)

    def find_exchange(self, name: str) -> Optional[ExchangeDefinition]:
        return next((x for x in self.exchanges if x.name == name), None)
