"""
Rewrites applied to exported cluster definitions before they are imported
elsewhere.

Transformers are looked up by name so that a list of names taken from a
command line or a configuration file can be turned into a chain:

>>> chain = TransformationChain.from_names(["strip_cmq_policies"])
>>> definitions = chain.apply(api.export_cluster_wide_definitions_as_data())
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Type

from rabbitmq_http.commons import QueueType
from rabbitmq_http.errors import InvalidArgument
from rabbitmq_http.models.definitions import ClusterDefinitionSet


class DefinitionSetTransformer:
    name: str

    def transform(self, definitions: ClusterDefinitionSet) -> ClusterDefinitionSet:
        raise NotImplementedError()


class StripCmqPolicies(DefinitionSetTransformer):
    """
    Remove classic mirrored queue keys from every policy and turn the classic
    queues those policies applied to into quorum queues.
    """

    name = "strip_cmq_policies"

    def transform(self, definitions: ClusterDefinitionSet) -> ClusterDefinitionSet:
        mirroring = [p for p in definitions.policies if p.has_cmq_keys()]
        definitions.update_policies(lambda p: p.without_cmq_keys())
        for policy in mirroring:
            definitions.update_queue_type_of_matching(policy, QueueType.quorum)
        return definitions


TRANSFORMERS: Dict[str, Type[DefinitionSetTransformer]] = {
    transformer.name: transformer for transformer in (StripCmqPolicies,)
}


class TransformationChain:
    def __init__(self, transformers: Iterable[DefinitionSetTransformer] = ()):
        self.transformers: List[DefinitionSetTransformer] = list(transformers)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> TransformationChain:
        transformers = []
        for name in names:
            if name not in TRANSFORMERS:
                raise InvalidArgument(
                    f"Unknown definitions transformer {name!r}, "
                    f"expected one of {', '.join(sorted(TRANSFORMERS))}"
                )
            transformers.append(TRANSFORMERS[name]())
        return cls(transformers)

    def __len__(self) -> int:
        return len(self.transformers)

    def apply(self, definitions: ClusterDefinitionSet) -> ClusterDefinitionSet:
        """Run every transformer in order, modifying the definitions in place."""
        for transformer in self.transformers:
            definitions = transformer.transform(definitions)
        return definitions
