from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rabbitmq_http.models.responses import MessageStats, PluginList


class ChurnRates(BaseModel):
    connection_created: int = 0
    connection_closed: int = 0
    queue_declared: int = 0
    queue_created: int = 0
    queue_deleted: int = 0
    channel_created: int = 0
    channel_closed: int = 0


class QueueTotals(BaseModel):
    messages: int = 0
    messages_ready: int = 0
    messages_unacknowledged: int = 0


class ObjectTotals(BaseModel):
    connections: int = 0
    channels: int = 0
    queues: int = 0
    exchanges: int = 0
    consumers: int = 0


class Overview(BaseModel):
    """Cluster-wide summary returned by GET /api/overview."""

    model_config = ConfigDict(extra="allow")

    cluster_name: str
    node: str
    erlang_full_version: str = ""
    erlang_version: str = ""
    rabbitmq_version: str
    product_name: str = ""
    product_version: str = ""
    cluster_tags: Dict[str, Any] = Field(default_factory=dict)
    node_tags: Dict[str, Any] = Field(default_factory=dict)
    statistics_db_event_queue: int = 0
    churn_rates: Optional[ChurnRates] = None
    queue_totals: Optional[QueueTotals] = None
    object_totals: Optional[ObjectTotals] = None
    message_stats: Optional[MessageStats] = None

    @field_validator(
        "cluster_tags", "node_tags", "message_stats", "queue_totals", mode="before"
    )
    @classmethod
    def _empty_list_is_empty_object(cls, value, info):
        # empty Erlang maps and proplists both serialize as []
        if value == []:
            return None if info.field_name in ("message_stats", "queue_totals") else {}
        return value

    def has_jit_enabled(self) -> bool:
        return "[jit]" in self.erlang_full_version


class ClusterNode(BaseModel):
    name: str = Field(..., description="Erlang node name, such as rabbit@hostname.")
    uptime: int = Field(0, description="Node uptime in milliseconds.")
    run_queue: int = 0
    processors: int = 0
    os_pid: Union[int, str] = Field("", description="Operating system process id.")
    fd_total: int = 0
    proc_total: int = 0
    mem_limit: int = Field(0, description="Memory high watermark in bytes.")
    mem_alarm: bool = False
    disk_free_limit: int = 0
    disk_free_alarm: bool = False
    rates_mode: str = ""
    enabled_plugins: PluginList = Field(default_factory=lambda: PluginList([]))
    being_drained: bool = False
    running: Optional[bool] = None

    @property
    def has_memory_alarm_in_effect(self) -> bool:
        return self.mem_alarm

    @property
    def has_free_disk_space_alarm_in_effect(self) -> bool:
        return self.disk_free_alarm


class NodeMemoryTotals(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rss: int = 0
    allocated: int = 0
    used_by_runtime: int = Field(0, alias="erlang")

    def max(self) -> int:
        return max(self.rss, self.allocated, self.used_by_runtime)


class NodeMemoryBreakdown(BaseModel):
    """Memory use by category, in bytes."""

    model_config = ConfigDict(populate_by_name=True)

    connection_readers: int = 0
    connection_writers: int = 0
    connection_channels: int = 0
    connection_other: int = 0
    classic_queue_procs: int = Field(0, alias="queue_procs")
    quorum_queue_procs: int = 0
    stream_queue_procs: int = 0
    stream_queue_replica_reader_procs: int = 0
    stream_queue_coordinator_procs: int = 0
    plugins: int = 0
    metadata_store: int = 0
    other_procs: int = Field(0, alias="other_proc")
    metrics: int = 0
    management_db: int = Field(0, alias="mgmt_db")
    mnesia: int = 0
    quorum_queue_ets_tables: int = Field(0, alias="quorum_ets")
    metadata_store_ets_tables: int = Field(0, alias="metadata_store_ets")
    other_ets_tables: int = Field(0, alias="other_ets")
    binary_heap: int = Field(0, alias="binary")
    message_indices: int = Field(0, alias="msg_index")
    code: int = 0
    atom_table: int = Field(0, alias="atom")
    other_system: int = 0
    allocated_but_unused: int = Field(0, alias="allocated_unused")
    reserved_but_unallocated: int = Field(0, alias="reserved_unallocated")
    calculation_strategy: str = Field("", alias="strategy")
    total: NodeMemoryTotals = Field(default_factory=NodeMemoryTotals)

    def grand_total(self) -> int:
        return self.total.max()

    def _categories(self) -> Dict[str, int]:
        return {
            name: value
            for name, value in self
            if name not in ("calculation_strategy", "total")
        }

    def breakdown(self) -> List[tuple]:
        """
        Categories ordered from the largest to the smallest consumer, each as a
        (name, bytes, percentage of the grand total) triple.
        """
        grand_total = self.grand_total()
        result = []
        for name, value in self._categories().items():
            share = (value / grand_total * 100) if grand_total else 0.0
            result.append((name, value, share))
        return sorted(result, key=lambda item: item[1], reverse=True)

    def percentage_as_text(self, category: str) -> str:
        value = self._categories()[category]
        grand_total = self.grand_total()
        share = (value / grand_total * 100) if grand_total else 0.0
        return f"{share:.2f}%"

    def metadata_store_percentage_as_text(self) -> str:
        return self.percentage_as_text("metadata_store")

    def code_percentage_as_text(self) -> str:
        return self.percentage_as_text("code")


class NodeMemoryFootprint(BaseModel):
    """
    Memory footprint of a node.

    The breakdown is None when the node reports it as not available, for
    example while it is still booting.
    """

    breakdown: Optional[NodeMemoryBreakdown] = Field(None, alias="memory")

    @field_validator("breakdown", mode="before")
    @classmethod
    def _not_available(cls, value):
        if value == "not_available":
            return None
        if isinstance(value, str):
            raise ValueError(f"unexpected memory breakdown value: {value!r}")
        return value
