"""Failure details reported by the health check endpoints with a 503 response."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResourceAlarm(BaseModel):
    node: str
    resource: str = Field(..., description="Either memory or disk.")


class ClusterAlarmCheckDetails(BaseModel):
    reason: str
    alarms: List[ResourceAlarm] = Field(default_factory=list)


class QuorumEndangeredQueue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    readable_name: str
    vhost: str = Field(..., alias="virtual_host")
    queue_type: str = Field(..., alias="type")


class QuorumCriticalityCheckDetails(BaseModel):
    reason: str
    queues: List[QuorumEndangeredQueue] = Field(default_factory=list)


class NoActivePortListenerDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    reason: str
    inactive_port: int = Field(0, alias="missing")


class NoActiveProtocolListenerDetails(BaseModel):
    """
    Older brokers report a single missing protocol, newer ones a list of
    them. Both decode into inactive_protocols.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: str
    reason: str
    active_protocols: List[str] = Field(default_factory=list, alias="protocols")
    inactive_protocols: List[str] = Field(default_factory=list, alias="missing")

    @field_validator("inactive_protocols", mode="before")
    @classmethod
    def _single_protocol(cls, value):
        if isinstance(value, str):
            return [value]
        return value

    @property
    def inactive_protocol(self) -> str:
        return self.inactive_protocols[0] if self.inactive_protocols else ""
