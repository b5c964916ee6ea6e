"""Autoscaler descriptors produced from scale options."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fn_events.config.models import AdvancedConfig, ScaledObjectAuthRef

SCALE_KAFKA = "kafka"
SCALE_NATS_STREAMING = "stan"


class _Descriptor(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ScaleTrigger(_Descriptor):
    """One autoscaler trigger: a type plus its string metadata."""

    type: str
    metadata: dict[str, str] = Field(default_factory=dict)
    authentication_ref: ScaledObjectAuthRef | None = None


class ScaledObjectDescriptor(_Descriptor):
    """Replica bounds, timings and triggers for a scaled workload."""

    min_replica_count: int | None = None
    max_replica_count: int | None = None
    cooldown_period: int | None = None
    polling_interval: int | None = None
    advanced: AdvancedConfig | None = None
    triggers: list[ScaleTrigger] = Field(default_factory=list)

    def to_manifest(self) -> dict[str, Any]:
        """Dump with resource key names, omitting absent values."""
        return self.model_dump(by_alias=True, exclude_none=True)
