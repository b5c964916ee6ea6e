"""Pydantic models for user-authored event-source specs.

Field names are snake_case in Python.  Every field also accepts the camelCase
name used by the EventSource custom resource (``natsURL``, ``enableTLS``,
``scaleOption`` ...), so manifests can be validated as written.

Optional fields default to ``None``, which means *absent*.  Absent fields are
never emitted downstream; ``""``, ``0`` and ``False`` are real values.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Int32 = Annotated[int, Field(ge=0, le=2**31 - 1)]
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]


class SpecModel(BaseModel):
    """Base for resource-facing models: camelCase aliases, no unknown keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------------
# Scale options
# ---------------------------------------------------------------------------


class HorizontalPodAutoscalerConfig(SpecModel):
    """HPA overrides passed through to the autoscaler."""

    name: str | None = None
    behavior: dict[str, Any] | None = None


class AdvancedConfig(SpecModel):
    """Autoscaler ``advanced`` block."""

    restore_to_original_replica_count: bool | None = None
    horizontal_pod_autoscaler_config: HorizontalPodAutoscalerConfig | None = None


class ScaledObjectAuthRef(SpecModel):
    """Reference to a TriggerAuthentication object."""

    name: str
    kind: str | None = None


class GenericScaleOption(SpecModel):
    """Scale settings shared by every event-source kind."""

    polling_interval: Int32 | None = None
    cooldown_period: Int32 | None = None
    min_replica_count: Int32 | None = None
    max_replica_count: Int32 | None = None
    advanced: AdvancedConfig | None = None
    metadata: dict[str, str] | None = None
    auth_ref: ScaledObjectAuthRef | None = None


def _generic_keys() -> frozenset[str]:
    keys: set[str] = set()
    for name, field in GenericScaleOption.model_fields.items():
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return frozenset(keys)


class ScaleOptionExtension(SpecModel):
    """A kind-specific scale option composed with a :class:`GenericScaleOption`.

    In the resource the generic keys sit inline next to the kind-specific ones.
    They are lifted into ``generic`` before validation, so the two halves are
    read separately and never through attribute promotion.
    """

    generic: GenericScaleOption = Field(default_factory=GenericScaleOption)

    @model_validator(mode="before")
    @classmethod
    def lift_generic_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "generic" in data:
            return data
        keys = _generic_keys()
        generic = {k: v for k, v in data.items() if k in keys}
        rest = {k: v for k, v in data.items() if k not in keys}
        rest["generic"] = generic
        return rest


class KafkaScaleOption(ScaleOptionExtension):
    """Kafka-specific scale settings.

    ``consumer_group``, ``topic`` and ``lag_threshold`` are accepted and kept,
    but the Kafka trigger is built from the source's own brokers and topic.
    """

    consumer_group: str | None = None
    topic: str | None = None
    lag_threshold: str


class NatsStreamingScaleOption(ScaleOptionExtension):
    """NATS Streaming scale settings."""

    nats_server_monitoring_endpoint: str
    queue_group: str | None = None
    durable_name: str | None = None
    subject: str | None = None
    lag_threshold: str


# ---------------------------------------------------------------------------
# Event-source specs
# ---------------------------------------------------------------------------


class KafkaSpec(SpecModel):
    """Kafka binding."""

    brokers: str
    auth_required: bool
    topic: str = ""
    sasl_username: str | None = None
    sasl_password: str | None = None
    max_message_bytes: Int64 | None = None
    scale_option: KafkaScaleOption | None = None


class NatsStreamingSpec(SpecModel):
    """NATS Streaming pub/sub, used as the event bus."""

    nats_url: str = Field(alias="natsURL")
    nats_streaming_cluster_id: str = Field(alias="natsStreamingClusterID")
    subscription_type: str
    ack_wait_time: str | None = None
    max_in_flight: Int64 | None = None
    durable_subscription_name: str | None = None
    deliver_new: bool | None = None
    start_at_sequence: Int64 | None = None
    start_with_last_received: bool | None = None
    deliver_all: bool | None = None
    start_at_time_delta: str | None = None
    start_at_time: str | None = None
    start_at_time_format: str | None = None
    consumer_id: str | None = Field(default=None, alias="consumerID")
    scale_option: NatsStreamingScaleOption | None = None


class RedisSpec(SpecModel):
    """Redis binding."""

    redis_host: str
    redis_password: str
    enable_tls: bool | None = Field(default=None, alias="enableTLS")
    failover: bool | None = None
    sentinel_master_name: str | None = None
    redeliver_interval: str | None = None
    processing_timeout: str | None = None
    redis_type: str | None = None
    redis_db: Int64 | None = Field(default=None, alias="redisDB")
    redis_max_retries: Int64 | None = None
    redis_min_retry_interval: str | None = None
    redis_max_retry_interval: str | None = None
    dial_timeout: str | None = None
    read_timeout: str | None = None
    write_timeout: str | None = None
    pool_size: Int64 | None = None
    pool_timeout: str | None = None
    max_conn_age: str | None = None
    min_idle_conns: Int64 | None = None
    idle_check_frequency: str | None = None
    idle_timeout: str | None = None


class CronSpec(SpecModel):
    """Cron binding."""

    schedule: str


class MQTTSpec(SpecModel):
    """MQTT binding."""

    url: str
    topic: str
    # Accepted for resource compatibility; the binding derives its own client id.
    consumer_id: str | None = Field(default=None, alias="consumerID")
    qos: Int64 | None = None
    retain: bool | None = None
    clean_session: bool | None = None
    ca_cert: str | None = None
    client_cert: str | None = None
    client_key: str | None = None


EventSourceSpec = KafkaSpec | NatsStreamingSpec | RedisSpec | CronSpec | MQTTSpec


# ---------------------------------------------------------------------------
# Translation config
# ---------------------------------------------------------------------------


class EventSourceKind(StrEnum):
    """Supported event-source kinds."""

    KAFKA = "kafka"
    NATS_STREAMING = "nats_streaming"
    REDIS = "redis"
    CRON = "cron"
    MQTT = "mqtt"


class EventSourceConfig(SpecModel):
    """One named event source; exactly the sub-config matching ``kind`` is used."""

    name: str = Field(min_length=1)
    kind: EventSourceKind
    kafka: KafkaSpec | None = None
    nats_streaming: NatsStreamingSpec | None = None
    redis: RedisSpec | None = None
    cron: CronSpec | None = None
    mqtt: MQTTSpec | None = None

    @model_validator(mode="after")
    def check_matching_sub_config(self) -> Self:
        """Ensure only the sub-config matching kind is provided."""
        kind = self.kind.value
        if getattr(self, kind) is None:
            msg = f"{kind} config is required when kind is '{kind}'"
            raise ValueError(msg)
        extra = [
            other.value
            for other in EventSourceKind
            if other is not self.kind and getattr(self, other.value) is not None
        ]
        if extra:
            msg = f"kind '{kind}' does not accept {', '.join(extra)} config"
            raise ValueError(msg)
        return self

    @property
    def spec(self) -> EventSourceSpec:
        """The variant value selected by ``kind``."""
        return getattr(self, self.kind.value)  # type: ignore[no-any-return]


class EventBusConfig(SpecModel):
    """Reconciler-supplied context for event-bus scaling."""

    subjects: list[str] = Field(default_factory=list)
    consumer_id: str = Field(min_length=1, alias="consumerID")


class TranslationConfig(SpecModel):
    """A namespace worth of event sources to translate."""

    namespace: str = Field(default="default", min_length=1)
    sources: list[EventSourceConfig] = Field(default_factory=list)
    event_bus: EventBusConfig | None = None

    @model_validator(mode="after")
    def check_unique_names(self) -> Self:
        """Reject two sources with the same name."""
        seen: set[str] = set()
        for source in self.sources:
            if source.name in seen:
                msg = f"Duplicate event source name '{source.name}'"
                raise ValueError(msg)
            seen.add(source.name)
        return self
