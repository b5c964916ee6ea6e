"""Map event-source specs to ordered component metadata entries."""

from __future__ import annotations

from collections.abc import Callable

from fn_events.config.models import (
    CronSpec,
    EventSourceSpec,
    KafkaSpec,
    MQTTSpec,
    NatsStreamingSpec,
    RedisSpec,
)
from fn_events.errors import MetadataEncodingError

MetadataValue = str | bool | int
MetadataEntry = tuple[str, MetadataValue]

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

# (metadata key, spec attribute) in emission order.
_KAFKA_OPTIONAL = (
    ("saslUsername", "sasl_username"),
    ("saslPassword", "sasl_password"),
    ("maxMessageBytes", "max_message_bytes"),
)

_NATS_STREAMING_OPTIONAL = (
    ("ackWaitTime", "ack_wait_time"),
    ("maxInFlight", "max_in_flight"),
    ("durableSubscriptionName", "durable_subscription_name"),
    ("deliverNew", "deliver_new"),
    ("startAtSequence", "start_at_sequence"),
    ("startWithLastReceived", "start_with_last_received"),
    ("deliverAll", "deliver_all"),
    ("startAtTimeDelta", "start_at_time_delta"),
    ("startAtTime", "start_at_time"),
    ("startAtTimeFormat", "start_at_time_format"),
)

_REDIS_OPTIONAL = (
    ("enableTLS", "enable_tls"),
    ("failover", "failover"),
    ("sentinelMasterName", "sentinel_master_name"),
    ("redeliverInterval", "redeliver_interval"),
    ("processingTimeout", "processing_timeout"),
    ("redisType", "redis_type"),
    ("redisDB", "redis_db"),
    ("redisMaxRetries", "redis_max_retries"),
    ("redisMinRetryInterval", "redis_min_retry_interval"),
    ("redisMaxRetryInterval", "redis_max_retry_interval"),
    ("dialTimeout", "dial_timeout"),
    ("readTimeout", "read_timeout"),
    ("writeTimeout", "write_timeout"),
    ("poolSize", "pool_size"),
    ("poolTimeout", "pool_timeout"),
    ("maxConnAge", "max_conn_age"),
    ("minIdleConns", "min_idle_conns"),
    ("idleCheckFrequency", "idle_check_frequency"),
    ("idleTimeout", "idle_timeout"),
)

_MQTT_OPTIONAL = (
    ("qos", "qos"),
    ("retain", "retain"),
    ("cleanSession", "clean_session"),
    ("caCert", "ca_cert"),
    ("clientCert", "client_cert"),
    ("clientKey", "client_key"),
)


def _present(spec: object, fields: tuple[tuple[str, str], ...]) -> list[MetadataEntry]:
    """Return entries for the optional fields that are set on *spec*."""
    entries: list[MetadataEntry] = []
    for key, attr in fields:
        value = getattr(spec, attr)
        if value is not None:
            entries.append((key, value))
    return entries


def kafka_metadata(spec: KafkaSpec) -> list[MetadataEntry]:
    """Return the Kafka binding metadata.

    The single ``topic`` field feeds both ``publishTopic`` and ``topics``.
    """
    return [
        ("brokers", spec.brokers),
        ("publishTopic", spec.topic),
        ("topics", spec.topic),
        ("authRequired", spec.auth_required),
        *_present(spec, _KAFKA_OPTIONAL),
    ]


def nats_streaming_metadata(spec: NatsStreamingSpec) -> list[MetadataEntry]:
    """Return the NATS Streaming pub/sub metadata."""
    return [
        ("natsURL", spec.nats_url),
        ("natsStreamingClusterID", spec.nats_streaming_cluster_id),
        ("subscriptionType", spec.subscription_type),
        *_present(spec, _NATS_STREAMING_OPTIONAL),
    ]


def redis_metadata(spec: RedisSpec) -> list[MetadataEntry]:
    """Return the Redis binding metadata."""
    return [
        ("redisHost", spec.redis_host),
        ("redisPassword", spec.redis_password),
        *_present(spec, _REDIS_OPTIONAL),
    ]


def cron_metadata(spec: CronSpec) -> list[MetadataEntry]:
    """Return the cron binding metadata."""
    return [("schedule", spec.schedule)]


def mqtt_metadata(spec: MQTTSpec) -> list[MetadataEntry]:
    """Return the MQTT binding metadata.

    ``consumer_id`` is not part of the binding metadata.
    """
    return [
        ("url", spec.url),
        ("topic", spec.topic),
        *_present(spec, _MQTT_OPTIONAL),
    ]


_MAPPERS: dict[type, Callable[..., list[MetadataEntry]]] = {
    KafkaSpec: kafka_metadata,
    NatsStreamingSpec: nats_streaming_metadata,
    RedisSpec: redis_metadata,
    CronSpec: cron_metadata,
    MQTTSpec: mqtt_metadata,
}


def metadata_for(spec: EventSourceSpec) -> list[MetadataEntry]:
    """Dispatch to the mapper for *spec*'s kind."""
    mapper = _MAPPERS.get(type(spec))
    if mapper is None:
        msg = f"Unknown event source spec: {type(spec).__name__}"
        raise TypeError(msg)
    return mapper(spec)


def encode_metadata_value(name: str, value: MetadataValue) -> str:
    """Return the canonical text for a metadata value.

    Booleans become ``"true"``/``"false"``, integers decimal text and strings
    are kept verbatim.  Integers must fit in a signed 64-bit range.
    """
    # bool is a subclass of int; check it first.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise MetadataEncodingError(name, value)
        return str(value)
    if isinstance(value, str):
        return value
    raise MetadataEncodingError(name, value)
