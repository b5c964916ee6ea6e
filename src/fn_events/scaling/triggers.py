"""Build autoscaler trigger descriptors from event-source scale options."""

from __future__ import annotations

from collections.abc import Sequence

from fn_events.config.models import GenericScaleOption, KafkaSpec, NatsStreamingSpec
from fn_events.errors import DurableNameRequiredError, NoTriggerError
from fn_events.scaling.models import (
    SCALE_KAFKA,
    SCALE_NATS_STREAMING,
    ScaledObjectDescriptor,
    ScaleTrigger,
)


def _scaled_object(
    generic: GenericScaleOption, triggers: list[ScaleTrigger]
) -> ScaledObjectDescriptor:
    return ScaledObjectDescriptor(
        min_replica_count=generic.min_replica_count,
        max_replica_count=generic.max_replica_count,
        cooldown_period=generic.cooldown_period,
        polling_interval=generic.polling_interval,
        advanced=generic.advanced,
        triggers=triggers,
    )


def build_kafka_scaled_object(spec: KafkaSpec) -> ScaledObjectDescriptor | None:
    """Return the Kafka scaled object, or ``None`` when scaling is not requested.

    The trigger starts from the scale option's free-form metadata and then
    ``bootstrapServers`` and ``topic`` are overwritten with the spec's own
    brokers and topic.
    """
    option = spec.scale_option
    if option is None:
        return None

    generic = option.generic
    metadata = dict(generic.metadata) if generic.metadata is not None else {}
    metadata["bootstrapServers"] = spec.brokers
    metadata["topic"] = spec.topic

    trigger = ScaleTrigger(
        type=SCALE_KAFKA,
        metadata=metadata,
        authentication_ref=generic.auth_ref,
    )
    return _scaled_object(generic, [trigger])


def build_event_bus_scaled_object(
    spec: NatsStreamingSpec,
    subjects: Sequence[str],
    consumer_id: str,
) -> ScaledObjectDescriptor | None:
    """Return the NATS Streaming scaled object with one trigger per subject.

    *consumer_id* is the queue group used when the spec sets none.  Returns
    ``None`` when scaling is not requested.

    Raises :class:`DurableNameRequiredError` when the spec has no durable
    subscription name, and :class:`NoTriggerError` when *subjects* is empty.
    """
    option = spec.scale_option
    if option is None:
        return None

    queue_group = spec.consumer_id if spec.consumer_id is not None else consumer_id
    endpoint = option.nats_server_monitoring_endpoint
    triggers: list[ScaleTrigger] = []
    for subject in subjects:
        if spec.durable_subscription_name is None:
            raise DurableNameRequiredError()
        triggers.append(
            ScaleTrigger(
                type=SCALE_NATS_STREAMING,
                metadata={
                    "natsServerMonitoringEndpoint": endpoint,
                    "lagThreshold": option.lag_threshold,
                    "subject": subject,
                    "queueGroup": queue_group,
                    "durableName": spec.durable_subscription_name,
                },
                authentication_ref=option.generic.auth_ref,
            )
        )

    if not triggers:
        raise NoTriggerError()
    return _scaled_object(option.generic, triggers)
