"""Unit tests for the autoscaler trigger builders."""

import pytest

from fn_events.config.models import (
    AdvancedConfig,
    GenericScaleOption,
    KafkaScaleOption,
    KafkaSpec,
    NatsStreamingScaleOption,
    NatsStreamingSpec,
    ScaledObjectAuthRef,
)
from fn_events.errors import (
    DurableNameRequiredError,
    NoTriggerError,
    ScaleValidationError,
)
from fn_events.scaling.models import SCALE_KAFKA, SCALE_NATS_STREAMING
from fn_events.scaling.triggers import (
    build_event_bus_scaled_object,
    build_kafka_scaled_object,
)


def _kafka(scale_option=None, **kwargs):
    return KafkaSpec(
        brokers="b1:9092",
        topic="orders",
        auth_required=False,
        scale_option=scale_option,
        **kwargs,
    )


def _kafka_option(**kwargs):
    return KafkaScaleOption(lag_threshold="10", **kwargs)


def _nats_option(**generic):
    return NatsStreamingScaleOption(
        nats_server_monitoring_endpoint="stan.default:8222",
        lag_threshold="10",
        generic=GenericScaleOption(**generic),
    )


def _nats(scale_option=None, **kwargs):
    return NatsStreamingSpec(
        nats_url="nats://n:4222",
        nats_streaming_cluster_id="stan",
        subscription_type="queue",
        scale_option=scale_option,
        **kwargs,
    )


class TestKafkaScaledObject:
    def test_not_requested_returns_none(self):
        assert build_kafka_scaled_object(_kafka()) is None

    def test_single_trigger_with_spec_brokers_and_topic(self):
        scaled = build_kafka_scaled_object(_kafka(_kafka_option()))
        assert scaled is not None
        assert len(scaled.triggers) == 1
        trigger = scaled.triggers[0]
        assert trigger.type == SCALE_KAFKA == "kafka"
        assert trigger.metadata == {"bootstrapServers": "b1:9092", "topic": "orders"}

    def test_spec_values_overwrite_option_metadata(self):
        option = KafkaScaleOption(
            lag_threshold="10",
            generic=GenericScaleOption(
                metadata={"bootstrapServers": "stale", "foo": "bar"}
            ),
        )
        scaled = build_kafka_scaled_object(_kafka(option))
        assert scaled is not None
        assert scaled.triggers[0].metadata == {
            "bootstrapServers": "b1:9092",
            "topic": "orders",
            "foo": "bar",
        }

    def test_option_metadata_is_not_mutated(self):
        metadata = {"topic": "stale"}
        option = _kafka_option(generic=GenericScaleOption(metadata=metadata))
        spec = _kafka(option)
        build_kafka_scaled_object(spec)
        assert spec.scale_option.generic.metadata == {"topic": "stale"}

    def test_copies_replica_bounds_and_timings(self):
        option = KafkaScaleOption(
            lag_threshold="10",
            generic=GenericScaleOption(
                min_replica_count=0,
                max_replica_count=10,
                cooldown_period=60,
                polling_interval=15,
                advanced=AdvancedConfig(restore_to_original_replica_count=True),
            ),
        )
        scaled = build_kafka_scaled_object(_kafka(option))
        assert scaled is not None
        assert scaled.min_replica_count == 0
        assert scaled.max_replica_count == 10
        assert scaled.cooldown_period == 60
        assert scaled.polling_interval == 15
        assert scaled.advanced == AdvancedConfig(restore_to_original_replica_count=True)

    def test_absent_bounds_stay_absent(self):
        scaled = build_kafka_scaled_object(_kafka(_kafka_option()))
        assert scaled is not None
        assert scaled.min_replica_count is None
        assert scaled.max_replica_count is None
        assert scaled.cooldown_period is None
        assert scaled.polling_interval is None

    def test_extension_fields_are_not_read(self):
        option = KafkaScaleOption(
            consumer_group="cg", topic="other-topic", lag_threshold="50"
        )
        scaled = build_kafka_scaled_object(_kafka(option))
        assert scaled is not None
        assert scaled.triggers[0].metadata == {
            "bootstrapServers": "b1:9092",
            "topic": "orders",
        }

    def test_auth_ref_attached_to_trigger(self):
        option = KafkaScaleOption(
            lag_threshold="10",
            generic=GenericScaleOption(auth_ref=ScaledObjectAuthRef(name="kafka-auth")),
        )
        scaled = build_kafka_scaled_object(_kafka(option))
        assert scaled is not None
        assert scaled.triggers[0].authentication_ref == ScaledObjectAuthRef(
            name="kafka-auth"
        )

    def test_manifest_uses_resource_keys(self):
        option = KafkaScaleOption(
            lag_threshold="10",
            generic=GenericScaleOption(min_replica_count=1, max_replica_count=3),
        )
        scaled = build_kafka_scaled_object(_kafka(option))
        assert scaled is not None
        assert scaled.to_manifest() == {
            "minReplicaCount": 1,
            "maxReplicaCount": 3,
            "triggers": [
                {
                    "type": "kafka",
                    "metadata": {"bootstrapServers": "b1:9092", "topic": "orders"},
                }
            ],
        }


class TestEventBusScaledObject:
    def test_not_requested_returns_none(self):
        assert build_event_bus_scaled_object(_nats(), ["s1"], "fallback-cg") is None

    def test_not_requested_ignores_missing_durable_name(self):
        assert build_event_bus_scaled_object(_nats(), [], "fallback-cg") is None

    def test_missing_durable_name_fails(self):
        spec = _nats(_nats_option())
        with pytest.raises(
            DurableNameRequiredError,
            match="durable subscription name required to use the scale feature",
        ):
            build_event_bus_scaled_object(spec, ["s1"], "fallback-cg")

    def test_missing_durable_name_is_validation_error(self):
        spec = _nats(_nats_option())
        with pytest.raises(ScaleValidationError):
            build_event_bus_scaled_object(spec, ["s1", "s2"], "fallback-cg")

    def test_fan_out_one_trigger_per_subject(self):
        spec = _nats(_nats_option(), durable_subscription_name="d1")
        scaled = build_event_bus_scaled_object(spec, ["s1", "s2"], "fallback-cg")
        assert scaled is not None
        assert len(scaled.triggers) == 2
        assert [t.metadata["subject"] for t in scaled.triggers] == ["s1", "s2"]
        for trigger in scaled.triggers:
            assert trigger.type == SCALE_NATS_STREAMING == "stan"
            assert trigger.metadata["durableName"] == "d1"
            assert trigger.metadata["queueGroup"] == "fallback-cg"

    def test_trigger_metadata(self):
        spec = _nats(_nats_option(), durable_subscription_name="d1")
        scaled = build_event_bus_scaled_object(spec, ["s1"], "fallback-cg")
        assert scaled is not None
        assert scaled.triggers[0].metadata == {
            "natsServerMonitoringEndpoint": "stan.default:8222",
            "lagThreshold": "10",
            "subject": "s1",
            "queueGroup": "fallback-cg",
            "durableName": "d1",
        }

    def test_explicit_consumer_id_wins(self):
        spec = _nats(
            _nats_option(), durable_subscription_name="d1", consumer_id="explicit-cg"
        )
        scaled = build_event_bus_scaled_object(spec, ["s1", "s2"], "fallback-cg")
        assert scaled is not None
        assert {t.metadata["queueGroup"] for t in scaled.triggers} == {"explicit-cg"}

    def test_empty_subjects_fail(self):
        spec = _nats(_nats_option(), durable_subscription_name="d1")
        with pytest.raises(NoTriggerError, match="no trigger produced"):
            build_event_bus_scaled_object(spec, [], "fallback-cg")

    def test_no_trigger_is_validation_error(self):
        assert issubclass(NoTriggerError, ScaleValidationError)

    def test_copies_replica_bounds_and_timings(self):
        spec = _nats(
            _nats_option(
                min_replica_count=1,
                max_replica_count=5,
                cooldown_period=30,
                polling_interval=10,
            ),
            durable_subscription_name="d1",
        )
        scaled = build_event_bus_scaled_object(spec, ["s1"], "fallback-cg")
        assert scaled is not None
        assert scaled.min_replica_count == 1
        assert scaled.max_replica_count == 5
        assert scaled.cooldown_period == 30
        assert scaled.polling_interval == 10

    def test_option_subject_and_queue_group_are_not_read(self):
        option = NatsStreamingScaleOption(
            nats_server_monitoring_endpoint="stan:8222",
            lag_threshold="10",
            subject="ignored",
            queue_group="ignored",
            durable_name="ignored",
        )
        spec = _nats(option, durable_subscription_name="d1")
        scaled = build_event_bus_scaled_object(spec, ["s1"], "fallback-cg")
        assert scaled is not None
        metadata = scaled.triggers[0].metadata
        assert metadata["subject"] == "s1"
        assert metadata["queueGroup"] == "fallback-cg"
        assert metadata["durableName"] == "d1"
