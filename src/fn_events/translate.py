"""Translate configured event sources into component and scaling descriptors."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from fn_events.components.builder import ComponentDescriptor, generate_component
from fn_events.config.models import (
    EventBusConfig,
    EventSourceConfig,
    KafkaSpec,
    NatsStreamingSpec,
    TranslationConfig,
)
from fn_events.scaling.models import ScaledObjectDescriptor
from fn_events.scaling.triggers import (
    build_event_bus_scaled_object,
    build_kafka_scaled_object,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class TranslationResult:
    source: str
    component: ComponentDescriptor
    scaled_object: ScaledObjectDescriptor | None = None


def _scaled_object_for(
    source: EventSourceConfig, event_bus: EventBusConfig | None
) -> ScaledObjectDescriptor | None:
    spec = source.spec
    if isinstance(spec, KafkaSpec):
        return build_kafka_scaled_object(spec)
    if isinstance(spec, NatsStreamingSpec):
        if event_bus is None:
            return build_event_bus_scaled_object(spec, [], source.name)
        return build_event_bus_scaled_object(
            spec, event_bus.subjects, event_bus.consumer_id
        )
    return None


def translate_source(
    source: EventSourceConfig,
    namespace: str,
    *,
    event_bus: EventBusConfig | None = None,
) -> TranslationResult:
    """Build the component descriptor and, if requested, the scaled object.

    Errors from either builder propagate unchanged.
    """
    component = generate_component(source.spec, namespace, source.name)
    logger.info(
        "component.built",
        source=source.name,
        namespace=namespace,
        type=component.type,
        entries=len(component.metadata),
    )

    scaled_object = _scaled_object_for(source, event_bus)
    if scaled_object is None:
        logger.debug("scaled_object.not_requested", source=source.name)
    else:
        logger.info(
            "scaled_object.built",
            source=source.name,
            triggers=len(scaled_object.triggers),
        )
    return TranslationResult(
        source=source.name, component=component, scaled_object=scaled_object
    )


def translate_config(config: TranslationConfig) -> list[TranslationResult]:
    """Translate every source in *config*, in order."""
    return [
        translate_source(source, config.namespace, event_bus=config.event_bus)
        for source in config.sources
    ]
