"""Build sidecar component descriptors from event-source specs."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict

from fn_events.components.metadata import (
    MetadataEntry,
    encode_metadata_value,
    metadata_for,
)
from fn_events.config.models import (
    CronSpec,
    EventSourceSpec,
    KafkaSpec,
    MQTTSpec,
    NatsStreamingSpec,
    RedisSpec,
)

COMPONENT_API_VERSION = "dapr.io/v1alpha1"
COMPONENT_VERSION = "v1"

BINDINGS_KAFKA = "bindings.kafka"
BINDINGS_REDIS = "bindings.redis"
BINDINGS_CRON = "bindings.cron"
BINDINGS_MQTT = "bindings.mqtt"
PUBSUB_NATS_STREAMING = "pubsub.natsstreaming"

_COMPONENT_TYPES: dict[type, str] = {
    KafkaSpec: BINDINGS_KAFKA,
    RedisSpec: BINDINGS_REDIS,
    CronSpec: BINDINGS_CRON,
    MQTTSpec: BINDINGS_MQTT,
    NatsStreamingSpec: PUBSUB_NATS_STREAMING,
}


class MetadataItem(BaseModel):
    """A single ``name``/``value`` component metadata pair."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class ComponentDescriptor(BaseModel):
    """A named, typed, versioned bundle of component metadata."""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    type: str
    version: str = COMPONENT_VERSION
    metadata: list[MetadataItem]

    def metadata_dict(self) -> dict[str, str]:
        """Metadata as a plain mapping (last entry wins on duplicate names)."""
        return {item.name: item.value for item in self.metadata}

    def to_manifest(self) -> dict[str, Any]:
        """Render the Component custom resource."""
        return {
            "apiVersion": COMPONENT_API_VERSION,
            "kind": "Component",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "type": self.type,
                "version": self.version,
                "metadata": [item.model_dump() for item in self.metadata],
            },
        }


def component_type(spec: EventSourceSpec) -> str:
    """Return the component type constant for *spec*'s kind."""
    ctype = _COMPONENT_TYPES.get(type(spec))
    if ctype is None:
        msg = f"Unknown event source spec: {type(spec).__name__}"
        raise TypeError(msg)
    return ctype


def build_component(
    spec: EventSourceSpec,
    namespace: str,
    name: str,
    metadata: Iterable[MetadataEntry],
) -> ComponentDescriptor:
    """Wrap *metadata* into a component descriptor for *spec*'s kind.

    Entry order is preserved.  Raises :class:`MetadataEncodingError` when a
    value has no canonical textual form.
    """
    items = [
        MetadataItem(name=key, value=encode_metadata_value(key, value))
        for key, value in metadata
    ]
    return ComponentDescriptor(
        name=name,
        namespace=namespace,
        type=component_type(spec),
        version=COMPONENT_VERSION,
        metadata=items,
    )


def generate_component(
    spec: EventSourceSpec, namespace: str, name: str
) -> ComponentDescriptor:
    """Map *spec* to metadata and build its component descriptor."""
    return build_component(spec, namespace, name, metadata_for(spec))
