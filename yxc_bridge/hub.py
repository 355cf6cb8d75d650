"""
Virtual device hub abstraction.

The controller ecosystem exposes twist controllers as virtual "Speaker"
devices whose state is a volume between 0.0 and 1.0. The bridge pushes
receiver state back into those devices through this interface.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger("yxc.bridge.hub")


@dataclass
class VirtualDeviceMeta:
    """Metadata attached to a virtual device update."""

    dimmable_type: str
    virtual_device_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VirtualDeviceMeta":
        """Create from the hub's camelCase metadata."""
        return cls(
            dimmable_type=data.get("dimmableType", data.get("dimmable_type", "")),
            virtual_device_id=data.get("virtualDeviceId", data.get("virtual_device_id", "")),
        )


@runtime_checkable
class VirtualDeviceHub(Protocol):
    """Protocol for the hub that owns the virtual devices."""

    def update_state(self, dimmable_type: str, device_id: str, values: dict[str, Any]) -> None: ...

    def create_virtual_device(
        self, device_id: str, dimmable_type: str, values: dict[str, Any]
    ) -> None: ...


class InMemoryHub:
    """Hub that keeps the latest virtual device states in memory."""

    def __init__(self) -> None:
        self._states: dict[tuple[str, str], dict[str, Any]] = {}
        self._created: set[tuple[str, str]] = set()

    def update_state(self, dimmable_type: str, device_id: str, values: dict[str, Any]) -> None:
        key = (dimmable_type, device_id)
        self._states.setdefault(key, {}).update(values)
        logger.info("Virtual %s %s -> %s", dimmable_type, device_id, values)

    def create_virtual_device(
        self, device_id: str, dimmable_type: str, values: dict[str, Any]
    ) -> None:
        key = (dimmable_type, device_id)
        self._created.add(key)
        self._states[key] = dict(values)
        logger.info("Created virtual %s %s with %s", dimmable_type, device_id, values)

    def get_state(self, dimmable_type: str, device_id: str) -> dict[str, Any]:
        """Return the last known state of a virtual device."""
        return dict(self._states.get((dimmable_type, device_id), {}))

    def is_created(self, dimmable_type: str, device_id: str) -> bool:
        return (dimmable_type, device_id) in self._created
