"""LightRegistry — id assignment and ownership of light records.

Records are plain JSON-shaped dicts exactly as the bridge API reports them.
Ids are assigned sequentially from 1 and never reused; lights are never
removed. Thread-safe: the control-plane and the caller registering lights
run on different threads.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any, Optional

from devicedb import DeviceModel, clone

logger = logging.getLogger("huesim.registry")


class LightRegistry:
    """Insertion-ordered id → light record map plus per-light callbacks."""

    def __init__(self):
        self._lights: dict[int, dict] = {}
        self._callbacks: dict[int, Callable[[str, Any], None]] = {}
        self._next_id = 1
        # Re-entrant so a state handler can call set_state during an update
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._lights)

    def __contains__(self, light_id: int) -> bool:
        return light_id in self._lights

    def add(
        self,
        model: DeviceModel,
        name: Optional[str] = None,
        override: Optional[dict] = None,
        callback: Optional[Callable[[str, Any], None]] = None,
    ) -> int:
        """Create a light from `model` and return its id."""
        light = model.to_dict()
        with self.lock:
            light_id = self._next_id
            self._next_id += 1

            light["name"] = name if name else f"light-{light_id}"
            if override:
                for key, value in override.items():
                    light[key] = clone(value)

            self._lights[light_id] = light
            if callback is not None:
                self._callbacks[light_id] = callback

        logger.debug(
            "Added light with name %s as ID %d (model %s)",
            light["name"],
            light_id,
            model.name,
        )
        return light_id

    def get_live(self, light_id: int) -> Optional[dict]:
        """Return the stored record itself (caller must hold `lock`)."""
        return self._lights.get(light_id)

    def get(self, light_id: int) -> Optional[dict]:
        """Return a copy of one light, or None if the id is unknown."""
        with self.lock:
            light = self._lights.get(light_id)
            return clone(light) if light is not None else None

    def snapshot(self) -> dict[int, dict]:
        """Return copies of all lights in registration order."""
        with self.lock:
            return {light_id: clone(light) for light_id, light in self._lights.items()}

    def callback_for(self, light_id: int) -> Optional[Callable[[str, Any], None]]:
        return self._callbacks.get(light_id)

    def merge_state(self, light_id: int, state: dict) -> bool:
        """Merge keys into a light's state. Returns False for unknown ids."""
        with self.lock:
            light = self._lights.get(light_id)
            if light is None:
                return False
            target = light.setdefault("state", {})
            for key, value in state.items():
                target[key] = clone(value)
            return True
