"""HueBridge — the emulated bridge as one cohesive unit.

Owns the configuration, the bridge identity, the model repository and the
light registry, and runs the two network faces of the bridge:
  - the HTTP control-plane (FastAPI under uvicorn, daemon thread)
  - the SSDP discovery responder (UDP 1900, daemon thread)

Typical use:

    bridge = HueBridge(BridgeConfig(port=8080))
    bridge.register_light("Kitchen Light", model="LWB006")
    bridge.start()
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any, Optional

from devicedb import ModelRepository
from upnp import messages
from upnp.server import DiscoveryResponder

from .config import AutoMerge, BridgeConfig, Delegated
from .identity import BridgeIdentity, resolve_ip_address
from .registry import LightRegistry

logger = logging.getLogger("huesim.bridge")


def state_ack(light_id: int, key: str, value: Any) -> dict:
    """One entry of a PUT .../state response."""
    return {"success": {f"/lights/{light_id}/state/{key}": value}}


class HueBridge:
    """An emulated bridge with its lights, HTTP API and discovery responder."""

    def __init__(self, config: Optional[BridgeConfig] = None):
        if config is None:
            config = BridgeConfig()
        self.config = config

        ip_address = config.ip_address or resolve_ip_address()
        self.identity = BridgeIdentity(
            ip_address=ip_address,
            port=config.port,
            description_path=config.description_path,
        )
        self.models = ModelRepository(config.devicedb)
        self.registry = LightRegistry()

        self.discovery: Optional[DiscoveryResponder] = None
        self._server = None
        self._server_thread: Optional[threading.Thread] = None

        logger.info(
            "Bridge %s at %s (policy %r)",
            self.identity.bridge_id,
            self.identity.description_url,
            config.policy,
        )

    # ------------------------------------------------------------------
    # Lights
    # ------------------------------------------------------------------

    def add_light(self, name: str, callback: Optional[Callable] = None) -> int:
        """Register a light built from the default model."""
        return self.registry.add(self.models.default, name=name, callback=callback)

    def register_light(
        self,
        name: Optional[str] = None,
        model: Optional[str] = None,
        override: Optional[dict] = None,
        callback: Optional[Callable] = None,
    ) -> int:
        """Register a light and return its id.

        Args:
            name: Display name (defaults to "light-<id>")
            model: Model id to emulate, loaded from the device database
            override: Top-level fields replacing the model's (e.g. uniqueid)
            callback: Called as callback(key, value) for every changed key
        """
        template = self.models.resolve(model)
        return self.registry.add(template, name=name, override=override, callback=callback)

    def lights(self) -> dict[int, dict]:
        return self.registry.snapshot()

    def get_light(self, light_id: int) -> Optional[dict]:
        return self.registry.get(light_id)

    def update_state(self, light_id: int, state: dict) -> Optional[list[dict]]:
        """Apply a partial state change as received by PUT .../state.

        Returns the per-key acknowledgements, or None if the light is unknown.
        """
        policy = self.config.policy
        with self.registry.lock:
            light = self.registry.get_live(light_id)
            if light is None:
                return None

            logger.debug("Received state change for light %d: %s", light_id, state)
            if isinstance(policy, Delegated):
                policy.handler(self, light_id, light, state)

            callback = self.registry.callback_for(light_id)
            result = []
            for key, value in state.items():
                if callback is not None:
                    try:
                        callback(key, value)
                    except Exception:
                        logger.exception(
                            "Callback for light %d failed on %s=%r", light_id, key, value
                        )
                # A delegated handler applies changes itself via set_state()
                if isinstance(policy, AutoMerge):
                    self.registry.merge_state(light_id, {key: value})
                result.append(state_ack(light_id, key, value))
            return result

    def set_state(self, light_id: int, state: dict):
        """Merge `state` into a light unconditionally (no-op for unknown ids)."""
        self.registry.merge_state(light_id, state)

    # ------------------------------------------------------------------
    # Description
    # ------------------------------------------------------------------

    def description(self) -> str:
        ident = self.identity
        return messages.encode_description(
            ident.ip_address, ident.port, ident.serial_number, ident.uuid
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Start the HTTP control-plane and, if enabled, discovery."""
        if self._server_thread is None:
            self._start_api_server()
        if self.config.upnp:
            self.start_discovery()

    def stop(self):
        """Stop discovery and the HTTP control-plane."""
        self.stop_discovery()
        if self._server is not None:
            self._server.should_exit = True
        if self._server_thread is not None:
            self._server_thread.join(timeout=5.0)
        self._server = None
        self._server_thread = None
        logger.info("Bridge stopped")

    def start_discovery(self):
        logger.debug("Starting UPnP discovery...")
        if self.discovery is not None:
            return
        ident = self.identity
        discovery = DiscoveryResponder(
            ip_address=ident.ip_address,
            port=ident.port,
            description_path=ident.description_path,
            bridge_id=ident.bridge_id,
            uuid=ident.uuid,
            bind_port=self.config.discovery_port,
        )
        discovery.start()
        self.discovery = discovery

    def stop_discovery(self):
        logger.debug("Stopping UPnP discovery...")
        if self.discovery is not None:
            self.discovery.stop()
            self.discovery = None

    def _start_api_server(self):
        """Start uvicorn in a daemon thread."""
        import uvicorn

        from api.app import create_app

        app = create_app(self)
        config = uvicorn.Config(
            app=app,
            host=self.config.host,
            port=self.config.port,
            log_level="debug" if self.config.debug else "info",
            access_log=False,
        )
        self._server = uvicorn.Server(config)
        self._server_thread = threading.Thread(
            target=self._server.run, name="uvicorn", daemon=True
        )
        self._server_thread.start()
        self._wait_for_api_server()

    def _wait_for_api_server(self, timeout: float = 5.0):
        """Log once uvicorn has bound, or report that its thread died."""
        deadline = time.monotonic() + timeout
        while not self._server.started and self._server_thread.is_alive():
            if time.monotonic() >= deadline:
                logger.warning(
                    "Api on %s:%d not started after %.1fs",
                    self.config.host,
                    self.config.port,
                    timeout,
                )
                return
            time.sleep(0.05)

        if self._server.started:
            logger.info("Api is listening on %s:%d", self.config.host, self.config.port)
            return

        logger.error(
            "Api server failed to start on %s:%d", self.config.host, self.config.port
        )
        self._server = None
        self._server_thread = None
