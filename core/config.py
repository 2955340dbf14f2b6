"""Bridge configuration and state-update policies.

A BridgeConfig is handed to HueBridge at construction and owned by that
instance. The update policy decides what happens to incoming state changes:

  - AutoMerge: every key of a PUT .../state body is merged into the
    light's state (per-device callbacks are notified as well)
  - Delegated(handler): the handler receives the whole change and is
    responsible for applying it via HueBridge.set_state(); nothing is
    merged automatically
"""

from collections.abc import Callable
from typing import Any, Optional

from upnp import constants as C

DEFAULT_HTTP_PORT = 80


class UpdatePolicy:
    """How state changes received by the control-plane reach a light."""


class AutoMerge(UpdatePolicy):
    def __repr__(self):
        return "AutoMerge()"


class Delegated(UpdatePolicy):
    """Hand every state change to one bridge-wide handler.

    The handler is called as handler(bridge, light_id, light, state).
    """

    def __init__(self, handler: Callable):
        if not callable(handler):
            raise TypeError("Delegated policy needs a callable handler")
        self.handler = handler

    def __repr__(self):
        return f"Delegated({self.handler!r})"


class BridgeConfig:
    """Construction-time settings of a HueBridge.

    Args:
        debug: Verbose logging, including one access-log line per request
        port: HTTP port of the control-plane (also advertised via SSDP)
        callback: Bridge-wide handler; shorthand for policy=Delegated(callback)
        policy: Explicit update policy (default AutoMerge)
        devicedb: Directory holding {model}.json descriptors
        upnp: Start the discovery responder together with the HTTP server
        ip_address: Advertised address; resolved from the interfaces if None
        host: HTTP bind address
        discovery_port: UDP port of the discovery responder
        description_path: Where the UPnP description is served
    """

    def __init__(
        self,
        debug: bool = False,
        port: int = DEFAULT_HTTP_PORT,
        callback: Optional[Callable] = None,
        policy: Optional[UpdatePolicy] = None,
        devicedb: Optional[str] = None,
        upnp: bool = True,
        ip_address: Optional[str] = None,
        host: str = "0.0.0.0",
        discovery_port: int = C.SSDP_PORT,
        description_path: str = C.DEFAULT_DESCRIPTION_PATH,
    ):
        if callback is not None and policy is not None:
            raise ValueError("Pass either callback or policy, not both")
        if policy is None:
            policy = Delegated(callback) if callback is not None else AutoMerge()

        self.debug = debug
        self.port = port
        self.policy = policy
        self.devicedb = devicedb
        self.upnp = upnp
        self.ip_address = ip_address
        self.host = host
        self.discovery_port = discovery_port
        self.description_path = description_path

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "BridgeConfig":
        """Build a config from the `bridge:` section of config.yaml."""
        data = data or {}
        kwargs = {}
        for key in (
            "debug",
            "port",
            "devicedb",
            "upnp",
            "ip_address",
            "host",
            "discovery_port",
            "description_path",
        ):
            if data.get(key) is not None:
                kwargs[key] = data[key]
        if "port" in kwargs:
            kwargs["port"] = int(kwargs["port"])
        if "discovery_port" in kwargs:
            kwargs["discovery_port"] = int(kwargs["discovery_port"])
        return cls(**kwargs)
