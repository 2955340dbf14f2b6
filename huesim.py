"""Hue Bridge Emulator — Main Entry Point.

Loads bridge settings and the light list from config.yaml, registers the
lights, then runs the emulated bridge until SIGINT/SIGTERM:
  - HTTP control-plane (v1 light API + description.xml, port 80 by default)
  - SSDP discovery responder (UDP 1900)

Environment:
  HUESIM_CONFIG  path of config.yaml (default: next to this file)
  HUESIM_PORT    overrides bridge.port
"""

import logging
import os
import signal
import threading

import yaml

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def load_config(path: str) -> dict:
    """Load config.yaml; a missing file means all defaults."""
    if not os.path.exists(path):
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def register_lights(bridge, lights: list, logger) -> list[int]:
    """Register the `lights:` section of config.yaml on the bridge."""
    ids = []
    for entry in lights or []:
        name = entry.get("name")

        def on_change(key, value, name=name):
            logger.info("%s: %s -> %r", name, key, value)

        light_id = bridge.register_light(
            name=name,
            model=entry.get("model"),
            override=entry.get("override"),
            callback=on_change,
        )
        ids.append(light_id)
    return ids


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main():
    config_path = os.environ.get(
        "HUESIM_CONFIG", os.path.join(os.path.dirname(__file__), "config.yaml")
    )
    config = load_config(config_path)

    from core.bridge import HueBridge
    from core.config import BridgeConfig

    bridge_config = BridgeConfig.from_dict(config.get("bridge"))
    if os.environ.get("HUESIM_PORT"):
        bridge_config.port = int(os.environ["HUESIM_PORT"])

    logging.basicConfig(
        level=logging.DEBUG if bridge_config.debug else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    logger = logging.getLogger("huesim")
    logger.info("Loaded config from %s", config_path)

    bridge = HueBridge(bridge_config)
    ids = register_lights(bridge, config.get("lights"), logger)
    logger.info("Registered %d light(s)", len(ids))

    bridge.start()
    logger.info("Hue Bridge Emulator fully started")
    logger.info("  Description: %s", bridge.identity.description_url)
    logger.info("  Discovery: %s", "enabled" if bridge_config.upnp else "disabled")

    # Wait for shutdown signal
    shutdown = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d — shutting down", signum)
        shutdown.set()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    shutdown.wait()

    bridge.stop()
    logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
