"""Bridge identity — outward address and the static hardware identifiers.

The identifiers mimic a genuine 2015 bridge (BSB002): the serial number is
the vendor OUI followed by a fixed suffix, the bridge id splices FFFE into
the middle of it, and the UUID uses the vendor's fixed namespace prefix.
"""

import ipaddress
import logging
import socket

import psutil

from upnp import constants as C

logger = logging.getLogger("huesim.identity")

SERIAL_PREFIX = "001788"
SERIAL_SUFFIX = "7ebe7d"
UUID_NAMESPACE = "2f402f80-da50-11e1-9b23-"


class NoAddressError(RuntimeError):
    """Raised when the host has no usable external IPv4 address."""


def resolve_ip_address() -> str:
    """Return the first non-loopback IPv4 address of this host."""
    for name, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            try:
                ip = ipaddress.ip_address(addr.address)
            except ValueError:
                continue
            if ip.is_loopback:
                continue
            logger.debug("Found ip address %s on %s", addr.address, name)
            return addr.address

    raise NoAddressError("No external IPv4 address found")


class BridgeIdentity:
    """Identifiers shared by the control-plane and the discovery responder."""

    __slots__ = (
        "ip_address",
        "port",
        "description_path",
        "serial_number",
        "bridge_id",
        "uuid",
    )

    def __init__(
        self,
        ip_address: str,
        port: int = 80,
        description_path: str = C.DEFAULT_DESCRIPTION_PATH,
    ):
        self.ip_address = ip_address
        self.port = port
        self.description_path = description_path
        self.serial_number = f"{SERIAL_PREFIX}{SERIAL_SUFFIX}"
        self.bridge_id = f"{SERIAL_PREFIX}FFFE{SERIAL_SUFFIX}"
        self.uuid = f"{UUID_NAMESPACE}{self.serial_number}"

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError(f"BridgeIdentity.{name} is read-only")
        object.__setattr__(self, name, value)

    @property
    def description_url(self) -> str:
        return f"http://{self.ip_address}:{self.port}{self.description_path}"

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.__slots__}
