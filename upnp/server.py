"""SSDP discovery responder.

Listens on UDP 1900 (multicast group 239.255.255.250) and answers every
datagram containing "M-SEARCH" with three unicast responses, one per
search target the bridge advertises:
  - upnp:rootdevice
  - uuid:<bridge uuid>
  - urn:schemas-upnp-org:device:basic:1

Each response points clients at the description document served by the
HTTP control-plane.
"""

import logging
import socket
import threading
from typing import Optional

from . import constants as C
from . import messages

logger = logging.getLogger("huesim.upnp")


class DiscoveryResponder:
    """UDP responder implementing the bridge's side of SSDP discovery.

    Args:
        ip_address: Advertised address of the HTTP control-plane
        port: Advertised HTTP port
        description_path: Path of the description document (e.g. /description.xml)
        bridge_id: Value of the hue-bridgeid header
        uuid: Bridge UUID used in the USN headers
        host: Bind address (default "" — all interfaces)
        bind_port: UDP port to listen on (default 1900)
        multicast_group: Group joined after binding
    """

    def __init__(
        self,
        ip_address: str,
        port: int,
        description_path: str,
        bridge_id: str,
        uuid: str,
        host: str = "",
        bind_port: int = C.SSDP_PORT,
        multicast_group: str = C.MULTICAST_GROUP,
    ):
        self.ip_address = ip_address
        self.port = port
        self.description_path = description_path
        self.bridge_id = bridge_id
        self.uuid = uuid
        self.host = host
        self.bind_port = bind_port
        self.multicast_group = multicast_group

        self._sock: Optional[socket.socket] = None
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def is_listening(self) -> bool:
        return self._running

    @property
    def address(self) -> Optional[tuple]:
        """The (host, port) the socket is bound to, or None when stopped."""
        if self._sock is None:
            return None
        return self._sock.getsockname()

    def start(self):
        """Bind, join the multicast group and start the receive thread."""
        with self._lock:
            if self._running:
                return
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
            try:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                sock.bind((self.host, self.bind_port))
                self._join_group(sock)
                sock.settimeout(1.0)  # Allow periodic check of _running flag
            except OSError:
                sock.close()
                raise
            self._sock = sock
            self._running = True
            self._thread = threading.Thread(
                target=self._recv_loop,
                args=(sock,),
                name="upnp-discovery",
                daemon=True,
            )
            self._thread.start()

        host, port = sock.getsockname()
        logger.info("Discovery is listening on %s:%d/udp", host, port)

    def stop(self):
        """Stop the receive thread and close the socket."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            thread, sock = self._thread, self._sock
            self._thread = None
            self._sock = None

        if thread:
            thread.join(timeout=3.0)
        if sock:
            sock.close()
        logger.info("Discovery stopped")

    def _join_group(self, sock: socket.socket):
        mreq = socket.inet_aton(self.multicast_group) + socket.inet_aton("0.0.0.0")
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
        except OSError as e:
            # Still reachable by unicast M-SEARCH
            logger.warning(
                "Could not join multicast group %s: %s", self.multicast_group, e
            )

    def _recv_loop(self, sock: socket.socket):
        """Main receive loop — reads datagrams and answers searches.

        Runs until stop() clears _running; socket errors are logged and
        the loop keeps listening.
        """
        while self._running:
            try:
                data, addr = sock.recvfrom(2048)
            except socket.timeout:
                continue
            except OSError:
                if self._running:
                    logger.exception("Socket error")
                continue

            try:
                self.handle_datagram(sock, data, addr)
            except Exception:
                logger.exception("Error handling datagram from %s", addr)

    def handle_datagram(self, sock: socket.socket, data: bytes, addr: tuple) -> int:
        """Answer an M-SEARCH datagram. Returns the number of responses sent."""
        if not messages.is_search_request(data):
            return 0

        logger.debug("Received M-SEARCH from %s:%d", addr[0], addr[1])
        sent = 0
        for st, usn in messages.search_targets(self.uuid):
            response = messages.encode_search_response(
                self.ip_address,
                self.port,
                self.description_path,
                self.bridge_id,
                st,
                usn,
            )
            if self._send(sock, response, addr):
                sent += 1
        return sent

    def _send(self, sock: socket.socket, data: bytes, addr: tuple) -> bool:
        """Send one response; a failure is logged and reported, never raised."""
        try:
            sock.sendto(data, addr)
        except OSError:
            logger.exception("Failed to send discovery response to %s", addr)
            return False
        return True
