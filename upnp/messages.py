"""SSDP search responses and the UPnP description document.

Both payloads are fixed text blocks written with bare newlines and normalized
to CRLF before they go on the wire, since Hue clients parse them strictly:

  HTTP/1.1 200 OK
  HOST: 239.255.255.250:1900
  ...
  ST: <search target>
  USN: <unique service name>
"""

from . import constants as C

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_crlf(text: str) -> str:
    """Normalize every line terminator to CRLF."""
    return text.replace("\r\n", "\n").replace("\n", C.CRLF)


def description_url(ip: str, port: int, path: str) -> str:
    """Build the LOCATION url, e.g. http://10.0.0.2:80/description.xml."""
    return f"http://{ip}:{port}{path}"


# ---------------------------------------------------------------------------
# Search responses
# ---------------------------------------------------------------------------


def search_targets(uuid: str) -> list[tuple[str, str]]:
    """Return the (ST, USN) pairs answered for every M-SEARCH."""
    udn = f"uuid:{uuid}"
    return [
        (C.ST_ROOT_DEVICE, f"{udn}::{C.ST_ROOT_DEVICE}"),
        (udn, udn),
        (C.ST_BASIC_DEVICE, udn),
    ]


def encode_search_response(
    ip: str, port: int, path: str, bridge_id: str, st: str, usn: str
) -> bytes:
    """Encode one M-SEARCH response datagram."""
    text = (
        "HTTP/1.1 200 OK\n"
        f"HOST: {C.MULTICAST_GROUP}:{C.SSDP_PORT}\n"
        "EXT:\n"
        f"CACHE-CONTROL: max-age={C.CACHE_MAX_AGE}\n"
        f"LOCATION: {description_url(ip, port, path)}\n"
        f"SERVER: {C.SERVER_BANNER}\n"
        f"hue-bridgeid: {bridge_id}\n"
        f"ST: {st}\n"
        f"USN: {usn}\n"
        "\n"
    )
    return to_crlf(text).encode("utf-8")


def decode_headers(data: bytes) -> dict[str, str]:
    """Parse a response datagram into {HEADER: value} (status line dropped).

    Header names are upper-cased so callers can look up "ST" / "USN"
    regardless of the casing on the wire.
    """
    headers = {}
    lines = data.decode("utf-8", errors="replace").split(C.CRLF)
    for line in lines[1:]:
        if not line:
            continue
        name, _, value = line.partition(":")
        headers[name.strip().upper()] = value.strip()
    return headers


def is_search_request(data: bytes) -> bool:
    """True if the datagram contains the M-SEARCH method anywhere."""
    return C.M_SEARCH in data


# ---------------------------------------------------------------------------
# Description document
# ---------------------------------------------------------------------------


def encode_description(ip: str, port: int, serial_number: str, uuid: str) -> str:
    """Build the UPnP device description served at the description path."""
    text = f"""<?xml version='1.0' encoding='UTF-8' ?>
<root xmlns='urn:schemas-upnp-org:device-1-0'>
<specVersion>
<major>1</major>
<minor>0</minor>
</specVersion>
<URLBase>http://{ip}:{port}/</URLBase>
<device>
<deviceType>{C.DEVICE_TYPE}</deviceType>
<friendlyName>Philips hue ({ip})</friendlyName>
<manufacturer>Royal Philips Electronics</manufacturer>
<manufacturerURL>http://www.philips.com</manufacturerURL>
<modelDescription>Philips hue Personal Wireless Lighting</modelDescription>
<modelName>Philips hue bridge 2015</modelName>
<modelNumber>BSB002</modelNumber>
<modelURL>http://www.meethue.com</modelURL>
<serialNumber>{serial_number}</serialNumber>
<UDN>uuid:{uuid}</UDN>
<presentationURL>index.html</presentationURL>
<iconList>
<icon>
<mimetype>image/png</mimetype>
<height>48</height>
<width>48</width>
<depth>24</depth>
<url>hue_logo_0.png</url>
</icon>
</iconList>
</device>
</root>
"""
    return to_crlf(text)
