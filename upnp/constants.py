# SSDP / UPnP discovery constants
# Reference: UPnP Device Architecture 1.0, section 1 (Discovery)

MULTICAST_GROUP = "239.255.255.250"
SSDP_PORT = 1900

# Search request method (matched case-sensitively anywhere in the datagram)
M_SEARCH = b"M-SEARCH"

# Search targets answered by the bridge
ST_ROOT_DEVICE = "upnp:rootdevice"
ST_BASIC_DEVICE = "urn:schemas-upnp-org:device:basic:1"

# Advertisement headers
CACHE_MAX_AGE = 100
SERVER_BANNER = "Linux/3.14.0 UPnP/1.0 IpBridge/1.29.0"

# Description document
DEVICE_TYPE = "urn:schemas-upnp-org:device:Basic:1"
DEFAULT_DESCRIPTION_PATH = "/description.xml"

CRLF = "\r\n"
