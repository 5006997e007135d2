"""
Capability negotiation for rumbac.
Parses the feature tag the bootloader embeds in its version reply.
"""

import logging
from typing import NamedTuple

from .config import CAPABILITY_CODES, Protocol
from .exceptions import CapabilityCodeException, ProtocolViolationException

logger = logging.getLogger(__name__)


class Capabilities(NamedTuple):
    """Protocol operations supported by the connected bootloader."""
    chip_erase: bool = False
    write_buffer: bool = False
    checksum_buffer: bool = False
    identify_chip: bool = False
    reset: bool = False

    @classmethod
    def from_tag(cls, tag: str) -> 'Capabilities':
        """
        Decode a capability tag such as 'IKXYZ'.

        Codes may come in any order and may repeat.

        Args:
            tag: Capability letters

        Returns:
            The decoded capability set

        Raises:
            CapabilityCodeException: If a byte is not a known capability code
        """
        flags = {}
        for code in tag.encode('utf-8'):
            name = CAPABILITY_CODES.get(chr(code))
            if name is None:
                raise CapabilityCodeException(code)
            flags[name] = True
        return cls(**flags)

    def codes(self) -> str:
        """Render the set back into its capability letters."""
        return ''.join(code for code, name in sorted(CAPABILITY_CODES.items())
                       if getattr(self, name))


def extract_capability_tag(version: str) -> str:
    """
    Find the capability tag inside a version reply.

    Args:
        version: Reply to the version command, e.g. 'v1.1 [Arduino:XYZ] ...'

    Returns:
        The text between the '[Arduino:' marker and the next ']'

    Raises:
        ProtocolViolationException: If either marker is missing
    """
    start = version.find(Protocol.CAPABILITY_PREFIX)
    if start < 0:
        raise ProtocolViolationException(
            f"no {Protocol.CAPABILITY_PREFIX!r} found in version info {version!r}")
    start += len(Protocol.CAPABILITY_PREFIX)
    end = version.find(Protocol.CAPABILITY_SUFFIX, start)
    if end < 0:
        raise ProtocolViolationException(
            f"no {Protocol.CAPABILITY_SUFFIX!r} found in version info {version!r}")
    return version[start:end]


def negotiate(transport) -> Capabilities:
    """Query the bootloader version and decode its capabilities."""
    transport.send(Protocol.VERSION_CMD)
    version = transport.read_str()
    capabilities = Capabilities.from_tag(extract_capability_tag(version))
    logger.debug(f"Device capabilities: {capabilities}")
    return capabilities
