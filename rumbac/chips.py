"""
Chip identification for rumbac.
Resolves the bootloader's identity reply to a flash layout.
"""

import logging
from typing import NamedTuple, Optional

from .config import CHIP_DEFS, Protocol
from .exceptions import DeviceNotRecognizedException

logger = logging.getLogger(__name__)


class FlashDescriptor(NamedTuple):
    """Flash memory geometry of one chip family."""
    name: str
    addr: int
    pages: int
    size: int
    planes: int
    lock_regions: int
    user: int
    stack: int

    @property
    def total_size(self) -> int:
        return self.pages * self.size


def lookup_flash(name: str) -> Optional[FlashDescriptor]:
    """
    Look up a chip family by its exact identity string.

    Args:
        name: Identity string reported by the device

    Returns:
        The flash descriptor, or None if the family is unknown
    """
    defs = CHIP_DEFS.get(name)
    if defs is None:
        return None
    return FlashDescriptor(name=name, **defs)


def identify_chip(transport, capabilities, port_name: str) -> FlashDescriptor:
    """
    Ask the device for its chip family and resolve its flash layout.

    Args:
        transport: Line transport to the device
        capabilities: Capabilities negotiated with the device
        port_name: Serial port name, used in the error message

    Returns:
        Flash descriptor of the attached chip

    Raises:
        DeviceNotRecognizedException: If the device cannot identify itself
            or reports an unknown family
    """
    if not capabilities.identify_chip:
        logger.debug("Device does not support chip identification")
        raise DeviceNotRecognizedException(port_name)

    transport.send(Protocol.IDENTIFY_CMD)
    family = transport.read_str()
    flash = lookup_flash(family)
    if flash is None:
        logger.debug(f"Unknown chip family {family!r}")
        raise DeviceNotRecognizedException(port_name)
    return flash
