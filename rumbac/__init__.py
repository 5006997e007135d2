"""
rumbac - A flash tool for SAM-BA style Arduino bootloaders.
"""

from .capabilities import Capabilities
from .chips import FlashDescriptor
from .flash import FlashReader, FlashWriter
from .programmer import Programmer
from .transport import LineTransport
from .exceptions import (
    RumbacException,
    TransportFaultException,
    SerialConnectionException,
    ProtocolViolationException,
    CapabilityCodeException,
    MissingCapabilityException,
    DeviceNotRecognizedException,
    InputTooLargeException
)

__version__ = '0.1.0'
