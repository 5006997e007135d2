"""
Line transport module for rumbac.
Frames request/response exchanges over an opened serial port.
"""

import logging
import time
from typing import Union

import serial

from .config import Protocol
from .exceptions import TransportFaultException, ProtocolViolationException

logger = logging.getLogger(__name__)


def strip_terminators(raw: bytes) -> bytes:
    """
    Cut a reply at its first NUL byte and drop trailing line terminators.

    Args:
        raw: Reply bytes as read from the line

    Returns:
        The text payload without NUL, CR or LF at its end
    """
    return raw.split(b'\0', 1)[0].rstrip(b'\r\n')


class LineTransport:
    """Blocking, timeout-bounded reads and writes over a serial port."""

    def __init__(self, serial_port):
        """
        Initialize the transport around an already opened port.

        Args:
            serial_port: A serial.Serial instance, or anything with the same
                read/write/flush methods
        """
        self.serial_port = serial_port

    def send(self, command: Union[str, bytes]) -> None:
        """
        Write a command, or raw data, to the device.

        Partial writes are continued after a short pause so the device
        input buffer is not overrun.

        Args:
            command: ASCII command string or raw bytes

        Raises:
            TransportFaultException: If the port reports an error or times out
        """
        if isinstance(command, str):
            logger.debug(f"> {command}")
            data = command.encode('ascii')
        else:
            logger.debug(f"> <{len(command)} raw bytes>")
            data = bytes(command)

        offset = 0
        try:
            while offset < len(data):
                written = self.serial_port.write(data[offset:])
                if not written:
                    raise TransportFaultException(f"write stalled after {offset} of {len(data)} bytes")
                offset += written
                if offset < len(data):
                    time.sleep(Protocol.WRITE_DELAY)
            self.serial_port.flush()
        except serial.SerialException as e:
            raise TransportFaultException(f"error writing to port: {e}")

    def _read_some(self, size: int) -> bytes:
        try:
            data = self.serial_port.read(size)
        except serial.SerialException as e:
            raise TransportFaultException(f"error reading from port: {e}")
        if not data:
            raise TransportFaultException("timed out waiting for device")
        return data

    def read_exact(self, size: int) -> bytes:
        """
        Read exactly `size` bytes, issuing as many reads as needed.

        Args:
            size: Number of bytes to read

        Returns:
            The bytes read

        Raises:
            TransportFaultException: On a port error or read timeout
        """
        buf = bytearray()
        while len(buf) < size:
            buf += self._read_some(size - len(buf))
        logger.debug(f"< <{size} raw bytes>")
        return bytes(buf)

    def read_str(self) -> str:
        """
        Read a NUL terminated text reply.

        Returns:
            Reply text with terminators stripped

        Raises:
            TransportFaultException: On a port error or read timeout
            ProtocolViolationException: If the reply does not fit the reply
                buffer or is not valid UTF-8
        """
        buf = bytearray()
        while True:
            c = self._read_some(1)
            buf += c
            if c == b'\0':
                break
            if len(buf) >= Protocol.MAX_REPLY_SIZE:
                raise ProtocolViolationException(
                    f"reply longer than {Protocol.MAX_REPLY_SIZE} bytes: {bytes(buf)!r}")

        payload = strip_terminators(bytes(buf))
        try:
            line = payload.decode('utf-8')
        except UnicodeDecodeError:
            raise ProtocolViolationException(f"reply is not valid UTF-8: {payload!r}")
        logger.debug(f"< {line}")
        return line

    def expect(self, literal: bytes) -> None:
        """
        Consume a fixed acknowledgement sequence.

        Raises:
            ProtocolViolationException: If the bytes read differ from `literal`
        """
        data = self.read_exact(len(literal))
        if data != literal:
            raise ProtocolViolationException(f"expected {literal!r}, got {data!r}")
