"""
Programmer module for rumbac.
Handles a bootloader session with the device over a serial port.
"""

import logging
from typing import BinaryIO, Optional, Tuple

import serial
from tqdm import tqdm

from .capabilities import Capabilities, negotiate
from .chips import FlashDescriptor, identify_chip
from .config import DEFAULT_BAUDRATE, DEFAULT_TIMEOUT, Protocol
from .exceptions import (
    SerialConnectionException,
    MissingCapabilityException
)
from .flash import FlashReader, FlashWriter
from .transport import LineTransport

logger = logging.getLogger(__name__)


class Programmer:
    """Flash programmer for SAM-BA style bootloaders over a serial port."""

    def __init__(self, port_name: str, baudrate: int = DEFAULT_BAUDRATE,
                 timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the programmer with the specified serial port.

        Args:
            port_name: Serial port name
            baudrate: Serial baud rate
            timeout: Read and write timeout in seconds
        """
        self.port_name = port_name
        self.baudrate = baudrate
        self.timeout = timeout
        self.serial_port = None
        self.transport: Optional[LineTransport] = None
        self.capabilities: Optional[Capabilities] = None
        self.flash: Optional[FlashDescriptor] = None

    def open_connection(self) -> bool:
        """
        Open the serial port connection.

        Returns:
            True if connection was opened successfully

        Raises:
            SerialConnectionException: If the port cannot be opened
        """
        try:
            self.serial_port = serial.Serial(
                port=self.port_name,
                baudrate=self.baudrate,
                timeout=self.timeout,
                write_timeout=self.timeout,
            )
        except serial.SerialException as e:
            logger.debug(f"Error opening serial port: {e}")
            raise SerialConnectionException(self.port_name, str(e))
        logger.debug(f"Opened serial port {self.port_name} at {self.baudrate} baud")
        self.transport = LineTransport(self.serial_port)
        return self.serial_port.is_open

    def close_connection(self) -> None:
        """Close the serial port connection."""
        if self.serial_port and self.serial_port.is_open:
            self.serial_port.close()
            logger.debug("Serial port closed")
        self.serial_port = None
        self.transport = None

    def handshake(self) -> Tuple[Capabilities, FlashDescriptor]:
        """
        Negotiate capabilities and identify the attached chip.

        Returns:
            Tuple of (capabilities, flash descriptor)

        Raises:
            DeviceNotRecognizedException: If the chip cannot be identified
            TransportFaultException: On a serial line failure
            ProtocolViolationException: On an unexpected reply
        """
        capabilities = negotiate(self.transport)
        flash = identify_chip(self.transport, capabilities, self.port_name)
        self.capabilities = capabilities
        self.flash = flash
        logger.info(f"Found {flash.name} with {flash.pages} pages of {flash.size} bytes")
        return capabilities, flash

    def read_flash(self) -> FlashReader:
        """
        Switch the device to binary mode and open a stream over its flash.

        Returns:
            Readable stream covering the whole flash
        """
        self.transport.send(Protocol.BINARY_MODE_CMD)
        self.transport.expect(Protocol.BINARY_MODE_ACK)
        return FlashReader(self.transport, self.flash)

    def dump_firmware(self, output: BinaryIO, progress: bool = True) -> int:
        """
        Copy the whole flash of the device into a binary stream.

        Args:
            output: Writable binary stream
            progress: Whether to show a progress bar

        Returns:
            Number of bytes copied
        """
        reader = self.read_flash()
        total = 0
        logger.info(f"Reading flash at address {self.flash.addr:#010x} "
                    f"with length {self.flash.total_size:#010x}")
        with tqdm(total=self.flash.total_size, unit='B', unit_scale=True, desc='Reading',
                  disable=not progress) as pbar:
            while True:
                data = reader.read(self.flash.size)
                if not data:
                    break
                output.write(data)
                total += len(data)
                pbar.update(len(data))
        logger.info("Flash read successful")
        return total

    def write_firmware(self, source: BinaryIO, progress: bool = True) -> int:
        """
        Program a firmware image into flash.

        Args:
            source: Seekable binary stream holding the image
            progress: Whether to show a progress bar

        Returns:
            Number of bytes programmed, including page padding

        Raises:
            MissingCapabilityException: If the device has no write buffer
            InputTooLargeException: If the image does not fit into flash
        """
        writer = FlashWriter(self.transport, self.capabilities, self.flash)
        written = writer.write(source, progress=progress)
        logger.info(f"Firmware written, {written} bytes")
        return written

    def reset(self) -> None:
        """
        Make the device leave the bootloader and run its firmware.

        Raises:
            MissingCapabilityException: If the device cannot be reset
        """
        if not self.capabilities.reset:
            raise MissingCapabilityException('reset')
        self.transport.send(Protocol.RESET_CMD)
        logger.info("Reset command sent")
