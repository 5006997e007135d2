"""
Flash reader and writer for rumbac.
Streams the flash contents out of the device and firmware images into it.
"""

import io
import logging
from typing import BinaryIO

from tqdm import tqdm

from .config import Protocol
from .exceptions import InputTooLargeException, MissingCapabilityException

logger = logging.getLogger(__name__)


def needs_read_quirk(size: int) -> bool:
    """
    Check whether a bulk read of `size` bytes must be split.

    The SAM firmware has a bug reading powers of 2 over 32 bytes via USB.
    Such reads fetch the first byte on its own and then one byte less.
    """
    return size > Protocol.READ_QUIRK_MIN_SIZE and (size & (size - 1)) == 0


def chunk_length(read_size: int, page_size: int, chunk_size: int = Protocol.CHUNK_SIZE) -> int:
    """
    Compute how many bytes of a chunk are sent to the device.

    A full chunk is sent as is. A short final chunk is rounded up to whole
    pages, but never beyond the chunk buffer.

    Args:
        read_size: Number of bytes read from the image for this chunk
        page_size: Flash page size
        chunk_size: Capacity of the chunk buffer

    Returns:
        Logical write length of the chunk
    """
    if read_size >= chunk_size:
        return read_size
    rounded = (read_size + page_size - 1) // page_size * page_size
    return min(rounded, chunk_size)


class FlashReader(io.RawIOBase):
    """
    Readable stream over the whole flash of the device, fetched page by page.

    The stream is lazy and cannot be rewound; it ends after the last page.
    The device must already be in binary mode.
    """

    def __init__(self, transport, flash):
        super().__init__()
        self.transport = transport
        self.flash = flash
        self.page = 0
        self._buf = bytearray(flash.size)
        self._offset = len(self._buf)

    def readable(self) -> bool:
        return True

    def _fill_page(self) -> None:
        address = self.flash.addr + self.page * self.flash.size
        self.page += 1

        size = len(self._buf)
        off = 0
        if needs_read_quirk(size):
            self.transport.send(Protocol.READ_BYTE_CMD.format(address))
            self._buf[0:1] = self.transport.read_exact(1)
            off = 1

        self.transport.send(Protocol.READ_CMD.format(address + off, size - off))
        self._buf[off:] = self.transport.read_exact(size - off)
        self._offset = 0

    def readinto(self, b) -> int:
        if self._offset == len(self._buf):
            if self.page == self.flash.pages:
                return 0
            self._fill_page()

        n = min(len(b), len(self._buf) - self._offset)
        b[:n] = self._buf[self._offset:self._offset + n]
        self._offset += n
        return n


def _remaining_size(source: BinaryIO) -> int:
    pos = source.tell()
    end = source.seek(0, io.SEEK_END)
    source.seek(pos)
    return end - pos


def _read_chunk(source: BinaryIO, size: int) -> bytes:
    buf = b''
    while len(buf) < size:
        data = source.read(size - len(buf))
        if not data:
            break
        buf += data
    return buf


class FlashWriter:
    """Programs a firmware image into flash through the device write buffer."""

    def __init__(self, transport, capabilities, flash, chunk_size: int = Protocol.CHUNK_SIZE):
        """
        Initialize the writer.

        Args:
            transport: Line transport to the device
            capabilities: Capabilities negotiated with the device
            flash: Flash descriptor of the attached chip
            chunk_size: Size of the chunks sent through the write buffer
        """
        self.transport = transport
        self.capabilities = capabilities
        self.flash = flash
        self.chunk_size = chunk_size

    def _write_chunk(self, offset: int, chunk: bytes) -> None:
        length = len(chunk)
        user = self.flash.user

        # Upload into the device write buffer
        self.transport.send(Protocol.SEND_BUFFER_CMD.format(user, length))
        self.transport.send(chunk)

        self.transport.send(Protocol.WRITE_BUFFER_CMD.format(user, 0))
        self.transport.expect(Protocol.WRITE_BUFFER_ACK)

        # Program the buffered bytes into flash
        address = self.flash.addr + offset
        self.transport.send(Protocol.WRITE_BUFFER_CMD.format(address, length))
        self.transport.expect(Protocol.WRITE_BUFFER_ACK)
        logger.debug(f"Chunk of {length} bytes written to address {address:#010x}")

    def write(self, source: BinaryIO, progress: bool = True) -> int:
        """
        Write the rest of `source` into flash, starting at the flash base.

        Resets the device afterwards if it supports it. Written data is not
        read back.

        Args:
            source: Seekable binary stream holding the firmware image
            progress: Whether to show a progress bar

        Returns:
            Number of bytes programmed, including page padding

        Raises:
            MissingCapabilityException: If the device has no write buffer
            InputTooLargeException: If the image does not fit into flash
        """
        if not self.capabilities.write_buffer:
            raise MissingCapabilityException('write_buffer')

        size = _remaining_size(source)
        if size > self.flash.total_size:
            raise InputTooLargeException(size, self.flash.total_size)

        # Enter binary mode
        self.transport.send(Protocol.BINARY_MODE_CMD)
        self.transport.expect(Protocol.BINARY_MODE_ACK)

        offset = 0
        logger.debug(f"Starting firmware write of {size} bytes to address {self.flash.addr:#010x}")
        with tqdm(total=size, unit='B', unit_scale=True, desc='Writing', disable=not progress) as pbar:
            while True:
                data = _read_chunk(source, self.chunk_size)
                if not data:
                    break

                length = chunk_length(len(data), self.flash.size, self.chunk_size)
                chunk = data.ljust(self.chunk_size, b'\0')[:length]
                self._write_chunk(offset, chunk)

                offset += length
                pbar.update(len(data))

        if self.capabilities.reset:
            logger.info("Resetting device")
            self.transport.send(Protocol.RESET_CMD)

        return offset
