"""
Configuration module for rumbac.
Contains chip definitions and constants used by the programmer.
"""

# Serial line defaults
DEFAULT_BAUDRATE = 230400
DEFAULT_TIMEOUT = 1.0

# Flash layout of every chip family the bootloader can report on 'I#'
CHIP_DEFS = {
    'nRF52840-QIAA': {
        'addr': 0,
        'pages': 256,
        'size': 4096,
        'planes': 1,
        'lock_regions': 0,
        'user': 0,
        'stack': 0,
    },
}

# Capability letters found inside the version reply
CAPABILITY_CODES = {
    'I': 'identify_chip',
    'K': 'reset',
    'X': 'chip_erase',
    'Y': 'write_buffer',
    'Z': 'checksum_buffer',
}


class Protocol:
    """Constants for the SAM-BA style bootloader protocol."""
    # Commands
    VERSION_CMD = 'V#'
    IDENTIFY_CMD = 'I#'
    BINARY_MODE_CMD = 'N#'
    RESET_CMD = 'K#'
    READ_BYTE_CMD = 'o{:08X},4#'
    READ_CMD = 'R{:08X},{:08X}#'
    SEND_BUFFER_CMD = 'S{:08X},{:08X}#'
    WRITE_BUFFER_CMD = 'Y{:08X},{:08X}#'

    # Acknowledgements
    BINARY_MODE_ACK = b'\n\r'
    WRITE_BUFFER_ACK = b'Y\n\r'

    # Markers around the capability tag in the version reply
    CAPABILITY_PREFIX = '[Arduino:'
    CAPABILITY_SUFFIX = ']'

    # Buffer size limitations
    CHUNK_SIZE = 4096
    MAX_REPLY_SIZE = 256

    # Bulk reads of power-of-two sizes above this are split (firmware bug)
    READ_QUIRK_MIN_SIZE = 32

    # Pause between partial writes, in seconds
    WRITE_DELAY = 0.001
