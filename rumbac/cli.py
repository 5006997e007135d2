"""
Command-line interface module for rumbac.
"""

import argparse
import logging
import sys
from typing import List

from serial.tools import list_ports

from .config import DEFAULT_BAUDRATE
from .exceptions import (
    RumbacException,
    DeviceNotRecognizedException
)
from .programmer import Programmer

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """
    Set up logging configuration.

    Args:
        verbose: Whether to enable verbose logging, including the wire trace
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )


def parse_args(args: List[str] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments (optional)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Flash tool for SAM-BA style Arduino bootloaders")
    parser.add_argument("-p", "--port", help="Serial port name")
    parser.add_argument("-b", "--baudrate", type=int, default=DEFAULT_BAUDRATE,
                        help=f"Serial baud rate (default {DEFAULT_BAUDRATE})")
    parser.add_argument("-v", "--verbose", help="Enable verbose logging", action="store_true")

    subparsers = parser.add_subparsers(dest='command', help='Operations')

    subparsers.add_parser('list', help='List available serial ports')
    subparsers.add_parser('info', help='Show device capabilities and flash layout')

    read_parser = subparsers.add_parser('read', help='Read the whole flash into a file')
    read_parser.add_argument('file', help='Location of the output file')

    write_parser = subparsers.add_parser('write', help='Write a firmware image into flash')
    write_parser.add_argument('file', help='Location of the firmware image')

    subparsers.add_parser('reset', help='Leave the bootloader and run the firmware')

    parsed = parser.parse_args(args)
    if parsed.command is None:
        parsed.command = 'list'
    return parsed


def handle_list() -> bool:
    ports = list_ports.comports()
    print(f"Found {len(ports)} serial ports.")
    for port in ports:
        print(f"port: {port.device} ({port.description})")
    return True


def handle_info(programmer: Programmer) -> bool:
    capabilities, flash = programmer.capabilities, programmer.flash
    print(f"capabilities: {capabilities.codes()}")
    for name, value in capabilities._asdict().items():
        print(f"  {name}: {value}")
    print(f"chip: {flash.name}")
    print(f"  address: {flash.addr:#010x}")
    print(f"  pages: {flash.pages}")
    print(f"  page size: {flash.size}")
    print(f"  planes: {flash.planes}")
    print(f"  lock regions: {flash.lock_regions}")
    print(f"  user: {flash.user:#010x}")
    print(f"  stack: {flash.stack:#010x}")
    return True


def handle_read(args: argparse.Namespace, programmer: Programmer) -> bool:
    """
    Handle read command.

    Args:
        args: Parsed arguments
        programmer: Programmer instance after handshake

    Returns:
        True if successful
    """
    with open(args.file, 'wb') as f:
        size = programmer.dump_firmware(f)
    logger.info(f"{size} bytes saved to {args.file}")
    return True


def handle_write(args: argparse.Namespace, programmer: Programmer) -> bool:
    """
    Handle write command.

    Args:
        args: Parsed arguments
        programmer: Programmer instance after handshake

    Returns:
        True if successful
    """
    with open(args.file, 'rb') as f:
        logger.info(f"Writing {args.file} to address {programmer.flash.addr:#010x}")
        programmer.write_firmware(f)
    return True


def run_command(args: argparse.Namespace) -> bool:
    """
    Run the specified command.

    Args:
        args: Parsed arguments

    Returns:
        True if successful, False otherwise
    """
    if args.command == 'list':
        return handle_list()

    if not args.port:
        logger.error(f"A serial port is required for the {args.command} command")
        return False

    programmer = Programmer(port_name=args.port, baudrate=args.baudrate)
    try:
        programmer.open_connection()

        logger.info("Starting handshake with the device...")
        programmer.handshake()

        if args.command == 'info':
            success = handle_info(programmer)
        elif args.command == 'read':
            success = handle_read(args, programmer)
        elif args.command == 'write':
            success = handle_write(args, programmer)
        elif args.command == 'reset':
            programmer.reset()
            success = True
        else:
            logger.error(f"Unknown command: {args.command}")
            success = False

        if success:
            logger.info("Operation completed successfully")
        return success

    except DeviceNotRecognizedException as e:
        logger.error(str(e))
        return False
    except (RumbacException, OSError) as e:
        logger.error(f"Fatal error: {e}")
        return False
    finally:
        programmer.close_connection()


def main(args: List[str] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        args: Command-line arguments (optional)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = parse_args(args)
    setup_logging(args.verbose)

    if run_command(args):
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
