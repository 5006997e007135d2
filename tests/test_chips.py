"""
Test module for chip identification.
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from rumbac.capabilities import Capabilities
from rumbac.chips import FlashDescriptor, identify_chip, lookup_flash
from rumbac.exceptions import DeviceNotRecognizedException
from rumbac.transport import LineTransport

from fake_serial import FakeSerial


class TestChips(unittest.TestCase):

    def test_lookup_nrf52(self):
        flash = lookup_flash('nRF52840-QIAA')
        self.assertEqual(flash, FlashDescriptor(name='nRF52840-QIAA', addr=0, pages=256, size=4096,
                                                planes=1, lock_regions=0, user=0, stack=0))
        self.assertEqual(flash.total_size, 1024 * 1024)

    def test_lookup_is_exact(self):
        self.assertIsNone(lookup_flash('nRF52840'))
        self.assertIsNone(lookup_flash('nrf52840-qiaa'))
        self.assertIsNone(lookup_flash(''))

    def test_identify(self):
        fake = FakeSerial()
        flash = identify_chip(LineTransport(fake), Capabilities(identify_chip=True), '/dev/ttyACM0')
        self.assertEqual(fake.commands, ['I'])
        self.assertEqual((flash.pages, flash.size, flash.addr), (256, 4096, 0))

    def test_identify_unknown_family(self):
        fake = FakeSerial(identity=b'SAMD21G18A\n\r\0')
        with self.assertRaises(DeviceNotRecognizedException) as ctx:
            identify_chip(LineTransport(fake), Capabilities(identify_chip=True), '/dev/ttyACM0')
        self.assertEqual(ctx.exception.port, '/dev/ttyACM0')
        self.assertIn('/dev/ttyACM0', str(ctx.exception))

    def test_identify_without_capability(self):
        fake = FakeSerial()
        with self.assertRaises(DeviceNotRecognizedException):
            identify_chip(LineTransport(fake), Capabilities(write_buffer=True), 'COM3')
        self.assertEqual(fake.commands, [])


if __name__ == '__main__':
    unittest.main()
