"""
Test module for the command-line interface.
"""

import io
import os
import sys
import tempfile
import unittest
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from rumbac import cli

from fake_serial import FakeSerial


class TestParseArgs(unittest.TestCase):

    def test_defaults_to_list(self):
        args = cli.parse_args([])
        self.assertEqual(args.command, 'list')
        self.assertEqual(args.baudrate, 230400)
        self.assertIsNone(args.port)

    def test_read(self):
        args = cli.parse_args(['-p', '/dev/ttyACM0', '-b', '921600', 'read', 'dump.bin'])
        self.assertEqual(args.command, 'read')
        self.assertEqual(args.port, '/dev/ttyACM0')
        self.assertEqual(args.baudrate, 921600)
        self.assertEqual(args.file, 'dump.bin')


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def run_main(self, argv, fake):
        with patch('rumbac.programmer.serial.Serial', return_value=fake), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout:
            code = cli.main(argv)
        return code, stdout.getvalue()

    def test_list(self):
        port = MagicMock(device='/dev/ttyACM0', description='Feather nRF52840')
        with patch('rumbac.cli.list_ports.comports', return_value=[port]), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout:
            code = cli.main(['list'])
        self.assertEqual(code, 0)
        self.assertIn('Found 1 serial ports.', stdout.getvalue())
        self.assertIn('/dev/ttyACM0', stdout.getvalue())

    def test_port_required(self):
        self.assertEqual(cli.main(['info']), 1)

    def test_info(self):
        fake = FakeSerial()
        code, out = self.run_main(['-p', '/dev/ttyACM0', 'info'], fake)
        self.assertEqual(code, 0)
        self.assertIn('capabilities: IKXYZ', out)
        self.assertIn('chip: nRF52840-QIAA', out)
        self.assertIn('pages: 256', out)
        self.assertFalse(fake.is_open)

    def test_unrecognized_device(self):
        fake = FakeSerial(identity=b'ATSAMD21G18\n\r\0')
        code, _ = self.run_main(['-p', '/dev/ttyACM0', 'info'], fake)
        self.assertEqual(code, 1)
        self.assertFalse(fake.is_open)

    def test_read(self):
        fake = FakeSerial(flash=os.urandom(256 * 4096))
        path = os.path.join(self.tmpdir.name, 'dump.bin')
        code, _ = self.run_main(['-p', '/dev/ttyACM0', 'read', path], fake)
        self.assertEqual(code, 0)
        with open(path, 'rb') as f:
            self.assertEqual(f.read(), bytes(fake.flash))

    def test_write(self):
        fake = FakeSerial()
        image = os.urandom(6000)
        path = os.path.join(self.tmpdir.name, 'firmware.bin')
        with open(path, 'wb') as f:
            f.write(image)

        code, _ = self.run_main(['-p', '/dev/ttyACM0', 'write', path], fake)
        self.assertEqual(code, 0)
        self.assertEqual(fake.flash[:6000], image)
        self.assertEqual(fake.flash[6000:8192], bytes(2192))
        self.assertTrue(fake.reset)

    def test_write_too_large(self):
        fake = FakeSerial()
        path = os.path.join(self.tmpdir.name, 'firmware.bin')
        with open(path, 'wb') as f:
            f.write(bytes(256 * 4096 + 1))

        code, _ = self.run_main(['-p', '/dev/ttyACM0', 'write', path], fake)
        self.assertEqual(code, 1)
        self.assertEqual(fake.commands, ['V', 'I'])

    def test_missing_firmware_file(self):
        fake = FakeSerial()
        path = os.path.join(self.tmpdir.name, 'missing.bin')
        code, _ = self.run_main(['-p', '/dev/ttyACM0', 'write', path], fake)
        self.assertEqual(code, 1)

    def test_reset(self):
        fake = FakeSerial()
        code, _ = self.run_main(['-p', '/dev/ttyACM0', 'reset'], fake)
        self.assertEqual(code, 0)
        self.assertEqual(fake.commands, ['V', 'I', 'K'])


if __name__ == '__main__':
    unittest.main()
