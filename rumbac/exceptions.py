"""
Exception classes for rumbac.
"""

class RumbacException(Exception):
    """Base exception class for rumbac."""
    def __init__(self, message):
        super().__init__(message)


class TransportFaultException(RumbacException):
    """Exception raised when reading from or writing to the serial line fails."""
    def __init__(self, message):
        super().__init__(f'Transport fault: {message}')


class SerialConnectionException(TransportFaultException):
    """Exception raised when the serial port cannot be opened."""
    def __init__(self, port, message):
        self.port = port
        super().__init__(f'cannot open port {port}: {message}')


class ProtocolViolationException(RumbacException):
    """Exception raised when the device replies with something unexpected."""
    def __init__(self, message):
        super().__init__(f'Protocol violation: {message}')


class CapabilityCodeException(ProtocolViolationException):
    """Exception raised when the capability tag holds an unknown code."""
    def __init__(self, code):
        self.code = code
        super().__init__(f'unrecognized capability code {bytes([code])!r}')


class MissingCapabilityException(ProtocolViolationException):
    """Exception raised when an operation needs a capability the device lacks."""
    def __init__(self, capability):
        self.capability = capability
        super().__init__(f'device does not support {capability}')


class DeviceNotRecognizedException(RumbacException):
    """Exception raised when the attached chip cannot be identified."""
    def __init__(self, port):
        self.port = port
        super().__init__(f'Device at {port!r} not recognized')


class InputTooLargeException(RumbacException):
    """Exception raised when a firmware image does not fit into flash."""
    def __init__(self, size, capacity):
        self.size = size
        self.capacity = capacity
        super().__init__(f'Firmware image of {size} bytes exceeds flash size of {capacity} bytes')
