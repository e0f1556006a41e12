"""
Methods for writing compact size data
"""
from bitkey.core import TX, WriteError

__all__ = ["write_compact_size", "push_data"]


def write_compact_size(num: int) -> bytes:
    """
    Given an integer we return its CompactSize encoding
    """
    if num < 0 or num > TX.MAX_COMPACTSIZE:
        raise WriteError("Given number out of bounds for CompactSize encoding")

    if num <= 0xfc:  # One byte
        return num.to_bytes(1, "little")
    elif num <= 0xffff:  # Two bytes
        return b'\xfd' + num.to_bytes(2, "little")
    elif num <= 0xffffffff:  # Four bytes
        return b'\xfe' + num.to_bytes(4, "little")
    else:  # Eight bytes
        return b'\xff' + num.to_bytes(8, "little")


def push_data(data: bytes) -> bytes:
    """
    Script push of data: direct push up to 75 bytes, OP_PUSHDATA1/2 beyond
    """
    length = len(data)
    if length <= 0x4b:
        return length.to_bytes(1, "little") + data
    elif length <= 0xff:
        return b'\x4c' + length.to_bytes(1, "little") + data
    elif length <= 0xffff:
        return b'\x4d' + length.to_bytes(2, "little") + data
    raise WriteError("Push data too large for script")
