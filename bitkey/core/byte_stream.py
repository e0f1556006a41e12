"""
Methods for reading serialized extended keys and signatures
"""
from io import BytesIO
from typing import Union, Optional

from .exceptions import ReadError

__all__ = ["SERIALIZED", "get_stream", "read_stream", "read_int"]

SERIALIZED = Union[bytes, BytesIO]


def get_stream(byte_stream: SERIALIZED) -> BytesIO:
    """Wrap bytes in a BytesIO; pass streams through"""
    if isinstance(byte_stream, bytes):
        return BytesIO(byte_stream)
    elif isinstance(byte_stream, BytesIO):
        return byte_stream
    raise TypeError(f"Expected bytes or BytesIO but received: {type(byte_stream)}")


def read_stream(stream: BytesIO, length: int, data_type: Optional[str] = None) -> bytes:
    """Read exactly `length` bytes or raise ReadError naming the field"""
    data = stream.read(length)
    if len(data) != length:
        field = f" Data type: {data_type}" if data_type else ""
        raise ReadError(f"Error reading stream. Insufficient data.{field}")
    return data


def read_int(stream: BytesIO, length: int, data_type: Optional[str] = None, byteorder: str = "big") -> int:
    return int.from_bytes(read_stream(stream, length, data_type), byteorder)
