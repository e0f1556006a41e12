"""
Test for CompactSize encoding and script pushes
"""
from random import randint

import pytest

from bitkey.core import WriteError
from bitkey.data import write_compact_size, push_data


def test_write_compactsize():
    """
    We create 4 distinct integers and verify they encode to proper CompactSize format
    """
    cs_1_int = randint(0, 0xfc)
    cs_2_int = randint(0xfd, 0xffff)
    cs_3_int = randint(0x10000, 0xffffffff)
    cs_4_int = randint(0x100000000, 0xffffffffffffffff)

    assert write_compact_size(cs_1_int) == cs_1_int.to_bytes(1, "little"), "CompactSize fails for 1-byte integer"
    assert write_compact_size(cs_2_int) == b'\xfd' + cs_2_int.to_bytes(2, "little"), \
        "CompactSize fails for 2-byte integer"
    assert write_compact_size(cs_3_int) == b'\xfe' + cs_3_int.to_bytes(4, "little"), \
        "CompactSize fails for 4-byte integer"
    assert write_compact_size(cs_4_int) == b'\xff' + cs_4_int.to_bytes(8, "little"), \
        "CompactSize fails for 8-byte integer"

    with pytest.raises(WriteError):
        write_compact_size(-1)


@pytest.mark.parametrize("length, prefix", [(33, b'\x21'), (0x4c, b'\x4c\x4c'), (0x100, b'\x4d\x00\x01')])
def test_push_data(length, prefix):
    data = b'\xab' * length
    assert push_data(data) == prefix + data, f"Wrong push for {length} bytes"
