"""
All methods for manipulating and representing data in BitKey
"""

# data/__init__.py
from bitkey.data.codec import *
from bitkey.data.compact_size import *
from bitkey.data.ecc_keys import *
