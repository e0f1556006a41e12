"""
Contains the core elements that are used within BitKey

Core:
    -Provides the reference formats and constants for BitKey
    -Provides custom exceptions for the various BitKey elements
    -Provides stream helpers for deserializing keys and transactions
    -Provides the logger factory
"""
# core/__init__.py
from bitkey.core.byte_stream import *
from bitkey.core.exceptions import *
from bitkey.core.formats import *
from bitkey.core.logging import *
