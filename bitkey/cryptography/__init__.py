"""
Elliptic curve cryptography, hash functions and password encryption
"""
# cryptography/__init__.py

from bitkey.cryptography.cipher import *
from bitkey.cryptography.ecc import *
from bitkey.cryptography.ecdsa import *
from bitkey.cryptography.hash_functions import *
