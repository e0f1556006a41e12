"""
BitKey - hierarchical deterministic key management for BTC, BCH and ETH wallets

    -Generates or imports a master secret (BIP39 mnemonic or extended private key)
    -Protects the master secret at rest with a password
    -Derives account credentials under the wallet path policy
    -Signs transaction proposals
    -Stores wallet records and address keys
"""
# bitkey/__init__.py
from bitkey.core import *
from bitkey.database import *
from bitkey.tx import *
from bitkey.wallet import *
