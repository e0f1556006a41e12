"""
Master keys, derivation paths, credentials and transaction signing
"""
# wallet/__init__.py
from bitkey.wallet.credentials import *
from bitkey.wallet.derivation import *
from bitkey.wallet.key import *
from bitkey.wallet.mnemonic import *
from bitkey.wallet.signer import *
from bitkey.wallet.xkeys import *
