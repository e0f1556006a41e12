"""
Unsigned transactions, scripts and digests for signing wallet proposals
"""
# tx/__init__.py
from bitkey.tx.proposal import *
from bitkey.tx.scripts import *
from bitkey.tx.sighash import *
from bitkey.tx.tx import *
