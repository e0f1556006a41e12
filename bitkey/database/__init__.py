"""
Persistence for wallet records and address keys
"""
# database/__init__.py
from bitkey.database.database import *
