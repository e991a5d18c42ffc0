"""Static typing helpers for ledger scalars.

NewType aliases for the exact integer amounts the contracts compute with.
"""

from typing import NewType

Wei = NewType("Wei", int)  # native token, 18 decimals
AttoUSD = NewType("AttoUSD", int)  # USD, 18 decimals
Timestamp = NewType("Timestamp", int)  # seconds since epoch
Address = NewType("Address", str)
