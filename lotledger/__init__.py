"""lotledger: FIFO lot ledger for a single fungible asset."""

__version__ = "0.1.0"
