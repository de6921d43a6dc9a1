"""Ingestion adapters and input parsing."""

from lotledger.ingestion.base import BaseAdapter, ImportResult
from lotledger.ingestion.manual import ManualAdapter
from lotledger.ingestion.parsers import parse_commission, parse_rate

__all__ = ["BaseAdapter", "ImportResult", "ManualAdapter", "parse_commission", "parse_rate"]
