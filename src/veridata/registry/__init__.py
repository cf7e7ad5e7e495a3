# src/veridata/registry/__init__.py

"""
Registry layer for VeriData.
Data sources keyed by content hash, their verifiers and the admin gate.
"""

from .schema import DataSourceRecord, VerifierRecord
from .admin import AdminGate
from .verifiers import VerifierRegistry, REPUTATION_INCREMENT
from .datasources import DataSourceRegistry

__all__ = [
    "DataSourceRecord",
    "VerifierRecord",
    "AdminGate",
    "VerifierRegistry",
    "REPUTATION_INCREMENT",
    "DataSourceRegistry",
]
