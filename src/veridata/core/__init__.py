# src/veridata/core/__init__.py

"""
Core orchestration for VeriData.
Manages configuration and the caller-facing registry service.
"""

from .config import load_config, VeriDataConfig
from .service import VeriDataService, RegistrySnapshot

__all__ = [
    "load_config",
    "VeriDataConfig",
    "VeriDataService",
    "RegistrySnapshot",
]
