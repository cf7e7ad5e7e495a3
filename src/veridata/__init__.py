# src/veridata/__init__.py

"""
VeriData Registry
Data-source registry with peer verification, token rewards and feedback ratings.
"""

__version__ = "0.1.0"
__author__ = "VeriData Development Team"

# No direct exports from root; subpackages are accessed explicitly
# e.g., from veridata.registry import DataSourceRegistry
