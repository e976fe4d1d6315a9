"""
MedStock
Inventory ledger API for a medical supply operation
"""

__version__ = "1.0.0"
