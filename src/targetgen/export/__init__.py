"""
Export module for the COCO annotation file of a generation run.
"""

from .coco_ledger import CocoLedger, CocoCategory, CocoInfo

__all__ = [
    'CocoLedger',
    'CocoCategory',
    'CocoInfo'
]
