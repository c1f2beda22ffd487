"""
Batch generation of world datasets.
"""

from .generator import WorldDatasetGenerator

__all__ = ["WorldDatasetGenerator"]
