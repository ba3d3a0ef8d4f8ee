"""
app/normalizers package marker.
"""

from app.normalizers.row_normalizer import RowNormalizer

__all__ = ["RowNormalizer"]
