"""
Bag-of-Words (BoW) sub-package with functions for converting between tidy term count tables and sparse
document-term-matrices (DTMs).

Markus Konrad <markus.konrad@wzb.eu>
"""

from . import dtm
from .dtm import cast_sparse, tidy_dtm
