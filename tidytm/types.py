"""
Module with common types used in type annotations throughout this project.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

from typing import Any, Callable, Dict, List, Sequence, Tuple, Union


StrOrInt = Union[str, int]

#: one column name or a sequence of column names (e.g. for composite document keys)
Columns = Union[str, Sequence[str]]

#: join key specification: a shared column name, a list of shared column names or a mapping from column names in
#: the left table to column names in the right table
JoinBy = Union[str, Sequence[str], Dict[str, str]]

#: documents passed to :func:`~tidytm.tokenize.tokenize`
DocKey = Union[StrOrInt, Tuple[Any, ...]]
DocText = Union[str, Sequence[str]]
Documents = Union[Dict[DocKey, DocText], Sequence[Tuple[DocKey, DocText]]]

#: tokenization unit: a unit name or a custom function that maps a text to a list of tokens
TokenUnit = Union[str, Callable[[str], List[str]]]
