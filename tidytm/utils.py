"""
Misc. utility functions.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import logging
from typing import Any, Hashable, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .errors import SchemaMismatch
from .types import Columns


#%% logging

_default_logging_hndlr: Optional[logging.Handler] = None  # default logging handler


def enable_logging(level: int = logging.INFO, fmt: str = '%(asctime)s:%(levelname)s:%(name)s:%(message)s',
                   logging_handler: Optional[logging.Handler] = None, add_logging_handler: bool = True,
                   **stream_hndlr_opts) -> None:
    """
    Enable logging for tidytm package with minimum log level `level` and log message format `fmt`. By default, logs
    to stderr via ``logging.StreamHandler``. You may also pass your own log handler.

    .. seealso:: Currently, only the logging levels INFO and DEBUG are used in tidytm. See the
                 `Python Logging HOWTO guide <https://docs.python.org/3/howto/logging.html>`_ for more information
                 on log levels and formats.

    :param level: minimum log level; default is INFO level
    :param fmt: log message format
    :param logging_handler: pass custom logging handler to be used instead of the default stream handler
    :param add_logging_handler: if True, add the logging handler to the logger
    :param stream_hndlr_opts: optional additional parameters passed to ``logging.StreamHandler``
    """

    global _default_logging_hndlr

    logger = logging.getLogger('tidytm')
    logger.setLevel(level)

    if logging_handler:
        _default_logging_hndlr = logging_handler
    else:
        _default_logging_hndlr = logging.StreamHandler(**stream_hndlr_opts)

    _default_logging_hndlr.setLevel(level)

    if fmt:
        _default_logging_hndlr.setFormatter(logging.Formatter(fmt))

    if add_logging_handler:
        logger.addHandler(_default_logging_hndlr)


def set_logging_level(level: int) -> None:
    """
    Set logging level for tidytm package default logging handler.

    :param level: minimum log level
    """

    logger = logging.getLogger('tidytm')
    logger.setLevel(level)

    if _default_logging_hndlr:
        _default_logging_hndlr.setLevel(level)


def disable_logging() -> None:
    """
    Disable logging for tidytm package.
    """
    set_logging_level(logging.WARNING)  # reset to default level

    if _default_logging_hndlr:
        logger = logging.getLogger('tidytm')
        logger.removeHandler(_default_logging_hndlr)


#%% table schema helpers


def as_column_list(columns: Optional[Columns]) -> List[str]:
    """
    Turn a single column name or a sequence of column names into a list of column names. ``None`` gives an empty
    list.

    :param columns: column name, sequence of column names or None
    :return: list of column names
    """
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    if not isinstance(columns, (list, tuple)):
        raise ValueError('`columns` must be a string or a list/tuple of strings')

    return list(columns)


def require_columns(df: pd.DataFrame, columns: Iterable[str], what: str = 'table') -> None:
    """
    Make sure that data frame `df` contains all columns in `columns`. Raises :class:`~tidytm.errors.SchemaMismatch`
    listing the missing columns otherwise.

    :param df: pandas DataFrame
    :param columns: required column names
    :param what: name of the table used in the error message
    """
    if not isinstance(df, pd.DataFrame):
        raise ValueError('%s must be a pandas DataFrame' % what)

    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaMismatch(missing, what)


def unique_in_order(values: Iterable[Hashable]) -> list:
    """
    Return the unique elements of `values` in order of their first occurrence.

    :param values: iterable of hashable items
    :return: list of unique items
    """
    return list(dict.fromkeys(values))


def group_codes(df: pd.DataFrame, columns: Columns) -> np.ndarray:
    """
    Number the distinct key combinations in column(s) `columns` of `df` in order of their first occurrence. Missing
    values in the key columns form a group of their own, so the numbering is consistent with
    ``df[columns].drop_duplicates()``.

    :param df: pandas DataFrame
    :param columns: key column name(s)
    :return: NumPy array with a zero-based group number for each row
    """
    codes = df.groupby(as_column_list(columns), sort=False, dropna=False, observed=True).ngroup().to_numpy()
    return pd.factorize(codes)[0]


def key_tuples(df: pd.DataFrame, columns: Sequence[str]) -> List[Any]:
    """
    Return the values of the key column(s) `columns` for each row in `df`. For a single key column, this is a list of
    scalars, for multiple key columns a list of tuples.

    :param df: pandas DataFrame
    :param columns: key column name(s)
    :return: list of keys, one per row
    """
    if len(columns) == 1:
        return df[columns[0]].tolist()
    else:
        return list(df[list(columns)].itertuples(index=False, name=None))


def labels_to_frame(labels: Sequence, columns: Columns) -> pd.DataFrame:
    """
    Create a data frame with the key column(s) `columns` from a sequence of (possibly composite) labels. Composite
    labels must be tuples with as many elements as there are `columns`.

    :param labels: sequence of labels
    :param columns: column name for scalar labels or sequence of column names for tuple labels
    :return: pandas DataFrame with one row per label
    """
    cols = as_column_list(columns)

    if len(cols) == 1:
        if isinstance(labels, np.ndarray):
            labels = labels.tolist()
        return pd.DataFrame({cols[0]: list(labels)})
    else:
        labels = [tuple(lbl) if isinstance(lbl, (list, np.ndarray)) else lbl for lbl in labels]
        if any(not isinstance(lbl, tuple) or len(lbl) != len(cols) for lbl in labels):
            raise ValueError('composite labels must be tuples of length %d' % len(cols))
        return pd.DataFrame.from_records(labels, columns=cols)


def flatten_list(l: Iterable[Iterable]) -> list:
    """
    Flatten a 2D sequence `l` to a 1D list and return it.

    :param l: 2D sequence, e.g. list of lists
    :return: flattened list, i.e. a 1D list that concatenates all elements from each list inside `l`
    """
    flat = []
    for x in l:
        flat.extend(x)

    return flat
