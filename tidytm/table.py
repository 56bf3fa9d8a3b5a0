"""
Transformations for *tidy tables*, i.e. pandas DataFrames with one observation per row and one variable per column.

All functions return a new DataFrame with a fresh ``RangeIndex`` and never modify their input. Required columns are
checked at runtime; a missing column raises :class:`~tidytm.errors.SchemaMismatch`. Joins always require explicit
join keys.

Unless noted otherwise, the order of rows is retained, and newly formed groups are output in order of their first
occurrence.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from . import defaults
from .errors import DuplicateKey
from .tokenseq import token_match_multi_pattern
from .types import Columns, JoinBy
from .utils import as_column_list, group_codes, require_columns

logger = logging.getLogger('tidytm')

_ROW_ORDER_COL = '__row_order__'


#%% filtering


def filter_rows(df: pd.DataFrame, predicate: Union[Callable[[pd.DataFrame], Any], Sequence[bool], np.ndarray]) \
        -> pd.DataFrame:
    """
    Keep only the rows of `df` for which `predicate` is True. `predicate` is either a boolean mask of length
    ``len(df)`` or a function that accepts the data frame and returns such a mask, e.g.::

        filter_rows(tokens, lambda d: d['word'].str.len() > 3)

    :param df: pandas DataFrame
    :param predicate: boolean mask or function that returns a boolean mask
    :return: new DataFrame with the matching rows in original order
    """
    mask = predicate(df) if callable(predicate) else predicate
    mask = np.asarray(mask)
    if mask.dtype == object and all(isinstance(m, (bool, np.bool_)) for m in mask):
        mask = mask.astype(bool)    # e.g. empty object series or nullable boolean without missing values

    if mask.dtype != bool or mask.shape != (len(df), ):
        raise ValueError('`predicate` must be or must produce a boolean mask of length %d' % len(df))

    return df.loc[mask].reset_index(drop=True)


def filter_tokens(df: pd.DataFrame, column: str, patterns: Any, match_type: str = 'exact',
                  ignore_case: bool = False, glob_method: str = 'match', inverse: bool = False) -> pd.DataFrame:
    """
    Keep only the rows of `df` whose value in `column` matches any of the patterns in `patterns`. Set `inverse` to
    True to instead remove the matching rows.

    .. seealso:: :func:`~tidytm.tokenseq.token_match` for the matching options

    :param df: pandas DataFrame, e.g. a token table
    :param column: column to match against
    :param patterns: single pattern or list of patterns
    :param match_type: one of: 'exact', 'regex', 'glob'
    :param ignore_case: if True, ignore case for matching
    :param glob_method: if `match_type` is 'glob', use this glob method. Must be 'match' or 'search'
    :param inverse: if True, remove matching rows instead of keeping them
    :return: new DataFrame
    """
    require_columns(df, [column])

    mask = token_match_multi_pattern(patterns, df[column].tolist(), match_type=match_type, ignore_case=ignore_case,
                                     glob_method=glob_method)
    if inverse:
        mask = ~mask

    return filter_rows(df, mask)


#%% counting


def count(df: pd.DataFrame, by: Columns, sort: bool = False, name: Optional[str] = None,
          wt: Optional[str] = None) -> pd.DataFrame:
    """
    Group `df` by the column(s) `by` and count the rows in each group. The result contains one row per distinct key
    combination with the key columns and a count column `name`. If `wt` is given, the values in this column are
    summed up instead of counting rows.

    Groups are output in order of their first occurrence, unless `sort` is True. In this case, groups are sorted
    in descending order by their count, ties are sorted by the key columns in ascending order.

    Example::

        tokens = pd.DataFrame({'document': ['d1', 'd1', 'd1'], 'word': ['a', 'a', 'b']})
        count(tokens, ['document', 'word'])
        #   document word  n
        # 0       d1    a  2
        # 1       d1    b  1

    :param df: pandas DataFrame
    :param by: column name or list of column names to group by
    :param sort: if True, sort by count as described above
    :param name: name of the count column; default is :data:`tidytm.defaults.count_col`
    :param wt: optional column with weights to sum up instead of counting
    :return: new DataFrame with key columns and count column
    """
    by_cols = as_column_list(by)
    if not by_cols:
        raise ValueError('at least one column to group by must be given')

    name = name or defaults.count_col
    if name in by_cols:
        raise ValueError('count column name %r must not be one of the grouping columns' % name)

    require_columns(df, by_cols + ([wt] if wt else []))

    grouped = df.groupby(group_codes(df, by_cols))
    counts = grouped[wt].sum() if wt else grouped.size()
    res = df[by_cols].drop_duplicates().reset_index(drop=True)
    res[name] = counts.to_numpy()

    if sort:
        res = res.sort_values([name] + by_cols, ascending=[False] + [True] * len(by_cols), kind='mergesort')

    return res.reset_index(drop=True)


def pairwise_count(df: pd.DataFrame, item: str, feature: Columns, sort: bool = False, upper: bool = True,
                   diag: bool = False, name: Optional[str] = None) -> pd.DataFrame:
    """
    Count how often pairs of items in column `item` occur together within the same group of `feature`, e.g. how
    often two words occur in the same section of text. Each item is counted at most once per feature group. The
    result has the columns ``item1``, ``item2`` and the count column `name`.

    :param df: pandas DataFrame
    :param item: column with the items to pair
    :param feature: column name(s) that define the groups in which items co-occur
    :param sort: if True, sort by count in descending order (ties by items in ascending order)
    :param upper: if True, report each pair in both orders (``(a, b)`` and ``(b, a)``), otherwise only the pair
                  in which ``item1 < item2``
    :param diag: if True, include pairs of an item with itself
    :param name: name of the count column; default is :data:`tidytm.defaults.count_col`
    :return: new DataFrame with columns ``item1``, ``item2`` and count column
    """
    feature_cols = as_column_list(feature)
    require_columns(df, [item] + feature_cols)

    pairs = df[[item] + feature_cols].drop_duplicates()
    merged = inner_join(pairs.rename(columns={item: 'item1'}), pairs.rename(columns={item: 'item2'}), by=feature_cols)

    if not diag:
        merged = merged.loc[merged['item1'] != merged['item2']]
    if not upper:
        merged = merged.loc[merged['item1'] <= merged['item2']]

    return count(merged, ['item1', 'item2'], sort=sort, name=name)


def bind_tf_idf(df: pd.DataFrame, term: Optional[str] = None, document: Optional[Columns] = None,
                n: Optional[str] = None) -> pd.DataFrame:
    """
    Add term frequency (``tf``), inverse document frequency (``idf``) and their product (``tf_idf``) to a table of
    term counts per document. The term frequency is the count divided by the total count of the document, the inverse
    document frequency is ``log(N / df)`` with ``N`` being the number of documents in `df` and ``df`` being the number
    of documents that contain the term.

    :param df: pandas DataFrame with one row per document and term
    :param term: term column; default is :data:`tidytm.defaults.term_col`
    :param document: document key column(s); default is :data:`tidytm.defaults.document_col`
    :param n: count column; default is :data:`tidytm.defaults.count_col`
    :return: new DataFrame with additional columns ``tf``, ``idf`` and ``tf_idf``
    """
    term = term or defaults.term_col
    doc_cols = as_column_list(document or defaults.document_col)
    n = n or defaults.count_col
    require_columns(df, doc_cols + [term, n])

    res = df.reset_index(drop=True)
    doc_totals = res.groupby(doc_cols, sort=False, dropna=False)[n].transform('sum')
    n_docs = len(res[doc_cols].drop_duplicates())
    docs_per_term = res[doc_cols + [term]].drop_duplicates().groupby(term, sort=False).size()

    res['tf'] = res[n] / doc_totals
    res['idf'] = np.log(n_docs / res[term].map(docs_per_term).astype(float))
    res['tf_idf'] = res['tf'] * res['idf']

    return res


#%% joins


def anti_join(df: pd.DataFrame, other: pd.DataFrame, by: JoinBy) -> pd.DataFrame:
    """
    Keep only the rows of `df` whose join key does *not* appear in `other`. This is for example used to remove
    stopwords from a token table::

        anti_join(tokens, stopwords_table, by='word')

    :param df: pandas DataFrame
    :param other: pandas DataFrame to compare with
    :param by: join key as column name shared by both tables, list of such names or dict mapping column names in `df`
               to column names in `other`
    :return: new DataFrame with the remaining rows of `df` in original order
    """
    return filter_rows(df, ~_key_membership(df, other, by))


def semi_join(df: pd.DataFrame, other: pd.DataFrame, by: JoinBy) -> pd.DataFrame:
    """
    Keep only the rows of `df` whose join key appears in `other`. In contrast to :func:`inner_join`, rows of `df`
    are never duplicated and no columns of `other` are added.

    :param df: pandas DataFrame
    :param other: pandas DataFrame to compare with
    :param by: join key; see :func:`anti_join`
    :return: new DataFrame with the matching rows of `df` in original order
    """
    return filter_rows(df, _key_membership(df, other, by))


def inner_join(df: pd.DataFrame, other: pd.DataFrame, by: JoinBy, suffixes: Tuple[str, str] = ('.x', '.y')) \
        -> pd.DataFrame:
    """
    Join `df` and `other` on the explicitly given join key `by` and keep only rows whose key appears in both tables.
    Duplicate keys produce all combinations of matching rows. The order of rows in `df` is retained. When key columns
    are named differently in both tables, only the key columns of `df` are kept. Other columns that appear in both
    tables are disambiguated by `suffixes`.

    Example::

        inner_join(tokens, get_sentiments('bing'), by='word')
        inner_join(tokens, lexicon, by={'token': 'word'})

    :param df: left pandas DataFrame
    :param other: right pandas DataFrame
    :param by: join key as column name shared by both tables, list of such names or dict mapping column names in `df`
               to column names in `other`
    :param suffixes: suffixes for non-key columns that appear in both tables
    :return: new DataFrame
    """
    return _merge(df, other, by, 'inner', suffixes)


def left_join(df: pd.DataFrame, other: pd.DataFrame, by: JoinBy, suffixes: Tuple[str, str] = ('.x', '.y')) \
        -> pd.DataFrame:
    """
    Same as :func:`inner_join`, but retain all rows of `df`. Rows without a match in `other` get missing values in
    the columns added from `other`.

    :param df: left pandas DataFrame
    :param other: right pandas DataFrame
    :param by: join key; see :func:`inner_join`
    :param suffixes: suffixes for non-key columns that appear in both tables
    :return: new DataFrame
    """
    return _merge(df, other, by, 'left', suffixes)


#%% reshaping


def pivot_wider(df: pd.DataFrame, names_from: str, values_from: str, id_cols: Optional[Columns] = None,
                values_fill: Any = None, values_fn: Optional[Union[str, Callable]] = None) -> pd.DataFrame:
    """
    Reshape `df` from "long" to "wide" format: each distinct value in column `names_from` becomes a new column whose
    cells are taken from column `values_from`. Rows are identified by the column(s) `id_cols`, which default to all
    columns except `names_from` and `values_from`. Cells without a value get `values_fill` (or a missing value if
    `values_fill` is None). Rows and new columns appear in order of first occurrence.

    If more than one row maps to the same cell, `values_fn` must be given to aggregate them (e.g. ``'sum'``),
    otherwise :class:`~tidytm.errors.DuplicateKey` is raised.

    Example::

        # sentiment counts per chapter with columns "chapter", "sentiment", "n"
        pivot_wider(counts, names_from='sentiment', values_from='n', values_fill=0)
        #    chapter  negative  positive
        # 0        1        12        20
        # 1        2         9         0

    :param df: pandas DataFrame in long format
    :param names_from: column whose values become the new column names
    :param values_from: column whose values fill the new columns
    :param id_cols: column name(s) that identify each output row
    :param values_fill: value for missing cells
    :param values_fn: aggregation function (or its name as understood by pandas) for cells with several values
    :return: new DataFrame in wide format
    """
    if id_cols is None:
        id_cols = [c for c in df.columns if c not in (names_from, values_from)]
    else:
        id_cols = as_column_list(id_cols)

    if not id_cols:
        raise ValueError('at least one id column is required')

    cell_cols = id_cols + [names_from]
    require_columns(df, cell_cols + [values_from])

    if values_fn is None:
        dupl = df.duplicated(subset=cell_cols)
        if dupl.any():
            key = tuple(df.loc[dupl, cell_cols].iloc[0])
            raise DuplicateKey(key, 'in columns %s; pass `values_fn` to aggregate multiple values per cell'
                               % ', '.join(cell_cols))
        cells = df[cell_cols + [values_from]]
    else:
        cells = df.groupby(cell_cols, sort=False, dropna=False, observed=True)[values_from].agg(values_fn)\
            .reset_index()

    if len(cells) == 0:
        return cells[id_cols].reset_index(drop=True)

    row_codes = group_codes(cells, id_cols)
    col_codes = group_codes(cells, names_from)
    row_keys = cells[id_cols].drop_duplicates().reset_index(drop=True)
    new_cols = cells[names_from].drop_duplicates().tolist()

    cell_values = pd.Series(cells[values_from].to_numpy(), index=pd.MultiIndex.from_arrays([row_codes, col_codes]))
    wide = cell_values.unstack(fill_value=values_fill).reset_index(drop=True)
    wide.columns = new_cols

    return pd.concat([row_keys, wide], axis=1)


def pivot_longer(df: pd.DataFrame, cols: Columns, names_to: str = 'name', values_to: str = 'value') \
        -> pd.DataFrame:
    """
    Reshape `df` from "wide" to "long" format: the columns `cols` are turned into a column `names_to` with the
    former column names and a column `values_to` with the former cell values. All other columns are repeated. The
    output is ordered by original row and then by the order of `cols`.

    :param df: pandas DataFrame in wide format
    :param cols: column name(s) to turn into rows
    :param names_to: name of the new column holding the former column names
    :param values_to: name of the new column holding the former cell values
    :return: new DataFrame in long format
    """
    cols = as_column_list(cols)
    if not cols:
        raise ValueError('at least one column to pivot must be given')
    require_columns(df, cols)

    id_cols = [c for c in df.columns if c not in cols]
    long = df.reset_index(drop=True).melt(id_vars=id_cols, value_vars=cols, var_name=names_to, value_name=values_to,
                                          ignore_index=False)

    # melt stacks column by column; a stable sort by the original row index gives row-by-row order
    return long.sort_index(kind='mergesort').reset_index(drop=True)


def top_n(df: pd.DataFrame, n: int, order_by: str, group_by: Optional[Columns] = None) -> pd.DataFrame:
    """
    Keep the rows with the `n` largest values in column `order_by`, optionally within each group defined by
    `group_by`. Rows that tie with the `n`-th largest value are kept as well, so that more than `n` rows per group may
    be returned. The original row order is retained; rows with missing values in `order_by` are dropped.

    Example::

        df = pd.DataFrame({'x': [5, 5, 5, 3, 2]})
        top_n(df, 2, 'x')
        #    x
        # 0  5
        # 1  5
        # 2  5

    :param df: pandas DataFrame
    :param n: number of top values to keep per group
    :param order_by: column with values to rank
    :param group_by: optional column name(s) that define groups
    :return: new DataFrame
    """
    if not isinstance(n, (int, np.integer)) or n < 1:
        raise ValueError('`n` must be an integer >= 1')

    group_cols = as_column_list(group_by)
    require_columns(df, [order_by] + group_cols)

    if group_cols:
        ranks = df.groupby(group_cols, sort=False, dropna=False)[order_by].rank(method='min', ascending=False)
    else:
        ranks = df[order_by].rank(method='min', ascending=False)

    return filter_rows(df, (ranks <= n).to_numpy())


def separate(df: pd.DataFrame, col: str, into: Sequence[str], sep: str = '_', remove: bool = True,
             convert: bool = False) -> pd.DataFrame:
    """
    Split the values in column `col` by the fixed separator `sep` into the columns `into`, e.g. to split a composite
    document key like ``"Emma_12"`` into a ``book`` and a ``chapter`` column. The last column receives the remainder
    if there are more separators than expected; missing parts are filled with missing values. The new columns are
    inserted at the position of `col`.

    :param df: pandas DataFrame
    :param col: column to split
    :param into: names of the new columns
    :param sep: fixed (non-regex) separator string
    :param remove: if True, remove `col` from the result
    :param convert: if True, convert each new column to a numeric type when all of its values allow this
    :return: new DataFrame
    """
    into = as_column_list(into)
    if not into:
        raise ValueError('`into` must contain at least one column name')
    if not sep:
        raise ValueError('`sep` must be a non-empty string')

    require_columns(df, [col])

    res = df.reset_index(drop=True)
    values = res[col].astype(object)
    values = values.where(values.isna(), values.astype(str))

    if len(res) > 0 and values.notna().any():
        parts = values.str.split(sep, n=len(into) - 1, expand=True, regex=False)
    else:
        parts = pd.DataFrame(index=res.index)
    parts = parts.reindex(columns=range(len(into)))
    parts.columns = into

    if convert:
        for c in into:
            parts[c] = _maybe_numeric(parts[c])

    pos = res.columns.get_loc(col)
    if remove:
        res = res.drop(columns=[col])
    else:
        pos += 1

    return pd.concat([res.iloc[:, :pos], parts, res.iloc[:, pos:]], axis=1)


def unite(df: pd.DataFrame, col: str, cols: Sequence[str], sep: str = '_', remove: bool = True) -> pd.DataFrame:
    """
    Join the values of columns `cols` into a single string column `col` using separator `sep`. This is the inverse
    of :func:`separate`. The new column is inserted at the position of the first column in `cols`.

    :param df: pandas DataFrame
    :param col: name of the new column
    :param cols: columns to join
    :param sep: separator string
    :param remove: if True, remove the columns `cols` from the result
    :return: new DataFrame
    """
    cols = as_column_list(cols)
    if not cols:
        raise ValueError('`cols` must contain at least one column name')

    require_columns(df, cols)

    res = df.reset_index(drop=True)
    united = [sep.join(map(str, row)) for row in res[cols].itertuples(index=False, name=None)]
    pos = res.columns.get_loc(cols[0])

    if remove:
        res = res.drop(columns=cols)

    res.insert(pos, col, pd.Series(united, dtype=object))

    return res


#%% helper functions


def _join_columns(by: JoinBy) -> Tuple[List[str], List[str]]:
    if isinstance(by, dict):
        if not by:
            raise ValueError('`by` must not be empty')
        return list(by.keys()), list(by.values())

    cols = as_column_list(by)
    if not cols:
        raise ValueError('`by` must not be empty')

    return cols, cols


def _key_membership(df: pd.DataFrame, other: pd.DataFrame, by: JoinBy) -> np.ndarray:
    left_cols, right_cols = _join_columns(by)
    require_columns(df, left_cols, 'left table')
    require_columns(other, right_cols, 'right table')

    if len(left_cols) == 1:
        return df[left_cols[0]].isin(other[right_cols[0]]).to_numpy()
    else:
        # merge matches missing values in keys with each other, like `isin` does for a single column
        right = other[right_cols].drop_duplicates()
        right.columns = left_cols
        matched = df[left_cols].merge(right, how='left', on=left_cols, indicator=True)['_merge']
        return (matched == 'both').to_numpy()


def _merge(df: pd.DataFrame, other: pd.DataFrame, by: JoinBy, how: str, suffixes: Tuple[str, str]) -> pd.DataFrame:
    left_cols, right_cols = _join_columns(by)
    require_columns(df, left_cols, 'left table')
    require_columns(other, right_cols, 'right table')

    # rows of the result follow the rows of the left table
    left = df.assign(**{_ROW_ORDER_COL: np.arange(len(df))})

    if left_cols == right_cols:
        res = left.merge(other, on=left_cols, how=how, suffixes=suffixes, sort=False)
    else:
        res = left.merge(other, left_on=left_cols, right_on=right_cols, how=how, suffixes=suffixes, sort=False)
        drop_cols = [r for l, r in zip(left_cols, right_cols)
                     if r != l and r not in df.columns and r in res.columns]
        res = res.drop(columns=drop_cols)

    res = res.sort_values(_ROW_ORDER_COL, kind='mergesort').drop(columns=_ROW_ORDER_COL)

    logger.debug('%s join of %d and %d rows resulted in %d rows', how, len(df), len(other), len(res))

    return res.reset_index(drop=True)


def _maybe_numeric(values: pd.Series) -> pd.Series:
    try:
        return pd.to_numeric(values)
    except (ValueError, TypeError):
        return values
