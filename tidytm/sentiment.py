"""
Sentiment analysis with lexicons on token tables.

All functions take a token table as produced by :func:`~tidytm.tokenize.unnest_tokens` and a sentiment lexicon
table as returned by :func:`~tidytm.lexicon.get_sentiments`. Tokens without an entry in the lexicon are ignored.

Example::

    from tidytm.lexicon import get_sentiments
    from tidytm.sentiment import sentiment_index

    tokens = unnest_tokens(lines, output='word', input='text')
    sentiment_index(tokens, get_sentiments('bing'), by='book', position='linenumber')

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from .table import count, inner_join, pivot_wider
from .types import Columns
from .utils import as_column_list, require_columns

logger = logging.getLogger('tidytm')


def sentiment_counts(tokens: pd.DataFrame, lexicon: pd.DataFrame, word: str = 'word',
                     by: Optional[Columns] = None, sort: bool = False) -> pd.DataFrame:
    """
    Count the tokens per sentiment label, optionally within groups defined by `by`.

    :param tokens: token table
    :param lexicon: sentiment lexicon with columns ``word`` and ``sentiment``
    :param word: token column in `tokens`
    :param by: optional grouping column(s) in `tokens`
    :param sort: if True, sort by count in descending order
    :return: DataFrame with grouping columns, ``sentiment`` and ``n``
    """
    by_cols = as_column_list(by)
    require_columns(tokens, by_cols, 'token table')
    joined = _join_lexicon(tokens, lexicon, word, 'sentiment')

    return count(joined, by_cols + ['sentiment'], sort=sort, name='n')


def sentiment_index(tokens: pd.DataFrame, lexicon: pd.DataFrame, by: Optional[Columns] = None,
                    index_size: int = 80, position: str = 'linenumber', word: str = 'word') -> pd.DataFrame:
    """
    Calculate the net sentiment for consecutive sections of text. Tokens are assigned to sections by integer division
    of their position in column `position` by `index_size`, e.g. with ``index_size=80`` and a line number as
    position, each section spans 80 lines. For each section, the number of tokens per sentiment label is counted and
    the net sentiment is the number of positive minus the number of negative tokens.

    :param tokens: token table
    :param lexicon: sentiment lexicon with columns ``word`` and ``sentiment``; net sentiment is calculated from the
                    labels ``positive`` and ``negative``
    :param by: optional grouping column(s) in `tokens`, e.g. a book title
    :param index_size: number of positions per section
    :param position: column in `tokens` with the (line) position of each token
    :param word: token column in `tokens`
    :return: DataFrame with grouping columns, ``index``, one count column per sentiment label and ``sentiment``;
             rows are in order of first occurrence of each section in `tokens`
    """
    if not isinstance(index_size, (int, np.integer)) or index_size < 1:
        raise ValueError('`index_size` must be an integer >= 1')

    by_cols = as_column_list(by)
    require_columns(tokens, by_cols + [position], 'token table')

    joined = _join_lexicon(tokens, lexicon, word, 'sentiment')
    joined['index'] = joined[position] // index_size

    id_cols = by_cols + ['index']
    counts = count(joined, id_cols + ['sentiment'], name='n')

    if len(counts) == 0:
        return pd.DataFrame(columns=id_cols + ['negative', 'positive', 'sentiment'])

    res = pivot_wider(counts, names_from='sentiment', values_from='n', id_cols=id_cols, values_fill=0)
    for label in ('negative', 'positive'):
        if label not in res.columns:
            res[label] = 0
    res['sentiment'] = res['positive'] - res['negative']

    logger.debug('calculated net sentiment for %d text sections', len(res))

    return res


def sentiment_score(tokens: pd.DataFrame, lexicon: pd.DataFrame, by: Columns, word: str = 'word',
                    value: str = 'value') -> pd.DataFrame:
    """
    Sum up numeric sentiment scores per group, e.g. with the VADER lexicon.

    :param tokens: token table
    :param lexicon: sentiment lexicon with columns ``word`` and `value`
    :param by: grouping column(s) in `tokens`
    :param word: token column in `tokens`
    :param value: score column in `lexicon`
    :return: DataFrame with grouping columns and the summed score in column ``sentiment``
    """
    by_cols = as_column_list(by)
    if not by_cols:
        raise ValueError('at least one column to group by must be given')
    require_columns(tokens, by_cols, 'token table')

    joined = _join_lexicon(tokens, lexicon, word, value)

    return count(joined, by_cols, name='sentiment', wt=value)


def _join_lexicon(tokens: pd.DataFrame, lexicon: pd.DataFrame, word: str, lexicon_col: str) -> pd.DataFrame:
    require_columns(tokens, [word], 'token table')
    require_columns(lexicon, ['word', lexicon_col], 'lexicon')

    if lexicon_col in tokens.columns:
        raise ValueError('token table must not contain a column "%s" that is also taken from the lexicon'
                         % lexicon_col)

    lex = lexicon[['word', lexicon_col]].drop_duplicates()

    return inner_join(tokens, lex, by={word: 'word'})
