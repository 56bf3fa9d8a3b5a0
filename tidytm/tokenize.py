"""
Functions for splitting text into tokens and for turning documents or text tables into *tidy token tables* with one
token per row.

The main entry points are :func:`unnest_tokens`, which works on a pandas DataFrame with a text column, and
:func:`tokenize`, which works on a sequence of ``(document key, text)`` pairs. Both use :func:`make_tokenizer`
internally, which can also be used directly to tokenize single strings.

Word and sentence segmentation is done with `NLTK <https://www.nltk.org/>`_ tokenizers that don't require any
trained models, so no NLTK data needs to be downloaded.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import logging
import re
from functools import partial
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from nltk.tokenize import PunktSentenceTokenizer, RegexpTokenizer, TreebankWordTokenizer

from . import defaults
from .errors import InvalidUnitConfiguration
from .tokenseq import check_ngram_sizes, token_ngrams, token_skip_ngrams, char_shingles
from .types import Columns, Documents, TokenUnit
from .utils import as_column_list, require_columns, flatten_list, group_codes

logger = logging.getLogger('tidytm')


#: available tokenization units
UNITS = ('words', 'characters', 'character_shingles', 'ngrams', 'skip_ngrams', 'sentences', 'lines',
         'paragraphs', 'regex', 'ptb')

#: singular unit names are accepted as well
UNIT_ALIASES = {
    'word': 'words',
    'character': 'characters',
    'ngram': 'ngrams',
    'skip_ngram': 'skip_ngrams',
    'sentence': 'sentences',
    'line': 'lines',
    'paragraph': 'paragraphs',
}

#: units for which punctuation (or non-alphanumeric characters) are removed by default
STRIP_PUNCT_BY_DEFAULT = {'words', 'ngrams', 'skip_ngrams', 'characters', 'character_shingles'}

# words, optionally with inner apostrophes as in "don't" or "o'clock"
PTTRN_WORD = r"\w+(?:['’]\w+)*"
PTTRN_WORD_OR_PUNCT = PTTRN_WORD + r"|[^\w\s]"
PTTRN_NUMBER = re.compile(r'^[+-]?\d+(?:[.,]\d+)*$')
PTTRN_PARAGRAPH_BREAK = re.compile(r'\n\s*\n')

_word_tokenizer = RegexpTokenizer(PTTRN_WORD)
_word_punct_tokenizer = RegexpTokenizer(PTTRN_WORD_OR_PUNCT)
_ptb_tokenizer = TreebankWordTokenizer()
_sent_tokenizer = PunktSentenceTokenizer()


#%% tokenizing single texts


def make_tokenizer(unit: TokenUnit = 'words', to_lower: bool = True, strip_punct: Optional[bool] = None,
                   strip_numeric: bool = False, n: Optional[int] = None, n_min: Optional[int] = None,
                   k: Optional[int] = None, pattern: Optional[Union[str, re.Pattern]] = None,
                   ngram_delim: Optional[str] = None) -> Callable[[str], List[str]]:
    """
    Create a function that tokenizes a single string according to tokenization unit `unit` and the given options.
    All options are validated here, so that invalid configurations are detected before any text is processed.

    Available units are:

    - ``'words'``: words; inner apostrophes are kept ("don't"), hyphenated words are split
    - ``'characters'``: single characters (Unicode code points)
    - ``'character_shingles'``: character n-grams of size `n_min` to `n` (default: 3)
    - ``'ngrams'``: word n-grams of size `n_min` to `n`; `n` is required
    - ``'skip_ngrams'``: word k-skip-n-grams of size `n_min` (default: 1) to `n` with at most `k` skipped words;
      `n` and `k` are required
    - ``'sentences'``: sentences found by NLTK's Punkt sentence tokenizer
    - ``'lines'``: non-empty lines
    - ``'paragraphs'``: non-empty paragraphs, i.e. text separated by blank lines
    - ``'regex'``: text pieces between matches of `pattern`
    - ``'ptb'``: Penn Treebank style word tokens via NLTK's :class:`~nltk.tokenize.TreebankWordTokenizer`
    - a custom function that accepts a string and returns a list of string tokens

    :param unit: tokenization unit as listed above (singular forms like ``'word'`` are accepted, too)
    :param to_lower: if True, convert tokens to lower case
    :param strip_punct: remove punctuation tokens for word based units or non-alphanumeric characters for character
                        based units; if None, this is enabled for ``'words'``, ``'ngrams'``, ``'skip_ngrams'``,
                        ``'characters'`` and ``'character_shingles'``
    :param strip_numeric: remove tokens that represent numbers (only for word based units)
    :param n: n-gram size (maximum size if `n_min` is given)
    :param n_min: minimum n-gram size
    :param k: maximum number of skipped words for ``'skip_ngrams'``
    :param pattern: regular expression string or compiled pattern used for ``'regex'``
    :param ngram_delim: string used to join words of n-grams; default is :data:`tidytm.defaults.ngram_delim`
    :return: function that accepts a single string and returns a list of string tokens
    """
    if callable(unit):
        if to_lower:
            return lambda text: [t.lower() for t in unit(text)]
        else:
            return unit

    if not isinstance(unit, str):
        raise InvalidUnitConfiguration('`unit` must be a string or a function, got %r' % (unit, ))

    unit = UNIT_ALIASES.get(unit, unit)
    if unit not in UNITS:
        raise InvalidUnitConfiguration('unknown tokenization unit %r; must be one of: %s' % (unit, ', '.join(UNITS)))

    if strip_punct is None:
        strip_punct = unit in STRIP_PUNCT_BY_DEFAULT

    if ngram_delim is None:
        ngram_delim = defaults.ngram_delim

    if unit in {'ngrams', 'skip_ngrams'} and n is None:
        raise InvalidUnitConfiguration('`n` must be given for unit %r' % unit)

    if unit == 'skip_ngrams' and k is None:
        raise InvalidUnitConfiguration('`k` must be given for unit "skip_ngrams"')

    if unit == 'regex':
        if not getattr(pattern, 'pattern', pattern):     # None, '' or re.compile('')
            raise InvalidUnitConfiguration('a non-empty `pattern` must be given for unit "regex"')
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as exc:
                raise InvalidUnitConfiguration('`pattern` %r could not be compiled: %s' % (pattern, exc)) from exc

    words = partial(_words, to_lower=to_lower, strip_punct=strip_punct, strip_numeric=strip_numeric)

    if unit == 'words':
        return words
    elif unit == 'ptb':
        return partial(_ptb_words, to_lower=to_lower, strip_punct=strip_punct, strip_numeric=strip_numeric)
    elif unit == 'ngrams':
        n_min = check_ngram_sizes(n, n_min)
        return lambda text: token_ngrams(words(text), n=n, n_min=n_min, join=True, join_str=ngram_delim)
    elif unit == 'skip_ngrams':
        n_min = check_ngram_sizes(n, 1 if n_min is None else n_min)
        if not isinstance(k, (int, np.integer)) or k < 0:
            raise InvalidUnitConfiguration('`k` must be an integer >= 0, got %r' % (k, ))
        return lambda text: token_skip_ngrams(words(text), n=n, k=k, n_min=n_min, join=True, join_str=ngram_delim)
    elif unit == 'characters':
        return partial(_characters, to_lower=to_lower, strip_non_alphanum=strip_punct)
    elif unit == 'character_shingles':
        if n is None:
            n = 3
        n_min = check_ngram_sizes(n, n_min)
        return lambda text: char_shingles(''.join(_characters(text, to_lower=to_lower,
                                                              strip_non_alphanum=strip_punct)),
                                          n=n, n_min=n_min)
    elif unit == 'sentences':
        return partial(_sentences, to_lower=to_lower)
    elif unit == 'lines':
        return partial(_lines, to_lower=to_lower)
    elif unit == 'paragraphs':
        return partial(_paragraphs, to_lower=to_lower)
    else:  # regex
        return partial(_regex_split, pattern=pattern, to_lower=to_lower)


def tokenize_text(text: Union[str, Sequence[str], None], unit: TokenUnit = 'words', **tokenizer_opts) -> List[str]:
    """
    Tokenize a single text `text` according to tokenization unit `unit`. The text may be given as string or as
    sequence of lines which are joined by line breaks before tokenization. ``None`` is treated as empty text.

    Example::

        tokenize_text(["Hello world.", "Goodbye world."])
        # ['hello', 'world', 'goodbye', 'world']

    .. seealso:: :func:`make_tokenizer` for available units and options

    :param text: string or sequence of line strings
    :param unit: tokenization unit
    :param tokenizer_opts: further options passed to :func:`make_tokenizer`
    :return: list of string tokens in source order
    """
    return make_tokenizer(unit, **tokenizer_opts)(_as_text(text))


def _as_text(text) -> str:
    if text is None:
        return ''
    if isinstance(text, str):
        return text
    if isinstance(text, float) and np.isnan(text):   # missing value in a pandas column
        return ''
    if isinstance(text, (list, tuple, np.ndarray, pd.Series)):
        return '\n'.join(map(_as_text, text))
    raise ValueError('text must be a string or a sequence of strings, got %r' % (text, ))


def _filter_word_tokens(tokens, to_lower, strip_punct, strip_numeric):
    if strip_punct:
        tokens = [t for t in tokens if any(c.isalnum() for c in t)]
    if strip_numeric:
        tokens = [t for t in tokens if not PTTRN_NUMBER.match(t)]
    if to_lower:
        tokens = [t.lower() for t in tokens]
    return tokens


def _words(text, to_lower, strip_punct, strip_numeric):
    tokenizer = _word_tokenizer if strip_punct else _word_punct_tokenizer
    return _filter_word_tokens(tokenizer.tokenize(text), to_lower, strip_punct, strip_numeric)


def _ptb_words(text, to_lower, strip_punct, strip_numeric):
    return _filter_word_tokens(_ptb_tokenizer.tokenize(text), to_lower, strip_punct, strip_numeric)


def _characters(text, to_lower, strip_non_alphanum):
    if to_lower:
        text = text.lower()
    if strip_non_alphanum:
        return [c for c in text if c.isalnum()]
    else:
        return list(text)


def _collapse_ws(s):
    return ' '.join(s.split())


def _maybe_lower(tokens, to_lower):
    return [t.lower() for t in tokens] if to_lower else tokens


def _sentences(text, to_lower):
    # lower case only after splitting, since the sentence tokenizer relies on capitalization
    sents = [_collapse_ws(s) for s in _sent_tokenizer.tokenize(text)]
    return _maybe_lower([s for s in sents if s], to_lower)


def _lines(text, to_lower):
    return _maybe_lower([line for line in text.splitlines() if line], to_lower)


def _paragraphs(text, to_lower):
    pars = [_collapse_ws(p) for p in PTTRN_PARAGRAPH_BREAK.split(text)]
    return _maybe_lower([p for p in pars if p], to_lower)


def _regex_split(text, pattern, to_lower):
    return _maybe_lower([piece for piece in pattern.split(text) if piece], to_lower)


#%% tokenizing tables and documents


def unnest_tokens(df: pd.DataFrame, output: str, input: str, token: TokenUnit = 'words', to_lower: bool = True,
                  drop: bool = True, collapse: Optional[Columns] = None, with_position: bool = False,
                  position_col: str = 'position', **tokenizer_opts) -> pd.DataFrame:
    """
    Split the text column `input` of table `df` into tokens and return a new table with one token per row in column
    `output`. All other columns of `df` are repeated for each token of their row. Row order and token order within
    each row are retained; rows with empty text produce no output rows.

    If `collapse` names one or more columns, the texts of all rows that share the same values in these columns are
    joined (by line breaks) before tokenization. This is necessary when tokens like n-grams or sentences may span
    several rows, e.g. several lines of the same chapter. Only the `collapse` columns are retained in this case and
    the groups are output in order of first occurrence.

    Example::

        lines = pd.DataFrame({'document': ['d1', 'd1'], 'text': ['Hello world.', 'Goodbye world.']})
        unnest_tokens(lines, 'word', 'text')
        #   document     word
        # 0       d1    hello
        # 1       d1    world
        # 2       d1  goodbye
        # 3       d1    world

    .. seealso:: :func:`make_tokenizer` for available tokenization units and options

    :param df: pandas DataFrame with a text column
    :param output: name of the output token column
    :param input: name of the input text column
    :param token: tokenization unit
    :param to_lower: if True, convert tokens to lower case
    :param drop: if True, drop the `input` column in the result
    :param collapse: optional column name(s) to group rows by before tokenization
    :param with_position: if True, add a column `position_col` with the zero-based token position within its text
    :param position_col: name of the position column
    :param tokenizer_opts: further options passed to :func:`make_tokenizer`
    :return: new pandas DataFrame with one token per row
    """
    collapse_cols = as_column_list(collapse)
    require_columns(df, [input] + collapse_cols, 'input table')

    tokenizer = make_tokenizer(token, to_lower=to_lower, **tokenizer_opts)

    if collapse_cols:
        base, texts = _collapsed_texts(df, input, collapse_cols)
    else:
        base = df.reset_index(drop=True)
        texts = [_as_text(t) for t in base[input]]

    token_lists = [tokenizer(t) for t in texts]
    lengths = np.fromiter(map(len, token_lists), dtype=int, count=len(token_lists))

    if drop or output == input:
        base = base.drop(columns=[input], errors='ignore')

    res = base.iloc[np.repeat(np.arange(len(base)), lengths)].reset_index(drop=True)
    res[output] = pd.Series(flatten_list(token_lists), dtype=object)

    if with_position:
        if len(lengths) > 0:
            res[position_col] = np.concatenate([np.arange(l) for l in lengths])
        else:
            res[position_col] = np.array([], dtype=int)

    logger.debug('tokenized %d texts into %d tokens with unit %r', len(texts), len(res), token)

    return res


def tokenize(docs: Documents, unit: TokenUnit = 'words', output: str = 'word', document: Optional[Columns] = None,
             with_position: bool = False, **tokenizer_opts) -> pd.DataFrame:
    """
    Tokenize documents `docs` and return a tidy token table with the document key column(s) and one token per row in
    column `output`. Document order and token order within each document are retained. Empty documents produce no
    rows.

    `docs` is either a dict mapping document keys to texts or a sequence of ``(document key, text)`` pairs. A text is
    a string or a sequence of line strings. Composite document keys can be given as tuples together with a list of
    column names as `document`, e.g. ``document=['book', 'chapter']``.

    Example::

        tokenize([('d1', ['Hello world.', 'Goodbye world.'])])
        #   document     word
        # 0       d1    hello
        # 1       d1    world
        # 2       d1  goodbye
        # 3       d1    world

    .. seealso:: :func:`make_tokenizer` for available tokenization units and options

    :param docs: dict or sequence of ``(document key, text)`` pairs
    :param unit: tokenization unit
    :param output: name of the token column
    :param document: name of the document key column or list of names for composite keys; default is
                     :data:`tidytm.defaults.document_col`
    :param with_position: if True, add a zero-based ``position`` column for each token in its document
    :param tokenizer_opts: further options passed to :func:`make_tokenizer`
    :return: pandas DataFrame with one token per row
    """
    doc_cols = as_column_list(document or defaults.document_col)

    if isinstance(docs, dict):
        items = list(docs.items())
    else:
        items = list(docs)

    if any(not isinstance(item, (tuple, list)) or len(item) != 2 for item in items):
        raise ValueError('`docs` must be a dict or a sequence of (document key, text) pairs')

    text_col = '__text__'
    if len(doc_cols) == 1:
        keys = pd.DataFrame({doc_cols[0]: pd.Series([key for key, _ in items], dtype=object)})
    else:
        if any(not isinstance(key, tuple) or len(key) != len(doc_cols) for key, _ in items):
            raise ValueError('composite document keys must be tuples of length %d' % len(doc_cols))
        keys = pd.DataFrame.from_records([key for key, _ in items], columns=doc_cols)

    keys[text_col] = [_as_text(text) for _, text in items]

    logger.info('tokenizing %d documents with unit %r', len(items), unit)

    return unnest_tokens(keys, output, text_col, token=unit, drop=True, with_position=with_position,
                         **tokenizer_opts)


def _collapsed_texts(df, input, collapse_cols):
    base = df[collapse_cols].drop_duplicates().reset_index(drop=True)
    if len(base) == 0:
        return base, []

    texts = pd.Series([_as_text(t) for t in df[input]], dtype=object)
    joined = texts.groupby(group_codes(df, collapse_cols)).agg('\n'.join)

    return base, joined.tolist()
