"""
Module for functions that work with text represented as *token sequences*, e.g. ``["a", "test", "document"]``
and single tokens (i.e. strings).

Most functions also accept NumPy arrays instead of lists / tuples.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import itertools
import re
from typing import Union, List, Any, Optional, Sequence, Callable

import globre
import numpy as np

from .errors import InvalidUnitConfiguration


#%% n-gram generation

def check_ngram_sizes(n: int, n_min: Optional[int]) -> int:
    if not isinstance(n, (int, np.integer)) or n < 1:
        raise InvalidUnitConfiguration('`n` must be an integer >= 1, got %r' % (n, ))

    if n_min is None:
        return n

    if not isinstance(n_min, (int, np.integer)) or not 1 <= n_min <= n:
        raise InvalidUnitConfiguration('`n_min` must be an integer in range [1, n], got %r' % (n_min, ))

    return n_min


def token_ngrams(tokens: Sequence, n: int, n_min: Optional[int] = None, join: bool = True, join_str: str = ' ',
                 ngram_container: Callable = list) -> list:
    """
    Generate n-grams of length `n` from list of tokens `tokens`. If `n_min` is given, generate all n-grams with sizes
    from `n_min` to `n`; for each start position in `tokens`, the n-grams are generated in increasing size.

    Either join the n-grams when `join` is True using `join_str` so that a list of joined n-gram strings is returned
    or, if `join` is False, return a list of n-gram lists (or other sequences depending on `ngram_container`).
    For the latter option, the tokens in `tokens` don't have to be strings but can by of any type.

    A token sequence shorter than the smallest n-gram size produces no n-grams:

    .. code-block:: text

        > token_ngrams("the bank of america".split(), n=2)
        ['the bank', 'bank of', 'of america']
        > token_ngrams("the bank of america".split(), n=2, n_min=1)
        ['the', 'the bank', 'bank', 'bank of', 'of', 'of america', 'america']
        > token_ngrams(["bank"], n=2)
        []

    :param tokens: sequence of tokens; if `join` is True, this must be a list of strings
    :param n: maximum size of the n-grams to generate
    :param n_min: minimum size of the n-grams to generate; if None, only n-grams of size `n` are generated
    :param join: if True, join n-grams by `join_str`
    :param join_str: string to join n-grams if `join` is True
    :param ngram_container: if `join` is False, use this function to create the n-gram sequences
    :return: list of joined n-gram strings or list of n-grams that are n-sized sequences
    """
    n_min = check_ngram_sizes(n, n_min)
    n_tok = len(tokens)

    ng = [ngram_container(tokens[i + j] for j in range(size))
          for i in range(n_tok)
          for size in range(n_min, n + 1)
          if i + size <= n_tok]

    if join:
        return list(map(lambda x: join_str.join(x), ng))
    else:
        return ng


def token_skip_ngrams(tokens: Sequence, n: int, k: int, n_min: Optional[int] = 1, join: bool = True,
                      join_str: str = ' ', ngram_container: Callable = list) -> list:
    """
    Generate k-skip-n-grams from `tokens`, i.e. all ordered token combinations of size `n_min` to `n` in which the
    total number of tokens skipped between the first and the last token is at most `k`. For each start position, the
    n-grams are generated in increasing size and, within the same size, in lexicographic order of the picked
    positions:

    .. code-block:: text

        > token_skip_ngrams("a b c d".split(), n=2, k=1, n_min=2)
        ['a b', 'a c', 'b c', 'b d', 'c d']

    :param tokens: sequence of tokens; if `join` is True, this must be a list of strings
    :param n: maximum size of the n-grams to generate
    :param k: maximum number of skipped tokens per n-gram
    :param n_min: minimum size of the n-grams to generate; if None, equals `n`
    :param join: if True, join n-grams by `join_str`
    :param join_str: string to join n-grams if `join` is True
    :param ngram_container: if `join` is False, use this function to create the n-gram sequences
    :return: list of joined n-gram strings or list of n-grams
    """
    n_min = check_ngram_sizes(n, n_min)
    if not isinstance(k, (int, np.integer)) or k < 0:
        raise InvalidUnitConfiguration('`k` must be an integer >= 0, got %r' % (k, ))

    n_tok = len(tokens)
    ng = []
    for i in range(n_tok):
        for size in range(n_min, n + 1):
            if i + size > n_tok:
                break
            # the last picked position can be at most `k` positions beyond the end of the contiguous n-gram, hence
            # restricting the window like this keeps the number of skipped tokens <= k
            window_end = min(n_tok, i + size + k)
            for rest in itertools.combinations(range(i + 1, window_end), size - 1):
                ng.append(ngram_container(tokens[j] for j in (i, ) + rest))

    if join:
        return list(map(lambda x: join_str.join(x), ng))
    else:
        return ng


def char_shingles(text: str, n: int, n_min: Optional[int] = None) -> List[str]:
    """
    Generate character shingles, i.e. n-grams of Unicode code points, from string `text`.

    :param text: input string
    :param n: maximum shingle size
    :param n_min: minimum shingle size; if None, equals `n`
    :return: list of shingle strings
    """
    return token_ngrams(list(text), n=n, n_min=n_min, join=True, join_str='')


#%% token matching


MATCH_TYPES = ('exact', 'regex', 'glob')


def make_token_matcher(pattern: Any, match_type: str = 'exact', ignore_case: bool = False,
                       glob_method: str = 'match') -> Callable[[Any], bool]:
    """
    Create a function that takes a single token and returns True if it matches `pattern`.

    :param pattern: string or compiled RE pattern; when `match_type` is ``'exact'``, `pattern` may be of any type that
                    allows equality checking
    :param match_type: one of: 'exact', 'regex', 'glob'; if 'regex', `pattern` must be RE pattern; if `glob`,
                       `pattern` must be a "glob" pattern like "hello w*"
                       (see https://github.com/metagriffin/globre)
    :param ignore_case: if True, ignore case for matching
    :param glob_method: if `match_type` is 'glob', use this glob method. Must be 'match' or 'search' (similar
                        behavior as Python's `re.match` or `re.search`)
    :return: function ``token -> bool``
    """
    if match_type not in MATCH_TYPES:
        raise ValueError('`match_type` must be one of %s' % ', '.join(map(repr, MATCH_TYPES)))

    flags = re.IGNORECASE if ignore_case else 0

    if match_type == 'exact':
        if ignore_case and isinstance(pattern, str):
            folded = pattern.casefold()
            return lambda t: isinstance(t, str) and t.casefold() == folded
        return lambda t: t == pattern

    if match_type == 'regex':
        compiled = re.compile(pattern, flags=flags) if isinstance(pattern, str) else pattern
        find = compiled.search
    else:
        if glob_method not in {'match', 'search'}:
            raise ValueError('`glob_method` must be "match" or "search"')
        # tokens never contain spaces, so use a space as path separator; the pattern must cover the whole token
        compiled = globre.compile(pattern, sep=' ', flags=flags | globre.EXACT) if isinstance(pattern, str) \
            else pattern
        find = compiled.search if glob_method == 'search' else compiled.match

    return lambda t: isinstance(t, str) and find(t) is not None


def token_match(pattern: Any, tokens: Union[List[str], np.ndarray],
                match_type: str = 'exact', ignore_case: bool = False, glob_method: str = 'match',
                inverse: bool = False) -> np.ndarray:
    """
    Match each token in `tokens` against `pattern` by exact equality, regular expression search or glob pattern.

    .. seealso:: :func:`make_token_matcher` for the meaning of `pattern`, `match_type`, `ignore_case` and
                 `glob_method`

    :param pattern: pattern to match
    :param tokens: list or NumPy array of string tokens
    :param match_type: one of: 'exact', 'regex', 'glob'
    :param ignore_case: if True, ignore case for matching
    :param glob_method: if `match_type` is 'glob', use this glob method. Must be 'match' or 'search'
    :param inverse: invert the matching results
    :return: 1D boolean NumPy array of length ``len(tokens)``
    """
    matches = make_token_matcher(pattern, match_type, ignore_case, glob_method)
    res = np.fromiter(map(matches, tokens), dtype=bool, count=len(tokens))

    return ~res if inverse else res


def token_match_multi_pattern(search_tokens: Any, tokens: Union[List[str], np.ndarray],
                              match_type: str = 'exact', ignore_case: bool = False, glob_method: str = 'match') \
        -> np.ndarray:
    """
    Like :func:`token_match`, but a token is a match if it matches *any* of the patterns in `search_tokens`.

    :param search_tokens: single pattern or list, tuple or set of patterns
    :param tokens: list or NumPy array of string tokens
    :param match_type: one of: 'exact', 'regex', 'glob'
    :param ignore_case: if True, ignore case for matching
    :param glob_method: if `match_type` is 'glob', use this glob method. Must be 'match' or 'search'
    :return: 1D boolean NumPy array of length ``len(tokens)``
    """
    if isinstance(search_tokens, (list, tuple, set, frozenset)):
        if not search_tokens:
            raise ValueError('`search_tokens` must not be empty')
        patterns = list(search_tokens)
    else:
        patterns = [search_tokens]

    if match_type == 'exact' and not ignore_case:
        lookup = set(patterns)
        matchers = [lambda t: t in lookup]
    else:
        matchers = [make_token_matcher(p, match_type, ignore_case, glob_method) for p in patterns]

    return np.fromiter((any(m(t) for m in matchers) for t in tokens), dtype=bool, count=len(tokens))
