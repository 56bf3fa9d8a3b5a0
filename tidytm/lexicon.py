"""
Stopword lists and sentiment lexicons as tidy tables.

Lexicons are served by a :class:`LexiconStore`, a read-only collection of named lexicon tables. Each lexicon is
loaded lazily on first access and then cached; there is no API to add or replace lexicons after the store was
created. Functions that need a lexicon accept a store as argument, so that tests or applications can pass their
own store instead of the process-wide default store returned by :func:`default_store`.

Every lexicon table has a ``word`` and a ``lexicon`` column. Sentiment lexicons additionally have a ``sentiment``
column with labels (e.g. ``"positive"``) and/or a ``value`` column with numeric scores.

The default store provides the following lexicons:

- ``snowball``: English Snowball stopword list (bundled with tidytm)
- ``nltk``: NLTK stopword list for the language set in :data:`tidytm.defaults.language`
- ``stop_words``: union of the above stopword lists
- ``bing``: opinion lexicon by Hu and Liu with the sentiment labels ``positive`` and ``negative``
- ``vader``: VADER sentiment lexicon with scores between -4 and 4

The last three require NLTK data packages (``stopwords``, ``opinion_lexicon``, ``vader_lexicon``), which can be
installed via ``nltk.download()``.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import logging
import os
import threading
from typing import Callable, Dict, FrozenSet, List, Optional, Union

import nltk
import pandas as pd
from nltk.corpus import opinion_lexicon
from nltk.sentiment.vader import SentimentIntensityAnalyzer

from . import defaults
from .errors import UnknownLexicon
from .utils import require_columns

MODULE_PATH = os.path.dirname(os.path.abspath(__file__))
DATAPATH = os.path.normpath(os.path.join(MODULE_PATH, 'data'))

#: a lexicon source: either a ready table or a function without arguments that loads the table
LexiconSource = Union[pd.DataFrame, Callable[[], pd.DataFrame]]

logger = logging.getLogger('tidytm')


#%% lexicon store


class LexiconStore:
    """
    Read-only collection of named lexicon tables.

    Example with a custom stopword table::

        store = LexiconStore({'custom': pd.DataFrame({'word': ['the', 'a', 'an']})})
        anti_join(tokens, store.load('custom'), by='word')
    """

    def __init__(self, sources: Dict[str, LexiconSource], preload: bool = False):
        """
        Create a lexicon store from `sources`.

        :param sources: dict that maps lexicon names to a DataFrame or to a function without arguments that returns
                        a DataFrame; each table must contain a ``word`` column; a ``lexicon`` column is added if
                        missing
        :param preload: if True, load all lexicons immediately instead of on first access
        """
        if not isinstance(sources, dict):
            raise ValueError('`sources` must be a dict mapping lexicon names to tables or loader functions')

        for name, src in sources.items():
            if not isinstance(name, str) or not name:
                raise ValueError('lexicon names must be non-empty strings')
            if not isinstance(src, pd.DataFrame) and not callable(src):
                raise ValueError('source for lexicon %r must be a pandas DataFrame or a callable' % name)

        self._sources = dict(sources)
        self._tables: Dict[str, pd.DataFrame] = {}
        self._lock = threading.RLock()

        if preload:
            for name in self._sources:
                self._table(name)

    @classmethod
    def with_defaults(cls, preload: bool = False) -> 'LexiconStore':
        """
        Create a new store with the default lexicons listed in the module documentation.

        :param preload: if True, load all lexicons immediately
        :return: new LexiconStore
        """
        return cls(default_sources(), preload=preload)

    @property
    def names(self) -> List[str]:
        """Sorted list of registered lexicon names."""
        return sorted(self._sources.keys())

    def __contains__(self, name) -> bool:
        return name in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def __repr__(self) -> str:
        return '<LexiconStore [%d lexicons: %s]>' % (len(self), ', '.join(self.names))

    def is_loaded(self, name: str) -> bool:
        """
        Check whether lexicon `name` was already loaded.

        :param name: lexicon name
        :return: True if the lexicon table is cached
        """
        return name in self._tables

    def load(self, name: str) -> pd.DataFrame:
        """
        Return lexicon `name` as table. The returned table is a copy, so it can be modified by the caller without
        affecting the store.

        :param name: lexicon name
        :return: DataFrame with at least the columns ``word`` and ``lexicon``
        """
        return self._table(name).copy()

    def stopwords(self, name: str) -> FrozenSet[str]:
        """
        Return the set of words in lexicon `name`.

        :param name: lexicon name
        :return: frozenset of words
        """
        return frozenset(self._table(name)['word'])

    def _table(self, name: str) -> pd.DataFrame:
        if name not in self._sources:
            raise UnknownLexicon(name, self._sources.keys())

        with self._lock:
            if name not in self._tables:
                src = self._sources[name]
                tbl = src() if callable(src) else src
                self._tables[name] = _lexicon_table(tbl, name)
                logger.info('loaded lexicon "%s" with %d entries', name, len(self._tables[name]))

            return self._tables[name]


_default_store: Optional[LexiconStore] = None
_default_store_lock = threading.Lock()


def default_store() -> LexiconStore:
    """
    Return the process-wide default lexicon store, which is created on first call.

    :return: LexiconStore with the default lexicons
    """
    global _default_store

    with _default_store_lock:
        if _default_store is None:
            _default_store = LexiconStore.with_defaults()

        return _default_store


def get_stopwords(name: str = 'snowball', store: Optional[LexiconStore] = None) -> pd.DataFrame:
    """
    Return stopword lexicon `name` as table with columns ``word`` and ``lexicon``, suitable for removing stopwords
    from a token table via :func:`~tidytm.table.anti_join`.

    :param name: lexicon name
    :param store: lexicon store; if None, use the default store
    :return: DataFrame with stopwords
    """
    if store is None:
        store = default_store()

    return store.load(name)


def get_sentiments(name: str = 'bing', store: Optional[LexiconStore] = None) -> pd.DataFrame:
    """
    Return sentiment lexicon `name` as table with columns ``word``, ``lexicon`` and ``sentiment`` and/or ``value``.

    :param name: lexicon name
    :param store: lexicon store; if None, use the default store
    :return: DataFrame with sentiment lexicon entries
    """
    if store is None:
        store = default_store()

    tbl = store.load(name)

    if 'sentiment' not in tbl.columns and 'value' not in tbl.columns:
        raise ValueError('lexicon "%s" is not a sentiment lexicon (neither "sentiment" nor "value" column)' % name)

    return tbl


#%% default lexicon sources


def default_sources(language: Optional[str] = None) -> Dict[str, LexiconSource]:
    """
    Return the loader functions for the default lexicons.

    :param language: language for the ``nltk`` stopword list; if None, use :data:`tidytm.defaults.language`
    :return: dict mapping lexicon names to loader functions
    """
    language = language or defaults.language

    return {
        'snowball': load_snowball_stopwords,
        'nltk': lambda: load_nltk_stopwords(language),
        'stop_words': lambda: load_stopword_union(language),
        'bing': load_bing_lexicon,
        'vader': load_vader_lexicon,
    }


def load_snowball_stopwords() -> pd.DataFrame:
    """
    Load the bundled English Snowball stopword list.

    :return: DataFrame with columns ``word`` and ``lexicon``
    """
    with open(os.path.join(DATAPATH, 'stopwords', 'snowball_en.txt'), encoding='utf-8') as f:
        words = [line.strip() for line in f if line.strip()]

    return pd.DataFrame({'word': words, 'lexicon': 'snowball'})


def load_nltk_stopwords(language: str) -> pd.DataFrame:
    """
    Load the NLTK stopword list for `language`. Requires NLTK's ``stopwords`` data package.

    :param language: language label as accepted by NLTK, e.g. ``"english"``
    :return: DataFrame with columns ``word`` and ``lexicon``
    """
    return pd.DataFrame({'word': nltk.corpus.stopwords.words(language), 'lexicon': 'nltk'})


def load_stopword_union(language: str) -> pd.DataFrame:
    """
    Load all stopword lists that are available and concatenate them. Lists that can't be loaded because of missing
    NLTK data are skipped with a warning.

    :param language: language for the NLTK stopword list
    :return: DataFrame with columns ``word`` and ``lexicon``; a word may appear once per lexicon
    """
    tables = [load_snowball_stopwords()]
    try:
        tables.append(load_nltk_stopwords(language))
    except LookupError:
        logger.warning('NLTK stopwords for language "%s" not available; not included in "stop_words"', language)

    return pd.concat(tables, ignore_index=True)


def load_bing_lexicon() -> pd.DataFrame:
    """
    Load the opinion lexicon by Hu and Liu (2004) from NLTK's ``opinion_lexicon`` data package.

    :return: DataFrame with columns ``word``, ``sentiment`` and ``lexicon`` sorted by word
    """
    tbl = pd.concat([pd.DataFrame({'word': opinion_lexicon.positive(), 'sentiment': 'positive'}),
                     pd.DataFrame({'word': opinion_lexicon.negative(), 'sentiment': 'negative'})],
                    ignore_index=True)
    tbl = tbl.sort_values('word', kind='mergesort').reset_index(drop=True)
    tbl['lexicon'] = 'bing'

    return tbl


def load_vader_lexicon() -> pd.DataFrame:
    """
    Load the VADER sentiment lexicon (Hutto and Gilbert 2014) from NLTK's ``vader_lexicon`` data package.

    :return: DataFrame with columns ``word``, ``value`` and ``lexicon``
    """
    scores = SentimentIntensityAnalyzer().lexicon

    return pd.DataFrame({'word': list(scores.keys()), 'value': list(scores.values()), 'lexicon': 'vader'})


#%% helper functions


def _lexicon_table(tbl: pd.DataFrame, name: str) -> pd.DataFrame:
    require_columns(tbl, ['word'], 'lexicon "%s"' % name)

    tbl = tbl.reset_index(drop=True)
    if 'lexicon' not in tbl.columns:
        tbl['lexicon'] = name

    return tbl
