"""
Functions to turn topic model results into tidy tables.

The topic-word distribution (*beta*) becomes a table with one row per topic and term, the document-topic
distribution (*gamma*) a table with one row per document and topic, and the topic assignments a table with one row
per nonzero cell of the document-term matrix (DTM). These tables can then be processed with the functions in
:mod:`tidytm.table`, e.g. to find the top terms per topic::

    beta = tidy_beta(result.topic_word, vocab)
    top_n(beta, 10, 'beta', group_by='topic')

Topics are identified by one-based integers, unless a topic label format string like ``'topic_{i1}'`` is passed as
`topic_fmt` or set in :data:`tidytm.defaults.topic_fmt`. Weights are passed through unchanged.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

from typing import NamedTuple, Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy.sparse import issparse, spmatrix

from .. import defaults
from ..bow.dtm import nonzero_cells
from ..errors import DimensionMismatch
from ..table import top_n
from ..types import Columns
from ..utils import as_column_list, labels_to_frame
from ._common import topic_ids, topic_labels
from .fit import TopicModelResult


class TidyTopicModel(NamedTuple):
    """Topic model result as three tidy tables."""
    #: table with columns ``topic``, ``term``, ``beta``
    beta: pd.DataFrame
    #: table with document key column(s), ``topic``, ``gamma``
    gamma: pd.DataFrame
    #: table with document key column(s), ``term``, ``count``, ``topic``; None if no DTM was given
    assignments: Optional[pd.DataFrame]


#%% tidy tables from distributions


def tidy_beta(topic_word_distrib: np.ndarray, vocab: Sequence, topic_fmt: Optional[str] = None,
              term: Optional[str] = None) -> pd.DataFrame:
    """
    Turn the topic-word distribution into a tidy table with one row per topic and term. Rows are ordered by topic
    and then by vocabulary index.

    :param topic_word_distrib: topic-word distribution; shape KxM, where K is number of topics, M is vocabulary size
    :param vocab: vocabulary of length M
    :param topic_fmt: topic label format string; see :func:`~tidytm.topicmod._common.topic_ids`
    :param term: name of the term column; default is :data:`tidytm.defaults.term_col`
    :return: DataFrame with columns ``topic``, term column and ``beta``
    """
    topic_word_distrib = _as_2d_array(topic_word_distrib, 'topic_word_distrib')
    vocab = list(vocab)
    term = term or defaults.term_col

    n_topics, n_terms = topic_word_distrib.shape
    if n_terms != len(vocab):
        raise DimensionMismatch('number of columns in `topic_word_distrib` (%d) must be equal to `len(vocab)` (%d)'
                                % (n_terms, len(vocab)))

    return pd.DataFrame({
        'topic': np.repeat(topic_labels(n_topics, topic_fmt), n_terms),
        term: np.tile(np.array(vocab, dtype=object), n_topics),
        'beta': topic_word_distrib.ravel()
    })


def tidy_gamma(doc_topic_distrib: np.ndarray, doc_labels: Sequence, document: Optional[Columns] = None,
               topic_fmt: Optional[str] = None) -> pd.DataFrame:
    """
    Turn the document-topic distribution into a tidy table with one row per document and topic. Rows are ordered by
    document and then by topic.

    :param doc_topic_distrib: document-topic distribution; shape NxK, where N is the number of documents, K is the
                              number of topics
    :param doc_labels: document labels of length N; tuples for composite document keys
    :param document: name of the document key column(s); default is :data:`tidytm.defaults.document_col`
    :param topic_fmt: topic label format string; see :func:`~tidytm.topicmod._common.topic_ids`
    :return: DataFrame with document key column(s), ``topic`` and ``gamma``
    """
    doc_topic_distrib = _as_2d_array(doc_topic_distrib, 'doc_topic_distrib')
    doc_labels = list(doc_labels)
    doc_cols = as_column_list(document or defaults.document_col)

    n_docs, n_topics = doc_topic_distrib.shape
    if n_docs != len(doc_labels):
        raise DimensionMismatch('number of rows in `doc_topic_distrib` (%d) must be equal to `len(doc_labels)` (%d)'
                                % (n_docs, len(doc_labels)))

    res = labels_to_frame([lbl for lbl in doc_labels for _ in range(n_topics)], doc_cols)
    res['topic'] = np.tile(topic_labels(n_topics, topic_fmt), n_docs)
    res['gamma'] = doc_topic_distrib.ravel()

    return res


def augment(dtm: Union[spmatrix, np.ndarray], doc_labels: Sequence, vocab: Sequence,
            topic_word_distrib: Optional[np.ndarray] = None, doc_topic_distrib: Optional[np.ndarray] = None,
            assignments: Optional[Union[spmatrix, np.ndarray]] = None, document: Optional[Columns] = None,
            term: Optional[str] = None, topic_fmt: Optional[str] = None) -> pd.DataFrame:
    """
    Assign a topic to each nonzero cell of the DTM, i.e. to each term that occurs in a document. If `assignments` is
    given, the topics are taken from this matrix. Otherwise, the topic for term ``w`` in document ``d`` is the topic
    ``k`` that maximizes ``gamma[d, k] * beta[k, w]``; in case of ties, the topic with the lowest index is chosen.

    :param dtm: (sparse) document-term-matrix of size NxM (N docs, M is vocab size) with term counts
    :param doc_labels: document labels of length N; tuples for composite document keys
    :param vocab: vocabulary of length M
    :param topic_word_distrib: topic-word distribution of shape KxM; required if `assignments` is not given
    :param doc_topic_distrib: document-topic distribution of shape NxK; required if `assignments` is not given
    :param assignments: optional matrix of shape NxM with the zero-based index of the topic assigned to each nonzero
                        DTM cell
    :param document: name of the document key column(s); default is :data:`tidytm.defaults.document_col`
    :param term: name of the term column; default is :data:`tidytm.defaults.term_col`
    :param topic_fmt: topic label format string; see :func:`~tidytm.topicmod._common.topic_ids`
    :return: DataFrame with document key column(s), term column, ``count`` and ``topic``; one row per nonzero DTM
             cell in row-major order
    """
    doc_labels = list(doc_labels)
    vocab = list(vocab)
    doc_cols = as_column_list(document or defaults.document_col)
    term = term or defaults.term_col

    if dtm.ndim != 2 or dtm.shape != (len(doc_labels), len(vocab)):
        raise DimensionMismatch('`dtm` must have shape %s (number of document labels x vocabulary size) but has '
                                'shape %s' % ((len(doc_labels), len(vocab)), dtm.shape))

    cells = nonzero_cells(dtm)

    if assignments is not None:
        if assignments.shape != dtm.shape:
            raise DimensionMismatch('`assignments` must have the same shape as `dtm` %s but has shape %s'
                                    % (dtm.shape, assignments.shape))
        if issparse(assignments):
            assignments = assignments.tocsr()
            topic_idx = np.asarray(assignments[cells.row, cells.col]).ravel()
        else:
            topic_idx = np.asarray(assignments)[cells.row, cells.col]
    else:
        if topic_word_distrib is None or doc_topic_distrib is None:
            raise ValueError('either `assignments` or both `topic_word_distrib` and `doc_topic_distrib` must be given')

        topic_word_distrib = _as_2d_array(topic_word_distrib, 'topic_word_distrib')
        doc_topic_distrib = _as_2d_array(doc_topic_distrib, 'doc_topic_distrib')
        _check_distrib_dims(topic_word_distrib, doc_topic_distrib, dtm.shape)

        # score of each topic for each nonzero cell; shape (number of nonzero cells, K)
        scores = doc_topic_distrib[cells.row, :] * topic_word_distrib[:, cells.col].T
        topic_idx = np.argmax(scores, axis=1) if len(scores) > 0 else np.array([], dtype=int)

    res = labels_to_frame([doc_labels[i] for i in cells.row], doc_cols)
    res[term] = pd.Series([vocab[j] for j in cells.col], dtype=object)
    res['count'] = cells.data
    res['topic'] = topic_ids(topic_idx, topic_fmt)

    return res


#%% tidy tables from topic model results


def tidy_model(result: TopicModelResult, doc_labels: Sequence, vocab: Sequence,
               dtm: Optional[Union[spmatrix, np.ndarray]] = None, document: Optional[Columns] = None,
               topic_fmt: Optional[str] = None) -> TidyTopicModel:
    """
    Turn a topic model result into the three tidy tables produced by :func:`tidy_beta`, :func:`tidy_gamma` and
    :func:`augment`. The assignments table is only produced when the DTM `dtm` is given.

    :param result: :class:`~tidytm.topicmod.fit.TopicModelResult`
    :param doc_labels: document labels; tuples for composite document keys
    :param vocab: vocabulary
    :param dtm: optional DTM that was used for fitting the model
    :param document: name of the document key column(s); default is :data:`tidytm.defaults.document_col`
    :param topic_fmt: topic label format string; see :func:`~tidytm.topicmod._common.topic_ids`
    :return: :class:`TidyTopicModel` tuple with tables ``beta``, ``gamma`` and ``assignments``
    """
    beta = tidy_beta(result.topic_word, vocab, topic_fmt=topic_fmt)
    gamma = tidy_gamma(result.doc_topic, doc_labels, document=document, topic_fmt=topic_fmt)

    if dtm is not None:
        assignments = augment(dtm, doc_labels, vocab, topic_word_distrib=result.topic_word,
                              doc_topic_distrib=result.doc_topic, assignments=result.assignments,
                              document=document, topic_fmt=topic_fmt)
    else:
        assignments = None

    return TidyTopicModel(beta, gamma, assignments)


def glance(result: TopicModelResult) -> pd.DataFrame:
    """
    Summarize a topic model result as a table with a single row.

    :param result: :class:`~tidytm.topicmod.fit.TopicModelResult`
    :return: DataFrame with columns ``n_docs``, ``n_topics``, ``n_terms`` and ``loglikelihood``
    """
    return pd.DataFrame({
        'n_docs': [result.n_docs],
        'n_topics': [result.n_topics],
        'n_terms': [result.n_terms],
        'loglikelihood': [np.nan if result.loglikelihood is None else result.loglikelihood],
    })


def top_terms(beta: pd.DataFrame, n: int = 10, term: Optional[str] = None) -> pd.DataFrame:
    """
    Select the `n` most probable terms per topic from a table produced by :func:`tidy_beta`. Ties at the boundary
    are included. Topics keep their order from `beta`, terms are sorted by descending probability within each topic.

    :param beta: table with columns ``topic``, term column and ``beta``
    :param n: number of top terms per topic
    :param term: name of the term column; default is :data:`tidytm.defaults.term_col`
    :return: DataFrame with the same columns as `beta`
    """
    term = term or defaults.term_col
    top = top_n(beta[['topic', term, 'beta']], n, 'beta', group_by='topic')
    top['topic_order'] = pd.factorize(top['topic'])[0]

    return top.sort_values(['topic_order', 'beta'], ascending=[True, False], kind='mergesort')\
        .drop(columns='topic_order')\
        .reset_index(drop=True)


#%% helper functions


def _as_2d_array(distrib: np.ndarray, name: str) -> np.ndarray:
    distrib = np.asarray(distrib)
    if distrib.ndim != 2:
        raise ValueError('`%s` must be a 2D array' % name)

    return distrib


def _check_distrib_dims(topic_word_distrib: np.ndarray, doc_topic_distrib: np.ndarray, dtm_shape: tuple) -> None:
    if topic_word_distrib.shape[0] != doc_topic_distrib.shape[1]:
        raise DimensionMismatch('number of topics in `topic_word_distrib` (%d rows) and `doc_topic_distrib` '
                                '(%d columns) differ' % (topic_word_distrib.shape[0], doc_topic_distrib.shape[1]))
    if doc_topic_distrib.shape[0] != dtm_shape[0]:
        raise DimensionMismatch('number of rows in `doc_topic_distrib` (%d) must be equal to number of documents '
                                'in `dtm` (%d)' % (doc_topic_distrib.shape[0], dtm_shape[0]))
    if topic_word_distrib.shape[1] != dtm_shape[1]:
        raise DimensionMismatch('number of columns in `topic_word_distrib` (%d) must be equal to number of terms '
                                'in `dtm` (%d)' % (topic_word_distrib.shape[1], dtm_shape[1]))
