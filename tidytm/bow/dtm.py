"""
Functions for converting tidy term count tables to sparse document-term-matrices (DTMs) and back, and some
compatibility functions for Gensim.

A DTM is a sparse matrix with one row per document and one column per term, accompanied by a sequence of document
labels (row index -> document key) and a vocabulary (column index -> term). Both are zero-indexed.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy.sparse import coo_matrix, csr_matrix, csc_matrix, issparse, spmatrix

from .. import defaults
from ..errors import DimensionMismatch, DuplicateKey, IndexOutOfRange
from ..types import Columns
from ..utils import as_column_list, key_tuples, labels_to_frame, require_columns, unique_in_order

logger = logging.getLogger('tidytm')


#%% conversion between tidy tables and DTMs


def cast_sparse(df: pd.DataFrame, document: Optional[Columns] = None, term: Optional[str] = None,
                value: Optional[str] = None, dtype: Any = None) -> Tuple[coo_matrix, List[Any], List[Any]]:
    """
    Convert a tidy table of term counts with one row per document and term to a sparse DTM in
    `COO sparse format <https://docs.scipy.org/doc/scipy/reference/generated/scipy.sparse.coo_matrix.html>`_.

    Row indices are assigned to documents and column indices to terms in order of their first occurrence in `df`, so
    the result is deterministic for a given table. If `document` is a list of columns, the documents are identified
    by composite keys and the document labels are tuples.

    Example::

        counts = pd.DataFrame({'document': ['d1', 'd1', 'd2'], 'term': ['a', 'b', 'a'], 'n': [2, 1, 3]})
        dtm, doc_labels, vocab = cast_sparse(counts)
        # dtm.toarray() -> [[2, 1], [3, 0]], doc_labels -> ['d1', 'd2'], vocab -> ['a', 'b']

    .. seealso:: :func:`tidy_dtm` for the reverse function.

    :param df: pandas DataFrame with document key column(s), term column and value column
    :param document: document key column(s); default is :data:`tidytm.defaults.document_col`
    :param term: term column; default is :data:`tidytm.defaults.term_col`
    :param value: column with the cell values, e.g. counts; default is :data:`tidytm.defaults.count_col`
    :param dtype: data type of the resulting matrix; if None, use the data type of the value column
    :return: tuple with (sparse DTM in COO format, list of document labels, list of terms as vocabulary)
    """
    doc_cols = as_column_list(document or defaults.document_col)
    term = term or defaults.term_col
    value = value or defaults.count_col
    key_cols = doc_cols + [term]

    require_columns(df, key_cols + [value])

    if df[key_cols].isna().any().any():
        raise ValueError('document keys and terms must not contain missing values')

    dupl = df.duplicated(subset=key_cols)
    if dupl.any():
        raise DuplicateKey(tuple(df.loc[dupl, key_cols].iloc[0]), 'for (document, term) pair; aggregate the table '
                                                                  'first, e.g. with `count()`')

    values = df[value].to_numpy()
    if not np.issubdtype(values.dtype, np.number):
        raise ValueError('value column "%s" must be numeric' % value)
    if (values < 0).any():
        raise ValueError('value column "%s" must not contain negative values' % value)

    doc_keys = key_tuples(df, doc_cols)
    terms = df[term].tolist()
    doc_labels = unique_in_order(doc_keys)
    vocab = unique_in_order(terms)

    doc_index = {d: i for i, d in enumerate(doc_labels)}
    term_index = {t: j for j, t in enumerate(vocab)}

    nonzero = values != 0
    rows = np.array([doc_index[d] for d in doc_keys], dtype=np.intp)[nonzero]
    cols = np.array([term_index[t] for t in terms], dtype=np.intp)[nonzero]

    dtm = coo_matrix((values[nonzero], (rows, cols)), shape=(len(doc_labels), len(vocab)),
                     dtype=dtype or values.dtype)

    logger.debug('created sparse DTM of shape %s with %d nonzero cells', dtm.shape, dtm.nnz)

    return dtm, doc_labels, vocab


def tidy_dtm(dtm: Union[spmatrix, np.ndarray], doc_labels: Sequence, vocab: Sequence,
             document: Optional[Columns] = None, term: Optional[str] = None, value: Optional[str] = None) \
        -> pd.DataFrame:
    """
    Convert a (sparse) DTM to a tidy table with one row per nonzero cell. Rows are in row-major order, i.e. ordered by
    document index and then by term index.

    .. seealso:: :func:`cast_sparse` for the reverse function.

    :param dtm: (sparse) document-term-matrix of size NxM (N docs, M is vocab size); any SciPy sparse format or a
                dense NumPy array
    :param doc_labels: document labels for the matrix rows; if `document` is a list of columns, each label must be
                       a tuple with one element per column
    :param vocab: terms for the matrix columns
    :param document: name of the document key column(s); default is :data:`tidytm.defaults.document_col`
    :param term: name of the term column; default is :data:`tidytm.defaults.term_col`
    :param value: name of the value column; default is :data:`tidytm.defaults.count_col`
    :return: pandas DataFrame with document key column(s), term column and value column
    """
    doc_cols = as_column_list(document or defaults.document_col)
    term = term or defaults.term_col
    value = value or defaults.count_col

    if term in doc_cols or value in doc_cols or term == value:
        raise ValueError('document, term and value columns must have distinct names')

    coo = nonzero_cells(dtm)

    doc_labels = list(doc_labels)
    vocab = list(vocab)

    if coo.nnz > 0:
        if coo.row.max() >= len(doc_labels):
            raise IndexOutOfRange('matrix row index %d has no document label; only %d labels given'
                                  % (coo.row.max(), len(doc_labels)))
        if coo.col.max() >= len(vocab):
            raise IndexOutOfRange('matrix column index %d has no vocabulary entry; only %d terms given'
                                  % (coo.col.max(), len(vocab)))

    res = labels_to_frame([doc_labels[i] for i in coo.row], doc_cols)
    res[term] = pd.Series([vocab[j] for j in coo.col], dtype=object)
    res[value] = coo.data

    return res


def create_sparse_dtm(vocab: Sequence, docs: Sequence[Sequence], dtype: Any = np.intc) -> coo_matrix:
    """
    Create a sparse DTM in COO format from vocabulary `vocab` and a list of tokenized documents `docs`.

    The DTM's rows are the documents in `docs`, its columns are indices in `vocab`, hence a value ``DTM[j, k]`` is the
    term frequency of term ``vocab[k]`` in document ``j``.

    :param vocab: list or array of unique terms used as columns
    :param docs: list of tokenized documents, i.e. list of token lists
    :param dtype: data type of the resulting matrix
    :return: a sparse document-term-matrix in COO sparse format
    """
    vocab = list(vocab)
    vocab_index = {t: j for j, t in enumerate(vocab)}
    if len(vocab_index) != len(vocab):
        raise ValueError('`vocab` must not contain duplicate terms')

    rows = []
    cols = []
    data = []

    for doc_idx, terms in enumerate(docs):
        if len(terms) == 0: continue   # skip empty documents

        try:
            term_indices = np.array([vocab_index[t] for t in terms], dtype=np.intp)
        except KeyError as exc:
            raise ValueError('term %r of document %d is not part of `vocab`' % (exc.args[0], doc_idx)) from exc

        # count the unique terms of the document and get their vocabulary indices
        uniq_indices, counts = np.unique(term_indices, return_counts=True)
        rows.append(np.repeat(doc_idx, len(uniq_indices)))
        cols.append(uniq_indices)
        data.append(counts)

    if data:
        rows, cols, data = np.concatenate(rows), np.concatenate(cols), np.concatenate(data)
    else:
        rows, cols, data = np.array([], dtype=np.intp), np.array([], dtype=np.intp), np.array([], dtype=dtype)

    return coo_matrix((data, (rows, cols)), shape=(len(docs), len(vocab)), dtype=dtype)


def dtm_to_dataframe(dtm: Union[spmatrix, np.ndarray], doc_labels: Sequence, vocab: Sequence) -> pd.DataFrame:
    """
    Convert a (sparse) DTM to a dense "wide" pandas DataFrame using document labels `doc_labels` as row index and
    `vocab` as column names.

    :param dtm: (sparse) document-term-matrix of size NxM (N docs, M is vocab size) with raw terms counts
    :param doc_labels: document labels used as row index; size must equal number of rows in `dtm`; composite labels
                       (tuples) produce a ``MultiIndex``
    :param vocab: list or array of vocabulary used as column names; size must equal number of columns in `dtm`
    :return: pandas DataFrame
    """
    _check_dtm_dims(dtm, doc_labels, vocab)

    if issparse(dtm):
        dtm = dtm.toarray()

    return pd.DataFrame(dtm, index=pd.Index(list(doc_labels)), columns=list(vocab))


#%% Gensim compatibility functions


def dtm_to_gensim_corpus(dtm: Union[spmatrix, np.ndarray]):
    """
    Convert a (sparse) DTM to a Gensim Corpus object.

    .. seealso:: :func:`~tidytm.bow.dtm.gensim_corpus_to_dtm` for the reverse function or
                 :func:`~tidytm.bow.dtm.dtm_and_vocab_to_gensim_corpus_and_dict` which additionally creates a Gensim
                 :class:`~gensim.corpora.dictionary.Dictionary`.

    :param dtm: (sparse) document-term-matrix of size NxM (N docs, M is vocab size) with raw terms counts
    :return: a Gensim :class:`gensim.matutils.Sparse2Corpus` object
    """
    import gensim

    # Gensim expects a terms-to-documents matrix in CSC format
    dtm_t = dtm.transpose()

    if issparse(dtm_t):
        dtm_sparse = dtm_t.tocsc()
    else:
        dtm_sparse = csc_matrix(dtm_t)

    return gensim.matutils.Sparse2Corpus(dtm_sparse)


def gensim_corpus_to_dtm(corpus, n_terms: Optional[int] = None) -> coo_matrix:
    """
    Convert a Gensim corpus object to a sparse DTM in COO format.

    .. seealso:: :func:`~tidytm.bow.dtm.dtm_to_gensim_corpus` for the reverse function.

    :param corpus: Gensim corpus object
    :param n_terms: number of terms, i.e. DTM columns; if None, it is inferred from the largest term ID in `corpus`
    :return: sparse DTM in COO format
    """
    import gensim

    dtm_t = gensim.matutils.corpus2csc(corpus, num_terms=n_terms)
    return coo_matrix(dtm_t.transpose())


def dtm_and_vocab_to_gensim_corpus_and_dict(dtm: Union[spmatrix, np.ndarray], vocab: Sequence,
                                            as_gensim_dictionary: bool = True):
    """
    Convert a (sparse) DTM *and* a vocabulary list to a Gensim Corpus object and
    Gensim :class:`~gensim.corpora.dictionary.Dictionary` object or a Python :func:`dict`.

    :param dtm: (sparse) document-term-matrix of size NxM (N docs, M is vocab size) with raw terms counts
    :param vocab: list or array of vocabulary
    :param as_gensim_dictionary: if True create Gensim :class:`~gensim.corpora.dictionary.Dictionary` from `vocab`,
                                 else create Python :func:`dict`
    :return: a 2-tuple with (Corpus object, Gensim :class:`~gensim.corpora.dictionary.Dictionary` or
             Python :func:`dict`)
    """
    if dtm.shape[1] != len(vocab):
        raise DimensionMismatch('number of DTM columns (%d) must be equal to `len(vocab)` (%d)'
                                % (dtm.shape[1], len(vocab)))

    corpus = dtm_to_gensim_corpus(dtm)

    # vocabulary array has to be converted to dict with index -> word mapping
    id2word = dict(zip(range(len(vocab)), vocab))

    if as_gensim_dictionary:
        import gensim
        return corpus, gensim.corpora.dictionary.Dictionary.from_corpus(corpus, id2word)
    else:
        return corpus, id2word


#%% helper functions


def nonzero_cells(dtm: Union[spmatrix, np.ndarray]) -> coo_matrix:
    """
    Return the nonzero cells of `dtm` as COO matrix in row-major order, i.e. sorted by row index and then by column
    index. Duplicate entries are summed up and explicit zeros are removed. `dtm` is not modified.

    :param dtm: (sparse) 2D matrix or dense 2D array
    :return: sparse matrix in COO format
    """
    if issparse(dtm):
        csr = csr_matrix(dtm, copy=True)
    else:
        dtm = np.asarray(dtm)
        if dtm.ndim != 2:
            raise ValueError('`dtm` must be a 2D array/matrix')
        csr = csr_matrix(dtm)

    csr.sum_duplicates()      # also sorts column indices per row
    csr.eliminate_zeros()

    return csr.tocoo()


def _check_dtm_dims(dtm: Union[spmatrix, np.ndarray], doc_labels: Sequence, vocab: Sequence) -> None:
    if dtm.ndim != 2:
        raise ValueError('`dtm` must be a 2D array/matrix')

    if dtm.shape[0] != len(doc_labels):
        raise DimensionMismatch('number of DTM rows (%d) must be equal to `len(doc_labels)` (%d)'
                                % (dtm.shape[0], len(doc_labels)))

    if dtm.shape[1] != len(vocab):
        raise DimensionMismatch('number of DTM columns (%d) must be equal to `len(vocab)` (%d)'
                                % (dtm.shape[1], len(vocab)))
