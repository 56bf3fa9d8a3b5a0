"""
Tests for tidytm.bow module.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import numpy as np
import pandas as pd
import pytest
from hypothesis import given
from scipy.sparse import coo_matrix, csr_matrix, issparse

from ._testtools import strategy_count_table, strategy_dtm_small
from tidytm import bow
from tidytm.errors import DimensionMismatch, DuplicateKey, IndexOutOfRange, SchemaMismatch


#%% cast_sparse and tidy_dtm


def test_cast_sparse():
    counts = pd.DataFrame({'document': ['d2', 'd2', 'd1', 'd3'],
                           'term': ['b', 'a', 'a', 'c'],
                           'n': [1, 2, 3, 0]})
    dtm, doc_labels, vocab = bow.cast_sparse(counts)

    assert isinstance(dtm, coo_matrix)
    assert doc_labels == ['d2', 'd1', 'd3']
    assert vocab == ['b', 'a', 'c']
    assert dtm.shape == (3, 3)
    assert dtm.nnz == 3     # zero count is not stored
    assert dtm.toarray().tolist() == [[1, 2, 0],
                                      [0, 3, 0],
                                      [0, 0, 0]]


def test_cast_sparse_custom_columns_and_dtype():
    counts = pd.DataFrame({'doc': ['x', 'y'], 'word': ['a', 'a'], 'tf_idf': [0.5, 0.25]})
    dtm, doc_labels, vocab = bow.cast_sparse(counts, document='doc', term='word', value='tf_idf', dtype=np.float32)

    assert dtm.dtype == np.float32
    assert doc_labels == ['x', 'y']
    assert vocab == ['a']
    assert np.allclose(dtm.toarray(), [[0.5], [0.25]])


def test_cast_sparse_composite_keys():
    counts = pd.DataFrame({'book': ['Emma', 'Emma', 'Persuasion'],
                           'chapter': [1, 2, 1],
                           'term': ['a', 'a', 'b'],
                           'n': [1, 2, 3]})
    dtm, doc_labels, vocab = bow.cast_sparse(counts, document=['book', 'chapter'])

    assert doc_labels == [('Emma', 1), ('Emma', 2), ('Persuasion', 1)]
    assert dtm.toarray().tolist() == [[1, 0], [2, 0], [0, 3]]

    back = bow.tidy_dtm(dtm, doc_labels, vocab, document=['book', 'chapter'])
    assert back.columns.tolist() == ['book', 'chapter', 'term', 'n']
    assert back.to_dict('list') == counts.to_dict('list')


def test_cast_sparse_invalid_input():
    with pytest.raises(DuplicateKey) as exc:
        bow.cast_sparse(pd.DataFrame({'document': ['d1', 'd1'], 'term': ['a', 'a'], 'n': [1, 2]}))
    assert exc.value.key == ('d1', 'a')

    with pytest.raises(SchemaMismatch) as exc:
        bow.cast_sparse(pd.DataFrame({'document': ['d1'], 'word': ['a'], 'n': [1]}))
    assert exc.value.missing == ['term']

    with pytest.raises(ValueError):
        bow.cast_sparse(pd.DataFrame({'document': ['d1'], 'term': ['a'], 'n': [-1]}))

    with pytest.raises(ValueError):
        bow.cast_sparse(pd.DataFrame({'document': ['d1'], 'term': ['a'], 'n': ['x']}))

    with pytest.raises(ValueError):
        bow.cast_sparse(pd.DataFrame({'document': ['d1', None], 'term': ['a', 'b'], 'n': [1, 1]}))


def test_cast_sparse_empty():
    counts = pd.DataFrame({'document': pd.Series([], dtype=object),
                           'term': pd.Series([], dtype=object),
                           'n': pd.Series([], dtype=int)})
    dtm, doc_labels, vocab = bow.cast_sparse(counts)
    assert dtm.shape == (0, 0)
    assert doc_labels == []
    assert vocab == []

    back = bow.tidy_dtm(dtm, doc_labels, vocab)
    assert back.columns.tolist() == ['document', 'term', 'n']
    assert len(back) == 0


@given(counts=strategy_count_table())
def test_cast_sparse_tidy_dtm_hypothesis(counts):
    dtm, doc_labels, vocab = bow.cast_sparse(counts)

    assert dtm.shape == (len(set(counts['document'])), len(set(counts['term'])))
    assert dtm.nnz == len(counts)
    assert dtm.sum() == counts['n'].sum()

    back = bow.tidy_dtm(dtm, doc_labels, vocab)
    assert back.columns.tolist() == ['document', 'term', 'n']
    assert set(back.itertuples(index=False, name=None)) == set(counts.itertuples(index=False, name=None))

    # output is in row-major order
    rows = [doc_labels.index(d) for d in back['document']]
    cols = [vocab.index(t) for t in back['term']]
    assert list(zip(rows, cols)) == sorted(zip(rows, cols))


def test_tidy_dtm():
    dtm = csr_matrix(np.array([[0, 2, 1],
                               [0, 0, 0],
                               [3, 0, 0]]))
    res = bow.tidy_dtm(dtm, ['d1', 'd2', 'd3'], ['a', 'b', 'c'], document='doc', term='word', value='count')

    assert res.columns.tolist() == ['doc', 'word', 'count']
    assert res['doc'].tolist() == ['d1', 'd1', 'd3']
    assert res['word'].tolist() == ['b', 'c', 'a']
    assert res['count'].tolist() == [2, 1, 3]
    assert res.index.tolist() == [0, 1, 2]


def test_tidy_dtm_dense_and_duplicate_entries():
    res = bow.tidy_dtm(np.array([[1, 0], [0, 4]]), ['d1', 'd2'], ['a', 'b'])
    assert res['n'].tolist() == [1, 4]

    # duplicate COO entries are summed; explicit zeros are skipped
    dtm = coo_matrix(([1, 2, 0], ([0, 0, 1], [1, 1, 0])), shape=(2, 2))
    res = bow.tidy_dtm(dtm, ['d1', 'd2'], ['a', 'b'])
    assert res.to_dict('list') == {'document': ['d1'], 'term': ['b'], 'n': [3]}
    assert dtm.nnz == 3     # input not modified


def test_tidy_dtm_invalid():
    dtm = coo_matrix(np.array([[0, 1], [2, 0]]))

    with pytest.raises(IndexOutOfRange):
        bow.tidy_dtm(dtm, ['d1'], ['a', 'b'])

    with pytest.raises(IndexOutOfRange):
        bow.tidy_dtm(dtm, ['d1', 'd2'], ['a'])

    with pytest.raises(IndexError):
        bow.tidy_dtm(dtm, [], [])

    with pytest.raises(ValueError):
        bow.tidy_dtm(dtm, ['d1', 'd2'], ['a', 'b'], term='n')

    with pytest.raises(ValueError):
        bow.tidy_dtm(np.array([1, 2]), ['d1'], ['a', 'b'])


#%% DTM helpers


def test_create_sparse_dtm():
    vocab = ['a', 'b', 'c']
    docs = [['a', 'c', 'a'], [], ['b']]
    dtm = bow.dtm.create_sparse_dtm(vocab, docs)

    assert isinstance(dtm, coo_matrix)
    assert dtm.dtype == np.intc
    assert dtm.toarray().tolist() == [[2, 0, 1], [0, 0, 0], [0, 1, 0]]

    assert bow.dtm.create_sparse_dtm(vocab, []).shape == (0, 3)

    with pytest.raises(ValueError):
        bow.dtm.create_sparse_dtm(vocab, [['a', 'x']])

    with pytest.raises(ValueError):
        bow.dtm.create_sparse_dtm(['a', 'a'], [['a']])


@given(dtm=strategy_dtm_small())
def test_dtm_to_dataframe_hypothesis(dtm):
    doc_labels = ['doc%d' % i for i in range(dtm.shape[0])]
    vocab = ['t%d' % j for j in range(dtm.shape[1])]

    for mat in (dtm, coo_matrix(dtm)):
        df = bow.dtm.dtm_to_dataframe(mat, doc_labels, vocab)
        assert df.index.tolist() == doc_labels
        assert df.columns.tolist() == vocab
        assert np.array_equal(df.to_numpy(), dtm)


def test_dtm_to_dataframe_dim_mismatch():
    with pytest.raises(DimensionMismatch):
        bow.dtm.dtm_to_dataframe(np.zeros((2, 3)), ['d1'], ['a', 'b', 'c'])

    with pytest.raises(DimensionMismatch):
        bow.dtm.dtm_to_dataframe(np.zeros((2, 3)), ['d1', 'd2'], ['a', 'b'])


@given(dtm=strategy_dtm_small())
def test_nonzero_cells_hypothesis(dtm):
    coo = bow.dtm.nonzero_cells(dtm)
    assert coo.nnz == np.count_nonzero(dtm)
    assert np.array_equal(coo.toarray(), dtm)
    assert list(zip(coo.row, coo.col)) == sorted(zip(coo.row, coo.col))


#%% Gensim compatibility


@given(dtm=strategy_dtm_small())
def test_gensim_corpus_round_trip(dtm):
    pytest.importorskip('gensim')

    corpus = bow.dtm.dtm_to_gensim_corpus(coo_matrix(dtm))
    assert len(corpus) == dtm.shape[0]

    back = bow.dtm.gensim_corpus_to_dtm(corpus, n_terms=dtm.shape[1])
    assert issparse(back)
    assert np.array_equal(back.toarray(), dtm)


def test_dtm_and_vocab_to_gensim_corpus_and_dict():
    pytest.importorskip('gensim')

    dtm = np.array([[1, 0, 2], [0, 3, 0]])
    vocab = ['a', 'b', 'c']

    corpus, id2word = bow.dtm.dtm_and_vocab_to_gensim_corpus_and_dict(dtm, vocab, as_gensim_dictionary=False)
    assert id2word == {0: 'a', 1: 'b', 2: 'c'}
    assert len(corpus) == 2

    corpus, gensim_dict = bow.dtm.dtm_and_vocab_to_gensim_corpus_and_dict(dtm, vocab)
    assert [gensim_dict[i] for i in range(3)] == vocab

    with pytest.raises(DimensionMismatch):
        bow.dtm.dtm_and_vocab_to_gensim_corpus_and_dict(dtm, ['a'])
