"""
Tests for tidytm.topicmod.tidiers module.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import numpy as np
import pandas as pd
import pytest
from hypothesis import given
from scipy.sparse import coo_matrix, csr_matrix

from ._testtools import strategy_2d_prob_distribution
from tidytm import defaults
from tidytm.errors import DimensionMismatch
from tidytm.topicmod import TopicModelResult, tidiers
from tidytm.topicmod._common import topic_ids, topic_labels


@pytest.fixture
def model():
    topic_word = np.array([[0.5, 0.3, 0.2, 0.0],
                           [0.1, 0.1, 0.1, 0.7]])
    doc_topic = np.array([[0.9, 0.1],
                          [0.2, 0.8],
                          [0.5, 0.5]])
    return TopicModelResult(topic_word, doc_topic, loglikelihood=-123.5)


@pytest.fixture
def dtm():
    return csr_matrix(np.array([[2, 1, 0, 0],
                                [0, 0, 1, 3],
                                [1, 0, 0, 1]]))


VOCAB = ['apple', 'banana', 'cherry', 'date']
DOCS = ['d1', 'd2', 'd3']


#%% topic identifiers


def test_topic_ids():
    assert topic_ids([0, 1, 2]).tolist() == [1, 2, 3]
    assert topic_ids([0, 2], 'topic_{i1}').tolist() == ['topic_1', 'topic_3']
    assert topic_ids([0, 2], 't{i0}').tolist() == ['t0', 't2']
    assert topic_labels(3).tolist() == [1, 2, 3]
    assert topic_labels(0).tolist() == []


def test_topic_ids_default_format(monkeypatch):
    monkeypatch.setattr(defaults, 'topic_fmt', 'topic_{i1}')
    assert topic_labels(2).tolist() == ['topic_1', 'topic_2']


#%% tidy_beta and tidy_gamma


def test_tidy_beta(model):
    res = tidiers.tidy_beta(model.topic_word, VOCAB)

    assert res.columns.tolist() == ['topic', 'term', 'beta']
    assert len(res) == 8
    assert res['topic'].tolist() == [1] * 4 + [2] * 4
    assert res['term'].tolist() == VOCAB * 2
    assert res['beta'].tolist() == model.topic_word.ravel().tolist()


def test_tidy_beta_options_and_invalid(model):
    res = tidiers.tidy_beta(model.topic_word, VOCAB, topic_fmt='topic_{i1}', term='word')
    assert res.columns.tolist() == ['topic', 'word', 'beta']
    assert res['topic'].unique().tolist() == ['topic_1', 'topic_2']

    with pytest.raises(DimensionMismatch):
        tidiers.tidy_beta(model.topic_word, VOCAB[:3])

    with pytest.raises(ValueError):
        tidiers.tidy_beta(np.array([0.5, 0.5]), ['a', 'b'])


@given(topic_word=strategy_2d_prob_distribution())
def test_tidy_beta_hypothesis(topic_word):
    vocab = ['t%d' % j for j in range(topic_word.shape[1])]
    res = tidiers.tidy_beta(topic_word, vocab)

    assert len(res) == topic_word.size
    sums = res.groupby('topic')['beta'].sum()
    assert sums.index.tolist() == list(range(1, topic_word.shape[0] + 1))
    assert np.allclose(sums.to_numpy(), 1, atol=1e-6)


def test_tidy_gamma(model):
    res = tidiers.tidy_gamma(model.doc_topic, DOCS)

    assert res.columns.tolist() == ['document', 'topic', 'gamma']
    assert res['document'].tolist() == ['d1', 'd1', 'd2', 'd2', 'd3', 'd3']
    assert res['topic'].tolist() == [1, 2] * 3
    assert res['gamma'].tolist() == model.doc_topic.ravel().tolist()


def test_tidy_gamma_composite_keys(model):
    labels = [('Emma', 1), ('Emma', 2), ('Persuasion', 1)]
    res = tidiers.tidy_gamma(model.doc_topic, labels, document=['book', 'chapter'])

    assert res.columns.tolist() == ['book', 'chapter', 'topic', 'gamma']
    assert res['book'].tolist() == ['Emma'] * 4 + ['Persuasion'] * 2
    assert res['chapter'].tolist() == [1, 1, 2, 2, 1, 1]


def test_tidy_gamma_invalid(model):
    with pytest.raises(DimensionMismatch):
        tidiers.tidy_gamma(model.doc_topic, DOCS[:2])


@given(doc_topic=strategy_2d_prob_distribution())
def test_tidy_gamma_hypothesis(doc_topic):
    labels = ['doc%d' % i for i in range(doc_topic.shape[0])]
    res = tidiers.tidy_gamma(doc_topic, labels)

    assert len(res) == doc_topic.size
    sums = res.groupby('document', sort=False)['gamma'].sum()
    assert sums.index.tolist() == labels
    assert np.allclose(sums.to_numpy(), 1, atol=1e-6)


#%% augment


def test_augment_with_assignments(dtm):
    assignments = np.array([[1, 0, 0, 0],
                            [0, 0, 1, 1],
                            [0, 0, 0, 1]])
    res = tidiers.augment(dtm, DOCS, VOCAB, assignments=assignments)

    assert res.columns.tolist() == ['document', 'term', 'count', 'topic']
    assert list(res.itertuples(index=False, name=None)) == [
        ('d1', 'apple', 2, 2),
        ('d1', 'banana', 1, 1),
        ('d2', 'cherry', 1, 2),
        ('d2', 'date', 3, 2),
        ('d3', 'apple', 1, 1),
        ('d3', 'date', 1, 2),
    ]

    # same result with sparse assignments
    res_sparse = tidiers.augment(dtm, DOCS, VOCAB, assignments=coo_matrix(assignments))
    assert res_sparse['topic'].tolist() == res['topic'].tolist()


def test_augment_most_probable_topic(model, dtm):
    res = tidiers.augment(dtm, DOCS, VOCAB, topic_word_distrib=model.topic_word, doc_topic_distrib=model.doc_topic,
                          topic_fmt='topic_{i1}')

    assert res['term'].tolist() == ['apple', 'banana', 'cherry', 'date', 'apple', 'date']
    assert res['count'].tolist() == [2, 1, 1, 3, 1, 1]
    # d1/apple: 0.9*0.5 vs. 0.1*0.1; d2/cherry: 0.2*0.2 vs. 0.8*0.1; d3/apple: 0.5*0.5 vs. 0.5*0.1
    assert res['topic'].tolist() == ['topic_1', 'topic_1', 'topic_2', 'topic_2', 'topic_1', 'topic_2']


def test_augment_ties_choose_first_topic(dtm):
    topic_word = np.full((2, 4), 0.25)
    doc_topic = np.full((3, 2), 0.5)
    res = tidiers.augment(dtm, DOCS, VOCAB, topic_word_distrib=topic_word, doc_topic_distrib=doc_topic)
    assert set(res['topic']) == {1}


def test_augment_invalid(model, dtm):
    with pytest.raises(DimensionMismatch):
        tidiers.augment(dtm, DOCS[:2], VOCAB, assignments=np.zeros((3, 4), dtype=int))

    with pytest.raises(DimensionMismatch):
        tidiers.augment(dtm, DOCS, VOCAB, assignments=np.zeros((3, 3), dtype=int))

    with pytest.raises(DimensionMismatch):
        tidiers.augment(dtm, DOCS, VOCAB, topic_word_distrib=model.topic_word, doc_topic_distrib=model.doc_topic[:2])

    with pytest.raises(DimensionMismatch):
        tidiers.augment(dtm, DOCS, VOCAB, topic_word_distrib=model.topic_word[:, :3],
                        doc_topic_distrib=model.doc_topic)

    with pytest.raises(ValueError):
        tidiers.augment(dtm, DOCS, VOCAB, topic_word_distrib=model.topic_word)


def test_augment_empty_dtm():
    res = tidiers.augment(csr_matrix((2, 3), dtype=int), ['a', 'b'], ['x', 'y', 'z'],
                          topic_word_distrib=np.full((2, 3), 1/3), doc_topic_distrib=np.full((2, 2), 0.5))
    assert res.columns.tolist() == ['document', 'term', 'count', 'topic']
    assert len(res) == 0


#%% tidy_model, glance and top_terms


def test_tidy_model(model, dtm):
    tidy = tidiers.tidy_model(model, DOCS, VOCAB, dtm=dtm)

    assert isinstance(tidy, tidiers.TidyTopicModel)
    assert tidy.beta.equals(tidiers.tidy_beta(model.topic_word, VOCAB))
    assert tidy.gamma.equals(tidiers.tidy_gamma(model.doc_topic, DOCS))
    assert tidy.assignments['topic'].tolist() == [1, 1, 2, 2, 1, 2]

    beta, gamma, assignments = tidiers.tidy_model(model, DOCS, VOCAB)
    assert len(beta) == 8
    assert len(gamma) == 6
    assert assignments is None


def test_tidy_model_uses_stored_assignments(model, dtm):
    assignments = np.zeros(dtm.shape, dtype=int)
    result = TopicModelResult(model.topic_word, model.doc_topic, assignments=assignments)
    tidy = tidiers.tidy_model(result, DOCS, VOCAB, dtm=dtm)
    assert set(tidy.assignments['topic']) == {1}


def test_glance(model):
    res = tidiers.glance(model)
    assert res.to_dict('records') == [{'n_docs': 3, 'n_topics': 2, 'n_terms': 4, 'loglikelihood': -123.5}]

    res = tidiers.glance(TopicModelResult(model.topic_word, model.doc_topic))
    assert np.isnan(res.loc[0, 'loglikelihood'])


def test_top_terms(model):
    beta = tidiers.tidy_beta(model.topic_word, VOCAB)
    res = tidiers.top_terms(beta, 2)

    assert res.columns.tolist() == ['topic', 'term', 'beta']
    assert list(res[['topic', 'term']].itertuples(index=False, name=None)) == [
        (1, 'apple'),
        (1, 'banana'),
        (2, 'date'),
        (2, 'apple'),
        (2, 'banana'),
        (2, 'cherry'),
    ]
    assert res['beta'].tolist() == [0.5, 0.3, 0.7, 0.1, 0.1, 0.1]


def test_top_terms_topic_order_is_kept():
    beta = pd.DataFrame({'topic': ['z', 'z', 'a', 'a'],
                         'term': ['x', 'y', 'x', 'y'],
                         'beta': [0.1, 0.9, 0.6, 0.4]})
    res = tidiers.top_terms(beta, 1)
    assert list(res.itertuples(index=False, name=None)) == [('z', 'y', 0.9), ('a', 'x', 0.6)]
