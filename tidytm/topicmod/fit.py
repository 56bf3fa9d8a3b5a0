"""
Fitting topic models through external topic modeling packages.

Topic model estimation is not implemented in tidytm. Instead, a :class:`TopicModelFitter` takes a sparse DTM as
created with :func:`~tidytm.bow.dtm.cast_sparse` and delegates the estimation to an external package. The result is
returned as :class:`TopicModelResult`, which can be turned into tidy tables with the functions in
:mod:`~tidytm.topicmod.tidiers`.

Two fitters are available:

- :class:`LDAFitter` uses collapsed Gibbs sampling from the `lda package <https://github.com/lda-project/lda>`_
- :class:`SklearnLDAFitter` uses variational Bayes from `scikit-learn <https://scikit-learn.org/>`_

Own fitters can be implemented by subclassing :class:`TopicModelFitter` and implementing
:meth:`~TopicModelFitter.fit_model`.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import importlib.util
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

import numpy as np
from scipy.sparse import csr_matrix, issparse, spmatrix

from ..errors import DimensionMismatch

logger = logging.getLogger('tidytm')


class TopicModelResult:
    """
    Result of a topic model estimation with the topic-word distribution (*beta*) and the document-topic distribution
    (*gamma*), and optionally per-cell topic assignments, the model's log likelihood and the model object of the
    external package.
    """

    def __init__(self, topic_word: np.ndarray, doc_topic: np.ndarray,
                 assignments: Optional[Union[np.ndarray, spmatrix]] = None,
                 loglikelihood: Optional[float] = None, model: Any = None):
        """
        Create a topic model result.

        :param topic_word: topic-word distribution; shape KxM, where K is number of topics, M is vocabulary size
        :param doc_topic: document-topic distribution; shape NxK, where N is the number of documents
        :param assignments: optional matrix of shape NxM aligned with the DTM that was used for fitting; holds the
                            zero-based index of the topic assigned to each nonzero DTM cell
        :param loglikelihood: optional log likelihood (or its approximation) of the fitted model
        :param model: optional model object of the external package
        """
        topic_word = np.asarray(topic_word)
        doc_topic = np.asarray(doc_topic)

        if topic_word.ndim != 2 or doc_topic.ndim != 2:
            raise ValueError('`topic_word` and `doc_topic` must be 2D arrays')

        if topic_word.shape[0] != doc_topic.shape[1]:
            raise DimensionMismatch('number of topics in `topic_word` (%d rows) and `doc_topic` (%d columns) differ'
                                    % (topic_word.shape[0], doc_topic.shape[1]))

        if assignments is not None and assignments.shape != (doc_topic.shape[0], topic_word.shape[1]):
            raise DimensionMismatch('`assignments` must have shape %s but has shape %s'
                                    % ((doc_topic.shape[0], topic_word.shape[1]), assignments.shape))

        self.topic_word = topic_word
        self.doc_topic = doc_topic
        self.assignments = assignments
        self.loglikelihood = loglikelihood
        self.model = model

    @property
    def n_topics(self) -> int:
        """Number of topics."""
        return self.topic_word.shape[0]

    @property
    def n_docs(self) -> int:
        """Number of documents."""
        return self.doc_topic.shape[0]

    @property
    def n_terms(self) -> int:
        """Vocabulary size."""
        return self.topic_word.shape[1]

    def __repr__(self):
        return '<TopicModelResult [%d documents / %d topics / %d terms]>' % (self.n_docs, self.n_topics, self.n_terms)


class TopicModelFitter(ABC):
    """
    Abstract base class for topic model fitters. Subclasses implement :meth:`fit_model` and set
    :attr:`package_name` to the name of the external package they require, if any.
    """

    #: name of the external package that is required for this fitter
    package_name: Optional[str] = None

    #: if True, the DTM must contain integer counts
    requires_integer_counts: bool = False

    @classmethod
    def is_available(cls) -> bool:
        """
        Check if the external package required by this fitter is installed.

        :return: True if the package is available or no package is required
        """
        return cls.package_name is None or importlib.util.find_spec(cls.package_name) is not None

    def fit(self, dtm: Union[spmatrix, np.ndarray], k: int, seed: Optional[int] = None) -> TopicModelResult:
        """
        Fit a topic model with `k` topics to the DTM `dtm`.

        :param dtm: (sparse) document-term-matrix of size NxM (N docs, M is vocab size) with term counts
        :param k: number of topics
        :param seed: optional random seed for reproducible results
        :return: :class:`TopicModelResult`
        """
        if not isinstance(k, (int, np.integer)) or k < 1:
            raise ValueError('`k` must be an integer >= 1')

        dtm = csr_matrix(dtm) if not issparse(dtm) else dtm.tocsr()

        if dtm.ndim != 2 or dtm.shape[0] == 0 or dtm.shape[1] == 0:
            raise ValueError('`dtm` must be a non-empty 2D matrix')

        if dtm.nnz > 0 and dtm.data.min() < 0:
            raise ValueError('`dtm` must not contain negative values')

        if self.requires_integer_counts:
            if not np.all(np.equal(np.mod(dtm.data, 1), 0)):
                raise ValueError('`dtm` must contain integer counts for this topic model')
            dtm = dtm.astype(np.intc)

        logger.info('fitting topic model with %d topics to DTM of shape %s', k, dtm.shape)

        result = self.fit_model(dtm, k, seed)

        if result.n_docs != dtm.shape[0] or result.n_terms != dtm.shape[1] or result.n_topics != k:
            raise DimensionMismatch('shape of topic model result %r does not match DTM shape %s and k=%d'
                                    % (result, dtm.shape, k))

        logger.info('fitted topic model: %r', result)

        return result

    @abstractmethod
    def fit_model(self, dtm: csr_matrix, k: int, seed: Optional[int]) -> TopicModelResult:
        """
        Fit a topic model. Called by :meth:`fit` with a validated DTM in CSR format.

        :param dtm: sparse DTM in CSR format
        :param k: number of topics
        :param seed: optional random seed
        :return: :class:`TopicModelResult`
        """
        pass


class LDAFitter(TopicModelFitter):
    """
    Latent Dirichlet Allocation via collapsed Gibbs sampling from the `lda package <https://github.com/lda-project/lda>`_.

    The lda package discards the per-token topic assignments after fitting, hence the result's ``assignments`` are
    not set.
    """

    package_name = 'lda'
    requires_integer_counts = True

    def __init__(self, n_iter: int = 1000, alpha: float = 0.1, eta: float = 0.01, refresh: int = 10):
        """
        Create an LDA fitter.

        :param n_iter: number of sampling iterations
        :param alpha: Dirichlet parameter for the document-topic distribution
        :param eta: Dirichlet parameter for the topic-word distribution
        :param refresh: log the model's log likelihood every `refresh` iterations
        """
        self.n_iter = n_iter
        self.alpha = alpha
        self.eta = eta
        self.refresh = refresh

    def fit_model(self, dtm: csr_matrix, k: int, seed: Optional[int]) -> TopicModelResult:
        from lda import LDA

        model = LDA(n_topics=k, n_iter=self.n_iter, alpha=self.alpha, eta=self.eta, random_state=seed,
                    refresh=self.refresh)
        model.fit(dtm)

        return TopicModelResult(model.topic_word_, model.doc_topic_, loglikelihood=model.loglikelihood(),
                                model=model)


class SklearnLDAFitter(TopicModelFitter):
    """
    Latent Dirichlet Allocation via (online) variational Bayes from
    `scikit-learn <https://scikit-learn.org/stable/modules/generated/sklearn.decomposition.LatentDirichletAllocation.html>`_.

    The topic-word distribution is derived by normalizing the model's ``components_``. The result's
    ``loglikelihood`` is the approximate log likelihood bound reported by the model's ``score()`` method.
    """

    package_name = 'sklearn'

    def __init__(self, max_iter: int = 10, learning_method: str = 'batch', **lda_params):
        """
        Create a scikit-learn LDA fitter.

        :param max_iter: maximum number of passes over the data
        :param learning_method: ``'batch'`` or ``'online'``
        :param lda_params: further parameters passed to ``LatentDirichletAllocation``
        """
        self.max_iter = max_iter
        self.learning_method = learning_method
        self.lda_params = lda_params

    def fit_model(self, dtm: csr_matrix, k: int, seed: Optional[int]) -> TopicModelResult:
        from sklearn.decomposition import LatentDirichletAllocation

        model = LatentDirichletAllocation(n_components=k, max_iter=self.max_iter,
                                          learning_method=self.learning_method, random_state=seed,
                                          **self.lda_params)
        doc_topic = model.fit_transform(dtm)
        topic_word = model.components_ / model.components_.sum(axis=1)[:, np.newaxis]

        return TopicModelResult(topic_word, doc_topic, loglikelihood=model.score(dtm), model=model)
