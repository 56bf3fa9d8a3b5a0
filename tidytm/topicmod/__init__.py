"""
Topic modeling sub-package with modules for fitting topic models through external packages, turning model results
into tidy tables and visualization.

Topic models are not implemented here. :mod:`~tidytm.topicmod.fit` wraps popular topic modeling packages (*lda* and
*scikit-learn*), which need to be installed separately in order to use them.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

from . import fit, tidiers, visualize
from .fit import TopicModelResult, TopicModelFitter, LDAFitter, SklearnLDAFitter
from .tidiers import TidyTopicModel, tidy_beta, tidy_gamma, augment, tidy_model, glance, top_terms
