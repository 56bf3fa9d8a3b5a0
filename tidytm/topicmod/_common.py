"""
Common constants and functions for topic modeling sub-package.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

from typing import Optional, Sequence, Union

import numpy as np

from .. import defaults


def topic_ids(topic_indices: Union[Sequence[int], np.ndarray], topic_fmt: Optional[str] = None) -> np.ndarray:
    """
    Turn zero-based topic indices into topic identifiers. Without a format string, topics are identified by
    one-based integers. Otherwise `topic_fmt` is used to generate string labels, where ``{i0}`` or ``{i1}`` are
    replaced by the zero- or one-based topic index, e.g. ``'topic_{i1}'``.

    :param topic_indices: zero-based topic indices
    :param topic_fmt: topic label format string; if None, use :data:`tidytm.defaults.topic_fmt`
    :return: NumPy array of topic identifiers
    """
    topic_indices = np.asarray(topic_indices, dtype=int)
    topic_fmt = topic_fmt or defaults.topic_fmt

    if topic_fmt is None:
        return topic_indices + 1
    else:
        return np.array([topic_fmt.format(i0=i, i1=i + 1) for i in topic_indices], dtype=object)


def topic_labels(n_topics: int, topic_fmt: Optional[str] = None) -> np.ndarray:
    """
    Generate the identifiers for `n_topics` topics.

    .. seealso:: :func:`topic_ids`

    :param n_topics: number of topics
    :param topic_fmt: topic label format string; if None, use :data:`tidytm.defaults.topic_fmt`
    :return: NumPy array of `n_topics` topic identifiers
    """
    return topic_ids(np.arange(n_topics), topic_fmt)
