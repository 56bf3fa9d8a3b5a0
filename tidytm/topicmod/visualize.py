"""
Functions for visualizing tidy topic model tables and sentiment analysis results with matplotlib.

All plotting functions accept a matplotlib Figure object and one or more Axes objects to draw on and return them,
so that plots can be further customized::

    fig, axes = plt.subplots(2, 2, figsize=(8, 6))
    plot_top_terms(fig, axes, tidy_beta(result.topic_word, vocab), n=10)
    plt.show()

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import logging

import numpy as np
import matplotlib.pyplot as plt

from .. import defaults
from ..table import count
from ..utils import require_columns
from .tidiers import top_terms

logger = logging.getLogger('tidytm')


#%% topic model plots


def plot_top_terms(fig, axes, beta_df, n=10, term=None, topic_title_fmt='topic {topic}',
                   xaxislabel='beta', palette='tab10', fontsize_terms=None):
    """
    Plot the `n` most probable terms of each topic in a table produced by :func:`~tidytm.topicmod.tidiers.tidy_beta`
    as horizontal bar charts, one chart per topic. The most probable term is on top.

    :param fig: matplotlib Figure object
    :param axes: matplotlib Axes object or array of Axes objects (e.g. as created with ``plt.subplots(nrows, ncols)``);
                 there must be at least as many Axes as topics in `beta_df`; unused Axes are hidden
    :param beta_df: table with columns ``topic``, term column and ``beta``
    :param n: number of top terms per topic
    :param term: name of the term column; default is :data:`tidytm.defaults.term_col`
    :param topic_title_fmt: format string for the title of each chart; ``{topic}`` is replaced by the topic
    :param xaxislabel: x-axis label
    :param palette: name of a matplotlib colormap used for the bar colors
    :param fontsize_terms: font size for the term labels
    :return: tuple of (matplotlib Figure object, array of matplotlib Axes objects)
    """
    term = term or defaults.term_col
    require_columns(beta_df, ['topic', term, 'beta'], 'beta table')

    top = top_terms(beta_df, n, term=term)
    topics = list(dict.fromkeys(top['topic']))
    axes_flat = np.atleast_1d(axes).ravel()

    if len(axes_flat) < len(topics):
        raise ValueError('%d Axes objects were passed but %d are required (one per topic)'
                         % (len(axes_flat), len(topics)))

    cmap = plt.get_cmap(palette)

    for i, (ax, topic) in enumerate(zip(axes_flat, topics)):
        topic_terms = top.loc[top['topic'] == topic]
        y = np.arange(len(topic_terms))

        ax.barh(y, topic_terms['beta'].to_numpy(), color=cmap(i % cmap.N))
        ax.set_yticks(y)
        ax.set_yticklabels(topic_terms[term].astype(str).tolist(), fontsize=fontsize_terms)
        ax.invert_yaxis()   # most probable term on top

        if topic_title_fmt:
            ax.set_title(topic_title_fmt.format(topic=topic))
        if xaxislabel:
            ax.set_xlabel(xaxislabel)

    for ax in axes_flat[len(topics):]:
        ax.set_visible(False)

    logger.debug('plotted top %d terms for %d topics', n, len(topics))

    return fig, axes


#%% text and sentiment plots


def plot_word_counts(fig, ax, tokens, n=10, word='word', title=None, xaxislabel='n', yaxislabel=None,
                     color='gray'):
    """
    Plot the `n` most frequent words in a token table as horizontal bar chart.

    :param fig: matplotlib Figure object
    :param ax: matplotlib Axes object
    :param tokens: token table
    :param n: number of most frequent words to plot
    :param word: token column in `tokens`
    :param title: plot title
    :param xaxislabel: x-axis label
    :param yaxislabel: y-axis label
    :param color: bar color
    :return: tuple of generated (matplotlib Figure object, matplotlib Axes object)
    """
    if n < 1:
        raise ValueError('`n` must be strictly positive')

    counts = count(tokens, word, sort=True, name='n').head(n)
    y = np.arange(len(counts))

    ax.barh(y, counts['n'].to_numpy(), color=color)
    ax.set_yticks(y)
    ax.set_yticklabels(counts[word].astype(str).tolist())
    ax.invert_yaxis()

    if title:
        ax.set_title(title)
    if xaxislabel:
        ax.set_xlabel(xaxislabel)
    if yaxislabel:
        ax.set_ylabel(yaxislabel)

    return fig, ax


def plot_sentiment_index(fig, ax, df, index='index', value='sentiment', title=None,
                         xaxislabel='index', yaxislabel='sentiment', color_pos='tab:blue', color_neg='tab:red'):
    """
    Plot the net sentiment per text section as bar chart, e.g. from a table produced by
    :func:`~tidytm.sentiment.sentiment_index`. Positive and negative values are drawn in different colors.

    :param fig: matplotlib Figure object
    :param ax: matplotlib Axes object
    :param df: table with one row per text section
    :param index: column with the section index used on the x-axis
    :param value: column with the net sentiment
    :param title: plot title
    :param xaxislabel: x-axis label
    :param yaxislabel: y-axis label
    :param color_pos: color for bars with positive sentiment
    :param color_neg: color for bars with negative sentiment
    :return: tuple of generated (matplotlib Figure object, matplotlib Axes object)
    """
    require_columns(df, [index, value], 'sentiment table')

    x = df[index].to_numpy()
    y = df[value].to_numpy()

    ax.bar(x, y, color=np.where(y >= 0, color_pos, color_neg).tolist())
    ax.axhline(0, color='black', lw=0.5)

    if title:
        ax.set_title(title)
    if xaxislabel:
        ax.set_xlabel(xaxislabel)
    if yaxislabel:
        ax.set_ylabel(yaxislabel)

    return fig, ax
