"""
An example for topic modeling with LDA on tidy tables. Each chapter of three novels by Jane Austen is treated as
a document; the topic model results are turned back into tidy tables for inspection and plotting.

Requires the NLTK data package "gutenberg" (see `scripts/download_nltk_data.py`) and the lda package
(`pip install tidytm[lda]`).

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import matplotlib.pyplot as plt
import pandas as pd
from nltk.corpus import gutenberg

from tidytm.utils import enable_logging
from tidytm.tokenize import unnest_tokens
from tidytm.table import anti_join, count, filter_rows
from tidytm.lexicon import get_stopwords
from tidytm.bow import cast_sparse
from tidytm.topicmod import LDAFitter, tidy_model, glance, top_terms
from tidytm.topicmod.visualize import plot_top_terms

#%%

enable_logging()

BOOKS = {
    'austen-emma.txt': 'Emma',
    'austen-persuasion.txt': 'Persuasion',
    'austen-sense.txt': 'Sense and Sensibility',
}

N_TOPICS = 6

#%% loading the books as table with one line per row and assigning chapter numbers

lines = []
for fileid, title in BOOKS.items():
    book_lines = pd.Series(gutenberg.raw(fileid).splitlines())
    chapter = book_lines.str.match(r'^chapter\s+[\divxlc]+', case=False).cumsum()
    lines.append(pd.DataFrame({'book': title, 'chapter': chapter, 'text': book_lines}))

lines = pd.concat(lines, ignore_index=True)
lines = filter_rows(lines, lambda df: df['chapter'] > 0)    # skip title pages

#%% tokenizing, removing stopwords and counting words per chapter

tokens = unnest_tokens(lines, output='word', input='text', strip_numeric=True)
tokens = anti_join(tokens, get_stopwords('snowball'), by='word')

# remove character names and other very frequent words that appear in almost all chapters
word_counts = count(tokens, ['book', 'chapter', 'word'])
doc_freq = count(word_counts, 'word', name='n_chapters')
n_chapters = len(word_counts[['book', 'chapter']].drop_duplicates())
common = doc_freq.loc[doc_freq['n_chapters'] > 0.5 * n_chapters, ['word']]
word_counts = anti_join(word_counts, common, by='word')

print(word_counts.head())

#%% generating the document-term matrix with (book, chapter) as document key

dtm, doc_labels, vocab = cast_sparse(word_counts, document=['book', 'chapter'], term='word')
print('DTM of shape', dtm.shape)

#%% fitting the topic model

result = LDAFitter(n_iter=500, alpha=50 / N_TOPICS, eta=0.1).fit(dtm, N_TOPICS, seed=20220105)
print(glance(result))

#%% turning the results into tidy tables

beta, gamma, assignments = tidy_model(result, doc_labels, vocab, dtm=dtm, document=['book', 'chapter'],
                                      topic_fmt='topic_{i1}')

print(top_terms(beta, 10))

fig, axes = plt.subplots(2, N_TOPICS // 2, figsize=(12, 8))
plot_top_terms(fig, axes, beta, n=10, topic_title_fmt='{topic}')
fig.tight_layout()
plt.show()

#%% average topic proportions per book

print(gamma.groupby(['book', 'topic'])['gamma'].mean().unstack())

#%% how many words of each book are assigned to each topic

print(count(assignments, ['book', 'topic'], wt='count', sort=True))
