"""
An example for word frequency and sentiment analysis with tidy tables, using three novels by Jane Austen from NLTK's
Gutenberg corpus.

Requires the NLTK data packages "gutenberg", "opinion_lexicon" and "vader_lexicon" (see
`scripts/download_nltk_data.py`).

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import matplotlib.pyplot as plt
import pandas as pd
from nltk.corpus import gutenberg

from tidytm.utils import enable_logging
from tidytm.tokenize import unnest_tokens
from tidytm.table import anti_join, count, bind_tf_idf, top_n, filter_tokens, pairwise_count
from tidytm.lexicon import get_stopwords, get_sentiments
from tidytm.sentiment import sentiment_counts, sentiment_index, sentiment_score
from tidytm.topicmod.visualize import plot_word_counts, plot_sentiment_index

#%%

enable_logging()

BOOKS = {
    'austen-emma.txt': 'Emma',
    'austen-persuasion.txt': 'Persuasion',
    'austen-sense.txt': 'Sense and Sensibility',
}

#%% loading the books as table with one line of text per row

lines = []
for fileid, title in BOOKS.items():
    book_lines = gutenberg.raw(fileid).splitlines()
    lines.append(pd.DataFrame({'book': title, 'linenumber': range(len(book_lines)), 'text': book_lines}))

lines = pd.concat(lines, ignore_index=True)
print(lines.head())

#%% tokenizing to one word per row and removing stopwords

tokens = unnest_tokens(lines, output='word', input='text')
tokens = anti_join(tokens, get_stopwords('snowball'), by='word')
tokens = filter_tokens(tokens, 'word', r'^\d+$', match_type='regex', inverse=True)   # remove numbers

print(count(tokens, 'word', sort=True).head(10))

fig, ax = plt.subplots(figsize=(6, 5))
plot_word_counts(fig, ax, tokens, n=15, title='most frequent words')
plt.show()

#%% words that are characteristic for each book

word_counts = count(tokens, ['book', 'word'])
tfidf = bind_tf_idf(word_counts, term='word', document='book')
print(top_n(tfidf, 5, 'tf_idf', group_by='book'))

#%% words that appear together in the same line

pairs = pairwise_count(tokens.loc[tokens['book'] == 'Persuasion'], 'word', ['book', 'linenumber'], sort=True)
print(pairs.head(10))

#%% sentiment per book and sentiment trajectory along each book

bing = get_sentiments('bing')
print(sentiment_counts(tokens, bing, by='book', sort=True))

sent_idx = sentiment_index(tokens, bing, by='book', index_size=80, position='linenumber')

fig, axes = plt.subplots(len(BOOKS), 1, figsize=(8, 8), sharey=True)
for ax, title in zip(axes, BOOKS.values()):
    plot_sentiment_index(fig, ax, sent_idx.loc[sent_idx['book'] == title], title=title)
fig.tight_layout()
plt.show()

#%% summed VADER scores per book

print(sentiment_score(tokens, get_sentiments('vader'), by='book'))
