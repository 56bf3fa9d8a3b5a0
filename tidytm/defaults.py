"""
Module with default settings that are used throughout tidytm when the respective function argument is not given
and which can be changed during runtime, e.g.::

    import tidytm

    tidytm.defaults.language = 'german'
    # -> the "nltk" stopword lexicon of a newly created default store is German now
    tidytm.lexicon.get_stopwords('nltk', store=tidytm.lexicon.LexiconStore.with_defaults())
"""

#: language label as accepted by NLTK's stopwords corpus
language = 'english'

#: name of the document key column in token tables, count tables and topic model tables
document_col = 'document'

#: name of the term column in count tables and topic model tables
term_col = 'term'

#: name of the count column created by :func:`tidytm.table.count`
count_col = 'n'

#: string used to join the tokens of an n-gram
ngram_delim = ' '

#: format string for topic labels where ``{i0}`` or ``{i1}`` are replaced by the zero- or one-indexed topic number;
#: if None, topics are identified by one-indexed integers
topic_fmt = None
