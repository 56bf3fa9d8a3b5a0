"""
Tests for tidytm.tokenize module.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""

import re
import string

import numpy as np
import pandas as pd
import pytest
from hypothesis import given, strategies as st

from ._testtools import strategy_texts
from tidytm import tokenize
from tidytm.errors import InvalidUnitConfiguration, SchemaMismatch


#%% tokenize_text and make_tokenizer


def test_tokenize_text_two_lines():
    assert tokenize.tokenize_text(['Hello world.', 'Goodbye world.']) == ['hello', 'world', 'goodbye', 'world']
    assert tokenize.tokenize_text('Hello world.\nGoodbye world.', unit='word') == \
        ['hello', 'world', 'goodbye', 'world']


@pytest.mark.parametrize('text, unit, opts, expected', [
    ('', 'words', {}, []),
    (None, 'words', {}, []),
    ("Don't stop-believing!", 'words', {}, ["don't", 'stop', 'believing']),
    ('Hello, World!', 'words', {'strip_punct': False}, ['hello', ',', 'world', '!']),
    ('Hello, World!', 'words', {'to_lower': False}, ['Hello', 'World']),
    ('I have 2 cats and 3.5 dogs', 'words', {'strip_numeric': True}, ['i', 'have', 'cats', 'and', 'dogs']),
    ('Ab c!', 'characters', {}, ['a', 'b', 'c']),
    ('Ab c!', 'characters', {'strip_punct': False, 'to_lower': False}, ['A', 'b', ' ', 'c', '!']),
    ('e\u0301\U0001F600x\u6f22', 'characters', {'strip_punct': False}, ['e', '\u0301', '\U0001F600', 'x', '\u6f22']),
    ('e\u0301\U0001F600x\u6f22', 'characters', {}, ['e', 'x', '\u6f22']),
    ('abcd', 'character_shingles', {}, ['abc', 'bcd']),
    ('e\u0301\U0001F600x\u6f22', 'character_shingles', {'n': 2, 'strip_punct': False},
     ['e\u0301', '\u0301\U0001F600', '\U0001F600x', 'x\u6f22']),
    ('\u6f22\u5b57 ok', 'character_shingles', {'n': 2}, ['\u6f22\u5b57', '\u5b57o', 'ok']),
    ('ab cd', 'character_shingles', {'n': 2}, ['ab', 'bc', 'cd']),
    ('The bank of America', 'ngrams', {'n': 2}, ['the bank', 'bank of', 'of america']),
    ('The bank', 'ngrams', {'n': 2, 'n_min': 1}, ['the', 'the bank', 'bank']),
    ('The bank', 'ngrams', {'n': 3}, []),
    ('The bank of', 'ngrams', {'n': 2, 'ngram_delim': '_'}, ['the_bank', 'bank_of']),
    ('a b c', 'skip_ngrams', {'n': 2, 'k': 1, 'n_min': 2}, ['a b', 'a c', 'b c']),
    ('This is one. This is two! And three?', 'sentences', {}, ['this is one.', 'this is two!', 'and three?']),
    ('This is one.\nStill one. Two.', 'sentences', {'to_lower': False}, ['This is one.', 'Still one.', 'Two.']),
    ('a\n\nB\n', 'lines', {}, ['a', 'b']),
    ('Para one\nline two.\n\n\nPara two.', 'paragraphs', {}, ['para one line two.', 'para two.']),
    ('a; b ;c;', 'regex', {'pattern': r'\s*;\s*'}, ['a', 'b', 'c']),
    ("They'll save and invest more.", 'ptb', {}, ['they', "'ll", 'save', 'and', 'invest', 'more', '.']),
    ("They'll save and invest more.", 'ptb', {'strip_punct': True},
     ['they', "'ll", 'save', 'and', 'invest', 'more']),
    ('A|B', lambda s: s.split('|'), {}, ['a', 'b']),
    ('A|B', lambda s: s.split('|'), {'to_lower': False}, ['A', 'B']),
])
def test_tokenize_text(text, unit, opts, expected):
    assert tokenize.tokenize_text(text, unit=unit, **opts) == expected


@pytest.mark.parametrize('unit, opts', [
    ('foo', {}),
    (123, {}),
    ('ngrams', {}),
    ('ngrams', {'n': 0}),
    ('ngrams', {'n': 2, 'n_min': 3}),
    ('skip_ngrams', {'n': 2}),
    ('skip_ngrams', {'n': 2, 'k': -1}),
    ('character_shingles', {'n': 0}),
    ('regex', {}),
    ('regex', {'pattern': ''}),
    ('regex', {'pattern': '('}),
    ('regex', {'pattern': re.compile('')}),
])
def test_make_tokenizer_invalid_config(unit, opts):
    with pytest.raises(InvalidUnitConfiguration):
        tokenize.make_tokenizer(unit, **opts)


def test_invalid_config_is_a_value_error():
    with pytest.raises(ValueError):
        tokenize.make_tokenizer('ngrams')


@given(texts=strategy_texts())
def test_tokenize_text_hypothesis(texts):
    tok = tokenize.tokenize_text(texts)
    assert isinstance(tok, list)
    assert all(isinstance(t, str) and t for t in tok)
    assert all(t == t.lower() for t in tok)
    assert all(any(c.isalnum() for c in t) for t in tok)

    # tokenizing lines separately gives the same tokens in the same order
    assert tok == [t for text in texts for t in tokenize.tokenize_text(text)]


#%% unnest_tokens


def test_unnest_tokens():
    df = pd.DataFrame({'document': ['d1', 'd1', 'd2', 'd3'],
                       'linenumber': [1, 2, 1, 1],
                       'text': ['Hello world.', 'Goodbye world.', '', 'Only one']})
    res = tokenize.unnest_tokens(df, 'word', 'text')

    assert res.columns.tolist() == ['document', 'linenumber', 'word']
    assert res['word'].tolist() == ['hello', 'world', 'goodbye', 'world', 'only', 'one']
    assert res['document'].tolist() == ['d1'] * 4 + ['d3'] * 2
    assert res['linenumber'].tolist() == [1, 1, 2, 2, 1, 1]
    assert res.index.tolist() == list(range(6))

    # input is not modified
    assert df.columns.tolist() == ['document', 'linenumber', 'text']
    assert len(df) == 4


def test_unnest_tokens_keep_input_and_position():
    df = pd.DataFrame({'text': ['a b c', None, 'd e']})
    res = tokenize.unnest_tokens(df, 'word', 'text', drop=False, with_position=True)

    assert res.columns.tolist() == ['text', 'word', 'position']
    assert res['word'].tolist() == ['a', 'b', 'c', 'd', 'e']
    assert res['position'].tolist() == [0, 1, 2, 0, 1]
    assert res['text'].tolist() == ['a b c'] * 3 + ['d e'] * 2


def test_unnest_tokens_output_replaces_input():
    df = pd.DataFrame({'text': ['A b']})
    res = tokenize.unnest_tokens(df, 'text', 'text', drop=False)
    assert res.columns.tolist() == ['text']
    assert res['text'].tolist() == ['a', 'b']


def test_unnest_tokens_collapse():
    df = pd.DataFrame({'book': ['x', 'x', 'y', 'x'],
                       'text': ['The bank', 'of America', 'Some other', 'text']})
    res = tokenize.unnest_tokens(df, 'bigram', 'text', token='ngrams', n=2, collapse='book')

    assert res.columns.tolist() == ['book', 'bigram']
    assert res['bigram'].tolist() == ['the bank', 'bank of', 'of america', 'america text', 'some other']
    assert res['book'].tolist() == ['x', 'x', 'x', 'x', 'y']


def test_unnest_tokens_collapse_missing_keys():
    df = pd.DataFrame({'chapter': [np.nan, 1.0, np.nan], 'text': ['The bank', 'Other text', 'of America']})
    res = tokenize.unnest_tokens(df, 'bigram', 'text', token='ngrams', n=2, collapse='chapter')

    assert res['bigram'].tolist() == ['the bank', 'bank of', 'of america', 'other text']
    assert res['chapter'].isna().tolist() == [True, True, True, False]

    df = pd.DataFrame({'book': ['x', 'x', 'x'], 'chapter': [np.nan, np.nan, 2.0],
                       'text': ['a b', 'c', 'd']})
    res = tokenize.unnest_tokens(df, 'word', 'text', collapse=['book', 'chapter'], with_position=True)

    assert res.columns.tolist() == ['book', 'chapter', 'word', 'position']
    assert res['word'].tolist() == ['a', 'b', 'c', 'd']
    assert res['position'].tolist() == [0, 1, 2, 0]


def test_unnest_tokens_empty():
    df = pd.DataFrame({'document': pd.Series([], dtype=object), 'text': pd.Series([], dtype=object)})
    res = tokenize.unnest_tokens(df, 'word', 'text', with_position=True)
    assert res.columns.tolist() == ['document', 'word', 'position']
    assert len(res) == 0


def test_unnest_tokens_missing_column():
    df = pd.DataFrame({'txt': ['a']})
    with pytest.raises(SchemaMismatch) as exc:
        tokenize.unnest_tokens(df, 'word', 'text')
    assert exc.value.missing == ['text']
    assert "'text'" in str(exc.value)


def test_unnest_tokens_invalid_config_fails_early():
    df = pd.DataFrame({'text': ['a']})
    with pytest.raises(InvalidUnitConfiguration):
        tokenize.unnest_tokens(df, 'word', 'text', token='ngrams')


@given(texts=st.lists(st.text(string.ascii_letters + ' .,\n', max_size=30), max_size=10))
def test_unnest_tokens_hypothesis(texts):
    df = pd.DataFrame({'id': np.arange(len(texts)), 'text': pd.Series(texts, dtype=object)})
    res = tokenize.unnest_tokens(df, 'word', 'text', with_position=True)

    expected = [tokenize.tokenize_text(t) for t in texts]
    assert res['word'].tolist() == [t for tok in expected for t in tok]
    assert res['id'].tolist() == [i for i, tok in enumerate(expected) for _ in tok]
    assert res['position'].tolist() == [p for tok in expected for p in range(len(tok))]


#%% tokenize


def test_tokenize_documents():
    res = tokenize.tokenize([('d1', ['Hello world.', 'Goodbye world.']), ('d2', ''), ('d3', 'The END')])

    assert res.columns.tolist() == ['document', 'word']
    assert res['document'].tolist() == ['d1', 'd1', 'd1', 'd1', 'd3', 'd3']
    assert res['word'].tolist() == ['hello', 'world', 'goodbye', 'world', 'the', 'end']


def test_tokenize_dict_and_options():
    res = tokenize.tokenize({'a': 'X y z', 'b': 'w'}, unit='ngrams', n=2, output='bigram', document='doc',
                            with_position=True)

    assert res.columns.tolist() == ['doc', 'bigram', 'position']
    assert res['doc'].tolist() == ['a', 'a']
    assert res['bigram'].tolist() == ['x y', 'y z']
    assert res['position'].tolist() == [0, 1]


def test_tokenize_composite_keys():
    docs = [(('Emma', 1), 'Emma Woodhouse, handsome'), (('Emma', 2), 'clever and rich')]
    res = tokenize.tokenize(docs, document=['book', 'chapter'])

    assert res.columns.tolist() == ['book', 'chapter', 'word']
    assert res['chapter'].tolist() == [1, 1, 1, 2, 2, 2]
    assert res['word'].tolist() == ['emma', 'woodhouse', 'handsome', 'clever', 'and', 'rich']

    with pytest.raises(ValueError):
        tokenize.tokenize([('Emma', 'text')], document=['book', 'chapter'])


def test_tokenize_empty_and_invalid():
    res = tokenize.tokenize([])
    assert res.columns.tolist() == ['document', 'word']
    assert len(res) == 0

    with pytest.raises(ValueError):
        tokenize.tokenize(['just text'])
