"""
Exceptions raised by tidytm functions when their input fails validation.

All of them derive from :class:`TidyTMError`, which itself is a :class:`ValueError`, so code that catches
``ValueError`` for invalid arguments keeps working.

.. codeauthor:: Markus Konrad <markus.konrad@wzb.eu>
"""


class TidyTMError(ValueError):
    """Base class for all tidytm validation errors."""


class InvalidUnitConfiguration(TidyTMError):
    """Tokenization unit or its options are invalid (e.g. n-gram size below 1 or a broken regex pattern)."""


class SchemaMismatch(TidyTMError):
    """A table lacks one or more columns that an operation requires."""

    def __init__(self, missing, what='table'):
        self.missing = list(missing)
        self.what = what
        super().__init__('%s is missing required column(s): %s' % (what, ', '.join(map(repr, self.missing))))


class DuplicateKey(TidyTMError):
    """More than one row maps to the same key where a unique key is required."""

    def __init__(self, key, context=''):
        self.key = key
        msg = 'duplicate key %r' % (key, )
        if context:
            msg += ' ' + context
        super().__init__(msg)


class UnknownLexicon(TidyTMError, KeyError):
    """A lexicon name is not registered in the lexicon store."""

    def __init__(self, name, available=()):
        self.name = name
        self.available = sorted(available)
        super().__init__('unknown lexicon %r; available lexicons: %s' % (name, ', '.join(self.available) or '(none)'))

    def __str__(self):
        # KeyError would otherwise wrap the message in quotes
        return self.args[0]


class IndexOutOfRange(TidyTMError, IndexError):
    """A matrix cell references a row or column index that has no label."""


class DimensionMismatch(TidyTMError):
    """Shapes of matrices and their label sequences don't agree."""
