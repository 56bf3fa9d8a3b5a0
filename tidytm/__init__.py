"""
tidytm – Tidy Text Mining and Topic Modeling Toolkit for Python

Markus Konrad <markus.konrad@wzb.eu>
"""

import logging

__title__ = 'tidytm'
__version__ = '0.1.0'
__author__ = 'Markus Konrad'
__license__ = 'Apache License 2.0'

logger = logging.getLogger(__title__)
logger.addHandler(logging.NullHandler())
logger.setLevel(logging.WARNING)   # set default level


from . import bow, defaults, errors, lexicon, sentiment, table, tokenize, tokenseq, topicmod, types, utils
