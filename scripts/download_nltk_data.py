"""
Download the NLTK data packages required by the lexicons in tidytm.lexicon and by the examples.

Usage: python download_nltk_data.py [DOWNLOAD_DIR]
"""

import sys

import nltk

# "gutenberg" is only needed for the examples
PACKAGES = ('stopwords', 'opinion_lexicon', 'vader_lexicon', 'gutenberg')

download_dir = sys.argv[1] if len(sys.argv) > 1 else None

failed = []
for pkg in PACKAGES:
    print('downloading NLTK data package "%s"' % pkg)
    if not nltk.download(pkg, download_dir=download_dir, quiet=True):
        print('could not download NLTK data package "%s"' % pkg, file=sys.stderr)
        failed.append(pkg)

if failed:
    sys.exit(1)
