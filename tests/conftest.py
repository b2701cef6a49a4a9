import random
from unittest.mock import MagicMock

import pytest

from data_preprocessing.lexical_tagger import LexicalClass, LexiconTagger
from data_preprocessing.text_preprocessor import TextPreprocessor

# Words missing from this lexicon are unresolved by the tagger
TEST_LEXICON = {
    "the": LexicalClass.OTHER,
    "a": LexicalClass.OTHER,
    ".": LexicalClass.OTHER,
    "?": LexicalClass.OTHER,
    "!": LexicalClass.OTHER,
    "cat": LexicalClass.NOUN,
    "dog": LexicalClass.NOUN,
    "ball": LexicalClass.NOUN,
    "water": LexicalClass.NOUN,
    "sat": LexicalClass.VERB,
    "ran": LexicalClass.VERB,
    "barks": LexicalClass.VERB,
    "sleeps": LexicalClass.VERB,
    "big": LexicalClass.ADJECTIVE,
    "happy": LexicalClass.ADJECTIVE,
    "cold": LexicalClass.ADJECTIVE,
}


@pytest.fixture
def lexicon_tagger():
    return LexiconTagger(TEST_LEXICON)


@pytest.fixture
def preprocessor(lexicon_tagger):
    """TextPreprocessor with a deterministic tagger (no nltk data needed)."""
    return TextPreprocessor(tagger=lexicon_tagger)


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    logger = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    return logger


def make_scripted_rng(choice=lambda seq: seq[0], length=25, coin=0.99):
    """
    Random source with fixed answers.

    Args:
        choice: Picks an element from a sequence.
        length: Value returned by `randint` (the response length budget).
        coin: Value returned by `random`; below the bias probability means "bias".
    """
    rng = MagicMock(spec=random.Random)
    rng.choice.side_effect = choice
    rng.randint.return_value = length
    rng.random.return_value = coin
    return rng


@pytest.fixture
def scripted_rng():
    return make_scripted_rng
