"""
Lexical Tagger Module

Coarse part-of-speech tagging for the chat companion. Every tagger exposes a
single method, `tag(tokens)`, that returns one `(token, LexicalClass or None)`
pair per input token, in order. `None` means the token's class could not be
resolved; callers drop such tokens rather than failing.

### Classes:
- `LexicalClass`: the closed set of grammatical classes (noun, verb, adjective, other).
- `NltkLexicalTagger`: wraps one `nltk.tag.PerceptronTagger` and maps Penn Treebank tags to `LexicalClass`.
- `LexiconTagger`: deterministic dictionary-driven tagger, loadable from a YAML lexicon.

### Dependencies:
- `nltk`: averaged perceptron POS tagger.
- `yaml`: lexicon files for `LexiconTagger`.
"""

import logging
from enum import Enum

import nltk
import yaml


class LexicalClass(Enum):
    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    OTHER = "other"


# Penn Treebank tag prefixes -> lexical class
PENN_TAG_PREFIXES = (
    ("NN", LexicalClass.NOUN),
    ("VB", LexicalClass.VERB),
    ("JJ", LexicalClass.ADJECTIVE),
)

NLTK_TAGGER_RESOURCE = "averaged_perceptron_tagger_eng"


def penn_to_lexical_class(penn_tag):
    """
    Maps a Penn Treebank tag (e.g. 'NNS', 'VBD', 'JJR') to a LexicalClass.

    Empty or missing tags are unresolved and map to None.
    """
    if not penn_tag:
        return None
    for prefix, lexical_class in PENN_TAG_PREFIXES:
        if penn_tag.startswith(prefix):
            return lexical_class
    return LexicalClass.OTHER


class NltkLexicalTagger:
    """
    Lexical tagger backed by nltk's averaged perceptron tagger.

    The tagger model is an nltk data resource. It is looked up on construction
    and downloaded when missing and `download` is True. One `PerceptronTagger`
    is loaded per instance and reused for every call to `tag`.
    """

    def __init__(self, download=True, logger=None):
        """
        Args:
            download (bool): Download the tagger resource if it is not installed.
            logger (logging.Logger, optional): Defaults to the module logger.

        Raises:
            ValueError: If the resource is missing and downloading is disabled or
                fails, or if the tagger model cannot be loaded.
        """
        self.logger = logger or logging.getLogger(__name__)
        self._ensure_resource(download)
        try:
            self.perceptron = nltk.tag.PerceptronTagger()
        except LookupError as e:
            error_msg = f"Failed to load nltk tagger '{NLTK_TAGGER_RESOURCE}': {e}"
            self.logger.error(error_msg)
            raise ValueError(error_msg)

    def _ensure_resource(self, download):
        try:
            nltk.data.find(f"taggers/{NLTK_TAGGER_RESOURCE}")
            return
        except LookupError:
            if not download:
                raise ValueError(
                    f"nltk resource '{NLTK_TAGGER_RESOURCE}' is not installed")

        self.logger.info("Downloading nltk tagger resource", extra={
            "metrics": {"resource": NLTK_TAGGER_RESOURCE}
        })
        if not nltk.download(NLTK_TAGGER_RESOURCE, quiet=True):
            error_msg = f"Failed to download nltk resource '{NLTK_TAGGER_RESOURCE}'"
            self.logger.error(error_msg)
            raise ValueError(error_msg)

    def tag(self, tokens):
        """
        Tags a sequence of tokens.

        Args:
            tokens (list of str): Tokens in sentence order.

        Returns:
            list: `(token, LexicalClass or None)` pairs aligned with `tokens`.
        """
        tokens = list(tokens)
        if not tokens:
            return []
        return [(word, penn_to_lexical_class(tag)) for word, tag in self.perceptron.tag(tokens)]


class LexiconTagger:
    """
    Deterministic tagger driven by a word -> LexicalClass mapping.

    Words absent from the lexicon are reported as unresolved (None).
    """

    def __init__(self, lexicon):
        self.lexicon = {}
        for word, lexical_class in lexicon.items():
            if not isinstance(lexical_class, LexicalClass):
                lexical_class = LexicalClass(lexical_class)
            self.lexicon[word.lower()] = lexical_class

    @classmethod
    def from_yaml(cls, lexicon_path, logger=None):
        """
        Builds a tagger from a YAML file grouping words by class:

            noun: [cat, dog]
            verb: [sat, ran]
            adjective: [big]

        Raises:
            ValueError: If the file contains an unknown class name.
            OSError: If the file cannot be read.
        """
        logger = logger or logging.getLogger(__name__)
        with open(lexicon_path, "r", encoding="utf-8") as f:
            groups = yaml.safe_load(f) or {}

        lexicon = {}
        for class_name, words in groups.items():
            try:
                lexical_class = LexicalClass(class_name)
            except ValueError:
                raise ValueError(
                    f"Unknown lexical class '{class_name}' in {lexicon_path}")
            for word in words or []:
                lexicon[str(word)] = lexical_class

        logger.info("Lexicon loaded", extra={
            "metrics": {"path": str(lexicon_path), "words": len(lexicon)}
        })
        return cls(lexicon)

    def tag(self, tokens):
        return [(word, self.lexicon.get(word.lower())) for word in tokens]
