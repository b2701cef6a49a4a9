"""
POS-biased Markov Chain Response Generator

This module implements the reply generator of the chat companion: an order-2
(trigram) Markov chain over word pairs, combined with two order-1
grammatical-role tables (adjective -> noun, noun -> verb) learned from
part-of-speech tagged sentences. During generation the model walks the
trigram table and, on a coin flip, prefers a grammatically plausible follower
of the last word.

Classes:
    - WordPair: Immutable two-word context used as the trigram table key.
    - GenerationStop: How the latest generation walk ended.
    - PosBiasedMarkovChain: Trains the tables and generates replies.

Usage:
    1. Create a `PosBiasedMarkovChain`, optionally with a `TextPreprocessor`
       and a seeded `random.Random`.
    2. Call `train` with the full conversation corpus (one utterance per line).
    3. Call `generate_response` with the user's input.

Example:
    >>> model = PosBiasedMarkovChain()
    >>> model.train("the cat sat.\\nthe cat ran.")
    >>> model.generate_response("the cat")  # or 'The cat ran.'
    'The cat sat.'

Notes:
    - Training is always a total rebuild. The tables are built into fresh
      dictionaries and swapped in at the end, so a partially built model is
      never visible.
    - Follower lists keep duplicates; a word seen three times after a context
      is three times as likely to be drawn.
    - The class of the last generated word is obtained by tagging that word on
      its own, not by reusing its tag from training.
"""

import logging
import random
from collections import defaultdict
from enum import Enum
from typing import NamedTuple

from data_preprocessing.lexical_tagger import LexicalClass
from data_preprocessing.text_preprocessor import SENTENCE_TERMINATORS, TextPreprocessor

UNTRAINED_MESSAGE = "I'm still learning. Say something to get started!"
NO_RESPONSE_MESSAGE = "I don't know how to respond to that yet."

DEFAULT_MIN_RESPONSE_LENGTH = 5
DEFAULT_MAX_RESPONSE_LENGTH = 25
DEFAULT_BIAS_PROBABILITY = 0.5


class WordPair(NamedTuple):
    word1: str
    word2: str


class GenerationStop(Enum):
    DEAD_END = "dead_end"
    PUNCTUATION_STOP = "punctuation_stop"
    LENGTH_EXHAUSTED = "length_exhausted"


class PosBiasedMarkovChain:
    def __init__(
        self,
        preprocessor=None,
        rng=None,
        min_response_length=DEFAULT_MIN_RESPONSE_LENGTH,
        max_response_length=DEFAULT_MAX_RESPONSE_LENGTH,
        bias_probability=DEFAULT_BIAS_PROBABILITY,
        logger=None,
    ):
        """
        Initializes an untrained model.

        Args:
            preprocessor (TextPreprocessor, optional): Cleans, tokenizes and tags text.
                A default `TextPreprocessor` (nltk tagger) is created when omitted.
            rng (random.Random, optional): Source of randomness. Anything with
                `choice`, `randint` and `random` works.
            min_response_length (int): Smallest number of words added to the seed pair.
            max_response_length (int): Largest number of words added to the seed pair.
            bias_probability (float): Chance per step of trying the grammatical-role tables first.
            logger (logging.Logger, optional): Defaults to the module logger.

        Raises:
            ValueError: If the length bounds or the bias probability are invalid.

        Attributes:
            transitions (dict): WordPair -> list of follower words.
            adjective_noun_pairs (dict): adjective -> list of nouns that followed it.
            noun_verb_pairs (dict): noun -> list of verbs that followed it.
            last_stop_reason (GenerationStop or None): How the latest walk ended.
        """
        if min_response_length < 0 or min_response_length > max_response_length:
            raise ValueError(
                f"Invalid response length range [{min_response_length}, {max_response_length}]")
        if not 0.0 <= bias_probability <= 1.0:
            raise ValueError(
                f"bias_probability must be between 0 and 1, got {bias_probability}")

        self.logger = logger or logging.getLogger(__name__)
        self.preprocessor = preprocessor if preprocessor is not None else TextPreprocessor()
        self.rng = rng if rng is not None else random.Random()
        self.min_response_length = min_response_length
        self.max_response_length = max_response_length
        self.bias_probability = bias_probability

        self.transitions = {}
        self.adjective_noun_pairs = {}
        self.noun_verb_pairs = {}
        self.last_stop_reason = None

    def train(self, corpus):
        """
        Rebuilds the trigram and grammatical-role tables from a corpus.

        Args:
            corpus (str): Every stored utterance, joined with newlines. Callers must
                pass the whole history each time; nothing from earlier calls is kept.

        Steps:
        1. Splits the corpus into sentences (one per line) and cleans each one.
        2. For sentences of 3 or more words, appends word[i] to the follower
           list of (word[i-2], word[i-1]).
        3. Tags the sentence and records adjective -> noun and noun -> verb
           pairs between adjacent tagged words.
        4. Swaps the new tables in.

        Example:
            Input: "the cat sat."
            Updates:
                - transitions[("the", "cat")] == ["sat"]
                - transitions[("cat", "sat")] == ["."]
        """
        transitions = defaultdict(list)
        adjective_noun_pairs = defaultdict(list)
        noun_verb_pairs = defaultdict(list)
        sentence_count = 0

        for sentence in self.preprocessor.split_sentences(corpus):
            cleaned_sentence = self.preprocessor.clean(sentence)
            words = self.preprocessor.tokenize(cleaned_sentence)
            if not words:
                continue
            sentence_count += 1

            if len(words) >= 3:
                for i in range(2, len(words)):
                    transitions[WordPair(words[i - 2], words[i - 1])].append(words[i])

            tagged_words = self.preprocessor.tag_sequence(cleaned_sentence)
            for (previous_word, previous_class), (current_word, current_class) in zip(
                    tagged_words, tagged_words[1:]):
                if previous_class == LexicalClass.ADJECTIVE and current_class == LexicalClass.NOUN:
                    adjective_noun_pairs[previous_word].append(current_word)
                if previous_class == LexicalClass.NOUN and current_class == LexicalClass.VERB:
                    noun_verb_pairs[previous_word].append(current_word)

        self.transitions = dict(transitions)
        self.adjective_noun_pairs = dict(adjective_noun_pairs)
        self.noun_verb_pairs = dict(noun_verb_pairs)

        self.logger.info("Markov model trained", extra={
            "metrics": {
                "corpus_characters": len(corpus),
                "sentences": sentence_count,
                "transition_states": len(self.transitions),
                "adjective_noun_states": len(self.adjective_noun_pairs),
                "noun_verb_states": len(self.noun_verb_pairs),
            }
        })

    def is_trained(self):
        return bool(self.transitions)

    def generate_response(self, text):
        """
        Generates a reply to the given input.

        Args:
            text (str): The user's utterance.

        Returns:
            str: The reply, with sentence terminators reattached and the first
                 character capitalized. `UNTRAINED_MESSAGE` when the model has no
                 trigrams, `NO_RESPONSE_MESSAGE` when no starting context exists.
        """
        self.last_stop_reason = None
        if not self.transitions:
            self.logger.warning("Response generation skipped - model not trained")
            return UNTRAINED_MESSAGE

        current_pair = self._get_start_pair(text)
        if current_pair is None:
            self.logger.warning("Response generation failed - no valid starting state")
            return NO_RESPONSE_MESSAGE

        output = [current_pair.word1, current_pair.word2]
        max_length = self.rng.randint(self.min_response_length, self.max_response_length)
        stop_reason = GenerationStop.LENGTH_EXHAUSTED

        for _ in range(max_length):
            next_word = self._biased_follower(output[-1])
            if next_word is None:
                followers = self.transitions.get(current_pair)
                if not followers:
                    stop_reason = GenerationStop.DEAD_END
                    break
                next_word = self.rng.choice(followers)

            output.append(next_word)
            if next_word in SENTENCE_TERMINATORS:
                stop_reason = GenerationStop.PUNCTUATION_STOP
                break

            current_pair = WordPair(current_pair.word2, next_word)

        self.last_stop_reason = stop_reason
        response = self._format_output(output)

        self.logger.info("Response generated", extra={
            "metrics": {
                "words": len(output),
                "max_length": max_length,
                "stop_reason": stop_reason.value,
            }
        })
        return response

    def _get_start_pair(self, text):
        """
        Picks the starting context: the last two input words when they are a
        known state, otherwise a random known state.
        """
        words = self.preprocessor.tokenize(self.preprocessor.clean(text))
        if len(words) >= 2:
            candidate = WordPair(words[-2], words[-1])
            if candidate in self.transitions:
                return candidate

        if not self.transitions:
            return None

        self.logger.debug("Input context not found in model, using random state")
        return self.rng.choice(list(self.transitions))

    def _biased_follower(self, last_word):
        """Returns a grammatically preferred follower of `last_word`, or None."""
        lexical_class = self.preprocessor.tag_word(last_word)
        if self.rng.random() >= self.bias_probability:
            return None

        if lexical_class == LexicalClass.ADJECTIVE and self.adjective_noun_pairs.get(last_word):
            return self.rng.choice(self.adjective_noun_pairs[last_word])
        if lexical_class == LexicalClass.NOUN and self.noun_verb_pairs.get(last_word):
            return self.rng.choice(self.noun_verb_pairs[last_word])
        return None

    def _format_output(self, words):
        text = " ".join(words)
        for terminator in SENTENCE_TERMINATORS:
            text = text.replace(f" {terminator}", terminator)
        text = text.strip()
        return text[:1].upper() + text[1:]
