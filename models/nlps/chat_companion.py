"""
Chat Companion

Conversation flow around the POS-biased Markov model: every user message is
stored, the model is retrained on the complete history (both sides of the
conversation), and the generated reply is stored as an assistant message.

Training and generation share one model instance and are serialised with a
lock, so a reply is never generated from a half-trained model.
"""

import logging
import random
import threading

from data_preprocessing.lexical_tagger import LexiconTagger, NltkLexicalTagger
from data_preprocessing.text_preprocessor import TextPreprocessor
from models.nlps.pos_biased_markov_chain import PosBiasedMarkovChain
from utils.history_stores.chat_history import ChatHistoryStore, ChatMessage, Sender, build_corpus


def build_tagger(tagger_config, logger=None):
    """
    Creates the lexical tagger named by the `tagger` config section.

    Raises:
        ValueError: If the backend is unknown or the lexicon path is missing.
    """
    backend = tagger_config.get("backend", "nltk")
    if backend == "nltk":
        return NltkLexicalTagger(download=tagger_config.get("download", True), logger=logger)
    if backend == "lexicon":
        lexicon_path = tagger_config.get("lexicon_path")
        if not lexicon_path:
            raise ValueError("Lexicon tagger requires 'lexicon_path'")
        return LexiconTagger.from_yaml(lexicon_path, logger=logger)

    error_msg = f"Unknown tagger backend '{backend}'"
    if logger:
        logger.error(error_msg)
    raise ValueError(error_msg)


class ChatCompanion:
    def __init__(self, history_store, generator, logger=None):
        """
        Loads the stored history and trains the generator on it.

        Args:
            history_store (ChatHistoryStore): Persistence for the conversation.
            generator (PosBiasedMarkovChain): Reply generator.
            logger (logging.Logger, optional): Defaults to the module logger.
        """
        self.history_store = history_store
        self.generator = generator
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()

        self.messages = self.history_store.load_history()
        self.train()

    @classmethod
    def from_config(cls, config, logger=None):
        """
        Builds a companion from a configuration mapping (see `utils.config.config_loader`).
        """
        tagger = build_tagger(config["tagger"], logger=logger)
        generator_config = config["generator"]
        generator = PosBiasedMarkovChain(
            preprocessor=TextPreprocessor(tagger=tagger),
            rng=random.Random(generator_config.get("seed")),
            min_response_length=generator_config["min_response_length"],
            max_response_length=generator_config["max_response_length"],
            bias_probability=generator_config["bias_probability"],
            logger=logger,
        )
        history_store = ChatHistoryStore(config["history"]["path"], logger=logger)
        return cls(history_store, generator, logger=logger)

    def corpus(self):
        return build_corpus(self.messages)

    def train(self):
        """Retrains the generator on the full conversation history."""
        corpus = self.corpus()
        with self._lock:
            self.generator.train(corpus)
        self.logger.info("Companion trained", extra={
            "metrics": {"messages": len(self.messages), "corpus_characters": len(corpus)}
        })

    def reply(self, text):
        """Generates a reply without storing anything."""
        with self._lock:
            return self.generator.generate_response(text)

    def process_user_input(self, text):
        """
        Stores the user's message, retrains, and stores and returns the reply.

        Raises:
            ValueError: If the input is blank or the stored history cannot be decoded.
        """
        if not text or not text.strip():
            raise ValueError("User input is empty")

        user_message = ChatMessage(text=text, sender=Sender.USER)
        self.history_store.save(user_message)
        self.messages.append(user_message)

        self.train()
        response = self.reply(text)

        assistant_message = ChatMessage(text=response, sender=Sender.ASSISTANT)
        self.history_store.save(assistant_message)
        self.messages.append(assistant_message)
        return response

    def reset_history(self):
        """Forgets the whole conversation; the model is left untrained."""
        self.history_store.clear_history()
        self.messages = []
        self.train()
        self.logger.info("Conversation history reset")

    def import_csv(self, csv_file_path, header=None):
        """Imports CSV utterances into the history and retrains."""
        count = self.history_store.import_csv(csv_file_path, header=header)
        self.messages = self.history_store.load_history()
        self.train()
        return count

    def export_corpus(self, export_path):
        return self.history_store.export_corpus(export_path, self.messages)
