"""
Chat History Store

Persists the conversation as a JSON list of messages and turns it into the
training corpus for the Markov model.

Each stored message looks like:

    {"id": "9b1d...", "text": "the cat sat.", "sender": "user",
     "timestamp": "2026-01-01T12:00:00+00:00"}
"""

import json
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

import pandas as pd


class Sender(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    text: str
    sender: Sender
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "text": self.text,
            "sender": self.sender.value,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            text=data["text"],
            sender=Sender(data["sender"]),
            id=data["id"],
            timestamp=parse_timestamp(data["timestamp"]),
        )


def parse_timestamp(value):
    """Parses an ISO 8601 timestamp, accepting a trailing 'Z' for UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def build_corpus(messages):
    """Joins message texts with newlines, one utterance per line."""
    return "\n".join(message.text for message in messages)


class ChatHistoryStore:
    """
    JSON file backed chat history.

    Reads are tolerant: a missing file is an empty history and an unreadable
    one is logged and treated as empty. Writes rewrite the whole file and
    refuse to replace an existing file that cannot be decoded.
    """

    def __init__(self, path, logger=None):
        """
        Args:
            path (str): Location of the JSON history file.
            logger (logging.Logger, optional): Defaults to the module logger.
        """
        self.path = str(path)
        self.logger = logger or logging.getLogger(__name__)

    def load_history(self):
        """
        Loads every stored message.

        Returns:
            list of ChatMessage: Messages in the order they were saved.
        """
        try:
            return self._read_messages()
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to decode chat history: {e}", extra={
                "metrics": {"path": self.path}
            })
            return []

    def _read_messages(self):
        """
        Raises:
            ValueError: If the file exists but does not hold a message list.
            OSError: If the file cannot be read.
        """
        if not os.path.exists(self.path):
            return []

        with open(self.path, "r", encoding="utf-8") as f:
            records = json.load(f)
        try:
            return [ChatMessage.from_dict(record) for record in records]
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid chat history record: {e}")

    def save(self, message):
        """
        Appends a message to the stored history.

        Raises:
            ValueError: If the existing file cannot be decoded. It is left untouched.
        """
        history = self._read_messages()
        history.append(message)
        self._write(history)

    def save_many(self, messages):
        history = self._read_messages()
        history.extend(messages)
        self._write(history)

    def _write(self, history):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([message.to_dict() for message in history], f, indent=2)

    def clear_history(self):
        """Deletes the history file."""
        try:
            os.remove(self.path)
            self.logger.info("Chat history cleared", extra={
                "metrics": {"path": self.path}
            })
        except FileNotFoundError:
            self.logger.warning("Chat history already empty", extra={
                "metrics": {"path": self.path}
            })

    def export_corpus(self, export_path, messages=None):
        """
        Writes the training corpus to a UTF-8 text file.

        Args:
            export_path (str): Destination file.
            messages (list of ChatMessage, optional): Defaults to the stored history.

        Returns:
            str: The path written.

        Raises:
            ValueError: If there is nothing to export.
        """
        if messages is None:
            messages = self.load_history()
        corpus = build_corpus(messages)
        if not corpus:
            raise ValueError("Chat history is empty - nothing to export")

        directory = os.path.dirname(str(export_path))
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(export_path, "w", encoding="utf-8") as f:
            f.write(corpus)

        self.logger.info("Corpus exported", extra={
            "metrics": {"path": str(export_path), "messages": len(messages), "characters": len(corpus)}
        })
        return str(export_path)

    def import_csv(self, csv_file_path, header=None, sender=Sender.USER):
        """
        Imports utterances from the first column of a CSV file.

        Args:
            csv_file_path (str): The path to the CSV file.
            header (int or None): Row number to use as the column names, or None if the file has no header.
            sender (Sender): Sender recorded on the imported messages.

        Returns:
            int: The number of messages imported. Blank and missing cells are skipped.
        """
        try:
            df = pd.read_csv(csv_file_path, encoding="UTF-8", header=header)
        except Exception as e:
            self.logger.error(f"Error processing CSV file at {csv_file_path}: {e}")
            raise

        if df.empty:
            return 0

        texts = [str(text).strip() for text in df.iloc[:, 0].dropna()]
        messages = [ChatMessage(text=text, sender=sender) for text in texts if text]
        if messages:
            self.save_many(messages)

        self.logger.info("CSV corpus imported", extra={
            "metrics": {"path": str(csv_file_path), "messages": len(messages)}
        })
        return len(messages)
