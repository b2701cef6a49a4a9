import json
from datetime import datetime, timezone

import pandas as pd
import pytest

from utils.history_stores.chat_history import (
    ChatHistoryStore,
    ChatMessage,
    Sender,
    build_corpus,
)


@pytest.fixture
def store(tmp_path, mock_logger):
    return ChatHistoryStore(tmp_path / "history" / "chat_history.json", logger=mock_logger)


def test_chat_message_defaults():
    message = ChatMessage(text="hello", sender=Sender.USER)
    assert message.id
    assert message.timestamp.tzinfo is not None
    assert ChatMessage(text="hello", sender=Sender.USER).id != message.id


def test_load_history_missing_file(store):
    assert store.load_history() == []


def test_save_and_load_history(store):
    first = ChatMessage(text="the cat sat.", sender=Sender.USER,
                        id="1", timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc))
    second = ChatMessage(text="The cat sat.", sender=Sender.ASSISTANT)

    store.save(first)
    store.save(second)

    assert store.load_history() == [first, second]

    with open(store.path, encoding="utf-8") as f:
        records = json.load(f)
    assert records[0] == {
        "id": "1",
        "text": "the cat sat.",
        "sender": "user",
        "timestamp": "2026-01-01T00:00:00+00:00",
    }
    assert records[1]["sender"] == "assistant"


def test_load_history_corrupt_file(store, mock_logger):
    store.save(ChatMessage(text="hi", sender=Sender.USER))
    with open(store.path, "w", encoding="utf-8") as f:
        f.write("{not json")

    assert store.load_history() == []
    mock_logger.error.assert_called_once()


def test_load_history_accepts_utc_z_suffix(store):
    record = {"id": "1", "text": "the cat sat.", "sender": "user",
              "timestamp": "2026-01-01T12:00:00Z"}
    store.save_many([])
    with open(store.path, "w", encoding="utf-8") as f:
        json.dump([record], f)

    history = store.load_history()

    assert len(history) == 1
    assert history[0].timestamp == datetime(2026, 1, 1, 12, tzinfo=timezone.utc)


def test_save_keeps_undecodable_history_file(store, mock_logger):
    store.save(ChatMessage(text="hi", sender=Sender.USER))
    with open(store.path, "w", encoding="utf-8") as f:
        f.write('[{"text": "hi"}]')

    with pytest.raises(ValueError):
        store.save(ChatMessage(text="the cat sat.", sender=Sender.USER))
    with pytest.raises(ValueError):
        store.save_many([ChatMessage(text="the dog ran.", sender=Sender.USER)])

    with open(store.path, encoding="utf-8") as f:
        assert f.read() == '[{"text": "hi"}]'


def test_clear_history(store, mock_logger):
    store.save(ChatMessage(text="hi", sender=Sender.USER))
    store.clear_history()

    assert store.load_history() == []
    mock_logger.info.assert_called()

    # Clearing twice is harmless
    store.clear_history()
    mock_logger.warning.assert_called_once()


def test_build_corpus():
    messages = [
        ChatMessage(text="the cat sat.", sender=Sender.USER),
        ChatMessage(text="The cat sat.", sender=Sender.ASSISTANT),
    ]
    assert build_corpus(messages) == "the cat sat.\nThe cat sat."
    assert build_corpus([]) == ""


def test_export_corpus(store, tmp_path):
    store.save(ChatMessage(text="hello there", sender=Sender.USER))
    store.save(ChatMessage(text="Hello there", sender=Sender.ASSISTANT))
    export_path = tmp_path / "out" / "corpus.txt"

    assert store.export_corpus(export_path) == str(export_path)
    assert export_path.read_text(encoding="utf-8") == "hello there\nHello there"


def test_export_corpus_empty_history(store, tmp_path):
    with pytest.raises(ValueError):
        store.export_corpus(tmp_path / "corpus.txt")
    assert not (tmp_path / "corpus.txt").exists()


def test_import_csv(mocker, store):
    mocker.patch("pandas.read_csv", return_value=pd.DataFrame(
        {"comment": ["the cat sat.", None, "  ", "the dog ran."], "sentiment": [1, 0, 0, 1]}))

    assert store.import_csv("dummy_path.csv") == 2

    history = store.load_history()
    assert [message.text for message in history] == ["the cat sat.", "the dog ran."]
    assert all(message.sender == Sender.USER for message in history)


def test_import_csv_empty_file(mocker, store):
    mocker.patch("pandas.read_csv", return_value=pd.DataFrame(columns=["comment"]))

    assert store.import_csv("dummy_path.csv") == 0
    assert store.load_history() == []


def test_import_csv_read_error(mocker, store, mock_logger):
    mocker.patch("pandas.read_csv", side_effect=FileNotFoundError("missing.csv"))

    with pytest.raises(FileNotFoundError):
        store.import_csv("missing.csv")
    mock_logger.error.assert_called_once()
