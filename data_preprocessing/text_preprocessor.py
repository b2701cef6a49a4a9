"""
Text Preprocessor Module

Cleaning, sentence splitting, tokenization and lexical tagging for the chat
companion's Markov model.

### Features:
1. **Cleaning** (`clean`):
    - Lowercasing
    - Removing straight and curly quotes
    - Removing parentheses and square brackets
    - Collapsing newlines to spaces
    - Separating sentence terminators (`.`, `?`, `!`) into standalone tokens

2. **Segmentation**:
    - `split_sentences`: one sentence per corpus line, yielded lazily
    - `tokenize`: whitespace tokenization

3. **Tagging**:
    - `tag_sequence`: `(word, LexicalClass)` pairs for a cleaned sentence
    - `tag_word`: lexical class of a single word, tagged out of context

No stemming, stopword removal or other normalization is applied: the
Markov model relies on the exact surface forms.

### Example Usage:

```python
from data_preprocessing.text_preprocessor import TextPreprocessor

preprocessor = TextPreprocessor()
cleaned = preprocessor.clean('He said "Hi!" (twice)')
print(cleaned)                        # he said hi ! twice
print(preprocessor.tokenize(cleaned))  # ['he', 'said', 'hi', '!', 'twice']
```
"""

from data_preprocessing.lexical_tagger import NltkLexicalTagger

QUOTE_CHARACTERS = "\"'“”‘’"
BRACKET_CHARACTERS = "()[]"
SENTENCE_TERMINATORS = (".", "?", "!")


class TextPreprocessor:
    def __init__(self, tagger=None):
        """
        Initializes the TextPreprocessor.

        Args:
            tagger: Object with a `tag(tokens)` method returning `(token, LexicalClass or None)`
                    pairs. Defaults to an `NltkLexicalTagger`.
        """
        self.tagger = tagger if tagger is not None else NltkLexicalTagger()
        self._strip_table = str.maketrans(
            "", "", QUOTE_CHARACTERS + BRACKET_CHARACTERS)

    def to_lowercase(self, text):
        """Converts text to lowercase."""
        return text.lower()

    def remove_quotes_and_brackets(self, text):
        """Removes quote characters, parentheses and square brackets."""
        return text.translate(self._strip_table)

    def handle_newlines(self, text):
        """Replaces line breaks with spaces."""
        return text.replace("\r", " ").replace("\n", " ")

    def separate_terminators(self, text):
        """Inserts a space before each '.', '?' and '!' so they tokenize on their own."""
        for terminator in SENTENCE_TERMINATORS:
            text = text.replace(terminator, f" {terminator}")
        return text

    def clean(self, text):
        """
        Normalizes raw text for tokenization and tagging.

        Args:
            text (str): Raw utterance text.

        Returns:
            str: Lowercased text without quotes or brackets, newlines collapsed
                 to spaces and sentence terminators separated by a space.

        Example:
            >>> TextPreprocessor(tagger=...).clean("Really? (Yes.)")
            'really ? yes .'
        """
        text = self.to_lowercase(text)
        text = self.remove_quotes_and_brackets(text)
        text = self.handle_newlines(text)
        return self.separate_terminators(text)

    def split_sentences(self, corpus):
        """
        Lazily yields the sentences of a corpus, one per line.

        The corpus holds one utterance per line, so sentences never span a
        line break.
        """
        for line in corpus.splitlines():
            yield line

    def tokenize(self, text):
        """Splits text on whitespace, dropping empty tokens."""
        return text.split()

    def tag_sequence(self, cleaned_sentence):
        """
        Tags every word of a cleaned sentence.

        Tokens whose class the tagger cannot resolve are skipped; the rest of
        the sentence is still tagged.

        Args:
            cleaned_sentence (str): Output of `clean`.

        Returns:
            list: `(word, LexicalClass)` pairs in sentence order.
        """
        tokens = self.tokenize(cleaned_sentence)
        if not tokens:
            return []
        return [
            (word, lexical_class)
            for word, lexical_class in self.tagger.tag(tokens)
            if lexical_class is not None
        ]

    def tag_word(self, word):
        """Returns the LexicalClass of a single word tagged on its own, or None."""
        tagged = self.tagger.tag([word])
        if not tagged:
            return None
        return tagged[0][1]
