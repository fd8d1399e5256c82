"""Tests for reading statistics."""

from contentkit.content.text import (
    average_sentence_length,
    count_words,
    reading_time,
    split_sentences,
)


class TestCountWords:
    def test_whitespace_separated(self):
        assert count_words("a b  c\nd") == 4

    def test_empty(self):
        assert count_words("") == 0


class TestReadingTime:
    def test_rounds_up(self):
        assert reading_time(1) == 1
        assert reading_time(200) == 1
        assert reading_time(201) == 2
        assert reading_time(351) == 2

    def test_zero(self):
        assert reading_time(0) == 0


class TestSentences:
    def test_split(self):
        assert split_sentences("Hi. There! Ok?") == ["Hi", "There", "Ok"]

    def test_repeated_punctuation(self):
        assert split_sentences("Wait... what?!") == ["Wait", "what"]

    def test_average(self):
        assert average_sentence_length("One two. Three four five six.") == 3.0

    def test_average_without_sentences(self):
        assert average_sentence_length("") == 0.0
