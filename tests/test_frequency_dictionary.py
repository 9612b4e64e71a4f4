"""Tests for the words frequency dictionary."""

import io
import pickle

import numpy as np
import pytest

from langdetector.exceptions import DataCorruptionError, StatePreconditionError
from langdetector.frequency_dictionary import FrequencyDictionary
from langdetector.utils import Language


@pytest.fixture
def dictionary():
    dictionary = FrequencyDictionary()
    for _ in range(3):
        dictionary.add_occurrence("the", Language.ENGLISH)
    dictionary.add_occurrence("the", Language.FRENCH)
    dictionary.add_occurrence("house", Language.ENGLISH)
    dictionary.add_occurrence("maison", Language.FRENCH)
    dictionary.add_occurrence("Haus", Language.GERMAN)
    return dictionary


def test_counts_before_normalization(dictionary):
    freq = dictionary.get_freq_of("the")

    assert freq[Language.ENGLISH.id] == 3
    assert freq[Language.FRENCH.id] == 1
    assert dictionary.word_counts_per_language[Language.ENGLISH.id] == 4
    assert dictionary.word_counts_per_language[Language.FRENCH.id] == 2


def test_words_are_lower_cased(dictionary):
    assert "haus" in dictionary
    assert "HAUS" in dictionary
    assert np.array_equal(dictionary.get_freq_of("HaUs"), dictionary.get_freq_of("haus"))


def test_normalized_vectors_are_probabilities(dictionary):
    dictionary.normalize()

    assert dictionary.normalized
    for word in ["the", "house", "maison", "haus"]:
        freq = dictionary.get_freq_of(word)
        assert freq.sum() == pytest.approx(1.0)
        assert np.all(freq > 0.0)


def test_normalization_corrects_for_corpus_size():
    dictionary = FrequencyDictionary()
    for _ in range(3):
        dictionary.add_occurrence("the", Language.ENGLISH)
    dictionary.add_occurrence("the", Language.FRENCH)

    dictionary.normalize()
    freq = dictionary.get_freq_of("the")

    # 3/3 for English and 1/1 for French: the raw 3:1 ratio is corrected to 1:1
    assert freq[Language.ENGLISH.id] / freq[Language.FRENCH.id] == pytest.approx(1.0)
    assert freq[Language.ENGLISH.id] > freq[Language.GERMAN.id]


def test_zeros_are_replaced_with_epsilon(dictionary):
    dictionary.normalize()
    freq = dictionary.get_freq_of("house")

    # house: 1/4 for English, eps = 1/7 elsewhere, before the final normalization
    eps = 1.0 / 7
    expected_english = 0.25 / (0.25 + eps * (len(freq) - 1))
    assert freq[Language.ENGLISH.id] == pytest.approx(expected_english)
    assert freq[Language.ITALIAN.id] == pytest.approx(eps / (0.25 + eps * (len(freq) - 1)))


def test_add_occurrence_after_normalization_fails(dictionary):
    dictionary.normalize()

    with pytest.raises(StatePreconditionError):
        dictionary.add_occurrence("new", Language.ENGLISH)


def test_normalize_twice_fails(dictionary):
    dictionary.normalize()

    with pytest.raises(StatePreconditionError):
        dictionary.normalize()


def test_unseen_word_is_absent(dictionary):
    assert dictionary.get_freq_of("never") is None
    dictionary.normalize()
    assert dictionary.get_freq_of("never") is None


def test_unknown_language_occurrences_are_ignored():
    dictionary = FrequencyDictionary()
    dictionary.add_occurrence("word", Language.UNKNOWN)

    assert len(dictionary) == 0


def test_add_text(tokenizer):
    dictionary = FrequencyDictionary()
    dictionary.add_text("Der Hund, der Katze.", Language.GERMAN, tokenizer)

    assert dictionary.get_freq_of("der")[Language.GERMAN.id] == 2
    assert dictionary.get_freq_of("katze")[Language.GERMAN.id] == 1


def test_dump_and_load(dictionary):
    dictionary.normalize()
    stream = io.BytesIO()
    dictionary.dump(stream)
    stream.seek(0)

    loaded = FrequencyDictionary.load(stream)

    assert loaded.normalized
    assert len(loaded) == len(dictionary)
    assert np.array_equal(loaded.get_freq_of("the"), dictionary.get_freq_of("the"))
    with pytest.raises(StatePreconditionError):
        loaded.add_occurrence("the", Language.ENGLISH)


def test_load_corrupted_stream():
    with pytest.raises(DataCorruptionError):
        FrequencyDictionary.load(io.BytesIO(b"not a pickle"))


def test_load_foreign_object():
    with pytest.raises(DataCorruptionError):
        FrequencyDictionary.load(io.BytesIO(pickle.dumps({"the": [1, 2]})))
