"""Tests for the text tokenizer and the CJK segmentation pass."""

import pytest

from langdetector.exceptions import InvalidConfigurationError
from langdetector.tokenization import JiebaSegmenter, TextTokenizer, cjk_ratio, is_cjk_char


class SplitCharsSegmenter:
    """CJK segmenter splitting a text into single chars."""

    def __init__(self):
        self.calls = []

    def segment(self, text):
        self.calls.append(text)
        return list(text)


class TestTextTokenizer:
    def test_punctuation_and_spaces_are_discarded(self, tokenizer):
        assert tokenizer.tokenize("Hello, world!  Ça va?", max_token_length=100) == ["Hello", "world", "Ça", "va"]

    def test_empty_text(self, tokenizer):
        assert tokenizer.tokenize("", max_token_length=10) == []

    def test_only_punctuation_and_whitespace(self, tokenizer):
        assert tokenizer.tokenize(" ,;!?  \n\t... 123 ", max_token_length=10) == []

    def test_digits_split_words(self, tokenizer):
        assert tokenizer.tokenize("abc123def", max_token_length=10) == ["abc", "def"]

    def test_long_tokens_are_split(self, tokenizer):
        assert tokenizer.tokenize("abcdefg hi", max_token_length=3) == ["abc", "def", "g", "hi"]

    def test_tokens_never_exceed_max_length(self, tokenizer):
        text = "Supercalifragilisticexpialidocious is quite a long word, isn't it?"
        tokens = tokenizer.tokenize(text, max_token_length=5)

        assert tokens
        assert all(0 < len(token) <= 5 for token in tokens)
        assert "".join(tokens) == "".join(char for char in text if char.isalpha())

    def test_exact_max_length_word(self, tokenizer):
        assert tokenizer.tokenize("abc def", max_token_length=3) == ["abc", "def"]

    @pytest.mark.parametrize("max_token_length", [0, -1])
    def test_non_positive_max_length(self, tokenizer, max_token_length):
        with pytest.raises(InvalidConfigurationError):
            tokenizer.tokenize("text", max_token_length=max_token_length)

    def test_tokenize_is_restartable(self, tokenizer):
        first = tokenizer.tokenize("uno due tre", max_token_length=100)
        second = tokenizer.tokenize("uno due tre", max_token_length=100)
        assert first == second == ["uno", "due", "tre"]


class TestCJKSegmentation:
    def test_cjk_tokens_are_segmented_in_place(self):
        segmenter = SplitCharsSegmenter()
        tokenizer = TextTokenizer(cjk_segmenter=segmenter)

        assert tokenizer.tokenize("hello 中文字 world", max_token_length=100) == ["hello", "中", "文", "字", "world"]
        assert segmenter.calls == ["中文字"]

    def test_tokens_below_threshold_pass_through(self):
        segmenter = SplitCharsSegmenter()
        tokenizer = TextTokenizer(cjk_segmenter=segmenter)

        # 2 CJK chars out of 6
        assert tokenizer.tokenize("abcd中文", max_token_length=100) == ["abcd中文"]
        assert segmenter.calls == []

    def test_threshold_is_inclusive(self):
        tokenizer = TextTokenizer(cjk_segmenter=SplitCharsSegmenter())

        # 2 CJK chars out of 5
        assert tokenizer.tokenize("abc中文", max_token_length=100) == ["a", "b", "c", "中", "文"]

    def test_empty_segments_are_dropped(self):
        class EmptySegmenter:
            def segment(self, text):
                return ["", text, ""]

        tokenizer = TextTokenizer(cjk_segmenter=EmptySegmenter())
        assert tokenizer.tokenize("日本語", max_token_length=100) == ["日本語"]

    def test_cjk_ratio(self):
        assert cjk_ratio("") == 0.0
        assert cjk_ratio("abc") == 0.0
        assert cjk_ratio("한국어") == 1.0
        assert cjk_ratio("ab中文") == 0.5

    def test_is_cjk_char(self):
        assert is_cjk_char("中")
        assert is_cjk_char("ひ")
        assert is_cjk_char("カ")
        assert is_cjk_char("한")
        assert not is_cjk_char("a")
        assert not is_cjk_char("ж")


class TestJiebaSegmenter:
    def test_han_run_is_replaced_by_jieba_words(self):
        tokenizer = TextTokenizer(cjk_segmenter=JiebaSegmenter())

        tokens = tokenizer.tokenize("hello 我爱北京天安门 world", max_token_length=100)

        assert tokens[0] == "hello"
        assert tokens[-1] == "world"

        words = tokens[1:-1]
        assert len(words) > 1
        assert all(words)
        assert "".join(words) == "我爱北京天安门"

    def test_custom_dictionary(self, tmp_path):
        dictionary = tmp_path / "dict.txt"
        dictionary.write_text("北京天安门 100 ns\n", encoding="utf-8")

        segmenter = JiebaSegmenter(str(dictionary))
        words = segmenter.segment("我爱北京天安门")

        assert segmenter.dictionary_path == str(dictionary)
        assert "北京天安门" in words
        assert "".join(words) == "我爱北京天安门"
