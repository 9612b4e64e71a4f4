#!/usr/bin/env python3
"""
Count the words frequency per language of a corpus and save them as a frequency dictionary.
"""
import argparse
import logging
import sys

from tqdm import tqdm

from langdetector.dataset import CorpusReader
from langdetector.exceptions import LanguageDetectorError
from langdetector.frequency_dictionary import FrequencyDictionary
from langdetector.tokenization import JiebaSegmenter, TextTokenizer

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def build_dictionary(args) -> FrequencyDictionary:
    """Build a normalized frequency dictionary from the given corpus."""
    tokenizer = TextTokenizer(
        cjk_segmenter=JiebaSegmenter(args.cjk_dictionary) if args.use_cjk_segmenter or args.cjk_dictionary else None)

    examples = CorpusReader().read(args.data_path)
    dictionary = FrequencyDictionary()

    logger.info("Counting words occurrences...")
    for example in tqdm(examples, desc="Counting"):
        dictionary.add_text(example.text, example.language, tokenizer, max_token_length=args.max_token_length)

    dictionary.normalize()

    return dictionary


def main():
    parser = argparse.ArgumentParser(description='Build the words frequency dictionary of a corpus')

    parser.add_argument('--data_path', type=str, required=True,
                        help='Path to the corpus (JSONL)')
    parser.add_argument('--output_path', type=str, required=True,
                        help='File in which to save the serialized dictionary')
    parser.add_argument('--use_cjk_segmenter', action='store_true',
                        help='Whether to segment CJK tokens')
    parser.add_argument('--cjk_dictionary', type=str,
                        help='Path to a custom dictionary of the CJK segmenter')
    parser.add_argument('--max_token_length', type=int, default=100)

    args = parser.parse_args()

    try:
        dictionary = build_dictionary(args)
    except LanguageDetectorError as e:
        logger.error(f"Cannot build the dictionary [{e.error_code}]: {e}")
        sys.exit(1)

    logger.info(f"Saving dictionary ({len(dictionary)} words) to '{args.output_path}'")
    with open(args.output_path, 'wb') as f:
        dictionary.dump(f)


if __name__ == '__main__':
    main()
