#!/usr/bin/env python3
"""
Prediction script for the token-level language detector.
Interactive interface for detecting the language of new texts.
"""
import argparse
import logging
import sys

from langdetector.exceptions import LanguageDetectorError
from langdetector.frequency_dictionary import FrequencyDictionary
from langdetector.language_detector import LanguageDetector
from langdetector.models import LanguageDetectorModel
from langdetector.tokenization import JiebaSegmenter, TextTokenizer
from langdetector.utils import LANGUAGE_CODES, entropy

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_detector(args) -> LanguageDetector:
    logger.info(f"Loading model from '{args.model_path}'")
    with open(args.model_path, 'rb') as f:
        model = LanguageDetectorModel.load(f)

    frequency_dictionary = None
    if args.frequency_dictionary:
        logger.info(f"Loading words frequency dictionary from '{args.frequency_dictionary}'")
        with open(args.frequency_dictionary, 'rb') as f:
            frequency_dictionary = FrequencyDictionary.load(f)

    tokenizer = TextTokenizer(
        cjk_segmenter=JiebaSegmenter(args.cjk_dictionary) if args.use_cjk_segmenter or args.cjk_dictionary else None)

    return LanguageDetector(model=model, tokenizer=tokenizer, frequency_dictionary=frequency_dictionary)


def format_prediction_output(detector: LanguageDetector, text: str, verbose: bool = False) -> str:
    """Format prediction output for display."""
    prediction = detector.predict(text)
    language = detector.get_language(prediction)

    output = [f"Detected language: {LANGUAGE_CODES.get(language.iso_code, language.name.title())}"]

    if verbose:
        output.append("")
        output.append("Full distribution:")
        for lang, score in detector.get_full_distribution(prediction)[:5]:
            output.append(f"  {lang.iso_code.upper()}: {score:.3f}")

        output.append("")
        output.append("Token-Level Predictions:")
        for i, (token, classification) in enumerate(detector.classify_tokens(text)):
            token_lang = detector.get_language(classification.languages)
            confidence = float(classification.languages.max())
            confidence_bar = "█" * int(confidence * 10) + "░" * (10 - int(confidence * 10))
            output.append(
                f"  {i+1:2d}. '{token:15}' → {token_lang.iso_code.upper():2} ({confidence:.3f}) {confidence_bar}"
                f" entropy: {entropy(classification.languages):.2f}")

    return "\n".join(output)


def interactive_mode(detector: LanguageDetector, verbose: bool = False):
    """Read texts from the standard input until an empty line."""
    while True:
        try:
            text = input("\nInsert a text (empty to exit): ").strip()
        except EOFError:
            break

        if not text:
            break

        print(format_prediction_output(detector, text, verbose))

    print("Thank you, bye!")


def main():
    parser = argparse.ArgumentParser(description='Detect the language of texts')

    parser.add_argument('--model_path', type=str, required=True,
                        help='Path to the serialized model')
    parser.add_argument('--frequency_dictionary', type=str,
                        help='Path to the serialized words frequency dictionary')
    parser.add_argument('--use_cjk_segmenter', action='store_true',
                        help='Whether to segment CJK tokens')
    parser.add_argument('--cjk_dictionary', type=str,
                        help='Path to a custom dictionary of the CJK segmenter')
    parser.add_argument('--text', type=str,
                        help='Single text to analyze (interactive mode if not given)')
    parser.add_argument('--verbose', action='store_true',
                        help='Show the full distribution and the token-level predictions')

    args = parser.parse_args()

    try:
        detector = load_detector(args)
    except (LanguageDetectorError, OSError) as e:
        logger.error(f"Cannot load the language detector: {e}")
        sys.exit(1)

    if args.text:
        print(format_prediction_output(detector, args.text, args.verbose))
    else:
        interactive_mode(detector, args.verbose)


if __name__ == '__main__':
    main()
