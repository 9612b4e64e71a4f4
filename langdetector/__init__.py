"""
Token-level Language Detector

Detects the language of a text by classifying each of its tokens with a
character-level attention network and fusing the per-token distributions,
optionally boosted by a corpus-derived words frequency dictionary.
"""

__version__ = "1.0.0"
