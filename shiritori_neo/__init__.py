# -*- coding: utf-8 -*-
"""AI と対戦する日本語しりとり。"""
from .kana import normalize_to_canonical_kana, strip_voicing, to_hiragana, to_large_kana
from .rules import derive_linking_sound, select_best_candidate, validate_word

__version__ = "1.0.0"
__all__ = [
    "to_hiragana",
    "to_large_kana",
    "normalize_to_canonical_kana",
    "strip_voicing",
    "derive_linking_sound",
    "validate_word",
    "select_best_candidate",
]
