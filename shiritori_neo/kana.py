# -*- coding: utf-8 -*-
"""かな文字の正規化。

しりとりの比較はすべて「大きいひらがな」1文字で行うので、
ここではカタカナ→ひらがな、小さいかな→大きいかな、濁点・半濁点の除去を
1文字単位の純粋関数として提供する。対応表にない文字はそのまま返す。
"""
from __future__ import annotations

LONG_VOWEL_MARK = "ー"

# カタカナ -> ひらがな のオフセット（ァ..ヶ の範囲のみ）
_KATAKANA_FIRST = 0x30A1  # ァ
_KATAKANA_LAST = 0x30F6  # ヶ
_KATAKANA_TO_HIRAGANA_OFFSET = 0x60

# 小さいかな -> 大きいかな 対応表
_SMALL_TO_LARGE = {
    "ぁ": "あ", "ぃ": "い", "ぅ": "う", "ぇ": "え", "ぉ": "お",
    "ゃ": "や", "ゅ": "ゆ", "ょ": "よ",
    "ゎ": "わ", "っ": "つ", "ゕ": "か", "ゖ": "け",
    "ァ": "ア", "ィ": "イ", "ゥ": "ウ", "ェ": "エ", "ォ": "オ",
    "ャ": "ヤ", "ュ": "ユ", "ョ": "ヨ",
    "ヮ": "ワ", "ッ": "ツ", "ヵ": "カ", "ヶ": "ケ",
}

# 語尾にあっても単独では次の頭文字になれない小さいかな
NON_LINKING_SMALL_KANA = frozenset("ぁぃぅぇぉゃゅょっァィゥェォャュョッ")

_VOICED = "がぎぐげござじずぜぞだぢづでどばびぶべぼぱぴぷぺぽ"
_UNVOICED = "かきくけこさしすせそたちつてとはひふへほはひふへほ"


def _build_voicing_table() -> dict:
    table = {}
    for voiced, plain in zip(_VOICED, _UNVOICED):
        table[voiced] = plain
        # カタカナ側も同じ並び
        table[chr(ord(voiced) + _KATAKANA_TO_HIRAGANA_OFFSET)] = chr(
            ord(plain) + _KATAKANA_TO_HIRAGANA_OFFSET
        )
    table["ゔ"] = "う"
    table["ヴ"] = "う"
    return table


_VOICED_TO_PLAIN = _build_voicing_table()


def _map_chars(s: str, fn) -> str:
    if len(s) <= 1:
        return fn(s)
    return "".join(fn(ch) for ch in s)


def _katakana_char_to_hiragana(ch: str) -> str:
    if not ch:
        return ""
    code = ord(ch)
    if _KATAKANA_FIRST <= code <= _KATAKANA_LAST:
        return chr(code - _KATAKANA_TO_HIRAGANA_OFFSET)
    return ch


def to_hiragana(ch: str) -> str:
    """カタカナをひらがなに変換する。長音「ー」や範囲外の文字はそのまま。"""
    return _map_chars(ch, _katakana_char_to_hiragana)


def to_large_kana(ch: str) -> str:
    """小さいかなを大きいかなにする（ひらがな・カタカナとも）。"""
    return _map_chars(ch, lambda c: _SMALL_TO_LARGE.get(c, c))


def normalize_to_canonical_kana(ch: str) -> str:
    """比較用の正規形（大きいひらがな）を返す。"""
    return to_hiragana(to_large_kana(ch))


def strip_voicing(ch: str) -> str:
    """濁点・半濁点を外す。が→か、ぱ→は、ヴ→う。"""
    return _map_chars(ch, lambda c: _VOICED_TO_PLAIN.get(c, c))


def is_small_kana(ch: str) -> bool:
    return ch in _SMALL_TO_LARGE


def is_hiragana(ch: str) -> bool:
    return "ぁ" <= ch <= "ゖ"


def is_katakana(ch: str) -> bool:
    # ヴ(U+30F4) もこの範囲に含まれる
    return "ァ" <= ch <= "ヶ"
