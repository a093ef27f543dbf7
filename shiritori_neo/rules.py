# -*- coding: utf-8 -*-
"""しりとりのルール判定。

- derive_linking_sound: ことばの語尾から、次のことばの頭文字（大きいひらがな）を決める
- validate_word / check_word: プレイヤーの入力を検証する
- select_best_candidate: AI が返した候補の中からルールを満たすものを1つ選ぶ

AI の応答は信用しない。プレイヤーと同じ判定をこちらで必ず通す。
"""
from __future__ import annotations

import logging
import random
import re
from typing import Iterable, List, Optional, Union

from .config import DEFAULT_RULES, SMALL_KANA_SKIP, VOICING_LENIENT, VOICING_STRICT, RuleConfig
from .errors import ForfeitCondition, RetryableInputError, RuleViolation
from .kana import (
    LONG_VOWEL_MARK,
    NON_LINKING_SMALL_KANA,
    is_hiragana,
    is_katakana,
    normalize_to_canonical_kana,
    strip_voicing,
)
from .models import GameState, Move, Reason, Verdict

logger = logging.getLogger(__name__)

# ひらがな・カタカナ（ヴを含む）・長音符のみ
_KANA_WORD = re.compile(r"^[ぁ-ゖァ-ヶー]+$")
# AI の候補の区切り（半角・全角カンマ、読点）
_CANDIDATE_SEPARATORS = re.compile(r"[,，、]")
_CANDIDATE_WRAPPING = " \t\r\n　「」『』\"'。．.・"
PASS_WORDS = frozenset({"パス", "ぱす"})

_N_ENDINGS = ("ん", "ン")
_WO_ENDINGS = ("を", "ヲ")


def _message(reason: Reason, word: str = "", linking_sound: Optional[str] = None,
             rules: RuleConfig = DEFAULT_RULES) -> str:
    if reason is Reason.EMPTY:
        return "言葉を入力してください。"
    if reason is Reason.INVALID_SCRIPT:
        return "ひらがなまたはカタカナで入力してください。"
    if reason is Reason.MIXED_SCRIPT:
        return "ひらがなとカタカナを混ぜずに入力してください。"
    if reason is Reason.TOO_SHORT:
        return f"{rules.min_length}文字以上の言葉を入力してください。"
    if reason is Reason.ENDS_WITH_N:
        return f"「{word}」は「ん」で終わっています。"
    if reason is Reason.ENDS_WITH_WO:
        return "ルール違反: 「を」または「ヲ」で終わる言葉は使えません。別の言葉を入力してください。"
    if reason is Reason.TRIPLE_REPEAT:
        return "ルール違反: 同じ文字が3つ以上連続して終わる言葉は使えません。別の言葉を入力してください。"
    if reason is Reason.REPEATED_HALF:
        return "ルール違反: 同じ言葉の繰り返し（例: モグモグ）は使えません。別の言葉を入力してください。"
    if reason is Reason.DUPLICATE:
        return "その言葉は既に使用されています。"
    if reason is Reason.WRONG_LINKING_SOUND:
        head = word[:1]
        return (
            f"「{linking_sound}」で始まる言葉を入力してください。"
            f"（「{head}」は「{normalize_to_canonical_kana(head)}」と解釈されました）"
        )
    if reason is Reason.NO_LINKING_SOUND:
        return f"「{word}」から次の文字を特定できませんでした。"
    return "良い言葉です！"


def _fail(reason: Reason, word: str = "", linking_sound: Optional[str] = None,
          rules: RuleConfig = DEFAULT_RULES) -> RuleViolation:
    cls = ForfeitCondition if reason.forfeit else RetryableInputError
    return cls(reason, _message(reason, word, linking_sound, rules))


def derive_linking_sound(word: str, rules: RuleConfig = DEFAULT_RULES) -> Optional[str]:
    """次のことばの頭文字を返す。決まらなければ None（出した側の負け）。

    - 語尾の「ー」は取り除いて、その前の文字を見る（くり返し適用）
    - 小さいかなしかない語は None
    - 語尾の小さいかなは "enlarge" なら大きくして使い、"skip" なら読み飛ばす
    """
    if not word:
        return None
    if word.endswith(LONG_VOWEL_MARK):
        rest = word[:-1]
        return derive_linking_sound(rest, rules) if rest else None
    if all(ch in NON_LINKING_SMALL_KANA or ch == LONG_VOWEL_MARK for ch in word):
        return None
    if rules.small_kana_tail == SMALL_KANA_SKIP and word[-1] in NON_LINKING_SMALL_KANA:
        return derive_linking_sound(word.rstrip("".join(NON_LINKING_SMALL_KANA)), rules)
    return normalize_to_canonical_kana(word[-1])


def ends_with_n(word: str) -> bool:
    """末尾が「ん」「ン」か（語尾の長音は除いて判定）。"""
    return word.rstrip(LONG_VOWEL_MARK).endswith(_N_ENDINGS)


def mixes_scripts(word: str) -> bool:
    return any(is_hiragana(ch) for ch in word) and any(is_katakana(ch) for ch in word)


def banned_pattern(word: str, min_length: int) -> Optional[Reason]:
    """追加ルール（を終わり・同字3連続・S+S）に当たれば理由を返す。"""
    if word.endswith(_WO_ENDINGS):
        return Reason.ENDS_WITH_WO
    if len(word) >= 3 and word[-1] == word[-2] == word[-3]:
        return Reason.TRIPLE_REPEAT
    if len(word) % 2 == 0 and len(word) >= 2 * min_length:
        half = len(word) // 2
        if word[:half] == word[half:]:
            return Reason.REPEATED_HALF
    return None


def links_to(word: str, linking_sound: str, voicing: str = VOICING_STRICT) -> bool:
    """word の頭文字が linking_sound とつながるか。"""
    head = normalize_to_canonical_kana(word[:1])
    if voicing == VOICING_LENIENT:
        return strip_voicing(head) == strip_voicing(linking_sound)
    return head == linking_sound


def _check(candidate: str, used: Iterable[str], linking_sound: Optional[str],
           rules: RuleConfig, voicing: str, extra_rules: bool,
           check_derivation: bool = True) -> str:
    word = (candidate or "").strip()
    if not word:
        raise _fail(Reason.EMPTY, rules=rules)
    if not _KANA_WORD.match(word):
        raise _fail(Reason.INVALID_SCRIPT, word, rules=rules)
    if not rules.allow_mixed_script and mixes_scripts(word):
        raise _fail(Reason.MIXED_SCRIPT, word, rules=rules)
    if len(word) < rules.min_length:
        raise _fail(Reason.TOO_SHORT, word, rules=rules)
    if ends_with_n(word):
        raise _fail(Reason.ENDS_WITH_N, word, rules=rules)
    if extra_rules:
        banned = banned_pattern(word, rules.min_length)
        if banned is not None:
            raise _fail(banned, word, rules=rules)
    if word in used:
        raise _fail(Reason.DUPLICATE, word, rules=rules)
    if linking_sound and not links_to(word, linking_sound, voicing):
        raise _fail(Reason.WRONG_LINKING_SOUND, word, linking_sound, rules)
    if check_derivation and derive_linking_sound(word, rules) is None:
        raise _fail(Reason.NO_LINKING_SOUND, word, rules=rules)
    return word


def check_word(candidate: str, state: GameState, rules: RuleConfig = DEFAULT_RULES) -> str:
    """プレイヤーの入力を検証し、前後の空白を除いたことばを返す。

    違反があれば RetryableInputError（入力しなおし）か
    ForfeitCondition（負け）を送出する。
    """
    return _check(
        candidate,
        state.used_words,
        state.linking_sound,
        rules,
        voicing=rules.voicing,
        extra_rules=rules.extra_rules,
    )


def validate_word(candidate: str, state: GameState, rules: RuleConfig = DEFAULT_RULES) -> Verdict:
    try:
        word = check_word(candidate, state, rules)
    except RuleViolation as exc:
        return Verdict(False, exc.reason, (candidate or "").strip(), exc.message)
    return Verdict(True, Reason.OK, word, _message(Reason.OK))


def split_candidates(raw_candidates: Union[str, Iterable[str], None]) -> List[str]:
    """AI の応答を候補のリストにする。空の候補と「パス」は捨てる。"""
    if not raw_candidates:
        return []
    if isinstance(raw_candidates, str):
        raw_candidates = [raw_candidates]
    out = []
    for chunk in raw_candidates:
        for part in _CANDIDATE_SEPARATORS.split(chunk or ""):
            word = part.strip(_CANDIDATE_WRAPPING)
            if word and word not in PASS_WORDS:
                out.append(word)
    return out


def select_best_candidate(
    raw_candidates: Union[str, Iterable[str], None],
    required_kana: Optional[str],
    history: Iterable[Union[Move, str]],
    rules: RuleConfig = DEFAULT_RULES,
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    """AI の候補からルールを満たすことばを1つ選ぶ。なければ None（AI の負け）。

    候補の順番はシャッフルしてから判定する。頭文字は濁点を無視して比べ、
    追加ルール（を終わりなど）と次の頭文字が決まるかはここでは見ない。
    後者は選んだあとで apply_opponent_move が AI の負けとして扱う。
    """
    candidates = split_candidates(raw_candidates)
    (rng or random).shuffle(candidates)
    used = {m.word if isinstance(m, Move) else m for m in history}
    for candidate in candidates:
        try:
            return _check(
                candidate,
                used,
                required_kana,
                rules,
                voicing=VOICING_LENIENT,
                extra_rules=False,
                check_derivation=False,
            )
        except RuleViolation as exc:
            logger.debug("rejected opponent candidate %r: %s", candidate, exc.reason.value)
    return None
