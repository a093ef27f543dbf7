# -*- coding: utf-8 -*-
import random

import pytest

from shiritori_neo.config import RuleConfig
from shiritori_neo.errors import ForfeitCondition, RetryableInputError
from shiritori_neo.kana import normalize_to_canonical_kana
from shiritori_neo.models import GameState, Move, Reason, Speaker
from shiritori_neo.rules import (
    check_word,
    derive_linking_sound,
    select_best_candidate,
    split_candidates,
    validate_word,
)


def _state(*words, linking_sound=None):
    history = tuple(
        Move(Speaker.PLAYER if i % 2 == 0 else Speaker.OPPONENT, w) for i, w in enumerate(words)
    )
    if linking_sound is None and words:
        linking_sound = derive_linking_sound(words[-1])
    return GameState(history=history, linking_sound=linking_sound)


# --- derive_linking_sound -------------------------------------------------

@pytest.mark.parametrize("word", ["りんご", "ゴリラ", "らくだ", "カメラ", "ねこ", "バナナ"])
def test_linking_sound_is_canonical_last_char(word):
    assert derive_linking_sound(word) == normalize_to_canonical_kana(word[-1])


def test_long_vowel_marks_are_peeled():
    assert derive_linking_sound("すーぱー") == "ぱ"
    assert derive_linking_sound("コーヒー") == "ひ"
    assert derive_linking_sound("すー") == "す"
    assert derive_linking_sound("まーーー") == "ま"


def test_peeling_is_idempotent():
    assert derive_linking_sound("すーぱー") == derive_linking_sound("すーぱ")


def test_small_kana_tail_is_enlarged():
    assert derive_linking_sound("きゃ") == "や"
    assert derive_linking_sound("シャッ") == "つ"
    assert derive_linking_sound("ちょきー") == "き"


def test_small_kana_tail_skip_mode():
    rules = RuleConfig(small_kana_tail="skip")
    assert derive_linking_sound("きゃ", rules) == "き"
    assert derive_linking_sound("ぱーてぃー", rules) == "て"
    assert derive_linking_sound("シャッ", rules) == "し"


@pytest.mark.parametrize("word", ["", "ー", "ーー", "ゃ", "っゃ", "ッー"])
def test_derivation_fails_without_full_size_kana(word):
    assert derive_linking_sound(word) is None


def test_long_vowel_inherits_from_katakana():
    assert derive_linking_sound("ラーメン") == "ん"


# --- validate_word --------------------------------------------------------

def test_accepts_first_word():
    verdict = validate_word("  もぐら ", GameState())
    assert verdict.accepted
    assert verdict.reason is Reason.OK
    assert verdict.word == "もぐら"


@pytest.mark.parametrize("word, reason", [
    ("", Reason.EMPTY),
    ("   ", Reason.EMPTY),
    ("apple", Reason.INVALID_SCRIPT),
    ("林檎", Reason.INVALID_SCRIPT),
    ("り ご", Reason.INVALID_SCRIPT),
    ("か", Reason.TOO_SHORT),
    ("きを", Reason.ENDS_WITH_WO),
    ("ヲヲと", None),
    ("かあああ", Reason.TRIPLE_REPEAT),
    ("もぐもぐ", Reason.REPEATED_HALF),
    ("モグモグ", Reason.REPEATED_HALF),
])
def test_retryable_rejections(word, reason):
    verdict = validate_word(word, GameState())
    if reason is None:
        assert verdict.accepted
        return
    assert not verdict.accepted
    assert verdict.reason is reason
    assert verdict.retryable
    assert not verdict.forfeit
    assert verdict.message


@pytest.mark.parametrize("word", ["めん", "メン", "らーめん", "ラーメン", "みかんー"])
def test_n_ending_forfeits(word):
    verdict = validate_word(word, GameState())
    assert verdict.reason is Reason.ENDS_WITH_N
    assert verdict.forfeit


def test_ending_n_wins_over_later_checks():
    # 既出かつ「ん」終わりでも負けとして扱う
    state = _state("めろん", linking_sound="め")
    assert validate_word("めろん", state).reason is Reason.ENDS_WITH_N


def test_repeated_half_needs_twice_min_length():
    assert validate_word("ささ", GameState()).accepted
    rules = RuleConfig(min_length=3)
    assert validate_word("もぐもぐ", GameState(), rules).accepted


def test_extra_rules_can_be_disabled():
    rules = RuleConfig(extra_rules=False)
    assert validate_word("もぐもぐ", GameState(), rules).accepted
    assert validate_word("きを", GameState(), rules).accepted


def test_mixed_script_switch():
    assert validate_word("カめら", GameState()).accepted
    verdict = validate_word("カめら", GameState(), RuleConfig(allow_mixed_script=False))
    assert verdict.reason is Reason.MIXED_SCRIPT
    # 長音符はどちらの文字種とも混ぜてよい
    assert validate_word("すーぱー", GameState(), RuleConfig(allow_mixed_script=False)).accepted


def test_duplicate_from_either_side_is_rejected():
    # 2番目の「かめ」はAIの語
    state = _state("すいか", "かめ", "めだか", linking_sound="か")
    assert state.history[1].speaker is Speaker.OPPONENT
    assert validate_word("かめ", state).reason is Reason.DUPLICATE
    state = _state("かめ", "めだか", linking_sound="か")
    assert validate_word("かめ", state).reason is Reason.DUPLICATE


def test_duplicate_is_surface_form_only():
    state = _state("りす", "すいか", "かめ", "めだか", linking_sound="か")
    assert validate_word("カメ", state).accepted


def test_wrong_linking_sound_strict():
    state = _state("ねこ")
    verdict = validate_word("ごま", state)
    assert verdict.reason is Reason.WRONG_LINKING_SOUND
    assert "こ" in verdict.message
    assert validate_word("コアラ", state).accepted


def test_lenient_voicing_accepts_voiced_start():
    state = _state("ねこ")
    assert validate_word("ごま", state, RuleConfig(voicing="lenient")).accepted


def test_small_kana_linking_sound_matches_large_start():
    state = _state("きゃ")
    assert validate_word("やま", state).accepted
    assert validate_word("ヤギ", state).accepted


def test_unlinkable_word_forfeits():
    verdict = validate_word("ゃゃ", GameState())
    assert verdict.reason is Reason.NO_LINKING_SOUND
    assert verdict.forfeit


def test_check_word_raises_by_class():
    with pytest.raises(RetryableInputError) as excinfo:
        check_word("か", GameState())
    assert excinfo.value.reason is Reason.TOO_SHORT
    with pytest.raises(ForfeitCondition):
        check_word("みかん", GameState())


# --- select_best_candidate ------------------------------------------------

def test_split_candidates_cleans_noise():
    raw = " 「ラジオ」, らくだ、，ラッコ。, パス ,,"
    assert split_candidates(raw) == ["ラジオ", "らくだ", "ラッコ"]
    assert split_candidates(None) == []
    assert split_candidates(["りす, りんご", "リボン"]) == ["りす", "りんご", "リボン"]


def test_arbitration_returns_none_when_nothing_fits():
    history = [Move(Speaker.PLAYER, "かめ")]
    assert select_best_candidate("ばなな, かめ, きりん", "か", history) is None


def test_arbitration_skips_invalid_candidates():
    history = ["すいか", "かめ"]
    raw = "ばなな, かめ, きりん, からす"
    for seed in range(10):
        assert select_best_candidate(raw, "か", history, rng=random.Random(seed)) == "からす"


def test_arbitration_is_voicing_lenient():
    assert select_best_candidate("ガラス", "か", []) == "ガラス"
    assert select_best_candidate("ばった", "は", []) == "ばった"
    assert select_best_candidate("パズル", "ば", []) == "パズル"


def test_arbitration_ignores_optional_rules():
    assert select_best_candidate("きを", "き", []) == "きを"


def test_arbitration_empty_input():
    assert select_best_candidate("", "か", []) is None
    assert select_best_candidate([], "か", []) is None


def test_arbitration_shuffles_candidates():
    raw = "からす, かめ, かさ, かに, かき"
    picks = {select_best_candidate(raw, "か", [], rng=random.Random(seed)) for seed in range(30)}
    assert len(picks) > 1


def test_arbitration_leaves_unlinkable_words_to_the_game():
    assert select_best_candidate("ぁぁ", "あ", []) == "ぁぁ"
