# -*- coding: utf-8 -*-
import random

from shiritori_neo.game import (
    ArmPlayerClock,
    AskOpponent,
    GameEnded,
    HaltPlayerClock,
    ShowMessage,
    apply_opponent_move,
    apply_player_move,
    apply_timeout,
    end_game,
    new_game,
)
from shiritori_neo.models import EndCause, Phase, Speaker


def _effects_of(effects, kind):
    return [e for e in effects if isinstance(e, kind)]


def _after_player(word="ごりら"):
    state, _ = new_game()
    return apply_player_move(state, word)


def test_new_game_awaits_first_word():
    state, effects = new_game()
    assert state.phase is Phase.AWAITING_FIRST_WORD
    assert state.turn_owner is Speaker.PLAYER
    assert state.linking_sound is None
    assert not state.is_over
    assert _effects_of(effects, ShowMessage)


def test_new_game_continues_turn_counter():
    state, _ = _after_player()
    restarted, _ = new_game(after=state)
    assert restarted.turn > state.turn
    assert restarted.history == ()


def test_accepted_player_word_hands_turn_to_opponent():
    state, effects = _after_player("ごりら")
    assert state.phase is Phase.OPPONENT_TURN
    assert state.turn_owner is Speaker.OPPONENT
    assert state.linking_sound == "ら"
    assert state.player_character_count == 3
    assert state.current_word == "ごりら"
    ask = _effects_of(effects, AskOpponent)[0]
    assert ask.turn == state.turn
    assert ask.linking_sound == "ら"
    assert ask.used_words == ("ごりら",)
    assert _effects_of(effects, HaltPlayerClock)


def test_retryable_error_keeps_state():
    state, _ = new_game()
    after, effects = apply_player_move(state, "apple")
    assert after.history == ()
    assert after.phase is Phase.AWAITING_FIRST_WORD
    assert after.turn == state.turn
    message = _effects_of(effects, ShowMessage)[0]
    assert message.is_error


def test_n_ending_ends_game_for_player():
    state, _ = new_game()
    after, effects = apply_player_move(state, "メン")
    assert after.is_over
    assert after.winner is Speaker.OPPONENT
    assert after.end_cause is EndCause.ENDS_WITH_N
    assert _effects_of(effects, GameEnded)


def test_player_input_ignored_during_opponent_turn():
    state, _ = _after_player()
    after, effects = apply_player_move(state, "らっこ")
    assert after is state
    assert effects == []


def test_opponent_move_picks_valid_candidate():
    state, _ = _after_player("ごりら")
    after, effects = apply_opponent_move(state, "ばなな, らっぱ", state.turn, rng=random.Random(0))
    assert after.phase is Phase.PLAYER_TURN
    assert after.turn_owner is Speaker.PLAYER
    assert after.current_word == "らっぱ"
    assert after.history[-1].speaker is Speaker.OPPONENT
    assert after.linking_sound == "ぱ"
    assert after.player_character_count == 3
    arm = _effects_of(effects, ArmPlayerClock)[0]
    assert arm.turn == after.turn


def test_opponent_without_valid_candidate_loses():
    state, _ = _after_player("ごりら")
    after, effects = apply_opponent_move(state, "らいおん", state.turn)
    assert after.is_over
    assert after.winner is Speaker.PLAYER
    assert after.end_cause is EndCause.ORACLE_EXHAUSTED
    ended = _effects_of(effects, GameEnded)[0]
    assert ended.score == 3


def test_opponent_empty_reply_loses():
    state, _ = _after_player()
    after, _ = apply_opponent_move(state, "", state.turn)
    assert after.winner is Speaker.PLAYER


def test_stale_opponent_reply_is_ignored():
    state, _ = _after_player()
    after, effects = apply_opponent_move(state, "らっぱ", state.turn - 1)
    assert after is state
    assert effects == []


def test_player_timeout_ends_game():
    state, _ = _after_player("ごりら")
    state, _ = apply_opponent_move(state, "らっぱ", state.turn)
    after, effects = apply_timeout(state, Speaker.PLAYER, state.turn)
    assert after.is_over
    assert after.winner is Speaker.OPPONENT
    assert after.end_cause is EndCause.TIMEOUT


def test_timeout_for_wrong_side_or_turn_is_ignored():
    state, _ = _after_player()
    assert apply_timeout(state, Speaker.PLAYER, state.turn) == (state, [])
    assert apply_timeout(state, Speaker.OPPONENT, state.turn - 1) == (state, [])


def test_opponent_timeout_then_late_reply():
    state, _ = _after_player()
    turn = state.turn
    over, _ = apply_timeout(state, Speaker.OPPONENT, turn)
    assert over.winner is Speaker.PLAYER
    late, effects = apply_opponent_move(over, "らっぱ", turn)
    assert late is over
    assert effects == []


def test_end_game_is_idempotent():
    state, _ = _after_player()
    first, effects = end_game(state, Speaker.PLAYER, EndCause.TIMEOUT, "first")
    second, more = end_game(first, Speaker.OPPONENT, EndCause.ENDS_WITH_N, "second")
    assert second is first
    assert more == []
    assert second.message == "first"
    assert second.winner is Speaker.PLAYER
    assert len(_effects_of(effects, GameEnded)) == 1


def test_game_over_absorbs_all_events():
    state, _ = new_game()
    over, _ = apply_player_move(state, "みかん")
    assert apply_player_move(over, "もぐら") == (over, [])
    assert apply_opponent_move(over, "らっぱ", over.turn) == (over, [])
    assert apply_timeout(over, Speaker.PLAYER, over.turn) == (over, [])


def test_full_exchange_counts_only_player_characters():
    state, _ = new_game()
    state, _ = apply_player_move(state, "しりとり")
    state, _ = apply_opponent_move(state, "りす", state.turn)
    state, _ = apply_player_move(state, "スイカ")
    assert state.player_character_count == 7
    assert [m.word for m in state.history] == ["しりとり", "りす", "スイカ"]
    assert state.linking_sound == "か"


def test_opponent_word_without_next_sound_loses():
    state, _ = _after_player("ぴあ")
    assert state.linking_sound == "あ"
    after, effects = apply_opponent_move(state, "ぁぁ", state.turn)
    assert after.is_over
    assert after.winner is Speaker.PLAYER
    assert after.end_cause is EndCause.NO_LINKING_SOUND
    assert [m.word for m in after.history] == ["ぴあ", "ぁぁ"]
    assert _effects_of(effects, GameEnded)[0].cause is EndCause.NO_LINKING_SOUND
