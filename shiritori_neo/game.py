# -*- coding: utf-8 -*-
"""ゲームの状態遷移。

各関数は GameState を受け取り、(新しい GameState, 副作用のリスト) を返す。
タイマーや AI 呼び出しそのものは session モジュールが副作用を見て行う。

    AWAITING_FIRST_WORD -> PLAYER_TURN <-> OPPONENT_TURN -> GAME_OVER

GAME_OVER に入ったあとはどの入力も無視する。
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .config import DEFAULT_RULES, RuleConfig
from .models import EndCause, GameState, Move, Phase, Reason, Speaker
from .rules import derive_linking_sound, select_best_candidate, validate_word

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShowMessage:
    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ArmPlayerClock:
    turn: int


@dataclass(frozen=True)
class HaltPlayerClock:
    pass


@dataclass(frozen=True)
class AskOpponent:
    turn: int
    current_word: str
    linking_sound: str
    used_words: Tuple[str, ...]


@dataclass(frozen=True)
class GameEnded:
    winner: Speaker
    cause: EndCause
    message: str
    score: int


Transition = Tuple[GameState, List[object]]

START_MESSAGE = "ゲーム開始！最初の言葉を入力してください。"
PLAYER_TURN_MESSAGE = "あなたの番です。"


def new_game(after: Optional[GameState] = None) -> Transition:
    """新しいゲームを始める。after を渡すとターン番号を引き継ぐ。"""
    turn = after.turn + 1 if after is not None else 0
    state = GameState(turn=turn, message=START_MESSAGE)
    return state, [ShowMessage(START_MESSAGE)]


def end_game(state: GameState, winner: Speaker, cause: EndCause, message: str) -> Transition:
    """ゲームを終える。すでに終わっていれば何もしない（最初の呼び出しだけが有効）。"""
    if state.is_over:
        return state, []
    logger.info("game over: winner=%s cause=%s", winner.value, cause.value)
    ended = replace(
        state,
        phase=Phase.GAME_OVER,
        winner=winner,
        end_cause=cause,
        message=message,
    )
    return ended, [
        HaltPlayerClock(),
        ShowMessage(message),
        GameEnded(winner, cause, message, ended.player_character_count),
    ]


def apply_player_move(state: GameState, raw_word: str, rules: RuleConfig = DEFAULT_RULES) -> Transition:
    if state.phase not in (Phase.AWAITING_FIRST_WORD, Phase.PLAYER_TURN):
        return state, []

    verdict = validate_word(raw_word, state, rules)
    if verdict.forfeit:
        cause = EndCause.ENDS_WITH_N if verdict.reason is Reason.ENDS_WITH_N else EndCause.NO_LINKING_SOUND
        return end_game(state, Speaker.OPPONENT, cause, verdict.message + "あなたの負けです。")
    if not verdict.accepted:
        return replace(state, message=verdict.message), [ShowMessage(verdict.message, is_error=True)]

    word = verdict.word
    linking_sound = derive_linking_sound(word, rules)
    moved = replace(
        state.with_move(Move(Speaker.PLAYER, word)),
        linking_sound=linking_sound,
        turn_owner=Speaker.OPPONENT,
        phase=Phase.OPPONENT_TURN,
        player_character_count=state.player_character_count + len(word),
        turn=state.turn + 1,
        message=verdict.message,
    )
    return moved, [
        HaltPlayerClock(),
        ShowMessage(verdict.message),
        AskOpponent(moved.turn, word, linking_sound, tuple(m.word for m in moved.history)),
    ]


def apply_opponent_move(
    state: GameState,
    raw_response: Optional[str],
    turn: int,
    rules: RuleConfig = DEFAULT_RULES,
    rng: Optional[random.Random] = None,
) -> Transition:
    """AI の応答を反映する。turn が今のターンと違えば遅れて届いた応答として捨てる。"""
    if state.phase is not Phase.OPPONENT_TURN or turn != state.turn:
        logger.info("ignoring opponent reply for turn %s (current turn %s, %s)",
                    turn, state.turn, state.phase.value)
        return state, []

    word = select_best_candidate(raw_response, state.linking_sound, state.history, rules, rng)
    if word is None:
        logger.info("no usable opponent candidate in %r", raw_response)
        return end_game(state, Speaker.PLAYER, EndCause.ORACLE_EXHAUSTED,
                        "AIが言葉を見つけられませんでした。あなたの勝ちです！")

    linking_sound = derive_linking_sound(word, rules)
    moved = state.with_move(Move(Speaker.OPPONENT, word))
    if linking_sound is None:
        return end_game(moved, Speaker.PLAYER, EndCause.NO_LINKING_SOUND,
                        f"AIの言葉「{word}」から次の文字を特定できませんでした。あなたの勝ちです！")

    moved = replace(
        moved,
        linking_sound=linking_sound,
        turn_owner=Speaker.PLAYER,
        phase=Phase.PLAYER_TURN,
        turn=state.turn + 1,
        message=PLAYER_TURN_MESSAGE,
    )
    return moved, [ShowMessage(PLAYER_TURN_MESSAGE), ArmPlayerClock(moved.turn)]


def apply_timeout(state: GameState, speaker: Speaker, turn: int) -> Transition:
    """speaker の持ち時間切れ。そのターンがまだ speaker の番のときだけ有効。"""
    if state.is_over or turn != state.turn or state.turn_owner is not speaker:
        return state, []
    if speaker is Speaker.PLAYER:
        message = "時間切れです！あなたの負けです。"
    else:
        message = "AIが時間内に応答しませんでした。あなたの勝ちです！"
    return end_game(state, speaker.other, EndCause.TIMEOUT, message)
