# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple


class Speaker(str, Enum):
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> "Speaker":
        return Speaker.OPPONENT if self is Speaker.PLAYER else Speaker.PLAYER

    @property
    def label(self) -> str:
        return "あなた" if self is Speaker.PLAYER else "AI"


class Phase(str, Enum):
    AWAITING_FIRST_WORD = "awaiting_first_word"
    PLAYER_TURN = "player_turn"
    OPPONENT_TURN = "opponent_turn"
    GAME_OVER = "game_over"


class EndCause(str, Enum):
    ENDS_WITH_N = "ends_with_n"
    NO_LINKING_SOUND = "no_linking_sound"
    ORACLE_EXHAUSTED = "oracle_exhausted"
    TIMEOUT = "timeout"


class Reason(str, Enum):
    """validate_word の判定理由。"""

    OK = "ok"
    EMPTY = "empty"
    INVALID_SCRIPT = "invalid_script"
    MIXED_SCRIPT = "mixed_script"
    TOO_SHORT = "too_short"
    ENDS_WITH_N = "ends_with_n"
    ENDS_WITH_WO = "ends_with_wo"
    TRIPLE_REPEAT = "triple_repeat"
    REPEATED_HALF = "repeated_half"
    DUPLICATE = "duplicate"
    WRONG_LINKING_SOUND = "wrong_linking_sound"
    NO_LINKING_SOUND = "no_linking_sound"

    @property
    def forfeit(self) -> bool:
        return self in (Reason.ENDS_WITH_N, Reason.NO_LINKING_SOUND)


@dataclass(frozen=True)
class Move:
    speaker: Speaker
    word: str

    def __str__(self) -> str:
        return f"{self.speaker.label}: {self.word}"


@dataclass(frozen=True)
class Verdict:
    accepted: bool
    reason: Reason
    word: str = ""
    message: str = ""

    @property
    def forfeit(self) -> bool:
        return not self.accepted and self.reason.forfeit

    @property
    def retryable(self) -> bool:
        return not self.accepted and not self.reason.forfeit


@dataclass(frozen=True)
class GameState:
    """1ゲーム分の状態。更新は game モジュールの関数が新しい値を返して行う。"""

    history: Tuple[Move, ...] = ()
    linking_sound: Optional[str] = None
    turn_owner: Speaker = Speaker.PLAYER
    phase: Phase = Phase.AWAITING_FIRST_WORD
    player_character_count: int = 0
    # ターンが変わるたびに増える。リスタートしても戻さない
    turn: int = 0
    winner: Optional[Speaker] = None
    end_cause: Optional[EndCause] = None
    message: str = ""

    @property
    def is_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    @property
    def used_words(self) -> frozenset:
        return frozenset(m.word for m in self.history)

    @property
    def current_word(self) -> Optional[str]:
        return self.history[-1].word if self.history else None

    @property
    def previous_word(self) -> Optional[str]:
        return self.history[-2].word if len(self.history) > 1 else None

    def with_move(self, move: Move) -> "GameState":
        return replace(self, history=self.history + (move,))
