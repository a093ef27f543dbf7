# -*- coding: utf-8 -*-
"""1ゲーム分の進行（タイマーと AI 呼び出し）。

状態の更新はすべて game モジュールの関数に任せ、ここでは返ってきた副作用を実行する。
タイマーや AI の応答はターン番号つきで状態遷移に渡すので、ターンが進んだあとや
ゲーム終了後に届いたものは遷移関数の側で無視される。
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from functools import partial
from typing import Optional, Tuple

from .config import DEFAULT_RULES, RuleConfig
from .errors import OracleFailure
from .game import (
    ArmPlayerClock,
    AskOpponent,
    GameEnded,
    HaltPlayerClock,
    ShowMessage,
    Transition,
    apply_opponent_move,
    apply_player_move,
    apply_timeout,
    new_game,
)
from .models import GameState, Speaker
from .storage import HighScoreStore

logger = logging.getLogger(__name__)


class GameSession:
    def __init__(
        self,
        oracle,
        rules: RuleConfig = DEFAULT_RULES,
        *,
        player_time_seconds: float = 60.0,
        opponent_time_seconds: float = 15.0,
        store: Optional[HighScoreStore] = None,
        rng: Optional[random.Random] = None,
        clock=time.monotonic,
    ):
        self.oracle = oracle
        self.rules = rules
        self.player_time_seconds = player_time_seconds
        self.opponent_time_seconds = opponent_time_seconds
        self.store = store
        self.rng = rng
        self._clock = clock

        self.state = GameState()
        self.message = ""
        self.is_error = False
        self.high_score = store.load() if store is not None else 0
        self.new_record = False
        self.player_time_remaining = player_time_seconds
        self._clock_started: Optional[float] = None
        self._player_timer: Optional[asyncio.Task] = None
        # 保存待ちの (ターン, 得点)
        self._unsaved_score: Optional[Tuple[int, int]] = None

    # --- public -----------------------------------------------------------

    def start(self) -> GameState:
        """新しいゲームを始める。動いているタイマーはすべて止める。

        AI への問い合わせが途中でも中断はしない。届いた応答はターン番号が
        合わないので捨てられる。
        """
        self._cancel_timers()
        self._clock_started = None
        self.player_time_remaining = self.player_time_seconds
        self.new_record = False
        self._apply(new_game(after=self.state))
        return self.state

    async def submit(self, raw_word: str) -> GameState:
        """プレイヤーの入力を処理し、受理されたら AI の応答まで進める。"""
        request = self._apply(apply_player_move(self.state, raw_word, self.rules))
        if request is not None:
            await self._play_opponent(request)
        await self._save_score()
        return self.state

    def expire(self, speaker: Speaker, turn: int) -> GameState:
        self._apply(apply_timeout(self.state, speaker, turn))
        return self.state

    def player_time_left(self) -> float:
        remaining = self.player_time_remaining
        if self._clock_started is not None:
            remaining -= self._clock() - self._clock_started
        return max(remaining, 0.0)

    def close(self) -> None:
        self._cancel_timers()

    # --- effects ----------------------------------------------------------

    def _apply(self, transition: Transition) -> Optional[AskOpponent]:
        self.state, effects = transition
        request = None
        for effect in effects:
            if isinstance(effect, ShowMessage):
                self.message = effect.text
                self.is_error = effect.is_error
            elif isinstance(effect, HaltPlayerClock):
                self._halt_player_clock()
            elif isinstance(effect, ArmPlayerClock):
                self._arm_player_clock(effect.turn)
            elif isinstance(effect, AskOpponent):
                request = effect
            elif isinstance(effect, GameEnded):
                self._finish(effect)
        return request

    def _arm_player_clock(self, turn: int) -> None:
        self._cancel_timers()
        self._clock_started = self._clock()
        self._player_timer = asyncio.ensure_future(
            self._player_countdown(turn, self.player_time_remaining)
        )

    def _halt_player_clock(self) -> None:
        if self._clock_started is not None:
            elapsed = self._clock() - self._clock_started
            self.player_time_remaining = max(self.player_time_remaining - elapsed, 0.0)
            self._clock_started = None
        self._cancel_timers()

    def _cancel_timers(self) -> None:
        timer, self._player_timer = self._player_timer, None
        if timer is not None and not timer.done() and timer is not asyncio.current_task():
            timer.cancel()

    async def _player_countdown(self, turn: int, seconds: float) -> None:
        await asyncio.sleep(max(seconds, 0.0))
        logger.info("player ran out of time on turn %s", turn)
        self._clock_started = None
        self.player_time_remaining = 0.0
        self.expire(Speaker.PLAYER, turn)
        await self._save_score()

    def _finish(self, ended: GameEnded) -> None:
        self._cancel_timers()
        if self.store is not None:
            self._unsaved_score = (self.state.turn, ended.score)
        elif ended.score > self.high_score:
            self.new_record = True
            self.high_score = ended.score

    async def _save_score(self) -> None:
        """ゲーム終了時の得点をファイルに書く。ファイル操作は別スレッドで行う。"""
        pending, self._unsaved_score = self._unsaved_score, None
        if pending is None or self.store is None:
            return
        turn, score = pending
        record = await asyncio.to_thread(self.store.submit, score)
        self.high_score = await asyncio.to_thread(self.store.load)
        # 書いている間に次のゲームが始まっていたら記録更新の表示は出さない
        if self.state.turn == turn:
            self.new_record = record

    # --- opponent ---------------------------------------------------------

    async def _ask_oracle(self, request: AskOpponent) -> str:
        try:
            return await self.oracle.suggest(request)
        except OracleFailure as exc:
            logger.warning("opponent oracle failed on turn %s: %s", request.turn, exc)
            return ""

    async def _play_opponent(self, request: AskOpponent) -> None:
        reply = asyncio.ensure_future(self._ask_oracle(request))
        try:
            raw = await asyncio.wait_for(asyncio.shield(reply), self.opponent_time_seconds)
        except asyncio.TimeoutError:
            logger.info("opponent timed out on turn %s", request.turn)
            self.expire(Speaker.OPPONENT, request.turn)
            reply.add_done_callback(partial(self._late_reply, request.turn))
            return
        except asyncio.CancelledError:
            # 呼び出し元が切断しても AI の応答はゲームに反映する
            reply.add_done_callback(partial(self._late_reply, request.turn))
            raise
        # 待っている間にリスタートや時間切れがあっても、遷移関数がターン番号で弾く
        self._apply(apply_opponent_move(self.state, raw, request.turn, self.rules, self.rng))

    def _late_reply(self, turn: int, reply: asyncio.Future) -> None:
        if reply.cancelled() or reply.exception() is not None:
            return
        self._apply(apply_opponent_move(self.state, reply.result(), turn, self.rules, self.rng))
        if self._unsaved_score is not None:
            asyncio.ensure_future(self._save_score())
