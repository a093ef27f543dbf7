# -*- coding: utf-8 -*-
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

VOICING_STRICT = "strict"
VOICING_LENIENT = "lenient"
SMALL_KANA_ENLARGE = "enlarge"
SMALL_KANA_SKIP = "skip"


@dataclass(frozen=True)
class RuleConfig:
    """ルールの切り替え。

    - min_length: 最低文字数（コードポイント数）
    - allow_mixed_script: ひらがなとカタカナの混在を許すか
    - voicing: 頭文字の比較方法。"strict" は完全一致、"lenient" は濁点を無視
    - extra_rules: 「を」終わり・同字3連続・繰り返し語の禁止
    - small_kana_tail: 語尾の小さいかなを "enlarge"（きゃ→や）するか "skip"（きゃ→き）するか
    """

    min_length: int = 2
    allow_mixed_script: bool = True
    voicing: str = VOICING_STRICT
    extra_rules: bool = True
    small_kana_tail: str = SMALL_KANA_ENLARGE

    def __post_init__(self):
        if self.min_length < 1:
            raise ValueError("min_length must be at least 1")
        if self.voicing not in (VOICING_STRICT, VOICING_LENIENT):
            raise ValueError(f"unknown voicing mode: {self.voicing!r}")
        if self.small_kana_tail not in (SMALL_KANA_ENLARGE, SMALL_KANA_SKIP):
            raise ValueError(f"unknown small_kana_tail mode: {self.small_kana_tail!r}")


DEFAULT_RULES = RuleConfig()


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    player_time_seconds: float = 60.0
    opponent_time_seconds: float = 15.0
    candidate_count: int = 5
    max_games: int = 100
    high_score_path: str = os.path.join("data", "high_score.json")
    rules: RuleConfig = DEFAULT_RULES


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """.env（あれば）と環境変数から設定を読む。"""
    load_dotenv()
    rules = RuleConfig(
        min_length=int(os.getenv("SHIRITORI_MIN_LENGTH", "2")),
        allow_mixed_script=_env_bool("SHIRITORI_MIXED_SCRIPT", True),
        voicing=os.getenv("SHIRITORI_VOICING", VOICING_STRICT),
        extra_rules=_env_bool("SHIRITORI_EXTRA_RULES", True),
        small_kana_tail=os.getenv("SHIRITORI_SMALL_KANA_TAIL", SMALL_KANA_ENLARGE),
    )
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
        player_time_seconds=float(os.getenv("SHIRITORI_PLAYER_TIME", "60")),
        opponent_time_seconds=float(os.getenv("SHIRITORI_OPPONENT_TIME", "15")),
        candidate_count=int(os.getenv("SHIRITORI_CANDIDATES", "5")),
        max_games=int(os.getenv("SHIRITORI_MAX_GAMES", "100")),
        high_score_path=os.getenv(
            "SHIRITORI_HIGH_SCORE_PATH", os.path.join("data", "high_score.json")
        ),
        rules=rules,
    )
