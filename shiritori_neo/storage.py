# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

HIGH_SCORE_KEY = "shiritoriNeoHighScore"


class HighScoreStore:
    """最高記録（プレイヤーが入力した総文字数）を JSON ファイルの1つのキーに保存する。

    値は文字列の整数で持つ。読み書きの失敗はログに残すだけで例外にはしない。
    """

    def __init__(self, path: Union[str, Path], key: str = HIGH_SCORE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_slots(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to read high score from %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> int:
        raw = self._read_slots().get(self.key)
        if raw is None:
            return 0
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed high score %r in %s", raw, self.path)
            return 0

    def submit(self, score: int) -> bool:
        """score が保存済みの記録を超えたときだけ書き込み、新記録なら True。"""
        if score <= self.load():
            return False
        slots = self._read_slots()
        slots[self.key] = str(score)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(slots, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to save high score to %s: %s", self.path, exc)
            return False
        logger.info("New high score: %s", score)
        return True
