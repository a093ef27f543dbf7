# -*- coding: utf-8 -*-
from __future__ import annotations


class ShiritoriError(Exception):
    """このパッケージの例外の基底クラス。"""


class RuleViolation(ShiritoriError):
    """ことばがルールに反している。reason は models.Reason。"""

    forfeit = False

    def __init__(self, reason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class RetryableInputError(RuleViolation):
    """入力しなおせば続けられる違反（空・文字種・短すぎ・既出など）。"""


class ForfeitCondition(RuleViolation):
    """出した側の負けになる違反（「ん」終わり、次の頭文字が決まらない）。"""

    forfeit = True


class OracleFailure(ShiritoriError):
    """AI からことばを受け取れなかった（通信エラー・空の応答など）。"""
