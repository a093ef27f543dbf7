# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Sequence

from .config import DEFAULT_RULES, RuleConfig


def build_system_instruction(rules: RuleConfig = DEFAULT_RULES, time_limit_seconds: float = 15) -> str:
    lines = [
        "あなたはしりとりゲームのAIです。プレイヤーと日本語のしりとりをします。",
        "厳守すべきルールは以下の通りです:",
        f"1. 単語は最低{rules.min_length}文字である必要があります。",
        "2. 単語はひらがなまたはカタカナのみ使用可能です（例: りんご, コンピューター）。記号・漢字・英数字は禁止です。",
        "3. 「ん」または「ン」で終わる単語は絶対に使用禁止です。使用した場合はあなたの負けです。",
        "4. こちらが指定する「開始ひらがな」で始まる単語を答えてください。"
        "カタカナの単語なら対応するカタカナで始めて構いません。",
        "5. 既に使われた単語は使用できません。",
        f"6. {time_limit_seconds:g}秒以内に返答してください。",
    ]
    if rules.extra_rules:
        lines += [
            "7. 「を」や「ヲ」で終わる単語は使用禁止です。",
            "8. 同じ文字が3つ以上連続して終わる単語（例: あああ）は使用禁止です。",
            "9. 同じ言葉の単純な繰り返し（例: モグモグ、きらきら）は使用禁止です。",
        ]
    lines.append("一般的な名詞を答えてください。記号や説明は含めないでください。")
    return "\n".join(lines)


def build_turn_prompt(
    current_word: str,
    linking_sound: str,
    used_words: Sequence[str],
    rules: RuleConfig = DEFAULT_RULES,
    candidate_count: int = 5,
) -> str:
    used = "、".join(used_words) or "（まだありません）"
    if candidate_count > 1:
        answer = (
            f"候補を{candidate_count}個まで、カンマ（,）区切りで単語だけを返してください。"
            "例: 「ラジオ,らくだ,ラッコ」"
        )
    else:
        answer = "単語を1つだけ返してください。例: 「ラジオ」"
    return (
        f"直前の単語: 「{current_word}」\n"
        f"次の単語は「{linking_sound}」で始まる、{rules.min_length}文字以上の"
        "ひらがなまたはカタカナの一般的な名詞にしてください。\n"
        f"使用禁止（既出）: {used}\n"
        "「ん」「ン」で終わる単語は絶対に答えないでください。\n"
        f"{answer}"
    )
