# -*- coding: utf-8 -*-
"""AI 側のことばの出どころ。

どちらの実装も suggest() でテキスト（1語またはカンマ区切りの候補）を返すだけで、
ルールの判定は rules.select_best_candidate が行う。取得できなければ OracleFailure。
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

import google.generativeai as genai

from .config import DEFAULT_RULES, RuleConfig, Settings
from .errors import OracleFailure
from .game import AskOpponent
from .kana import strip_voicing
from .prompts import build_system_instruction, build_turn_prompt

logger = logging.getLogger(__name__)

# API キーがないときに使う簡易辞書（頭文字ごと）
FALLBACK_WORDS: Dict[str, List[str]] = {
    "あ": ["あひる", "アイロン", "あさがお", "あじさい"],
    "い": ["いるか", "イチゴ", "いのしし", "いす"],
    "う": ["うさぎ", "ウクレレ", "うちわ", "うどん"],
    "え": ["えんぴつ", "エプロン", "えだまめ", "えほん"],
    "お": ["おにぎり", "オルガン", "おたまじゃくし", "おもちゃ"],
    "か": ["かたつむり", "カメラ", "かぶとむし", "かばん"],
    "が": ["がっこう", "ガラス", "がちょう"],
    "き": ["きつつき", "キャベツ", "きのこ", "きって"],
    "ぎ": ["ぎんなん", "ギター", "ぎょうざ"],
    "く": ["くじら", "クレヨン", "くつした", "くるみ"],
    "ぐ": ["ぐんて", "グラス", "ぐみ"],
    "け": ["けいと", "ケーキ", "けむし", "けしごむ"],
    "げ": ["げたばこ", "ゲーム", "げんかん"],
    "こ": ["こいのぼり", "コアラ", "こおろぎ", "こま"],
    "ご": ["ごりら", "ゴマ", "ごはん"],
    "さ": ["さつまいも", "サッカー", "さくらんぼ", "さる"],
    "ざ": ["ざりがに", "ザクロ", "ざぶとん"],
    "し": ["しまうま", "シャツ", "しゃもじ", "しか"],
    "じ": ["じてんしゃ", "ジュース", "じゃがいも"],
    "す": ["すずめ", "スプーン", "すいか", "すもう"],
    "ず": ["ずかん", "ズボン", "ずきん"],
    "せ": ["せみ", "セーター", "せんぷうき", "せなか"],
    "ぜ": ["ぜんまい", "ゼリー", "ぜにごけ"],
    "そ": ["そろばん", "ソファ", "そうじき", "そら"],
    "ぞ": ["ぞう", "ゾンビ", "ぞうり"],
    "た": ["たけのこ", "タオル", "たいこ", "たぬき"],
    "だ": ["だんご", "ダンス", "だちょう", "だいず"],
    "ち": ["ちょうちょ", "チーズ", "ちくわ", "ちりとり"],
    "つ": ["つくえ", "ツリー", "つばめ", "つみき"],
    "て": ["てるてるぼうず", "テレビ", "てぶくろ", "てがみ"],
    "で": ["でんしゃ", "デザート", "でんわ"],
    "と": ["とうもろこし", "トマト", "とけい", "とんぼ"],
    "ど": ["どんぐり", "ドーナツ", "どじょう"],
    "な": ["なまず", "ナイフ", "なのはな", "なわとび"],
    "に": ["にわとり", "ニンジン", "にんぎょう", "にじ"],
    "ぬ": ["ぬいぐるみ", "ヌードル", "ぬりえ"],
    "ね": ["ねずみ", "ネクタイ", "ねっこ", "ねぎ"],
    "の": ["のこぎり", "ノート", "のりまき", "のはら"],
    "は": ["はさみ", "ハンカチ", "はなび", "はしご"],
    "ば": ["ばった", "バナナ", "ばしゃ"],
    "ぱ": ["ぱんだ", "パズル", "パイナップル"],
    "ひ": ["ひまわり", "ヒーロー", "ひよこ", "ひつじ"],
    "び": ["びわ", "ビスケット", "びじゅつかん"],
    "ぴ": ["ぴーまん", "ピアノ", "ピエロ"],
    "ふ": ["ふくろう", "フライパン", "ふうせん", "ふで"],
    "ぶ": ["ぶどう", "ブランコ", "ぶたにく"],
    "ぷ": ["ぷりん", "プール", "プリンター"],
    "へ": ["へちま", "ヘリコプター", "へいわ", "へび"],
    "べ": ["べんとう", "ベッド", "べにしょうが"],
    "ぺ": ["ぺんぎん", "ペンキ", "ペダル"],
    "ほ": ["ほたる", "ホットケーキ", "ほうき", "ほっぺ"],
    "ぼ": ["ぼうし", "ボール", "ぼたもち"],
    "ぽ": ["ぽすと", "ポテト", "ポケット"],
    "ま": ["まつぼっくり", "マスク", "まくら", "まめ"],
    "み": ["みのむし", "ミシン", "みかづき", "みみ"],
    "む": ["むささび", "ムース", "むぎちゃ", "むし"],
    "め": ["めだまやき", "メロディー", "めがね", "めだか"],
    "も": ["もみじ", "モグラ", "ものさし", "もち"],
    "や": ["やかん", "ヤシ", "やまびこ", "やぎ"],
    "ゆ": ["ゆきだるま", "ユニフォーム", "ゆかた", "ゆび"],
    "よ": ["よっと", "ヨーグルト", "ようかん", "よる"],
    "ら": ["らくだ", "ラジオ", "らっきょう", "ラッコ"],
    "り": ["りんご", "リボン", "りす", "りゅう"],
    "る": ["るりいろ", "ルビー", "るすばん"],
    "れ": ["れんこん", "レモン", "れいぞうこ", "レタス"],
    "ろ": ["ろうそく", "ロケット", "ろば", "ろうか"],
    "わ": ["わなげ", "ワイン", "わたがし", "わに"],
}


class FallbackOracle:
    """組み込みの辞書から、頭文字が合いそうな未使用の語をまとめて返す。"""

    def __init__(self, words: Optional[Dict[str, List[str]]] = None):
        self.words = FALLBACK_WORDS if words is None else words

    async def suggest(self, request: AskOpponent) -> str:
        base = strip_voicing(request.linking_sound)
        used = set(request.used_words)
        candidates = [
            word
            for head, words in self.words.items()
            if strip_voicing(head) == base
            for word in words
            if word not in used
        ]
        if not candidates:
            raise OracleFailure(f"no fallback word for {request.linking_sound!r}")
        return ",".join(candidates)


class GeminiOracle:
    """Gemini に候補を出してもらう。"""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-1.5-flash",
        rules: RuleConfig = DEFAULT_RULES,
        candidate_count: int = 5,
        time_limit_seconds: float = 15,
    ):
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.rules = rules
        self.candidate_count = candidate_count
        self.model = genai.GenerativeModel(
            model_name,
            system_instruction=build_system_instruction(rules, time_limit_seconds),
        )

    async def suggest(self, request: AskOpponent) -> str:
        prompt = build_turn_prompt(
            request.current_word,
            request.linking_sound,
            request.used_words,
            self.rules,
            self.candidate_count,
        )
        try:
            resp = await self.model.generate_content_async(prompt)
            text = resp.text
        except Exception as exc:
            logger.warning("Gemini request failed: %s", exc)
            raise OracleFailure(str(exc)) from exc
        text = (text or "").strip()
        if not text:
            raise OracleFailure("empty response from Gemini")
        logger.debug("Gemini suggested %r for %r", text, request.linking_sound)
        return text


def build_oracle(settings: Settings):
    """API キーがあれば Gemini、なければ組み込み辞書を使う。"""
    if settings.gemini_api_key:
        return GeminiOracle(
            settings.gemini_api_key,
            settings.gemini_model,
            rules=settings.rules,
            candidate_count=settings.candidate_count,
            time_limit_seconds=settings.opponent_time_seconds,
        )
    logger.warning("GEMINI_API_KEY is not set: using the built-in word list")
    return FallbackOracle()
