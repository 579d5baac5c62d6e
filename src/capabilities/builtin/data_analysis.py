# src/capabilities/builtin/data_analysis.py — v1
"""Text analysis plugin: summary, statistics or keywords of the input."""

from __future__ import annotations

import re
from collections import Counter
from typing import Any

from agentweave.capabilities.base import BasePlugin

_WORD_RE = re.compile(r"[A-Za-z0-9']+")
_SENTENCE_RE = re.compile(r"[.!?]+")

# Words ignored when ranking keywords.
_STOPWORDS = frozenset(
    "a an and are as at be by for from has have in is it its of on or that the "
    "this to was were will with".split()
)


class DataAnalysisPlugin(BasePlugin):
    @property
    def name(self) -> str:
        return "data_analysis"

    @property
    def description(self) -> str:
        return "Analyse input text: type=summary | statistics | keywords"

    def execute(self, input_text: str, parameters: dict[str, Any]) -> Any:
        kind = str(parameters.get("type", "summary"))
        words = _WORD_RE.findall(input_text)

        if kind == "summary":
            unique = {w.lower() for w in words}
            return (
                f"{len(words)} words ({len(unique)} unique), "
                f"{len(input_text)} characters"
            )

        if kind == "statistics":
            sentences = [s for s in _SENTENCE_RE.split(input_text) if s.strip()]
            avg_len = sum(len(w) for w in words) / len(words) if words else 0.0
            return {
                "characters": len(input_text),
                "words": len(words),
                "sentences": len(sentences),
                "avg_word_length": round(avg_len, 2),
            }

        if kind == "keywords":
            top_n = int(parameters.get("top_n", 5))
            counts = Counter(
                w.lower() for w in words if w.lower() not in _STOPWORDS and len(w) > 2
            )
            return [word for word, _ in counts.most_common(top_n)]

        raise ValueError(f"unsupported analysis type: {kind!r}")
