"""
Rule-based legal document analyzer.
No AI / ML — pure Python: regex, keyword weights, sentence heuristics.
Produces a plain-language summary, a 0–100 risk score, risk warnings,
advice, keyword highlights, and answers to free-text questions.
"""

import re
import math
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Data classes
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RiskBand:
    label:  str     # "Low" | "Medium" | "High"
    color:  str     # CSS class for the gradient meter
    badge:  str     # CSS class for the badge


@dataclass
class AnalysisResult:
    summary:    str
    risk_score: float                                         # 0–100
    risks:      List[str] = field(default_factory=list)       # detection order
    advice:     List[str] = field(default_factory=list)       # never empty
    highlights: List[str] = field(default_factory=list)       # keyword-table order

    @property
    def risk_level(self) -> str:
        return risk_band(self.risk_score).label

    def to_dict(self) -> dict:
        """Serialize to a plain dict (for JSON / session storage)."""
        return {
            "summary":    self.summary,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "risks":      list(self.risks),
            "advice":     list(self.advice),
            "highlights": list(self.highlights),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AnalysisResult":
        return cls(
            summary=d["summary"],
            risk_score=d["risk_score"],
            risks=list(d["risks"]),
            advice=list(d["advice"]),
            highlights=list(d["highlights"]),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Keyword table
# ─────────────────────────────────────────────────────────────────────────────

RISK_KEYWORDS: Tuple[Tuple[str, int], ...] = (
    ("indemnify",       15),
    ("indemnification", 18),
    ("liability",       12),
    ("penalty",         10),
    ("arbitration",      6),
    ("termination",      8),
    ("confidential",     6),
    ("non-compete",     14),
    ("breach",          10),
    ("damages",         10),
    ("waiver",           6),
    ("jurisdiction",     6),
    ("governing law",    8),
    ("auto-renew",      10),
    ("late fee",         8),
    ("exclusive",        8),
)

# Compiled once; keywords are matched as literals.
_KEYWORD_PATTERNS = tuple(
    (kw, weight, re.compile(re.escape(kw), re.IGNORECASE))
    for kw, weight in RISK_KEYWORDS
)

SAMPLE_DOCUMENT = (
    "This Agreement is governed by the laws of California. "
    "Either party may terminate for material breach upon 30 days written notice. "
    "Liability is limited to the fees paid in the preceding 12 months and excludes indirect damages. "
    "The agreement auto-renews for successive one-year terms unless notice of non-renewal is "
    "provided 60 days prior to the end of the then-current term. "
    "Each party shall indemnify and hold harmless the other from third-party claims."
)

HIGH_RISK_THRESHOLD = 60
MEDIUM_RISK_THRESHOLD = 25

SUMMARY_MIN_SENTENCES = 3
SUMMARY_MAX_SENTENCES = 6
SUMMARY_FALLBACK_CHARS = 240

MAX_QUESTION_TOKENS = 6

PROMPT_MESSAGE = "Please provide a document and a question."
NO_MATCH_MESSAGE = "No relevant passage found."


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def normalize(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()

def split_sentences(clean: str) -> List[str]:
    return re.split(r'(?<=[.!?])\s+', clean)

def _has(text: str, pattern: str) -> bool:
    return re.search(pattern, text, re.IGNORECASE) is not None


# ─────────────────────────────────────────────────────────────────────────────
# Risk scoring
# ─────────────────────────────────────────────────────────────────────────────

def compute_risk_score(clean: str) -> float:
    """
    Weighted keyword frequency capped at 100, plus up to 20 points for
    documents longer than 800 characters (full 20 at 2800+).
    """
    base_risk = min(100, sum(
        len(pat.findall(clean)) * weight for _, weight, pat in _KEYWORD_PATTERNS
    ))
    length_adj = min(20.0, max(0.0, (len(clean) - 800) / 2000) * 20)
    return min(100.0, base_risk + length_adj)

def risk_band(score: float) -> RiskBand:
    if score < MEDIUM_RISK_THRESHOLD:
        return RiskBand("Low", "meter-low", "badge-low")
    if score < HIGH_RISK_THRESHOLD:
        return RiskBand("Medium", "meter-medium", "badge-medium")
    return RiskBand("High", "meter-high", "badge-high")

def display_score(score: float) -> int:
    """Whole-number score for badges and reports, halves rounded up."""
    return math.floor(score + 0.5)

def meter_position(score: float) -> float:
    """Pointer offset (percent) on the risk meter."""
    return min(100.0, max(0.0, score))


# ─────────────────────────────────────────────────────────────────────────────
# Sentence ranking
# ─────────────────────────────────────────────────────────────────────────────

def score_sentence(sentence: str) -> int:
    lower = sentence.lower()
    score = sum(weight for kw, weight in RISK_KEYWORDS if kw in lower)
    return score + min(10, math.ceil(len(sentence) / 120))

def build_summary(sentences: List[str], clean: str) -> str:
    # sorted() is stable, so equal scores keep document order
    ranked = sorted(sentences, key=score_sentence, reverse=True)
    k = max(SUMMARY_MIN_SENTENCES,
            min(SUMMARY_MAX_SENTENCES, math.ceil(len(sentences) * 0.25)))
    summary = " ".join(s.strip() for s in ranked[:k])
    return summary or clean[:SUMMARY_FALLBACK_CHARS]


# ─────────────────────────────────────────────────────────────────────────────
# Risks, advice, highlights
# ─────────────────────────────────────────────────────────────────────────────

RISK_RULES = [
    (r'auto-?renew',                   "Auto-renewal present. Calendar cancellation dates."),
    (r'indemnif',                      "Indemnification may shift liability to you."),
    (r'termination',                   "Termination terms could be strict, so check notice periods."),
    (r'jurisdiction|governing law',    "Jurisdiction may be unfavorable."),
]

HIGH_RISK_MESSAGE = "High overall risk. Seek legal review before signing."

ADVICE_RULES = [
    (r'indemnif',                      "Limit indemnification to direct damages and mutual obligations."),
    (r'liability',                     "Cap liability to fees paid in the last 12 months and exclude indirect damages."),
    (r'termination',                   "Add convenience termination with 30-day notice if possible."),
    (r'confidential',                  "Ensure confidentiality survives for at least 2 years."),
    (r'auto-?renew',                   "Replace auto-renewal with explicit renewal or add opt-out reminders."),
    (r'jurisdiction|governing law',    "Choose a neutral jurisdiction or your home state."),
]

FALLBACK_ADVICE = "No obvious red flags detected. Still consider a legal review for important agreements."

def build_risks(clean: str, risk_score: float) -> List[str]:
    risks = []
    if risk_score >= HIGH_RISK_THRESHOLD:
        risks.append(HIGH_RISK_MESSAGE)
    risks.extend(message for pattern, message in RISK_RULES if _has(clean, pattern))
    return risks

def build_advice(clean: str) -> List[str]:
    tips = [tip for pattern, tip in ADVICE_RULES if _has(clean, pattern)]
    return tips or [FALLBACK_ADVICE]

def build_highlights(clean: str) -> List[str]:
    lower = clean.lower()
    return [kw for kw, _ in RISK_KEYWORDS if kw in lower]


# ─────────────────────────────────────────────────────────────────────────────
# Question answering
# ─────────────────────────────────────────────────────────────────────────────

def _question_tokens(question: str) -> List[str]:
    # word characters are ASCII letters, digits and underscore only
    tokens = re.split(r'\W+', question.lower(), flags=re.ASCII)
    return [w for w in tokens if w][:MAX_QUESTION_TOKENS]

def answer_query(text: str, question: str) -> str:
    """
    Return the sentence that best matches the question: one point per
    question token found in the sentence, plus a small informativeness
    bonus to break ties.
    """
    clean = normalize(text)
    if not clean or not question.strip():
        return PROMPT_MESSAGE

    words = _question_tokens(question)
    sentences = split_sentences(clean)

    def relevance(sentence: str) -> float:
        lower = sentence.lower()
        return sum(1 for w in words if w in lower) + score_sentence(sentence) / 50

    ranked = sorted(sentences, key=relevance, reverse=True)
    top = ranked[0] if ranked else (sentences[0] if sentences else "")
    return top or NO_MATCH_MESSAGE


# ─────────────────────────────────────────────────────────────────────────────
# Main entry point
# ─────────────────────────────────────────────────────────────────────────────

def analyze(text: str) -> AnalysisResult:
    clean = normalize(text)
    sentences = split_sentences(clean)
    risk_score = compute_risk_score(clean)

    result = AnalysisResult(
        summary=build_summary(sentences, clean),
        risk_score=risk_score,
        risks=build_risks(clean, risk_score),
        advice=build_advice(clean),
        highlights=build_highlights(clean),
    )
    logger.debug("Analyzed %d chars, %d sentences, risk %.1f",
                 len(clean), len(sentences), risk_score)
    return result
