import math
import random
from typing import List, Optional

from resume_analyzer.models import AnalysisResult, ScoreBreakdown, SectionFeedback

KEYWORDS = [
    "javascript",
    "react",
    "node.js",
    "python",
    "sql",
    "aws",
    "docker",
    "git",
]

KEYWORD_WEIGHT = 40
# Placeholder until a real format-analysis pass exists.
FORMAT_SCORE = 25
CONTENT_SCORE_MIN = 15
CONTENT_SCORE_SPAN = 20
LONG_TEXT_THRESHOLD = 500

STRENGTHS = [
    "Professional format",
    "Clear contact information",
    "Relevant experience highlighted",
]

IMPROVEMENTS = [
    "Add more technical keywords",
    "Include quantifiable achievements",
    "Optimize for ATS systems",
]

SECTION_FEEDBACK = {
    "contact": (90, "Complete and professional"),
    "experience": (85, "Good detail and relevance"),
    "skills": (70, "Could include more technical skills"),
    "education": (80, "Well formatted"),
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_band(score: int) -> str:
    """Colour band used when displaying a score."""
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    return "needs-work"


def score_grade(score: int) -> str:
    if score >= 90:
        return "A+"
    if score >= 80:
        return "A"
    if score >= 70:
        return "B"
    if score >= 60:
        return "C"
    return "D"


def score_verdict(score: int) -> str:
    """One-line summary shown under the grade."""
    if score >= 80:
        return "Excellent! Your resume is well-optimized and ready to impress employers."
    if score >= 60:
        return "Good foundation! A few improvements will make your resume even stronger."
    return "There's room for improvement. Follow our recommendations to boost your score."


class ScoringService:
    """
    Mock ATS scoring.

    Only the keyword and length components look at the text. The content
    component is random; pass a seeded ``random.Random`` for reproducible
    scores.
    """

    def __init__(self, rng: Optional[random.Random] = None, keywords: Optional[List[str]] = None):
        self.rng = rng or random.Random()
        self.keywords = list(keywords) if keywords is not None else list(KEYWORDS)

    def match_keywords(self, text: str) -> List[str]:
        content = (text or "").lower()
        return [keyword for keyword in self.keywords if keyword in content]

    def keyword_score(self, matched: List[str]) -> float:
        if not self.keywords:
            return 0.0
        return KEYWORD_WEIGHT * len(matched) / len(self.keywords)

    def content_score(self) -> float:
        return self.rng.random() * CONTENT_SCORE_SPAN + CONTENT_SCORE_MIN

    @staticmethod
    def length_score(text: str) -> int:
        return 15 if len((text or "").lower()) > LONG_TEXT_THRESHOLD else 10

    def analyze(self, text: str, file_name: str) -> AnalysisResult:
        """
        Score resume text.

        ``file_name`` labels the result only, it never affects the score.
        Never raises: empty or missing text still yields a valid result.
        """
        if not isinstance(text, str):
            text = ""

        matched = self.match_keywords(text)
        breakdown = ScoreBreakdown(
            keyword_score=self.keyword_score(matched),
            format_score=FORMAT_SCORE,
            content_score=self.content_score(),
            length_score=self.length_score(text),
        )
        raw = (
            breakdown.keyword_score
            + breakdown.format_score
            + breakdown.content_score
            + breakdown.length_score
        )
        total = max(0, min(100, round_half_up(raw)))

        return AnalysisResult(
            score=total,
            keywords_found=matched,
            strengths=list(STRENGTHS),
            improvements=list(IMPROVEMENTS),
            section_feedback={
                name: SectionFeedback(score=score, feedback=feedback)
                for name, (score, feedback) in SECTION_FEEDBACK.items()
            },
            breakdown=breakdown,
        )
