"""
App rating scorer.
What it does:
- Scores an app 0-100 from its rating, ratings count and install count
- Buckets the score into a category
- Explains each component with a short insight

And, the main purpose:
Quick, stateless quality signal for Play Store metrics.
"""


import re
from typing import List, Literal

from pydantic import BaseModel, Field

Category = Literal["excellent", "good", "average", "poor"]


class AppScore(BaseModel):
    score: int = Field(..., ge=0, le=100)
    category: Category
    insights: List[str] = []


def parse_installs(installs: str) -> int:
    """'10,000,000+' -> 10000000. Anything without digits is 0."""
    match = re.search(r"[\d,]+", installs or "")
    if not match:
        return 0
    digits = match.group(0).replace(",", "")
    return int(digits) if digits else 0


def _rating_component(rating: float) -> tuple[int, str]:
    if rating >= 4.5:
        return 40, "Excellent user rating"
    if rating >= 4.0:
        return 30, "Good user rating"
    if rating >= 3.5:
        return 20, "Average user rating"
    return 10, "Below average rating"


def _ratings_count_component(ratings_count: int) -> tuple[int, str]:
    if ratings_count >= 100_000:
        return 30, "Large user base with extensive feedback"
    if ratings_count >= 10_000:
        return 20, "Good amount of user feedback"
    if ratings_count >= 1_000:
        return 10, "Moderate user feedback"
    return 5, "Limited user feedback"


def _installs_component(installs: str) -> tuple[int, str]:
    n = parse_installs(installs)
    if n >= 10_000_000:
        return 30, "Widely installed app"
    if n >= 1_000_000:
        return 20, "Popular app"
    if n >= 100_000:
        return 10, "Growing user base"
    return 5, "Emerging app"


def categorize(score: int) -> Category:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "average"
    return "poor"


def score_app(rating: float, ratings_count: int, installs: str) -> AppScore:
    components = [
        _rating_component(rating),
        _ratings_count_component(ratings_count),
        _installs_component(installs),
    ]
    score = sum(points for points, _ in components)
    return AppScore(
        score=score,
        category=categorize(score),
        insights=[insight for _, insight in components],
    )
