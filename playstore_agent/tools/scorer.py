from playstore_agent.core.scoring import score_app
from playstore_agent.tools.registry import register


"""
Rating scorer tool.

What it does:
- Exposes the 0-100 app score to the agent
Main purpose:
Let the agent judge an app's metrics the same way reports do.
"""

@register(
    "score-app-rating",
    description="Score an app 0-100 from its Play Store rating, ratings count and installs",
    parameters={
        "type": "object",
        "properties": {
            "rating": {"type": "number", "description": "Average rating, 0.0 to 5.0"},
            "ratings_count": {"type": "integer", "description": "Number of ratings"},
            "installs": {"type": "string", "description": "Install display string, e.g. 10,000,000+"},
        },
        "required": ["rating", "ratings_count", "installs"],
    },
)
async def score_app_rating(rating: float, ratings_count: int, installs: str = "") -> dict:
    return score_app(float(rating), int(ratings_count), str(installs)).model_dump()
