"""
API request and response schemas.
What it defines:
- Input payloads
- Validation rules

And, the main purpose:
Ensure structured communication between client and server.
"""


from pydantic import BaseModel, ConfigDict, Field

class RatingCheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app_names: list[str] = Field(..., alias="appNames", min_length=1, description="Free-text app names to look up")

class ScoreRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rating: float = Field(..., ge=0.0, le=5.0)
    ratings_count: int = Field(..., alias="ratingsCount", ge=0)
    installs: str = ""
