"""
GET /weekly-summary → WeeklySummaryResponse
"""
from pydantic import BaseModel, Field


class WeeklySummaryResponse(BaseModel):
    week_start: str = Field(description="Monday 00:00 of the summarised week.")
    totals: dict[str, int] = Field(
        description="Sum of counts per user id. Users without entries are omitted.",
        examples=[{"tekta": 5, "yihun": 5}],
    )
    entry_count: int
