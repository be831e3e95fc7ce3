"""
Genre Models

Shared by release details and watchlist items.
"""

from pydantic import BaseModel, Field, ConfigDict


class Genre(BaseModel):
    """Genre record."""
    id: int
    source_id: int = Field(..., alias="sourceId")
    name: str

    model_config = ConfigDict(populate_by_name=True)


def genre_from_row(row: dict) -> Genre:
    return Genre(id=row["id"], source_id=row["source_id"], name=row["name"])
