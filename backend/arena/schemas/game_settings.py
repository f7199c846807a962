"""Game settings schemas"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional

from arena.schemas.user import Avatar


class GameSettingsUpdate(BaseModel):
    """Game settings update - at least one field"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    player_name: Optional[str] = Field(None, alias="playerName", min_length=1, max_length=100)
    game_time: Optional[int] = Field(None, alias="gameTime", ge=5)
    won: Optional[bool] = None
    lost: Optional[bool] = None
    commentary: Optional[str] = None
    avatar: Optional[Avatar] = None

    @model_validator(mode="after")
    def not_empty(self):
        if not self.model_fields_set:
            raise ValueError("at least one setting is required")
        return self
