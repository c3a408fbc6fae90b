from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Participant(BaseModel):
    """A registered gift exchange participant."""

    id: int
    first_name: str = ""
    last_name: str = ""
    username: Optional[str] = None
    wish_list: Optional[str] = None
    recipient_id: Optional[int] = None  # who this participant gives a gift to
    santa_id: Optional[int] = None  # who gives a gift to this participant
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        parts = [self.first_name, self.last_name]
        if self.username:
            parts.append(f"@{self.username}")
        return " ".join(part for part in parts if part)

    @property
    def has_wish_list(self) -> bool:
        return bool(self.wish_list)
