"""Avatar models"""
from enum import Enum
from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field

MAX_ATTRIBUTE_VALUE = 999


class AttributeType(str, Enum):
    """Avatar attributes raised by level-ups and completed work"""
    STRENGTH = "strength"
    WISDOM = "wisdom"
    INTELLIGENCE = "intelligence"


class Avatar(BaseModel):
    """
    A user's avatar

    `current_xp` is the XP earned inside the current level, not the lifetime
    total. Snapshots are immutable; progression returns a replacement record.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    name: str = Field(default="Adventurer", min_length=1, max_length=50)
    level: int = Field(default=1, ge=1, le=100)
    current_xp: int = Field(default=0, ge=0)
    strength: int = Field(default=0, ge=0, le=MAX_ATTRIBUTE_VALUE)
    wisdom: int = Field(default=0, ge=0, le=MAX_ATTRIBUTE_VALUE)
    intelligence: int = Field(default=0, ge=0, le=MAX_ATTRIBUTE_VALUE)
    unlocked_items: FrozenSet[str] = Field(default_factory=frozenset)

    @classmethod
    def create(cls, id: str, user_id: str, name: str = "Adventurer") -> "Avatar":
        """New avatar at level 1 with no XP, attributes or items"""
        return cls(id=id, user_id=user_id, name=name)

    def get_attribute(self, attribute: AttributeType) -> int:
        return getattr(self, attribute.value)

    def has_unlocked_item(self, item_id: str) -> bool:
        return item_id in self.unlocked_items

    @property
    def total_attributes(self) -> int:
        return self.strength + self.wisdom + self.intelligence
