from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from .config import OPTION_CAPACITY, FEW_SLOTS_AT


class OptionId(str, Enum):
    A = "optionA"
    B = "optionB"
    C = "optionC"


class Tier(str, Enum):
    AVAILABLE = "available"
    FEW_SLOTS = "few_slots"
    FULL = "full"


class RegistryConfig(BaseModel):
    """
    Capacity shared by every option, and the count at which an option
    starts being reported as having few slots left.
    """
    capacity: int = OPTION_CAPACITY
    few_slots_at: int = FEW_SLOTS_AT

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.capacity < 1:
            raise ValueError("capacity must be at least 1")
        if not 0 <= self.few_slots_at <= self.capacity:
            raise ValueError("few_slots_at must lie between 0 and capacity")
        return self


class SessionIn(BaseModel):
    name: str = Field(..., examples=["Zoe"])


class SelectionIn(BaseModel):
    option_id: str = Field(..., examples=["optionA"])


class SessionResult(BaseModel):
    participant: str
    already_selected: bool
    option_id: Optional[OptionId] = None
    option_name: Optional[str] = None


class SelectionResult(BaseModel):
    participant: str
    option_id: OptionId
    option_name: str
    count: int


class OptionStatus(BaseModel):
    option_id: OptionId
    name: str
    count: int
    capacity: int
    tier: Tier


class OptionSummary(BaseModel):
    option_id: OptionId
    count: int
    percentage: int


class Summary(BaseModel):
    total_selections: int
    available_slots: int
    distinct_participants: int
    per_option: List[OptionSummary]
    all_full: bool


class OptionCount(BaseModel):
    id: OptionId
    count: int = Field(..., ge=0)


class SelectionRecord(BaseModel):
    participant: str
    option_id: OptionId


class RegistrySnapshot(BaseModel):
    """
    Full registry state, in recorded selection order:
    options[i] = {id, count}, selections[j] = {participant, option_id}
    """
    options: List[OptionCount]
    selections: List[SelectionRecord]
