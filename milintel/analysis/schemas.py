"""Expected shape of the model's JSON reply for each tier.

Only ``threatLevel`` is mandatory and bounded; everything else is accepted in
whatever shape the model chose, so a paid run is never thrown away over a
cosmetic difference. Unknown keys are kept.
"""

from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Region(BaseModel):
    model_config = ConfigDict(extra="allow")

    # models alternate between "name" and "region" for the label
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "region"))
    score: Any = None
    reasoning: Any = None


class _Assessment(BaseModel):
    model_config = ConfigDict(extra="allow")

    threatLevel: float = Field(ge=0, le=100)
    regions: Union[List[Union[Region, str]], Any] = Field(default_factory=list, union_mode="left_to_right")
    indicators: Any = Field(default_factory=list)


class MiniAssessment(_Assessment):
    probability: Any = None
    summary: Any = ""


class DeepAssessment(_Assessment):
    confidenceInterval: Any = None
    probabilities: Any = Field(default_factory=dict)
    historicalContext: Any = None
    scenarios: Any = Field(default_factory=list)
    executiveSummary: Any = None
    monitoringPriorities: Any = Field(default_factory=list)
