from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union


class _AliasedModel(BaseModel):
    # METAR wire keys are camelCase (and ICAO is upper case)
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Timestamp(_AliasedModel):
    day_of_month: str = Field(alias="dayOfMonth")
    hours: str
    mins: str
    timezone: str = "Z"


class Wind(_AliasedModel):
    direction: str  # 3-digit true heading or "VRB"
    speed: str
    gusting_speed: Optional[str] = Field(default=None, alias="gustingSpeed")
    speed_units: str = Field(alias="speedUnits")


# Anything a single parse step can produce
ParsedField = Union[Timestamp, Wind, str]


class ParsedMetar(_AliasedModel):
    report_type: Optional[str] = Field(default=None, alias="reportType")
    icao: Optional[str] = Field(default=None, alias="ICAO")
    timestamp: Optional[Timestamp] = None
    modifier: Optional[str] = None
    wind: Optional[Wind] = None


class Diagnostic(BaseModel):
    field: str
    token: Optional[str] = None
    message: str


class DecodedMetar(_AliasedModel):
    raw: str = Field(alias="METAR")
    parsed: ParsedMetar = Field(alias="parsedMETAR")
    diagnostics: List[Diagnostic] = []
    unparsed: List[str] = []


class DecodeRequest(BaseModel):
    metar: str
