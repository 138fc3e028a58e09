"""Pydantic schemas for Cookbook.

Models for:
- Ingest input files (ingredients, preparations, units, recipes)
- The nested recipe documents stored in recipe.steps / recipe.ingredients
- API responses
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    TypeAdapter,
    field_validator,
)

from .services.durations import format_duration, parse_duration


def _to_timedelta(value):
    if isinstance(value, timedelta):
        return value
    return parse_duration(value)


# ISO-8601 text on the wire and in the database, timedelta in Python
Duration = Annotated[
    timedelta,
    BeforeValidator(_to_timedelta),
    PlainSerializer(format_duration, return_type=str),
]


def _none_as_empty(value):
    return [] if value is None else value


# --- Reference data ---

class IngredientRef(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class ReferencePreparation(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class ReferenceUnit(BaseModel):
    abbreviation: str
    id: str
    name: str


class IngredientAllowedUnit(BaseModel):
    id: str
    name: str
    abbreviation: Optional[str] = None
    dimension: Optional[str] = None


# --- Ingest input files ---

class IngestIngredientUnit(BaseModel):
    id: str
    name: str


class IngestIngredient(BaseModel):
    id: str
    name: str
    allowed_units: list[IngestIngredientUnit]


class IngestMeasurementSystem(BaseModel):
    id: str
    name: str


class IngestUnit(BaseModel):
    id: str
    name: str
    abbreviation: Optional[str] = None
    dimension: Optional[str] = None
    measurement_system: Optional[IngestMeasurementSystem] = None


# --- Step capability settings ---

class ReferenceSettingId(str, Enum):
    KEEP_WARM = "kitchenos:Kenwood:KeepWarmSetting"
    TEMPERATURE = "kitchenos:Kenwood:TemperatureSetting"
    SPEED = "kitchenos:Kenwood:SpeedSetting"
    TIME = "kitchenos:Kenwood:TimeSetting"


# Older exports name the same settings differently
SETTING_ID_ALIASES = {
    "cckg:InternalTemperatureSetting": ReferenceSettingId.TEMPERATURE,
    "cckg:TemperatureSetting": ReferenceSettingId.TEMPERATURE,
    "cckg:TimeSetting": ReferenceSettingId.TIME,
}


class ReferenceSetting(BaseModel):
    id: ReferenceSettingId
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def _resolve_alias(cls, value):
        if isinstance(value, str):
            return SETTING_ID_ALIASES.get(value, value)
        return value


class ReferenceValue(BaseModel):
    id: str
    name: str


class NumericSettingValue(BaseModel):
    type: Literal["numeric"] = "numeric"
    reference_unit: Optional[ReferenceUnit] = None
    text: str
    value: float


class BooleanSettingValue(BaseModel):
    type: Literal["boolean"] = "boolean"
    text: str
    value: bool


class NominalSettingValue(BaseModel):
    type: Literal["nominal"] = "nominal"
    text: str
    reference_value: ReferenceValue


SettingValue = Annotated[
    Union[NumericSettingValue, BooleanSettingValue, NominalSettingValue],
    Field(discriminator="type"),
]


class CapabilitySetting(BaseModel):
    reference_setting: ReferenceSetting
    value: SettingValue


class CapabilityPhase(BaseModel):
    can_follow_phases: list[str]
    id: str
    name: str


class ReferenceCapability(BaseModel):
    id: str
    name: str


class StepCapability(BaseModel):
    phase: CapabilityPhase
    reference_capability: ReferenceCapability
    settings: list[CapabilitySetting] = []

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_default(cls, value):
        return _none_as_empty(value)


# --- Recipe documents ---

class Quantity(BaseModel):
    amount: Optional[float] = None
    reference_unit: ReferenceUnit
    text: str


class StepIngredient(BaseModel):
    ingredient_idx: int = Field(..., ge=0, le=255)
    quantity: Quantity


class RecipeStep(BaseModel):
    capability: Optional[StepCapability] = None
    ingredients: list[StepIngredient] = []
    source_text: Optional[str] = None
    text: str

    @field_validator("ingredients", mode="before")
    @classmethod
    def _ingredients_default(cls, value):
        return _none_as_empty(value)


class RecipeIngredient(BaseModel):
    quantity: Quantity
    reference_ingredient: IngredientRef
    reference_preparations: list[ReferencePreparation] = []
    source_text: Optional[str] = None

    @field_validator("reference_preparations", mode="before")
    @classmethod
    def _preparations_default(cls, value):
        return _none_as_empty(value)


class Author(BaseModel):
    image: str
    name: str
    url: str


class ForkedIntoOtherLocale(BaseModel):
    id: str
    locale: str


class ReferenceTag(BaseModel):
    category: str
    id: str
    name: str


class RecipeDocument(BaseModel):
    """A full recipe as exchanged with the upstream service and the UI."""
    id: str
    exposed_id: Optional[str] = None
    name: str
    description: str
    prep_time: Optional[Duration] = None
    cook_time: Optional[Duration] = None
    total_time: Duration
    author: Author
    serves: int = Field(..., ge=0, le=255)
    etag: str
    organization_id: str
    locale: str
    created_at: datetime
    modified_at: datetime
    # Required for imports; custom recipes get a value when saved
    published_at: Optional[datetime] = None
    created_by_id: str
    steps: list[RecipeStep]
    ingredients: list[RecipeIngredient]

    forked_into_other_locales: list[ForkedIntoOtherLocale] = []
    reference_tags: list[ReferenceTag] = []
    state: str = "published"
    visibility: str = "all-users"
    referenced: Optional[bool] = None
    requester_role: Optional[str] = None

    @field_validator("forked_into_other_locales", "reference_tags", mode="before")
    @classmethod
    def _lists_default(cls, value):
        return _none_as_empty(value)


StepsDocument = TypeAdapter(list[RecipeStep])
IngredientsDocument = TypeAdapter(list[RecipeIngredient])


# --- API responses ---

class RecipeItem(BaseModel):
    id: str
    name: str
    author_name: str
    total_time: Duration


class IngestSummary(BaseModel):
    ingredients: int = 0
    preparations: int = 0
    units: int = 0
    ingredient_units: int = 0
    authors: int = 0
    recipes: int = 0
