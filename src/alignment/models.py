"""Data models for scene alignment.

Records here are assumed fully populated; raw dicts from upstream are turned
into these by alignment.normalize before scoring or clustering sees them.
"""

from typing import List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

ShotType = Literal["CU", "MS", "WS"]
Angle = Literal["low", "eye", "high"]
NegativeSpace = Literal["left", "right", "center"]
Balance = Literal["symmetrical", "asymmetrical"]
Dominance = Literal["weak", "moderate", "strong"]
TemperatureCategory = Literal["warm", "cold"]
Contrast = Literal["low", "medium", "high"]

# Neutral daylight, used wherever a mood has no usable temperature
NEUTRAL_KELVIN = 5500.0
WARM_KELVIN = 6500.0
COLD_KELVIN = 4500.0


class Composition(BaseModel):
    """Framing of a scene request or an analyzed image."""

    model_config = ConfigDict(frozen=True)

    negative_space: NegativeSpace = "center"
    shot_type: ShotType = "MS"  # Close-Up, Medium Shot, Wide Shot
    angle: Angle = "eye"
    balance: Balance = "asymmetrical"
    subject_dominance: Dominance = "moderate"


class MoodDna(BaseModel):
    """Colour temperature / vibe / rhythm fingerprint of an image."""

    model_config = ConfigDict(frozen=True)

    temp: Union[float, TemperatureCategory] = NEUTRAL_KELVIN  # Kelvin-like value or category
    primary_color: str = "neutral"  # hex, e.g. "#E8D4C0"
    vibe: str = "neutral"
    emotional_intensity: str = "medium"
    rhythm: str = "calm"

    def temperature_category(self) -> TemperatureCategory:
        """Categorical temperature; numeric temps at or above daylight count as warm."""
        if isinstance(self.temp, str):
            return self.temp
        return "warm" if self.temp >= NEUTRAL_KELVIN else "cold"

    def kelvin(self) -> float:
        """Numeric temperature used for clustering distance."""
        if isinstance(self.temp, str):
            return WARM_KELVIN if self.temp == "warm" else COLD_KELVIN
        return float(self.temp)


class EmotionalLayer(BaseModel):
    model_config = ConfigDict(frozen=True)

    intent_words: List[str] = []  # e.g. ["overwhelmed", "suffocation"]
    vibe: str = ""


class SpatialStrategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy_words: List[str] = []  # e.g. ["cluttered frame"]
    shot_type: Optional[ShotType] = None
    balance: Optional[Balance] = None


class SubjectTreatment(BaseModel):
    model_config = ConfigDict(frozen=True)

    treatment_words: List[str] = []  # e.g. ["hidden face", "vulnerable posture"]
    identity: str = ""
    dominance: str = ""


class ColorMapping(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature_words: List[str] = []  # e.g. ["golden hour"]
    temperature: TemperatureCategory = "warm"
    contrast: Contrast = "medium"


class VisualIntent(BaseModel):
    """Optional four-layer elaboration of a scene."""

    model_config = ConfigDict(frozen=True)

    emotional_layer: Optional[EmotionalLayer] = None
    spatial_strategy: Optional[SpatialStrategy] = None
    subject_treatment: Optional[SubjectTreatment] = None
    color_mapping: Optional[ColorMapping] = None

    def is_empty(self) -> bool:
        return not any((
            self.emotional_layer,
            self.spatial_strategy,
            self.subject_treatment,
            self.color_mapping,
        ))


class Scene(BaseModel):
    """One narrative beat that needs a matching image."""

    model_config = ConfigDict(frozen=True)

    intent: str
    required_impact: int = Field(ge=1, le=10)
    preferred_composition: Composition = Composition()
    visual_intent: Optional[VisualIntent] = None

    @field_validator('intent')
    @classmethod
    def validate_intent_not_empty(cls, v: str) -> str:
        """Ensure intent is not empty."""
        if not v or not v.strip():
            raise ValueError("Scene intent cannot be empty")
        return v


class CandidateMetadata(BaseModel):
    """Analysis metadata attached to an indexed image."""

    model_config = ConfigDict(frozen=True)

    impact_score: float = Field(default=5, ge=1, le=10)
    visual_weight: float = Field(default=5, ge=1, le=10)
    composition: Composition = Composition()
    mood_dna: Optional[MoodDna] = None
    metaphorical_tags: List[str] = []


class Candidate(BaseModel):
    """Image returned by the candidate store, with its query similarity."""

    model_config = ConfigDict(frozen=True)

    id: str
    external_id: str = ""  # e.g. Pexels id
    url: str = ""
    photographer: Optional[str] = None
    similarity: float = 0.0
    metadata: CandidateMetadata = CandidateMetadata()


class ImageMatch(BaseModel):
    """Scored candidate for one scene."""

    model_config = ConfigDict(frozen=True)

    image_id: str
    external_id: str
    url: str
    match_score: float = Field(ge=0.0, le=1.0)
    vector_similarity: float
    impact_relevance: float
    composition_match: float
    mood_consistency_score: float
    intent_depth_score: Optional[float] = None  # None when the scene has no visual intent
    metadata: CandidateMetadata

    @property
    def mood_dna(self) -> Optional[MoodDna]:
        return self.metadata.mood_dna


class RankingWeights(BaseModel):
    """Weights of the composite match score."""

    model_config = ConfigDict(frozen=True)

    vector_similarity: float = 0.5
    impact_relevance: float = 0.3
    composition_match: float = 0.15
    mood_consistency: float = 0.05
