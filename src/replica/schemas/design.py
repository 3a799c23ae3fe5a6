from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FontTokens(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    secondary: str


class ColorTokens(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    secondary: str
    accent: str
    background: str
    text: str


class SpacingTokens(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: float
    scale: list[float]


class TimingTokens(BaseModel):
    model_config = ConfigDict(frozen=True)

    avg_duration_per_word: float  # seconds
    min_duration: float  # seconds


class DesignSystem(BaseModel):
    """Reusable design tokens applied to every re-rendered overlay."""

    model_config = ConfigDict(frozen=True)

    fonts: FontTokens
    colors: ColorTokens
    spacing: SpacingTokens
    timing: TimingTokens


class PartialFontTokens(BaseModel):
    primary: str | None = None
    secondary: str | None = None


class PartialColorTokens(BaseModel):
    primary: str | None = None
    secondary: str | None = None
    accent: str | None = None
    background: str | None = None
    text: str | None = None


class PartialSpacingTokens(BaseModel):
    base: float | None = None
    scale: list[float] | None = None


class PartialTimingTokens(BaseModel):
    avg_duration_per_word: float | None = Field(
        default=None,
        validation_alias=AliasChoices("avg_duration_per_word", "avgDurationPerWord"),
    )
    min_duration: float | None = Field(
        default=None,
        validation_alias=AliasChoices("min_duration", "minDuration"),
    )


class PartialDesignSystem(BaseModel):
    """What the design-system collaborator returns; any field may be missing."""

    fonts: PartialFontTokens = Field(default_factory=PartialFontTokens)
    colors: PartialColorTokens = Field(default_factory=PartialColorTokens)
    spacing: PartialSpacingTokens = Field(default_factory=PartialSpacingTokens)
    timing: PartialTimingTokens = Field(default_factory=PartialTimingTokens)
