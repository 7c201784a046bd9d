"""
cinescript.models - Project, Scene and Shot data model.

Composition attributes and shot status are closed string enums whose values
are the display labels stored on disk. Field aliases keep the camelCase keys
of the stored JSON, so saved shot lists load back unchanged.
"""

from __future__ import annotations

import time
import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ShotSize(str, Enum):
    ELS = "Extreme Long Shot"
    LS = "Long Shot"
    MLS = "Medium Long Shot"
    MS = "Medium Shot"
    MCU = "Medium Close-Up"
    CU = "Close-Up"
    ECU = "Extreme Close-Up"


class CameraAngle(str, Enum):
    OVERHEAD = "Bird's Eye / Overhead"
    HIGH = "High Angle"
    EYE_LEVEL = "Eye Level"
    LOW = "Low Angle"
    WORMS_EYE = "Worm's Eye"
    DUTCH = "Dutch Angle"


class CameraMovement(str, Enum):
    STATIC = "Static"
    PAN = "Pan"
    TILT = "Tilt"
    DOLLY_IN = "Dolly In"
    DOLLY_OUT = "Dolly Out"
    ZOOM_IN = "Zoom In"
    ZOOM_OUT = "Zoom Out"
    TRACKING = "Tracking"
    CRANE = "Crane"
    STEADICAM = "Steadicam"
    HANDHELD = "Handheld"


class ShotFraming(str, Enum):
    SINGLE = "Single / Standard"
    TWO_SHOT = "Two-Shot"
    OTS = "Over the Shoulder"
    POV = "Point of View"
    INSERT = "Insert Shot"


class FocusType(str, Enum):
    STANDARD = "Standard"
    DEEP = "Deep Focus"
    RACK = "Rack Focus"
    SHALLOW = "Shallow Focus"


class ShotStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"
    ON_HOLD = "On Hold"


class TimeOfDay(str, Enum):
    INT = "INT"
    EXT = "EXT"


class Lighting(str, Enum):
    DAY = "DAY"
    NIGHT = "NIGHT"
    MAGIC_HOUR = "MAGIC HOUR"
    ARTIFICIAL = "ARTIFICIAL"


COMPOSITION_FIELDS: dict[str, type[Enum]] = {
    "size": ShotSize,
    "angle": CameraAngle,
    "movement": CameraMovement,
    "framing": ShotFraming,
    "focus": FocusType,
}


def parse_enum(enum_cls: type[Enum], value: object) -> Enum | None:
    """Map a raw value onto a closed enum, or None if it is outside the domain.

    Accepts either the stored label ("Close-Up") or the member name ("CU").
    """
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        pass
    return enum_cls.__members__.get(value.strip().upper().replace(" ", "_"))


def new_id(prefix: str) -> str:
    """Generate a collision-resistant identifier, e.g. ``shot_9f1c...``."""
    return f"{prefix}_{uuid.uuid4().hex}"


def now_ms() -> int:
    return int(time.time() * 1000)


class _Entity(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
    )


class Shot(_Entity):
    """A single camera setup within a scene."""

    id: str = Field(default_factory=lambda: new_id("shot"))
    number: int = Field(default=1, ge=1)

    size: ShotSize = ShotSize.MS
    angle: CameraAngle = CameraAngle.EYE_LEVEL
    movement: CameraMovement = CameraMovement.STATIC
    framing: ShotFraming = ShotFraming.SINGLE
    focus: FocusType = FocusType.STANDARD

    description: str = ""
    notes: str = ""
    image_url: str | None = Field(default=None, alias="imageUrl")

    lens: str = ""
    camera: str = ""
    aperture: str = ""
    fps: int = 24
    resolution: str = "1080p"
    color_temp: str = Field(default="", alias="colorTemp")

    timecode: str | None = None
    takes: int | None = Field(default=None, ge=0)
    status: ShotStatus | None = None
    ad_notes: str | None = Field(default=None, alias="adNotes")


class Scene(_Entity):
    """A located, time-tagged group of shots."""

    id: str = Field(default_factory=lambda: new_id("scene"))
    number: str = "1A"
    title: str = "NEW SCENE"
    location: str = "TBD"
    time_of_day: TimeOfDay = Field(default=TimeOfDay.EXT, alias="timeOfDay")
    lighting: Lighting = Lighting.DAY
    shots: list[Shot] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.number} - {self.title}"


class Project(_Entity):
    """Top-level production with its ordered scenes."""

    id: str = Field(default_factory=lambda: new_id("proj"))
    name: str = "UNTITLED PROJECT"
    description: str | None = ""
    director: str = "TBD"
    dop: str = "TBD"
    created_at: int = Field(default_factory=now_ms, alias="createdAt")
    scenes: list[Scene] = Field(default_factory=list)

    def to_storage(self) -> dict:
        """Serialize with the camelCase keys used on disk."""
        return self.model_dump(mode="json", by_alias=True)


class ShotSuggestion(BaseModel):
    """Partial shot details proposed by the AI assistant.

    Only fields that passed validation are set; None means "keep the
    existing value".
    """

    lens: str | None = None
    camera: str | None = None
    aperture: str | None = None
    lighting: str | None = None
    size: ShotSize | None = None
    angle: CameraAngle | None = None
    movement: CameraMovement | None = None
    framing: ShotFraming | None = None
    focus: FocusType | None = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)
