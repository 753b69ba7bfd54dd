from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stampflow.core.config import get_settings
from stampflow.services.coordinates import clamp_percent
from stampflow.utils.colors import normalize_color


def _default(name: str) -> Any:
    return getattr(get_settings(), name)


class StampSpec(BaseModel):
    """وصف كامل لعملية ختم واحدة. قيمة ثابتة تُستبدل بالكامل عند كل تعديل."""

    model_config = ConfigDict(frozen=True)

    text: str = Field("", description="نص الختم (قد يكون فارغًا).")
    x_percent: float = Field(default_factory=lambda: _default("default_x_percent"))
    y_percent: float = Field(default_factory=lambda: _default("default_y_percent"))
    font_size: float = Field(default_factory=lambda: _default("default_font_size"))
    color: str = Field(default_factory=lambda: _default("default_color"))

    @field_validator("x_percent", "y_percent")
    @classmethod
    def _clamp_position(cls, value: float) -> float:
        return clamp_percent(value)

    @field_validator("font_size")
    @classmethod
    def _clamp_font_size(cls, value: float) -> float:
        settings = get_settings()
        return max(settings.min_font_size, min(settings.max_font_size, value))

    @field_validator("color")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        return normalize_color(value)

    def replace(self, **changes: Any) -> "StampSpec":
        """إرجاع نسخة جديدة بعد إعادة التحقق من كل الحقول."""
        data = self.model_dump()
        data.update({key: value for key, value in changes.items() if value is not None})
        return StampSpec.model_validate(data)


class SessionRequest(BaseModel):
    session_id: str = Field(..., description="معرف جلسة التحرير.")


class StampUpdateRequest(SessionRequest):
    text: str | None = None
    x_percent: float | None = None
    y_percent: float | None = None
    font_size: float | None = None
    color: str | None = None


class PointerPositionRequest(SessionRequest):
    x_px: float = Field(..., description="موضع المؤشر أفقيًا داخل المعاينة المعروضة.")
    y_px: float = Field(..., description="موضع المؤشر عموديًا داخل المعاينة المعروضة.")
    width_px: float = Field(..., gt=0, description="عرض المعاينة كما تُعرض.")
    height_px: float = Field(..., gt=0, description="ارتفاع المعاينة كما تُعرض.")


class StampCommitRequest(SessionRequest):
    generation: int | None = Field(
        default=None,
        description="رقم إصدار المستند الذي تم تحريره (لرفض الختم على مستند قديم).",
    )
