"""Map a pipeline result onto render-ready text overlays."""

from __future__ import annotations

from replica.schemas.design import DesignSystem
from replica.schemas.overlay import EnrichedOverlay, OverlayStyle, Position, TextOverlay
from replica.schemas.pipeline import PipelineResult
from replica.services.geometry import box_center

# Overlay glyph height as a share of the detected box height.
_FONT_HEIGHT_RATIO = 0.8
# Translucent plate behind re-rendered text, independent of the design palette.
_OVERLAY_BACKGROUND = "rgba(0,0,0,0.7)"
_DEFAULT_FONT_WEIGHT = "700"


def _style_for(overlay: EnrichedOverlay, design: DesignSystem) -> OverlayStyle:
    typography = overlay.visuals.typography
    styling = overlay.visuals.styling
    cx, cy = box_center(overlay.bounding_box)

    if typography.font_size:
        font_size = f"{typography.font_size:g}vh"
    else:
        font_size = f"{overlay.bounding_box.height * _FONT_HEIGHT_RATIO:g}vh"

    return OverlayStyle(
        font_size=font_size,
        color=styling.text_color or design.colors.text,
        background=_OVERLAY_BACKGROUND,
        position=Position(x=cx, y=cy),
        alignment=overlay.layout.alignment,
        font_weight=str(typography.font_weight or _DEFAULT_FONT_WEIGHT),
        font_family=typography.font_family or design.fonts.primary,
        letter_spacing=typography.letter_spacing,
        stroke_color=styling.stroke_color,
        stroke_width=styling.stroke_width,
    )


def map_overlays(result: PipelineResult) -> list[TextOverlay]:
    return [
        TextOverlay(
            id=o.id,
            text=o.text,
            role=o.role,
            start_time=o.start_time,
            end_time=max(o.end_time, o.start_time + o.duration),
            style=_style_for(o, result.design_system),
            motion_path=o.motion_path,
            styling=o.visuals.styling,
        )
        for o in result.overlays
    ]
