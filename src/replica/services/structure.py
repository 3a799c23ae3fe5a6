"""LLM-backed structural intelligence: layout, roles, design tokens, variations.

Each method sends one JSON-mode request for the whole batch of instances
and validates the reply item by item.  Items that fail validation are
dropped (the merger applies defaults for missing ids); a reply that is not
JSON at all raises, which the merger turns into a warning.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from replica.exceptions import EnrichmentError
from replica.schemas.design import (
    PartialColorTokens,
    PartialDesignSystem,
    PartialFontTokens,
    PartialSpacingTokens,
    PartialTimingTokens,
)
from replica.schemas.overlay import ConsolidatedTextInstance, EdgeInsets, LayoutLogic, TextRole
from replica.services.llm import ChatClient
from replica.utils.llm_parse import extract_items, parse_json_payload

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT_LAYOUT = "You are a layout-reasoning AI. STRICT JSON ONLY. NO HALLUCINATIONS."
_USER_PROMPT_LAYOUT = """\
For each overlay, determine:
Anchor position (top, center, bottom)
Horizontal alignment (left, center, right)
Padding (top, right, bottom, left)
Margin from screen edges
Z-index / layering order
Normalize all values.
Return {"overlays": [{"id", "anchor", "alignment", "padding", "margin", "zIndex"}]}.
Output JSON only."""

_SYSTEM_PROMPT_ROLE = "You are a video storytelling AI. STRICT JSON ONLY. NO HALLUCINATIONS."
_USER_PROMPT_ROLE = """\
Classify each text overlay into one role:
HOOK
BODY
CTA

Rules:
Each overlay must have exactly one role
Return {"classifications": [{"id", "role"}]}.
Output JSON only"""

_SYSTEM_PROMPT_DESIGN = "You are a design-system AI. STRICT JSON ONLY."
_USER_PROMPT_DESIGN = """\
From all extracted overlays, generate reusable design tokens:
Font tokens: {"fonts": {"primary", "secondary"}}
Color palette: {"colors": {"primary", "secondary", "accent", "background", "text"}} as hex
Spacing scale: {"spacing": {"base", "scale"}}
Timing presets in seconds: {"timing": {"avgDurationPerWord", "minDuration"}}

Rules:
Output JSON only"""

_SYSTEM_PROMPT_VARIATION = "You generate text variations without altering design or timing."
_USER_PROMPT_VARIATION = """\
Given HOOK and CTA text, generate exactly 3 variations.
Rules:
Preserve original intent
Do not change length drastically
Return {"variations": [{"id", "variations": ["...", "...", "..."]}]}
Output JSON only"""


class _LayoutItem(BaseModel):
    id: str
    anchor: str
    alignment: str = "center"
    padding: EdgeInsets = Field(default_factory=EdgeInsets)
    margin: EdgeInsets = Field(default_factory=EdgeInsets)
    z_index: int = Field(default=1, validation_alias=AliasChoices("z_index", "zIndex"))

    @field_validator("padding", "margin", mode="before")
    @classmethod
    def _uniform_insets(cls, v: Any) -> Any:
        if isinstance(v, (int, float)):
            return {"top": v, "right": v, "bottom": v, "left": v}
        return v if v is not None else {}

    def to_layout(self) -> LayoutLogic:
        return LayoutLogic(
            anchor=self.anchor.lower(),
            alignment=self.alignment.lower(),
            padding=self.padding,
            margin=self.margin,
            z_index=self.z_index,
        )


class _VariationItem(BaseModel):
    id: str
    variations: list[str]


class StructureAnalyzerService:
    def __init__(self, client: ChatClient) -> None:
        self._client = client

    async def _call(self, system_prompt: str, instruction: str, data: Any) -> Any:
        response = await self._client.chat(
            messages=[
                {"role": "system", "content": system_prompt},
                {
                    "role": "user",
                    "content": f"{instruction}\n\nInput Data:\n{json.dumps(data, ensure_ascii=False)}",
                },
            ],
            json_format=True,
        )
        return parse_json_payload(response.content)

    async def analyze_layout(
        self, instances: Sequence[ConsolidatedTextInstance]
    ) -> dict[str, LayoutLogic]:
        known = {i.id for i in instances}
        payload = await self._call(
            _SYSTEM_PROMPT_LAYOUT,
            _USER_PROMPT_LAYOUT,
            [
                {"id": i.id, "text": i.text, "boundingBox": i.bounding_box.model_dump()}
                for i in instances
            ],
        )

        layouts: dict[str, LayoutLogic] = {}
        for raw in extract_items(payload, "overlays", "layouts"):
            try:
                item = _LayoutItem.model_validate(raw)
                layout = item.to_layout()
            except ValidationError as e:
                logger.debug("Dropping invalid layout item %r: %s", raw, e)
                continue
            if item.id in known:
                layouts[item.id] = layout
        logger.info("Layout analysis: %d/%d overlays", len(layouts), len(known))
        return layouts

    async def classify_roles(
        self, instances: Sequence[ConsolidatedTextInstance]
    ) -> dict[str, TextRole]:
        known = {i.id for i in instances}
        payload = await self._call(
            _SYSTEM_PROMPT_ROLE,
            _USER_PROMPT_ROLE,
            [
                {
                    "id": i.id,
                    "text": i.text,
                    "startTime": i.start_time,
                    "duration": i.duration,
                    "boundingBox": i.bounding_box.model_dump(),
                }
                for i in instances
            ],
        )

        items = extract_items(payload, "classifications", "roles")
        if not items and isinstance(payload, dict):
            # Some models answer with a bare {id: role} mapping.
            items = [{"id": k, "role": v} for k, v in payload.items()]

        roles: dict[str, TextRole] = {}
        for raw in items:
            if not isinstance(raw, dict) or raw.get("id") not in known:
                continue
            try:
                roles[raw["id"]] = TextRole(str(raw.get("role", "")).upper())
            except ValueError:
                logger.debug("Dropping unknown role %r for %s", raw.get("role"), raw["id"])
        logger.info("Role classification: %d/%d overlays", len(roles), len(known))
        return roles

    async def generate_design_system(
        self, instances: Sequence[ConsolidatedTextInstance]
    ) -> PartialDesignSystem:
        payload = await self._call(
            _SYSTEM_PROMPT_DESIGN,
            _USER_PROMPT_DESIGN,
            [{"text": i.text, "visuals": i.visuals.model_dump(exclude_none=True)} for i in instances],
        )
        if not isinstance(payload, dict):
            raise EnrichmentError("Design system response is not a JSON object")

        sections = {
            "fonts": PartialFontTokens,
            "colors": PartialColorTokens,
            "spacing": PartialSpacingTokens,
            "timing": PartialTimingTokens,
        }
        parsed: dict[str, BaseModel] = {}
        for name, model in sections.items():
            try:
                parsed[name] = model.model_validate(payload.get(name) or {})
            except ValidationError as e:
                logger.warning("Ignoring malformed design tokens '%s': %s", name, e.errors()[0].get("msg"))
                parsed[name] = model()
        return PartialDesignSystem(**parsed)

    async def generate_variations(
        self, instances: Sequence[ConsolidatedTextInstance]
    ) -> dict[str, list[str]]:
        if not instances:
            return {}
        known = {i.id for i in instances}
        payload = await self._call(
            _SYSTEM_PROMPT_VARIATION,
            _USER_PROMPT_VARIATION,
            [
                {"id": i.id, "text": i.text, "role": str(getattr(i, "role", TextRole.BODY))}
                for i in instances
            ],
        )

        variations: dict[str, list[str]] = {}
        for raw in extract_items(payload, "variations"):
            try:
                item = _VariationItem.model_validate(raw)
            except ValidationError:
                continue
            if item.id in known and item.variations:
                variations[item.id] = item.variations
        return variations
