"""Fan-out / fan-in of enrichment collaborators onto consolidated instances.

Layout, role and design-system enrichment run concurrently and are joined;
variation generation runs afterwards because it needs the roles.  Every
branch has its own timeout, and a failing or slow branch degrades to its
empty value plus a warning without affecting the others.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import ValidationError

from replica.schemas.design import DesignSystem, PartialDesignSystem
from replica.schemas.overlay import (
    DEFAULT_LAYOUT,
    ConsolidatedTextInstance,
    EnrichedOverlay,
    LayoutLogic,
    TextRole,
)
from replica.schemas.pipeline import SegmentVariations
from replica.services.collaborators import (
    DesignSystemCollaborator,
    LayoutCollaborator,
    RoleCollaborator,
    VariationCollaborator,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ROLE = TextRole.BODY
VARIATION_ROLES = (TextRole.HOOK, TextRole.CTA)

# (section, field, fallback), in the order warnings are reported
DESIGN_FALLBACKS: tuple[tuple[str, str, Any], ...] = (
    ("fonts", "primary", "Inter"),
    ("fonts", "secondary", "Inter"),
    ("colors", "primary", "#ffffff"),
    ("colors", "secondary", "#000000"),
    ("colors", "accent", "#FF0000"),
    ("colors", "background", "#000000"),
    ("colors", "text", "#ffffff"),
    ("spacing", "base", 4),
    ("spacing", "scale", [4, 8, 16, 24, 32]),
    ("timing", "avg_duration_per_word", 0.4),
    ("timing", "min_duration", 1.0),
)


@dataclass(frozen=True)
class EnrichmentResult:
    overlays: list[EnrichedOverlay] = field(default_factory=list)
    design_system: DesignSystem | None = None
    variations: list[SegmentVariations] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def resolve_design_system(partial: PartialDesignSystem | None) -> tuple[DesignSystem, list[str]]:
    """Fill every missing design token with its fallback, one warning per substitution."""
    partial = partial or PartialDesignSystem()
    resolved: dict[str, dict[str, Any]] = {}
    warnings: list[str] = []
    for section, name, fallback in DESIGN_FALLBACKS:
        value = getattr(getattr(partial, section), name)
        if value is None or value == "" or value == []:
            warnings.append(f"Could not detect {section}.{name}, using default {fallback!r}")
            value = fallback
        resolved.setdefault(section, {})[name] = value
    return DesignSystem.model_validate(resolved), warnings


def _coerce_role(value: Any) -> TextRole | None:
    try:
        return TextRole(str(value).upper())
    except ValueError:
        return None


def _coerce_layout(value: Any) -> LayoutLogic | None:
    if isinstance(value, LayoutLogic):
        return value
    try:
        return LayoutLogic.model_validate(value)
    except ValidationError:
        return None


def _coerce_mapping(name: str, value: Any) -> tuple[dict[str, Any], str | None]:
    if isinstance(value, Mapping):
        return dict(value), None
    logger.warning("%s enrichment returned %s instead of a mapping", name, type(value).__name__)
    return {}, f"{name.capitalize()} enrichment returned malformed output, using defaults"


def _coerce_partial(value: Any) -> tuple[PartialDesignSystem, str | None]:
    if isinstance(value, PartialDesignSystem):
        return value, None
    if value is None:
        return PartialDesignSystem(), None
    try:
        return PartialDesignSystem.model_validate(value), None
    except ValidationError as e:
        logger.warning("design system enrichment returned malformed output: %s", e)
        return PartialDesignSystem(), "Design system enrichment returned malformed output, using defaults"


def enrich_instance(
    instance: ConsolidatedTextInstance,
    layouts: dict[str, Any],
    roles: dict[str, Any],
) -> EnrichedOverlay:
    """New overlay value; the source instance is left untouched."""
    role = _coerce_role(roles[instance.id]) if instance.id in roles else None
    layout = _coerce_layout(layouts[instance.id]) if instance.id in layouts else None
    return EnrichedOverlay.model_validate(
        {
            **dict(instance),
            "role": role or DEFAULT_ROLE,
            "layout": layout or DEFAULT_LAYOUT,
        }
    )


class EnrichmentMerger:
    def __init__(
        self,
        layout: LayoutCollaborator,
        roles: RoleCollaborator,
        design: DesignSystemCollaborator,
        variations: VariationCollaborator,
        *,
        timeout: float = 60.0,
    ) -> None:
        self._layout = layout
        self._roles = roles
        self._design = design
        self._variations = variations
        self._timeout = timeout

    async def _guarded(self, name: str, call: Awaitable[T], empty: T) -> tuple[T, str | None]:
        """Await one branch with a timeout; failures become (empty, warning)."""
        try:
            return await asyncio.wait_for(call, timeout=self._timeout), None
        except asyncio.TimeoutError:
            logger.warning("%s enrichment timed out after %.1fs", name, self._timeout)
            return empty, f"{name.capitalize()} enrichment timed out, using defaults"
        except Exception as e:
            logger.warning("%s enrichment failed, using defaults: %s", name, e)
            return empty, f"{name.capitalize()} enrichment failed ({type(e).__name__}), using defaults"

    async def merge(self, instances: Sequence[ConsolidatedTextInstance]) -> EnrichmentResult:
        warnings: list[str] = []

        if not instances:
            design_system, design_warnings = resolve_design_system(None)
            return EnrichmentResult(
                design_system=design_system,
                warnings=["No text overlays detected", *design_warnings],
            )

        (layouts, w_layout), (roles, w_role), (partial, w_design) = await asyncio.gather(
            self._guarded("layout", self._layout.analyze_layout(instances), {}),
            self._guarded("role", self._roles.classify_roles(instances), {}),
            self._guarded(
                "design system",
                self._design.generate_design_system(instances),
                PartialDesignSystem(),
            ),
        )
        if w_layout is None:
            layouts, w_layout = _coerce_mapping("layout", layouts)
        if w_role is None:
            roles, w_role = _coerce_mapping("role", roles)
        if w_design is None:
            partial, w_design = _coerce_partial(partial)
        # Fixed order keeps the warning list deterministic.
        warnings.extend(w for w in (w_layout, w_role, w_design) if w)

        design_system, design_warnings = resolve_design_system(partial)
        warnings.extend(design_warnings)

        overlays = [enrich_instance(i, layouts, roles) for i in instances]

        variations, w_variation = await self._generate_variations(overlays)
        if w_variation:
            warnings.append(w_variation)

        logger.info(
            "Enrichment merged: %d overlays, %d roles, %d layouts, %d variation sets, %d warnings",
            len(overlays),
            len(roles),
            len(layouts),
            len(variations),
            len(warnings),
        )
        return EnrichmentResult(
            overlays=overlays,
            design_system=design_system,
            variations=variations,
            warnings=warnings,
        )

    async def _generate_variations(
        self, overlays: list[EnrichedOverlay]
    ) -> tuple[list[SegmentVariations], str | None]:
        targets = [o for o in overlays if o.role in VARIATION_ROLES]
        if not targets:
            return [], None

        generated, warning = await self._guarded(
            "variation", self._variations.generate_variations(targets), {}
        )
        generated = generated or {}
        variations = [
            SegmentVariations(segment_id=o.id, variations=list(generated[o.id]))
            for o in targets
            if generated.get(o.id)
        ]
        return variations, warning
