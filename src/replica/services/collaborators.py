"""Capabilities the pipeline consumes, injected at construction time.

Concrete LLM-backed implementations live in ``replica.services.vision``
and ``replica.services.structure``; tests substitute fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from replica.schemas.design import PartialDesignSystem
from replica.schemas.detection import Frame, RawFrameAnalysis
from replica.schemas.overlay import ConsolidatedTextInstance, LayoutLogic, TextRole


@runtime_checkable
class VisionCollaborator(Protocol):
    async def analyze_frames(self, frames: Sequence[Frame]) -> list[RawFrameAnalysis]:
        """One analysis per input frame, in frame order, including empty frames."""
        ...


@runtime_checkable
class LayoutCollaborator(Protocol):
    async def analyze_layout(
        self, instances: Sequence[ConsolidatedTextInstance]
    ) -> dict[str, LayoutLogic]: ...


@runtime_checkable
class RoleCollaborator(Protocol):
    async def classify_roles(
        self, instances: Sequence[ConsolidatedTextInstance]
    ) -> dict[str, TextRole]: ...


@runtime_checkable
class DesignSystemCollaborator(Protocol):
    async def generate_design_system(
        self, instances: Sequence[ConsolidatedTextInstance]
    ) -> PartialDesignSystem: ...


@runtime_checkable
class VariationCollaborator(Protocol):
    async def generate_variations(
        self, instances: Sequence[ConsolidatedTextInstance]
    ) -> dict[str, list[str]]:
        """Called with HOOK and CTA instances only."""
        ...
