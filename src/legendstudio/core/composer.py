"""Prompt composition for flat and structured scene modes.

Composition is pure apart from the injected random source, which picks the
action, quality and (when none is chosen) director and mission clauses. Two
calls with identical fields may therefore differ; the mandatory clauses
(anatomy, negative prompt, outpaint guard) always appear once and in order.
"""

import logging
import random
from collections.abc import Sequence
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from .catalogs import (
    ANATOMY_CLAUSE,
    ATTRIBUTE_LABELS,
    CINEMATIC_REALISM_CLAUSE,
    COMPANION_PROMPTS,
    CUSTOM_COMPANION_CLAUSE,
    CUSTOM_WEAPON_CLAUSE,
    CYBERNETIC_AUGMENTATION_DIRECTIVES,
    DEFAULT_SUBJECT,
    DIRECTOR_STYLES,
    DYNAMIC_ACTION_PROMPTS,
    FACIAL_REPLICATION_DIRECTIVE,
    GROUP_PORTRAIT_DIRECTIVE,
    IMMERSIVE_QUALITY_PROMPTS,
    NEGATIVE_PROMPT_CLAUSE,
    OUTPAINT_GUARD,
    PLACEHOLDER_FILL_DIRECTIVE,
    SCENE_PROMPTS,
    all_scenes,
    flattened_missions,
)
from .modes import SceneDraft

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """Anything that can pick one element of a sequence (``random.Random`` conforms)."""

    def choice(self, seq: Sequence[T]) -> T: ...

    def sample(self, population: Sequence[T], k: int) -> list[T]: ...


class ResolvedDirector(BaseModel):
    """Director actually used for one composition (``name`` is ``None`` if unknown)."""

    name: str | None
    prompt: str
    randomized: bool


class ScenePrompt(BaseModel):
    """One composed prompt of a multi-scene batch."""

    scene: str
    prompt: str
    director: ResolvedDirector
    mission: str
    mission_randomized: bool


class PromptComposer:
    """Builds final prompt strings from drafts.

    Args:
        rng: Random source for action/quality/director/mission variety.
            Defaults to a fresh ``random.Random``.
    """

    def __init__(self, rng: RandomSource | None = None) -> None:
        self.rng: RandomSource = rng if rng is not None else random.Random()

    # ------------------------------------------------------------------
    # Flat mode
    # ------------------------------------------------------------------

    def compose_simple(self, prompt: str) -> str:
        """Placeholder-fill directive, user prompt, outpaint guard."""
        return f"{PLACEHOLDER_FILL_DIRECTIVE}, {prompt}, {OUTPAINT_GUARD}"

    # ------------------------------------------------------------------
    # Structured scene mode
    # ------------------------------------------------------------------

    def resolve_director(self, director: str | None) -> ResolvedDirector:
        """Look up a director by name, or pick one at random when ``None``."""
        if director is None:
            name = self.rng.choice(list(DIRECTOR_STYLES))
            return ResolvedDirector(name=name, prompt=DIRECTOR_STYLES[name], randomized=True)
        prompt = DIRECTOR_STYLES.get(director)
        if prompt is None:
            logger.warning("Unknown director %r; no director clause added", director)
            return ResolvedDirector(name=None, prompt="", randomized=False)
        return ResolvedDirector(name=director, prompt=prompt, randomized=False)

    def resolve_mission(self, mission: str | None) -> tuple[str, bool]:
        """Return ``(mission_text, randomized)``."""
        if mission is None:
            return self.rng.choice(flattened_missions()), True
        return mission, False

    def _subject_parts(self, draft: SceneDraft) -> list[str]:
        parts = [draft.prompt.strip() or DEFAULT_SUBJECT]

        if draft.has_character:
            parts.append(FACIAL_REPLICATION_DIRECTIVE)
            if draft.custom_companion_images:
                parts.append(GROUP_PORTRAIT_DIRECTIVE)
        else:
            parts.extend(CYBERNETIC_AUGMENTATION_DIRECTIVES)

        for field, label in ATTRIBUTE_LABELS.items():
            value = getattr(draft, field)
            if value is not None:
                parts.append(f"{label}: {value}")

        if draft.weapon is not None:
            parts.append(f"Wielding weapon: {draft.weapon}")
        if draft.vehicle is not None:
            parts.append(f"Driving or posing with vehicle: {draft.vehicle}")
        if any(not img.is_placeholder for img in draft.custom_weapon_images):
            parts.append(CUSTOM_WEAPON_CLAUSE)

        if draft.companion is not None:
            description = COMPANION_PROMPTS.get(draft.companion)
            if description:
                parts.append(
                    f"With a companion who is an exact match to this description: {description}"
                )
            else:
                parts.append(f"With companion: {draft.companion}")
        if draft.custom_companion_images and draft.character_image is None:
            parts.append(CUSTOM_COMPANION_CLAUSE)

        if draft.cinematic_realism:
            parts.append(CINEMATIC_REALISM_CLAUSE)

        parts.append(ANATOMY_CLAUSE)
        parts.append(NEGATIVE_PROMPT_CLAUSE)
        return parts

    def compose_base(self, draft: SceneDraft) -> str:
        """Clauses 1-8: everything before the director clause.

        The action and quality clauses are re-sampled on every call.
        """
        action = self.rng.choice(DYNAMIC_ACTION_PROMPTS)
        quality = self.rng.choice(IMMERSIVE_QUALITY_PROMPTS)
        body = ", ".join(self._subject_parts(draft))
        return f"{PLACEHOLDER_FILL_DIRECTIVE}, {body}. Action: {action}. Visuals: {quality}."

    def compose_structured(self, draft: SceneDraft) -> tuple[str, ResolvedDirector]:
        """Full single-unit structured prompt and the director it used."""
        director = self.resolve_director(draft.director)
        return _join(self.compose_base(draft), director.prompt, OUTPAINT_GUARD), director

    def compose_override(self, prompt: str) -> str:
        """An explicit override prompt only gets the outpaint guard."""
        return _join(prompt, OUTPAINT_GUARD)

    def compose_batch(self, draft: SceneDraft, scenes: Sequence[str]) -> list[ScenePrompt]:
        """One prompt per scene; director and mission are resolved per scene."""
        prompts: list[ScenePrompt] = []
        for scene in scenes:
            director = self.resolve_director(draft.director)
            mission, mission_randomized = self.resolve_mission(draft.mission)
            description = SCENE_PROMPTS.get(scene) or f"A scene in {scene}."
            text = _join(
                self.compose_base(draft),
                director.prompt,
                f"The character is in this scene: {description}.",
                f"Narrative Focus: {mission}.",
                OUTPAINT_GUARD,
            )
            prompts.append(
                ScenePrompt(
                    scene=scene,
                    prompt=text,
                    director=director,
                    mission=mission,
                    mission_randomized=mission_randomized,
                )
            )
        return prompts

    def scene_alt_text(self, draft: SceneDraft, scene_prompt: ScenePrompt) -> str:
        """Human-readable metadata line for a batch result."""
        parts = [scene_prompt.scene]
        if draft.weapon is not None:
            parts.append(f"Weapon: {draft.weapon}")
        if draft.vehicle is not None:
            parts.append(f"Vehicle: {draft.vehicle}")
        if draft.companion is not None:
            parts.append(f"Companion: {draft.companion}")
        director = scene_prompt.director
        director_name = director.name or "none"
        parts.append(
            f"Director: random ({director_name})" if director.randomized else f"Director: {director_name}"
        )
        parts.append(
            "Mission: random" if scene_prompt.mission_randomized else f"Mission: {scene_prompt.mission[:10]}"
        )
        return " | ".join(parts)

    def random_scenes(self, count: int) -> list[str]:
        """Pick ``count`` distinct scenes from the whole catalog."""
        scenes = all_scenes()
        return self.rng.sample(scenes, min(count, len(scenes)))

    # ------------------------------------------------------------------
    # Video
    # ------------------------------------------------------------------

    def compose_video(self, prompt: str, director: str | None) -> str:
        """User prompt followed by the director clause."""
        resolved = self.resolve_director(director)
        return f"{prompt} {resolved.prompt}".strip()


def _join(*clauses: str) -> str:
    return " ".join(clause for clause in clauses if clause)
