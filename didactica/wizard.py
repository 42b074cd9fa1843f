"""
Two-step wizard: SETUP (subject, grade, document, characters) then TOPICS
(per-topic configuration and settings), ending in RESULT.

The Streamlit app keeps one ``WizardState`` in ``st.session_state`` and
only changes it through these methods.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from loguru import logger

from .models import GeneratedMaterial, MaterialParams, Topic


class Step(str, Enum):
    SETUP = "setup"
    TOPICS = "topics"
    RESULT = "result"


class WizardError(RuntimeError):
    """A transition that is not allowed from the current step."""


def setup_is_valid(params: MaterialParams) -> bool:
    has_source = bool(params.document_text.strip() or params.manual_description.strip())
    if not params.is_narrative:
        return has_source
    characters_ok = all(c.is_complete for c in params.characters)
    return has_source and characters_ok and bool(params.scenario.strip())


def topics_are_valid(params: MaterialParams) -> bool:
    return bool(params.selected_topics)


@dataclass
class WizardState:
    step: Step = Step.SETUP
    params: Optional[MaterialParams] = None
    material: Optional[GeneratedMaterial] = None
    is_generating: bool = False
    error: Optional[str] = None

    def _require(self, *steps: Step):
        if self.step not in steps:
            raise WizardError(f"not allowed from step {self.step.value}")

    def submit_setup(self, params: MaterialParams, topics: list[Topic]):
        self._require(Step.SETUP)
        if not setup_is_valid(params):
            raise WizardError("setup form is incomplete")
        params.topics = list(topics)
        self.params = params
        self.error = None
        self.step = Step.TOPICS

    def back_to_setup(self):
        self._require(Step.TOPICS)
        self.step = Step.SETUP

    def start_generation(self):
        self._require(Step.TOPICS)
        if self.is_generating:
            raise WizardError("a generation is already in progress")
        if self.params is None or not topics_are_valid(self.params):
            raise WizardError("select at least one topic")
        self.material = None
        self.error = None
        self.is_generating = True
        logger.debug("wizard: generation started")

    def update_material(self, material: GeneratedMaterial):
        if not self.is_generating:
            raise WizardError("no generation in progress")
        self.material = material

    def finish_generation(self, material: GeneratedMaterial):
        if not self.is_generating:
            raise WizardError("no generation in progress")
        self.material = material
        self.is_generating = False
        self.step = Step.RESULT

    def fail_generation(self, message: str):
        """Drop the partial result and go back to the topic step."""
        self.material = None
        self.is_generating = False
        self.error = message
        self.step = Step.TOPICS
        logger.debug("wizard: generation failed, back to topics")

    def dismiss_error(self):
        self.error = None

    def back_to_edit(self):
        self._require(Step.RESULT)
        self.step = Step.TOPICS

    def reset(self):
        self.step = Step.SETUP
        self.params = None
        self.material = None
        self.is_generating = False
        self.error = None
