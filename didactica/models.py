"""
Data model for the material generator.

Form parameters are plain write-once records consumed by a single
generation call. ``GeneratedMaterial`` is the only mutable object: it is
filled in place while the response streams and frozen once it ends.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .config import MODEL_NAME, TEMPERATURE

GRADES = ["1r", "2n", "3r", "4t"]
SUBJECTS = ["Llengua i Literatura", "Creació Literària", "Teatre", "Anglès"]
NARRATIVE_SUBJECTS = {"Creació Literària", "Teatre"}


class MaterialClosedError(RuntimeError):
    """Raised when a finished material is modified."""


class Section(str, Enum):
    """The five documents, in the order the model is asked to emit them."""

    GENERAL = "general"
    ADAPTED = "adapted"
    PEDAGOGICAL = "pedagogical"
    SOL_GENERAL = "sol_general"
    SOL_ADAPTED = "sol_adapted"

    @property
    def marker(self) -> str:
        return _MARKERS[self]

    @property
    def label(self) -> str:
        return _LABELS[self][0]

    @property
    def doc_title(self) -> str:
        return _LABELS[self][1]


_MARKERS = {
    Section.GENERAL: "[GENERAL_START]",
    Section.ADAPTED: "[ADAPTACIO_START]",
    Section.PEDAGOGICAL: "[PEDAGOGIA_START]",
    Section.SOL_GENERAL: "[SOL_GENERAL_START]",
    Section.SOL_ADAPTED: "[SOL_ADAPTADA_START]",
}

_LABELS = {
    Section.GENERAL: ("Alumnat", "Material Alumnat"),
    Section.ADAPTED: ("Adaptat", "Material Adaptat DUA"),
    Section.PEDAGOGICAL: ("Curricular", "Taula Curricular"),
    Section.SOL_GENERAL: ("Sols. General", "Solucionari General"),
    Section.SOL_ADAPTED: ("Sols. Adaptat", "Solucionari Adaptat"),
}


class TheoryLevel(str, Enum):
    NONE = "CAP"
    BRIEF = "BREU RESUM"
    SCHEMATIC = "ESQUEMÀTIC"
    DETAILED = "DETALLAT"


@dataclass
class Character:
    name: str = ""
    description: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.name.strip() and self.description.strip())


@dataclass
class Topic:
    """One content block of the unit, as proposed by the document analysis."""

    title: str
    snippet: str = ""
    theory: TheoryLevel = TheoryLevel.BRIEF
    systematization_count: int = 3
    extension_count: int = 1
    is_adapted: bool = False
    is_included: bool = True


@dataclass
class GenerationSettings:
    temperature: float = TEMPERATURE
    model: str = MODEL_NAME

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be between 0 and 2, got {self.temperature}")


@dataclass
class MaterialParams:
    subject: str = "Creació Literària"
    grade: str = "1r"
    characters: list[Character] = field(default_factory=lambda: [Character() for _ in range(3)])
    scenario: str = ""
    manual_description: str = ""
    document_text: str = ""
    topics: list[Topic] = field(default_factory=list)
    settings: GenerationSettings = field(default_factory=GenerationSettings)

    @property
    def selected_topics(self) -> list[Topic]:
        return [t for t in self.topics if t.is_included]

    @property
    def has_adapted_version(self) -> bool:
        return any(t.is_adapted for t in self.selected_topics)

    @property
    def is_narrative(self) -> bool:
        return self.subject in NARRATIVE_SUBJECTS


@dataclass
class GeneratedMaterial:
    """Five generated documents, each holding the best-known prefix of its text."""

    general: str = ""
    adapted: str = ""
    pedagogical: str = ""
    sol_general: str = ""
    sol_adapted: str = ""
    has_adapted_version: bool = False
    _closed: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name, value):
        if getattr(self, "_closed", False):
            raise MaterialClosedError(f"cannot set {name!r} on a finished material")
        super().__setattr__(name, value)

    @property
    def is_complete(self) -> bool:
        return self._closed

    def get(self, section: Section) -> str:
        return getattr(self, Section(section).value)

    def apply(self, texts: Iterable[str]):
        """Overwrite all five sections, given in canonical order."""
        texts = list(texts)
        if len(texts) != len(Section):
            raise ValueError(f"expected {len(Section)} sections, got {len(texts)}")
        for section, text in zip(Section, texts):
            setattr(self, section.value, text)

    def finish(self):
        object.__setattr__(self, "_closed", True)
