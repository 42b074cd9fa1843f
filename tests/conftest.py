"""
Pytest configuration and shared fixtures.

No test talks to Gemini: the client functions are monkeypatched on the
module that imported them.
"""
import pytest

from didactica.demux import MARKERS
from didactica.models import Character, GenerationSettings, MaterialParams, TheoryLevel, Topic

SECTION_BODIES = [
    "# Llengua - Material Alumnat\n\n- 1.1. Escriu un diàleg. (**Resultat: diàleg**)",
    "# Llengua - Suport DUA\n\n- 1.1. Escriu dues frases. (**Resultat: frases**)",
    "# Programació Curricular\n\n| Competència | Sabers | Bloom | DUA | Exercicis |\n|---|---|---|---|---|",
    "# Solucionari General\n\n- 1.1. Diàleg resolt. (**Resultat: diàleg**)",
    "# Solucionari Adaptat\n\n- 1.1. Frases resoltes. (**Resultat: frases**)",
]


@pytest.fixture
def full_response():
    """A complete streamed response, markers in canonical order."""
    return "Preàmbul que s'ha de descartar.\n" + "".join(
        f"{marker}\n{body}\n\n" for marker, body in zip(MARKERS, SECTION_BODIES)
    )


@pytest.fixture
def sample_topics():
    return [
        Topic("El diàleg", "Marques del diàleg", theory=TheoryLevel.DETAILED, is_adapted=True),
        Topic("La descripció", "Descripció de personatges", systematization_count=4, extension_count=2),
        Topic("El teatre", "Text teatral", is_included=False),
    ]


@pytest.fixture
def sample_params(sample_topics):
    return MaterialParams(
        subject="Creació Literària",
        grade="2n",
        characters=[
            Character("Laia", "Curiosa i valenta"),
            Character("Pol", "Tímid però enginyós"),
            Character("Nina", "Una gata que parla"),
        ],
        scenario="Un far abandonat a la costa",
        manual_description="Unitat sobre textos narratius",
        document_text="Tema 3. El diàleg. Tema 4. La descripció.",
        topics=sample_topics,
        settings=GenerationSettings(temperature=0.4, model="gemini-test"),
    )


@pytest.fixture
def chunked():
    """Split a text into fixed-size chunks, like a stream would deliver it."""
    def split(text, size):
        return [text[i:i + size] for i in range(0, len(text), size)]
    return split
