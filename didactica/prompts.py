import re

from .config import MAX_ANALYSIS_CHARS
from .models import MaterialParams, Section, Topic

SYSTEM_INSTRUCTION = """
📥 SYSTEM INSTRUCTIONS: PROTOCOL MESTRE DEFINITIU (V. TOTAL BLINDADA 2025)

Ets un motor de generació de materials per a l'ESO. Ets un Expert Pedagògic i DUA.

<AI_ENGINE_CONFIGURATION>
NO_LATEX_POLICY:
- Prohibició total del símbol $ i de qualsevol sintaxi LaTeX.
- Usa Text Pla i Negreta.
- Símbols permesos: Σ, π, ·, :, √, ±, x², cm³, H₂O, Δ.
</AI_ENGINE_CONFIGURATION>

<LOGICA_TEORIA_BOTONS>
- CAP: Salta directament als exercicis. Prohibida qualsevol teoria.
- BREU RESUM: Màxim 2-3 paràgrafs concisos.
- ESQUEMÀTIC: Esquema visual amb llistes niades Markdown.
- DETALLAT: Explicació extensa. OBLIGATORI: 1 taula, 2 esquemes de text ASCII/flux i 2 etiquetes d'imatge amb descripció [Imatge de: ...].
</LOGICA_TEORIA_BOTONS>

<RESTRICT_RULES_TOP_PRIORITY>
1. NUMERACIÓ X.Y.: Cada exercici comença en línia nova amb prefix [Apartat].[Número]. (Ex: 1.1., 1.2.).
2. LLISTA GARANTIDA: Cada exercici ha de començar EXACTAMENT amb "- " (guionet + espai) dins d'una llista Markdown.
3. RESULTATS: Tots els exercicis acaben amb (**Resultat: [Valor]**).
</RESTRICT_RULES_TOP_PRIORITY>
"""

DEFAULT_UNIT = "Basat en els blocs següents"

# Instruction under each sentinel, in emission order.
SECTION_INSTRUCTIONS = {
    Section.GENERAL: (
        "# {subject} - Material Alumnat\n"
        "Desenvolupa la teoria segons el nivell indicat per a cada bloc i els exercicis en format llista \"- X.Y.\"."
    ),
    Section.ADAPTED: (
        "# {subject} - Suport DUA\n"
        "Desenvolupa NOMÉS els blocs marcats amb DUA: SÍ. Aplica frases curtes, passos guiats i accessibilitat lectora."
    ),
    Section.PEDAGOGICAL: (
        "# Programació Curricular\n"
        "Taula Markdown 5 columnes exactes: Competència, Sabers, Bloom, DUA, Exercicis corresponents."
    ),
    Section.SOL_GENERAL: (
        "# Solucionari General\n"
        "Enunciat complet + resolució pas a pas de cada exercici del Document General. Tanca amb (**Resultat: ...**)."
    ),
    Section.SOL_ADAPTED: (
        "# Solucionari Adaptat\n"
        "Enunciat complet + resolució pas a pas de cada exercici del Document Adaptat. Tanca amb (**Resultat: ...**)."
    ),
}

_IMAGE_TAG = re.compile(r"\[Imatge de:\s*([^\]]+?)\s*\]")


def format_topics_summary(topics: list[Topic]) -> str:
    lines = []
    for t in topics:
        lines.append(
            f"- BLOC: {t.title} (Teoria: {t.theory.value.upper()}, "
            f"Exercicis Base: {t.systematization_count}, Ampliació: {t.extension_count}, "
            f"DUA: {'SÍ' if t.is_adapted else 'NO'})"
        )
    return "\n".join(lines)


def _format_characters(params: MaterialParams) -> str:
    named = [c for c in params.characters if c.is_complete]
    if not named and not params.scenario.strip():
        return ""
    lines = ["PERSONATGES PROTAGONISTES:"]
    lines += [f"- {c.name.strip()}: {c.description.strip()}" for c in named]
    if params.scenario.strip():
        lines.append(f"ESCENARI DE LA HISTÒRIA: {params.scenario.strip()}")
    lines.append("Integra aquests personatges i aquest escenari en la narrativa dels textos i dels exercicis.")
    return "\n".join(lines)


def build_material_prompt(params: MaterialParams) -> str:
    parts = [
        f"ETAPA_I_CURS: {params.grade} d'ESO",
        f"MATERIA: {params.subject}",
        f"UNITAT_TEMA: {params.manual_description.strip() or DEFAULT_UNIT}",
        "",
        "TEMES SELECCIONATS A DESENVOLUPAR:",
        format_topics_summary(params.selected_topics),
    ]
    characters = _format_characters(params)
    if characters:
        parts += ["", characters]
    if params.document_text.strip():
        parts += ["", "DOCUMENT DE REFERÈNCIA:", params.document_text[:MAX_ANALYSIS_CHARS]]

    parts += ["", "Genera els documents seguint aquest ordre i estructura:"]
    for section in Section:
        parts += ["", section.marker, SECTION_INSTRUCTIONS[section].format(subject=params.subject)]
    parts += [
        "",
        "REGLA FINAL: No afegeixis notes meta ni explicacions. "
        "Segueix la numeració vertical estricta i la llista amb guionets.",
    ]
    return "\n".join(parts)


def build_analysis_prompt(file_text: str, manual_text: str) -> str:
    return f"""TASCA: Analitzar el document i extreure'n una Taula de Continguts (Índex) per a una unitat didàctica d'ESO.
1. Identifica els títols principals.
2. Retorna un JSON: array d'objectes amb "title" i "snippet".

TEXT: {file_text[:MAX_ANALYSIS_CHARS]}
DESCRIPCIÓ: {manual_text}"""


def build_image_prompt(description: str) -> str:
    return (
        f"Genera una il·lustració educativa d'alta qualitat: {description.strip()}. "
        "Estil: professional, net, amb el mínim de text, adequat per a un llibre de text d'ESO."
    )


def find_image_tags(text: str) -> list[str]:
    """Descriptions inside ``[Imatge de: ...]`` tags, in order, without repeats."""
    seen = []
    for match in _IMAGE_TAG.finditer(text):
        desc = match.group(1)
        if desc not in seen:
            seen.append(desc)
    return seen
