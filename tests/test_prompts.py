from didactica.config import MAX_ANALYSIS_CHARS
from didactica.demux import MARKERS
from didactica.models import Character, MaterialParams, Topic
from didactica.prompts import (
    DEFAULT_UNIT,
    SYSTEM_INSTRUCTION,
    build_analysis_prompt,
    build_image_prompt,
    build_material_prompt,
    find_image_tags,
    format_topics_summary,
)


def test_topics_summary_lines(sample_topics):
    summary = format_topics_summary(sample_topics[:2])
    assert summary.splitlines() == [
        "- BLOC: El diàleg (Teoria: DETALLAT, Exercicis Base: 3, Ampliació: 1, DUA: SÍ)",
        "- BLOC: La descripció (Teoria: BREU RESUM, Exercicis Base: 4, Ampliació: 2, DUA: NO)",
    ]


def test_material_prompt_header(sample_params):
    prompt = build_material_prompt(sample_params)
    assert "ETAPA_I_CURS: 2n d'ESO" in prompt
    assert "MATERIA: Creació Literària" in prompt
    assert "UNITAT_TEMA: Unitat sobre textos narratius" in prompt
    assert "# Creació Literària - Material Alumnat" in prompt


def test_material_prompt_markers_in_canonical_order(sample_params):
    prompt = build_material_prompt(sample_params)
    positions = [prompt.index(marker) for marker in MARKERS]
    assert positions == sorted(positions)
    assert all(prompt.count(marker) == 1 for marker in MARKERS)


def test_material_prompt_only_selected_topics(sample_params):
    prompt = build_material_prompt(sample_params)
    assert "BLOC: El diàleg" in prompt
    assert "BLOC: El teatre" not in prompt


def test_material_prompt_characters_and_scenario(sample_params):
    prompt = build_material_prompt(sample_params)
    assert "- Laia: Curiosa i valenta" in prompt
    assert "ESCENARI DE LA HISTÒRIA: Un far abandonat a la costa" in prompt


def test_material_prompt_without_characters():
    params = MaterialParams(subject="Anglès", topics=[Topic("Past simple")])
    prompt = build_material_prompt(params)
    assert "PERSONATGES" not in prompt
    assert f"UNITAT_TEMA: {DEFAULT_UNIT}" in prompt
    assert "DOCUMENT DE REFERÈNCIA" not in prompt


def test_incomplete_characters_are_left_out():
    params = MaterialParams(
        characters=[Character("Laia", "Curiosa"), Character("Pol", "")],
        topics=[Topic("Diàleg")],
    )
    prompt = build_material_prompt(params)
    assert "- Laia: Curiosa" in prompt
    assert "- Pol" not in prompt


def test_document_excerpt_is_truncated():
    params = MaterialParams(document_text="x" * (MAX_ANALYSIS_CHARS + 500), topics=[Topic("T")])
    prompt = build_material_prompt(params)
    assert "x" * MAX_ANALYSIS_CHARS in prompt
    assert "x" * (MAX_ANALYSIS_CHARS + 1) not in prompt


def test_analysis_prompt_truncates_text():
    prompt = build_analysis_prompt("Z" * (MAX_ANALYSIS_CHARS * 2), "Unitat 3")
    assert prompt.count("Z") == MAX_ANALYSIS_CHARS
    assert "DESCRIPCIÓ: Unitat 3" in prompt
    assert '"title"' in prompt and '"snippet"' in prompt


def test_system_instruction_rules():
    assert "NO_LATEX_POLICY" in SYSTEM_INSTRUCTION
    assert "(**Resultat: [Valor]**)" in SYSTEM_INSTRUCTION


def test_image_prompt():
    assert "un far de nit" in build_image_prompt("  un far de nit ")


def test_find_image_tags():
    text = "Teoria [Imatge de: un far de nit] i [Imatge de:  cicle de l'aigua ] i [Imatge de: un far de nit]"
    assert find_image_tags(text) == ["un far de nit", "cicle de l'aigua"]
    assert find_image_tags("sense imatges") == []
