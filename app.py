import streamlit as st
from loguru import logger

from didactica.config import MODEL_CHOICES, MODEL_NAME, configure_logging
from didactica.core import GenerationError, analyze_content_parts, generate_illustration, generate_material_stream
from didactica.documents import SUPPORTED_EXTENSIONS, FileReadError, read_upload
from didactica.export import FORMATS, export_section
from didactica.models import (
    GRADES, NARRATIVE_SUBJECTS, SUBJECTS, Character, GenerationSettings, MaterialParams, Section, TheoryLevel,
)
from didactica.prompts import find_image_tags
from didactica.wizard import Step, WizardState, setup_is_valid, topics_are_valid

configure_logging()

st.set_page_config(page_title="Assistent Didàctic ESO", layout="wide")
st.title("🎓 Assistent Didàctic ESO")
st.caption("Generador DUA-Bloom · Protocol Didàctic v2025")

if "wizard" not in st.session_state:
    st.session_state.wizard = WizardState()
if "images" not in st.session_state:
    st.session_state.images = {}
wiz = st.session_state.wizard

# a new script run while still flagged as generating means the last run was interrupted
if wiz.is_generating:
    wiz.fail_generation("La generació s'ha interromput. Torna-ho a provar.")

PLACEHOLDER = "_Generant..._"
EXPORT_LABELS = {"md": "📄 Word/MarkDown", "txt": "📝 Text", "tex": "🧬 Overleaf (LaTeX)", "ipynb": "🐍 Colab"}
ADAPTED_SECTIONS = (Section.ADAPTED, Section.SOL_ADAPTED)

with st.sidebar:
    st.header("Unitat")
    st.write(f"Pas actual: **{wiz.step.value}**")
    if wiz.step != Step.SETUP and st.button("Nova Unitat"):
        wiz.reset()
        st.session_state.images = {}
        st.rerun()
    with st.expander("❔ Guia d'ús dels formats"):
        st.markdown(
            "**🧬 Overleaf (LaTeX)**: vés a overleaf.com, crea un *Blank Project* i enganxa-hi el codi descarregat.\n\n"
            "**🐍 Colab (Notebook)**: obre el fitxer .ipynb per treballar amb cel·les de text i codi."
        )

if wiz.error:
    st.error(wiz.error)
    if st.button("Tancar avís"):
        wiz.dismiss_error()
        st.rerun()


def render_setup():
    prev = wiz.params or MaterialParams()
    col1, col2 = st.columns(2)
    with col1:
        subject = st.selectbox("Matèria", SUBJECTS, index=SUBJECTS.index(prev.subject) if prev.subject in SUBJECTS else 0)
    with col2:
        grade = st.selectbox("Curs", GRADES, index=GRADES.index(prev.grade), format_func=lambda g: f"{g} ESO")

    up = st.file_uploader("Document de referència (opcional)", type=list(SUPPORTED_EXTENSIONS))
    manual = st.text_area("Descripció de la unitat", value=prev.manual_description,
                          placeholder="Tema, objectius, enfocament...")

    characters, scenario = prev.characters, prev.scenario
    if subject in NARRATIVE_SUBJECTS:
        st.subheader("👥 Els 3 Personatges Protagonistes")
        characters = []
        for i, col in enumerate(st.columns(3)):
            old = prev.characters[i] if i < len(prev.characters) else Character()
            with col:
                name = st.text_input(f"Personatge {i + 1}", value=old.name, key=f"char_name_{i}",
                                     placeholder="Nom del personatge")
                desc = st.text_area("Descripció", value=old.description, key=f"char_desc_{i}",
                                    placeholder="Breu descripció (personalitat, trets...)")
            characters.append(Character(name, desc))
        st.subheader("📍 L'Escenari de la Història")
        scenario = st.text_area("Escenari", value=prev.scenario,
                                placeholder="Descriu on passa l'acció (un bosc encantat, una nau espacial, l'institut...)")

    document_text = prev.document_text
    if up is not None:
        try:
            document_text = read_upload(st.session_state, up.file_id, up.name, up.getvalue())
        except FileReadError as e:
            st.error(str(e))
            st.stop()
        st.success(f"Document llegit: {len(document_text)} caràcters.")

    params = MaterialParams(
        subject=subject,
        grade=grade,
        characters=characters,
        scenario=scenario,
        manual_description=manual,
        document_text=document_text,
        settings=prev.settings,
    )
    if st.button("Analitzar continguts ➡", type="primary", disabled=not setup_is_valid(params)):
        try:
            with st.spinner("Analitzant el document..."):
                topics = analyze_content_parts(document_text, manual)
        except GenerationError as e:
            st.error(str(e))
            return
        wiz.submit_setup(params, topics)
        st.rerun()
    elif not setup_is_valid(params):
        st.info("Puja un document o escriu una descripció" +
                (", i completa els personatges i l'escenari." if params.is_narrative else "."))


def render_topics():
    params = wiz.params
    st.subheader("📚 Blocs de contingut")
    levels = [level.value for level in TheoryLevel]
    for i, topic in enumerate(params.topics):
        with st.expander(topic.title, expanded=True):
            if topic.snippet:
                st.caption(topic.snippet)
            c1, c2, c3, c4, c5 = st.columns([1, 2, 1, 1, 1])
            topic.is_included = c1.checkbox("Incloure", value=topic.is_included, key=f"inc_{i}")
            topic.theory = TheoryLevel(c2.selectbox("Teoria", levels, index=levels.index(topic.theory.value),
                                                    key=f"theory_{i}"))
            topic.systematization_count = int(c3.number_input("Exercicis base", 0, 20,
                                                              topic.systematization_count, key=f"base_{i}"))
            topic.extension_count = int(c4.number_input("Ampliació", 0, 20, topic.extension_count, key=f"ext_{i}"))
            topic.is_adapted = c5.checkbox("DUA", value=topic.is_adapted, key=f"dua_{i}")

    st.subheader("⚙️ Configuració de la generació")
    col1, col2 = st.columns(2)
    current = params.settings
    with col1:
        temperature = st.slider("Temperatura", 0.0, 2.0, float(current.temperature), 0.05)
    with col2:
        model = current.model or MODEL_NAME
        choices = MODEL_CHOICES if model in MODEL_CHOICES else [model] + MODEL_CHOICES
        model = st.selectbox("Model", choices, index=choices.index(model))
    params.settings = GenerationSettings(temperature=temperature, model=model)

    back, go = st.columns(2)
    if back.button("⬅ Tornar"):
        wiz.back_to_setup()
        st.rerun()
    # a second generation is refused by WizardState.start_generation, not by this button
    if go.button("✨ Generar Materials", type="primary", disabled=not topics_are_valid(params)):
        run_generation()


def run_generation():
    wiz.start_generation()
    st.info("Generant material didàctic: aplicant protocols DUA i criteris Bloom...")
    tabs = st.tabs([s.label for s in Section])
    slots = {s: tab.empty() for s, tab in zip(Section, tabs)}

    def show(material):
        wiz.update_material(material)
        for s in Section:
            slots[s].markdown(material.get(s) or PLACEHOLDER)

    try:
        material = generate_material_stream(wiz.params, on_update=show)
    except GenerationError as e:
        wiz.fail_generation(str(e))
        st.rerun()
    wiz.finish_generation(material)
    st.rerun()


def render_illustrations(text, section):
    images = st.session_state.images
    for n, desc in enumerate(find_image_tags(text)):
        if desc in images:
            st.image(images[desc], caption=desc)
        elif st.button(f"🖼️ Generar imatge: {desc}", key=f"img_{section.value}_{n}"):
            try:
                with st.spinner("Generant imatge..."):
                    image = generate_illustration(desc)
            except GenerationError as e:
                st.error(str(e))
                continue
            if image is None:
                st.warning("El model no ha retornat cap imatge.")
                continue
            images[desc] = image
            st.image(image, caption=desc)


def render_result():
    material = wiz.material
    back, restart = st.columns(2)
    if back.button("⬅ Editar blocs"):
        wiz.back_to_edit()
        st.rerun()
    if restart.button("Tornar a l'inici"):
        wiz.reset()
        st.session_state.images = {}
        st.rerun()

    for section, tab in zip(Section, st.tabs([s.label for s in Section])):
        with tab:
            text = material.get(section)
            st.caption(f"Assistent Didàctic · {section.doc_title}")
            if not text:
                if section in ADAPTED_SECTIONS and not material.has_adapted_version:
                    st.info("Cap bloc marcat amb DUA: no s'ha generat versió adaptada.")
                else:
                    st.warning("Aquesta secció ha arribat buida.")
                continue
            cols = st.columns(len(FORMATS))
            for col, fmt in zip(cols, FORMATS):
                export = export_section(text, section, fmt)
                col.download_button(EXPORT_LABELS[fmt], export.data, file_name=export.filename,
                                    mime=export.mime_type, key=f"dl_{section.value}_{fmt}")
            st.markdown(text)
            if section in (Section.GENERAL, Section.ADAPTED):
                render_illustrations(text, section)


if wiz.step == Step.SETUP:
    render_setup()
elif wiz.step == Step.TOPICS:
    render_topics()
elif wiz.step == Step.RESULT and wiz.material is not None:
    render_result()
else:
    logger.warning("result step without material, resetting wizard")
    wiz.reset()
    st.rerun()
