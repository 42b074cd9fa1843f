import json
from typing import Callable, Optional

from loguru import logger

from .demux import split_sections
from .llm import ask_gemini_json, generate_image, stream_gemini
from .models import GeneratedMaterial, MaterialParams, Section, Topic
from .prompts import SYSTEM_INSTRUCTION, build_analysis_prompt, build_image_prompt, build_material_prompt

GENERATION_ERROR = "Error en la comunicació amb el motor d'IA. Verifica la teva clau API o la connexió."
FALLBACK_TOPIC = ("Contingut Principal", "Anàlisi general.")

TOPICS_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING"},
            "snippet": {"type": "STRING"},
        },
        "required": ["title", "snippet"],
    },
}


class GenerationError(Exception):
    """The generation service failed; any partial output is void."""


def _parse_topics(raw: str) -> list[Topic]:
    try:
        data = json.loads(raw or "[]")
    except json.JSONDecodeError:
        logger.warning("analysis returned malformed JSON, using fallback topic")
        return [Topic(*FALLBACK_TOPIC)]
    if not isinstance(data, list):
        data = []
    topics = [
        Topic(title=str(item["title"]).strip(), snippet=str(item.get("snippet", "")).strip())
        for item in data
        if isinstance(item, dict) and str(item.get("title", "")).strip()
    ]
    if not topics:
        logger.warning("analysis returned no topics, using fallback topic")
        return [Topic(*FALLBACK_TOPIC)]
    return topics


def analyze_content_parts(file_text: str, manual_text: str) -> list[Topic]:
    """Ask the model for the unit's table of contents."""
    prompt = build_analysis_prompt(file_text, manual_text)
    try:
        raw = ask_gemini_json(prompt, TOPICS_SCHEMA)
    except Exception as e:
        logger.exception("content analysis failed")
        raise GenerationError(GENERATION_ERROR) from e
    topics = _parse_topics(raw)
    logger.info("analysis found {} topics", len(topics))
    return topics


def generate_material_stream(
    params: MaterialParams,
    on_update: Optional[Callable[[GeneratedMaterial], None]] = None,
) -> GeneratedMaterial:
    """Stream the five documents, re-splitting the whole buffer after each chunk.

    ``on_update`` sees the same material object after every chunk. The
    returned material is finished and can no longer change. On failure the
    partial material is dropped and ``GenerationError`` is raised.
    """
    material = GeneratedMaterial(has_adapted_version=params.has_adapted_version)
    prompt = build_material_prompt(params)
    logger.info(
        "generating material: {} {} ESO, {} topics, model {}",
        params.subject, params.grade, len(params.selected_topics), params.settings.model,
    )

    accumulated = ""
    chunks = 0
    # only the upstream call is wrapped; errors raised by on_update propagate as they are
    try:
        stream = iter(stream_gemini(
            prompt,
            system=SYSTEM_INSTRUCTION,
            model=params.settings.model,
            temperature=params.settings.temperature,
        ))
    except Exception as e:
        logger.exception("could not open generation stream")
        raise GenerationError(GENERATION_ERROR) from e
    while True:
        try:
            text = next(stream)
        except StopIteration:
            break
        except Exception as e:
            logger.exception("generation stream failed after {} chunks", chunks)
            raise GenerationError(GENERATION_ERROR) from e
        accumulated += text
        chunks += 1
        material.apply(split_sections(accumulated, final=False))
        if on_update:
            on_update(material)

    material.apply(split_sections(accumulated))
    material.finish()
    expected = [s for s in Section if material.has_adapted_version or s not in (Section.ADAPTED, Section.SOL_ADAPTED)]
    empty = [section.value for section in expected if not material.get(section)]
    if empty:
        logger.warning("generation finished with empty sections: {}", ", ".join(empty))
    logger.info("generation complete: {} chunks, {} chars", chunks, len(accumulated))
    if on_update:
        on_update(material)
    return material


def generate_illustration(description: str):
    """Separate image request for one ``[Imatge de: ...]`` description."""
    try:
        image = generate_image(build_image_prompt(description))
    except Exception as e:
        logger.exception("image generation failed for {!r}", description)
        raise GenerationError(GENERATION_ERROR) from e
    if image is None:
        logger.warning("image model returned no image for {!r}", description)
    return image
