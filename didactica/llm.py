import google.generativeai as genai
from loguru import logger

from .config import ANALYSIS_MODEL, GEMINI_API_KEY, IMAGE_MODEL, MODEL_NAME

genai.configure(api_key=GEMINI_API_KEY)


def _chunk_text(chunk) -> str:
    # .text raises on chunks that carry no text part (e.g. the closing one)
    try:
        return chunk.text or ""
    except ValueError:
        return ""


def stream_gemini(prompt: str, system: str = None, model: str = None, temperature: float = 0.7):
    """Yield the text of a streamed generation, chunk by chunk."""
    name = model or MODEL_NAME
    logger.debug("streaming from {} (prompt {} chars, temperature {})", name, len(prompt), temperature)
    gm = genai.GenerativeModel(name, system_instruction=system or None)
    stream = gm.generate_content(
        prompt,
        generation_config=genai.types.GenerationConfig(temperature=temperature),
        stream=True,
    )
    for chunk in stream:
        text = _chunk_text(chunk)
        if text:
            yield text


def ask_gemini_json(prompt: str, schema: dict, model: str = None) -> str:
    gm = genai.GenerativeModel(model or ANALYSIS_MODEL)
    resp = gm.generate_content(
        prompt,
        generation_config={"response_mime_type": "application/json", "response_schema": schema},
    )
    return _chunk_text(resp)


def generate_image(prompt: str, model: str = None):
    """Return the first inline image of the response, or None."""
    gm = genai.GenerativeModel(model or IMAGE_MODEL)
    resp = gm.generate_content(prompt)
    for candidate in resp.candidates or []:
        for part in candidate.content.parts:
            if part.inline_data and part.inline_data.data:
                return part.inline_data.data
    return None
