# didactica/config.py: env driven, same .env the Streamlit app reads
import os
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv(override=True)

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
MODEL_NAME = os.getenv("MODEL_NAME", "gemini-3-flash-preview")
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "gemini-3-flash-preview")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image")
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.7"))
MAX_ANALYSIS_CHARS = int(os.getenv("MAX_ANALYSIS_CHARS", "15000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MODEL_CHOICES = ["gemini-3-flash-preview", "gemini-3-pro-preview", "gemini-2.5-flash"]


def configure_logging(level: str = None):
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or LOG_LEVEL,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {name}:{line} | {message}",
    )
