"""
Export of one displayed section to a downloadable file.

Markdown and text are the raw section. LaTeX wraps the text in a fixed
preamble with headings turned into sectioning commands. The notebook is a
single markdown cell.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass

from .models import Section

FILENAME_STEM = "material-didactic"

LATEX_PREAMBLE = (
    "\\documentclass[12pt]{article}\n"
    "\\usepackage[utf8]{inputenc}\n"
    "\\usepackage[catalan]{babel}\n"
    "\\usepackage[margin=1in]{geometry}\n"
)

_HEADING = re.compile(r"^ {0,3}(#+)(?:[ \t]+(.*?))?[ \t#]*$")
_LATEX_COMMANDS = {1: "section", 2: "subsection", 3: "subsubsection"}


@dataclass(frozen=True)
class ExportFile:
    filename: str
    mime_type: str
    data: str


def to_markdown(text: str) -> str:
    return text


def to_latex(text: str) -> str:
    lines = []
    for line in text.split("\n"):
        match = _HEADING.match(line)
        if match:
            command = _LATEX_COMMANDS.get(len(match.group(1)), "paragraph")
            line = f"\\{command}{{{match.group(2) or ''}}}"
        lines.append(line)
    body = "\n".join(lines)
    return f"{LATEX_PREAMBLE}\\begin{{document}}\n{body}\n\\end{{document}}"


def to_notebook(text: str) -> str:
    notebook = {
        "cells": [
            {
                "cell_type": "markdown",
                "metadata": {},
                "source": [line + "\n" for line in text.split("\n")],
            }
        ],
        "metadata": {},
        "nbformat": 4,
        "nbformat_minor": 0,
    }
    return json.dumps(notebook, ensure_ascii=False)


FORMATS = {
    "md": ("text/markdown", to_markdown),
    "txt": ("text/plain", to_markdown),
    "tex": ("text/x-tex", to_latex),
    "ipynb": ("application/x-ipynb+json", to_notebook),
}


def export_section(content: str, section: Section, fmt: str) -> ExportFile:
    try:
        mime, convert = FORMATS[fmt]
    except KeyError:
        raise ValueError(f"unknown export format {fmt!r}, expected one of {sorted(FORMATS)}") from None
    return ExportFile(
        filename=f"{FILENAME_STEM}-{Section(section).value}.{fmt}",
        mime_type=mime,
        data=convert(content),
    )
