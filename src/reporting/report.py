from __future__ import annotations

import base64
import html
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

import pandas as pd

from .tables import format_table

_STYLE = """
body { font-family: Helvetica, Arial, sans-serif; max-width: 1100px; margin: 2em auto; color: #222; }
h1 { border-bottom: 2px solid #444; padding-bottom: 0.2em; }
h2 { margin-top: 2em; border-bottom: 1px solid #bbb; }
table.dataframe { border-collapse: collapse; font-size: 0.85em; margin: 0.8em 0; }
table.dataframe th, table.dataframe td { border: 1px solid #ccc; padding: 3px 8px; text-align: right; }
table.dataframe th { background: #f0f0f0; }
p.caption { color: #555; font-style: italic; }
img { max-width: 100%; }
"""


@dataclass
class ReportSection:
    """One block of the report: a heading, optional prose, and a table or figure."""

    title: str
    text: str = ""
    table: Optional[pd.DataFrame] = None
    figure_path: Optional[Path] = None
    caption: str = ""
    level: int = 2


def _figure_html(path: Path, alt: str) -> str:
    data = base64.b64encode(Path(path).read_bytes()).decode("ascii")
    return f'<img src="data:image/png;base64,{data}" alt="{html.escape(alt)}"/>'


def render_section(section: ReportSection, digits: int = 3) -> str:
    level = min(max(int(section.level), 1), 6)
    parts = [f"<h{level}>{html.escape(section.title)}</h{level}>"]
    if section.text:
        parts.append(f"<p>{html.escape(section.text)}</p>")
    if section.table is not None:
        parts.append(format_table(section.table, digits=digits).to_html(index=False, border=0, escape=True))
    if section.figure_path is not None:
        parts.append(_figure_html(section.figure_path, alt=section.title))
    if section.caption:
        parts.append(f'<p class="caption">{html.escape(section.caption)}</p>')
    return "\n".join(parts)


def render_html(
    title: str,
    sections: Sequence[ReportSection],
    *,
    notes: Iterable[str] = (),
    digits: int = 3,
) -> str:
    """Self-contained HTML document (figures inlined as base64 PNG)."""

    body = [f"<h1>{html.escape(title)}</h1>"]
    notes = list(notes)
    if notes:
        body.append("<ul>" + "".join(f"<li>{html.escape(n)}</li>" for n in notes) + "</ul>")
    body.extend(render_section(s, digits=digits) for s in sections)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\"/>\n"
        f"<title>{html.escape(title)}</title>\n<style>{_STYLE}</style>\n</head>\n<body>\n"
        + "\n".join(body)
        + "\n</body>\n</html>\n"
    )


def write_report(path: Path, document: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(document, encoding="utf-8")
