from pathlib import Path

import numpy as np
import pandas as pd

from src.reporting.figures import plot_correlation_matrix, save_figure
from src.reporting.report import ReportSection, render_html, write_report
from src.reporting.tables import format_p_value, format_table


def test_format_p_value():
    assert format_p_value(0.0000001) == "<0.001"
    assert format_p_value(0.04567) == "0.046"
    assert format_p_value(np.nan) == ""


def test_format_table_rounds_floats_only():
    df = pd.DataFrame({"term": ["Intercept", "x"], "estimate": [1.23456, -0.00049], "n": [10, 10], "p_value": [0.5, 1e-9]})
    out = format_table(df, digits=2)
    assert out["estimate"].tolist() == [1.23, -0.0]
    assert out["n"].tolist() == [10, 10]
    assert out["p_value"].tolist() == ["0.500", "<0.001"]
    # Input is left untouched.
    assert df["p_value"].iloc[1] == 1e-9


def test_render_html_inlines_figure(tmp_path: Path):
    corr = pd.DataFrame([[1.0, 0.9], [0.9, 1.0]], index=["a", "b"], columns=["a", "b"])
    fig = plot_correlation_matrix(corr, title="Test")
    figure_path = tmp_path / "corr.png"
    save_figure(fig, figure_path)
    assert figure_path.exists()

    table = pd.DataFrame({"model": ["<m1>"], "r2": [0.123456]})
    document = render_html(
        "Flights & delays",
        [
            ReportSection("Intro", text="Plain text."),
            ReportSection("Fit", table=table, caption="y ~ x", level=3),
            ReportSection("Plot", figure_path=figure_path),
        ],
        notes=["Associations only."],
    )

    assert document.startswith("<!DOCTYPE html>")
    assert "<title>Flights &amp; delays</title>" in document
    assert "<h3>Fit</h3>" in document
    assert "&lt;m1&gt;" in document
    assert "0.123" in document and "0.123456" not in document
    assert "data:image/png;base64," in document
    assert "<li>Associations only.</li>" in document

    out = tmp_path / "reports" / "report.html"
    write_report(out, document)
    assert out.read_text(encoding="utf-8") == document
