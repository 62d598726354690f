from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

import pandas as pd


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.config import DATASET_VERSION, LATE_THRESHOLD_MINUTES  # noqa: E402
from src.reporting.report import ReportSection, render_html, write_report  # noqa: E402
from src.utils.logging import run_metadata, write_json  # noqa: E402


REPORT_TITLE = "Linear and Logistic Regression on NYC Flights (2013)"
TOP_CORRELATIONS = 15

FAMILY_TEXT = {
    "linear": (
        "Linear models",
        "Arrival delay (minutes) is modelled as a linear combination of predictors. "
        "Each model adds terms to the previous one; all are fitted on the same rows.",
    ),
    "logistic": (
        "Logistic models",
        f"Late arrival (more than {LATE_THRESHOLD_MINUTES} minutes behind schedule) is modelled on the log-odds scale. "
        "Coefficients are reported as odds ratios.",
    ),
}


def _read(tables_dir: Path, name: str, hint: str) -> pd.DataFrame:
    path = tables_dir / name
    if not path.exists():
        raise SystemExit(f"Missing input table: {path}. Run {hint} first.")
    return pd.read_csv(path)


def descriptive_sections(tables_dir: Path, figures_dir: Path) -> List[ReportSection]:
    hint = "scripts/02_eda.py"
    figure = figures_dir / "correlation_matrix.png"
    if not figure.exists():
        raise SystemExit(f"Missing correlation plot: {figure}. Run {hint} first.")

    correlations = _read(tables_dir, "correlations_tidy.csv", hint).head(TOP_CORRELATIONS)
    return [
        ReportSection(
            "Descriptive statistics",
            text="Numeric variables after joining weather, planes, airlines and airports.",
        ),
        ReportSection("Numeric summary", table=_read(tables_dir, "summary_numeric.csv", hint), level=3),
        ReportSection("Arrival delay by carrier", table=_read(tables_dir, "summary_by_carrier.csv", hint), level=3),
        ReportSection("Arrival delay by origin airport", table=_read(tables_dir, "summary_by_origin.csv", hint), level=3),
        ReportSection("Arrival delay by season", table=_read(tables_dir, "summary_by_season.csv", hint), level=3),
        ReportSection("Correlations"),
        ReportSection(
            "Correlation matrix",
            figure_path=figure,
            caption="Pairwise-complete correlations among delay, schedule and weather variables.",
            level=3,
        ),
        ReportSection(f"Strongest {TOP_CORRELATIONS} pairwise correlations", table=correlations, level=3),
    ]


def family_sections(tables_dir: Path, family: str, specs: pd.DataFrame) -> List[ReportSection]:
    hint = "scripts/03_fit_models.py"
    title, text = FAMILY_TEXT[family]
    fam_specs = specs.loc[specs["family"] == family]

    sections = [
        ReportSection(title, text=text),
        ReportSection("Model formulas", table=fam_specs[["model", "formula", "description"]], level=3),
    ]
    for model, formula in zip(fam_specs["model"], fam_specs["formula"]):
        if family == "logistic":
            table = _read(tables_dir, f"odds_ratios_{model}.csv", hint)
        else:
            table = _read(tables_dir, f"coefficients_{model}.csv", hint)
        sections.append(ReportSection(f"{model}", table=table, caption=formula, level=3))

    sections.extend(
        [
            ReportSection("Model fit", table=_read(tables_dir, f"glance_{family}.csv", hint), level=3),
            ReportSection(
                "Model comparison",
                table=_read(tables_dir, f"compare_performance_{family}.csv", hint),
                caption="bf: BIC-approximated Bayes factor against the first model (values above 1 favour the model).",
                level=3,
            ),
            ReportSection(
                "Sequential likelihood-ratio tests",
                table=_read(tables_dir, f"lr_tests_{family}.csv", hint),
                level=3,
            ),
        ]
    )
    return sections


def main() -> None:
    parser = argparse.ArgumentParser(description="Render the regression walkthrough as a single HTML report.")
    parser.add_argument("--outdir", type=Path, default=Path("outputs"), help="Directory holding tables/ and figures/.")
    parser.add_argument("--report", type=Path, default=None, help="Output HTML path (default: <outdir>/reports/).")
    parser.add_argument("--digits", type=int, default=3, help="Decimal places shown in tables.")
    args = parser.parse_args()

    if args.digits < 0:
        raise SystemExit("--digits must be >= 0.")

    tables_dir = args.outdir / "tables"
    figures_dir = args.outdir / "figures"
    report_path = args.report or (args.outdir / "reports" / "regression_report.html")

    specs = _read(tables_dir, "model_specs.csv", "scripts/03_fit_models.py")
    families = [f for f in ["linear", "logistic"] if (specs["family"] == f).any()]

    sections = descriptive_sections(tables_dir, figures_dir)
    for family in families:
        sections.extend(family_sections(tables_dir, family, specs))

    document = render_html(
        REPORT_TITLE,
        sections,
        notes=[
            f"Dataset: {DATASET_VERSION} (flights joined with weather, planes, airlines and airports).",
            "Cancelled and diverted flights (no arrival delay) are excluded.",
            "Estimates describe associations only.",
        ],
        digits=args.digits,
    )
    write_report(report_path, document)

    write_json(
        args.outdir / "logs" / "report_run_metadata.json",
        run_metadata(report=str(report_path), families=families, n_sections=len(sections)),
    )

    print(f"Wrote {report_path}")


if __name__ == "__main__":
    main()
