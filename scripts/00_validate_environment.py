import argparse
import sys

from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.config import LOGS_DIR, SOURCE_TABLES  # noqa: E402
from src.utils.logging import run_metadata, write_json  # noqa: E402


def bundled_table_shapes() -> dict:
    try:
        import nycflights13
    except ImportError:
        return {}
    return {name: list(getattr(nycflights13, name).shape) for name in SOURCE_TABLES}


def main() -> None:
    parser = argparse.ArgumentParser(description="Record interpreter, package versions and dataset availability.")
    parser.add_argument("--outdir", type=Path, default=LOGS_DIR.parent, help="Output directory (default: outputs/).")
    args = parser.parse_args()

    shapes = bundled_table_shapes()
    info = run_metadata(
        dataset_importable=bool(shapes),
        source_table_shapes=shapes,
    )
    out_path = args.outdir / "logs" / "environment_check.json"
    write_json(out_path, info)
    print(f"Wrote {out_path}")

    if not shapes:
        raise SystemExit("nycflights13 is not installed; install project dependencies first.")


if __name__ == "__main__":
    main()
