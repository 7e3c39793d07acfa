from __future__ import annotations

import argparse
import json
import platform
import re
import statistics
import sys
import tempfile
import zipfile
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from importlib import metadata
from pathlib import Path
from time import perf_counter
from typing import Any

import polars as pl

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from xlsrpt.report import (  # noqa: E402
    CellCurrency,
    CellDate,
    CellInt,
    CellPercent,
    CellStr,
    SpecReportColumn,
    SpecReportParams,
    write_report_from_frame,
    write_report_from_rows,
)
from xlsxwriter.utility import xl_col_to_name  # noqa: E402


@dataclass(frozen=True)
class ReportBenchmarkScenario:
    name: str
    mode: str
    n_rows: int
    n_repeat_cols: int  # each repeat adds one block of 5 columns
    if_alt_bg: bool = True


@dataclass(frozen=True)
class ReportBenchmarkStats:
    scenario: ReportBenchmarkScenario
    n_cols: int
    repeats: int
    warmup_runs: int
    times_seconds: list[float]
    mean_seconds: float
    median_seconds: float
    min_seconds: float
    max_seconds: float
    stdev_seconds: float
    rows_per_second_median: float
    output_size_bytes_mean: int


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run report generation benchmarks for xlsrpt.report.",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=5,
        help="Number of measured runs for each scenario.",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=1,
        help="Number of warmup runs for each scenario.",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=PROJECT_ROOT / "benchmarks" / "report" / "results",
        help="Directory where benchmark result files are written.",
    )
    parser.add_argument(
        "--profile",
        choices=("default", "huge"),
        default="default",
        help="Scenario profile to run.",
    )
    return parser.parse_args()


def build_scenarios(profile: str) -> list[ReportBenchmarkScenario]:
    if profile == "default":
        return [
            ReportBenchmarkScenario(name="keyed_tall", mode="keyed", n_rows=20_000, n_repeat_cols=2),
            ReportBenchmarkScenario(name="frame_tall", mode="frame", n_rows=20_000, n_repeat_cols=2),
        ]

    return [
        ReportBenchmarkScenario(name="keyed_huge", mode="keyed", n_rows=200_000, n_repeat_cols=4),
        ReportBenchmarkScenario(name="frame_huge", mode="frame", n_rows=200_000, n_repeat_cols=4),
    ]


def detect_xlsrpt_version() -> str:
    try:
        return metadata.version("xlsrpt")
    except metadata.PackageNotFoundError:
        return "local-src"


def build_columns(n_repeat_cols: int) -> tuple[SpecReportColumn, ...]:
    l_columns: list[SpecReportColumn] = []
    for n_idx in range(n_repeat_cols):
        l_columns.extend(
            [
                SpecReportColumn(f"id_{n_idx:02d}"),
                SpecReportColumn(f"name_{n_idx:02d}"),
                SpecReportColumn(f"share_{n_idx:02d}"),
                SpecReportColumn(f"amount_{n_idx:02d}", aggregate=True),
                SpecReportColumn(f"at_{n_idx:02d}"),
            ]
        )
    return tuple(l_columns)


def build_keyed_rows(*, n_rows: int, n_repeat_cols: int) -> dict[datetime, tuple[Any, ...]]:
    # timestamp keys inserted newest first, so ordering has real work to do
    ts_base = datetime(2024, 1, 1)
    dict_rows: dict[datetime, tuple[Any, ...]] = {}
    for n_row in reversed(range(n_rows)):
        ts_key = ts_base + timedelta(minutes=n_row)
        l_cells: list[Any] = []
        for n_idx in range(n_repeat_cols):
            l_cells.extend(
                [
                    CellInt(n_row),
                    CellStr(f"customer_{n_idx:02d}_{n_row % 10_000}"),
                    CellPercent((n_row % 100) / 100),
                    CellCurrency(n_row * (n_idx + 1) / 7.0),
                    CellDate(ts_key),
                ]
            )
        dict_rows[ts_key] = tuple(l_cells)
    return dict_rows


def build_dataframe(*, n_rows: int, n_repeat_cols: int) -> pl.DataFrame:
    df = pl.DataFrame({"row_id": pl.Series("row_id", range(n_rows), dtype=pl.Int64)})

    l_expr: list[pl.Expr] = []
    for n_idx in range(n_repeat_cols):
        l_expr.extend(
            [
                pl.col("row_id").alias(f"id_{n_idx:02d}"),
                (
                    pl.lit(f"customer_{n_idx:02d}_")
                    + (pl.col("row_id") % 10_000).cast(pl.String)
                ).alias(f"name_{n_idx:02d}"),
                # string percentages go through type inference
                ((pl.col("row_id") % 100).cast(pl.String) + pl.lit("%")).alias(
                    f"share_{n_idx:02d}"
                ),
                ((pl.col("row_id") * (n_idx + 1)).cast(pl.Float64) / 7.0).alias(
                    f"amount_{n_idx:02d}"
                ),
                pl.lit(datetime(2024, 1, 1)).alias(f"at_{n_idx:02d}"),
            ]
        )
    return df.with_columns(l_expr).drop("row_id")


def validate_xlsx_output(
    *, path_xlsx_out: Path, expected_rows_total: int, expected_cols_total: int
) -> None:
    with zipfile.ZipFile(path_xlsx_out) as zf:
        v_xml_sheet = zf.read("xl/worksheets/sheet1.xml")

    m_dimension = re.search(rb'<dimension[^>]*\sref="([^"]+)"', v_xml_sheet)
    if not m_dimension:
        raise ValueError("Missing worksheet dimension in `sheet1.xml`.")
    c_dimension_ref = m_dimension.group(1).decode("ascii")

    c_expected = f"A1:{xl_col_to_name(expected_cols_total - 1)}{expected_rows_total}"
    if c_dimension_ref != c_expected:
        raise ValueError(f"Dimension mismatch: expected={c_expected}, got={c_dimension_ref}.")
    n_rows_from_tags = v_xml_sheet.count(b"<row ")
    if n_rows_from_tags != expected_rows_total:
        raise ValueError(
            f"<row> tag count mismatch: expected={expected_rows_total}, got={n_rows_from_tags}."
        )
    if b"SUBTOTAL(109," not in v_xml_sheet:
        raise ValueError("Missing subtotal formula row.")


def run_one_write(
    *, scenario: ReportBenchmarkScenario, source: Any, path_xlsx_out: Path
) -> float:
    params = SpecReportParams(
        title=scenario.name,
        columns=build_columns(scenario.n_repeat_cols),
        file_out=path_xlsx_out,
        if_alt_bg=scenario.if_alt_bg,
        if_auto_filter=True,
        if_no_title_row=True,
    )
    n_t_start = perf_counter()
    if scenario.mode == "keyed":
        write_report_from_rows(params, source)
    else:
        write_report_from_frame(params, source)
    return perf_counter() - n_t_start


def benchmark_scenario(
    *, scenario: ReportBenchmarkScenario, repeat: int, warmup: int, path_dir_tmp: Path
) -> ReportBenchmarkStats:
    if scenario.mode == "keyed":
        source: Any = build_keyed_rows(
            n_rows=scenario.n_rows, n_repeat_cols=scenario.n_repeat_cols
        )
    else:
        source = build_dataframe(n_rows=scenario.n_rows, n_repeat_cols=scenario.n_repeat_cols)
    n_cols = 5 * scenario.n_repeat_cols
    # header + data + subtotal row
    n_rows_total = scenario.n_rows + 2

    l_times_seconds: list[float] = []
    l_output_size_bytes: list[int] = []
    for n_idx in range(warmup + repeat):
        path_file_out = path_dir_tmp / f"{scenario.name}_{n_idx}.xlsx"
        n_elapsed = run_one_write(scenario=scenario, source=source, path_xlsx_out=path_file_out)
        validate_xlsx_output(
            path_xlsx_out=path_file_out,
            expected_rows_total=n_rows_total,
            expected_cols_total=n_cols,
        )
        if n_idx >= warmup:
            l_times_seconds.append(n_elapsed)
            l_output_size_bytes.append(path_file_out.stat().st_size)
        path_file_out.unlink(missing_ok=True)

    n_median_seconds = statistics.median(l_times_seconds)
    return ReportBenchmarkStats(
        scenario=scenario,
        n_cols=n_cols,
        repeats=repeat,
        warmup_runs=warmup,
        times_seconds=l_times_seconds,
        mean_seconds=statistics.mean(l_times_seconds),
        median_seconds=n_median_seconds,
        min_seconds=min(l_times_seconds),
        max_seconds=max(l_times_seconds),
        stdev_seconds=statistics.stdev(l_times_seconds) if len(l_times_seconds) > 1 else 0.0,
        rows_per_second_median=scenario.n_rows / n_median_seconds if n_median_seconds else 0.0,
        output_size_bytes_mean=round(statistics.mean(l_output_size_bytes)),
    )


def render_markdown_summary(payload: dict[str, Any]) -> str:
    l_lines = [
        "# Report Benchmark Record",
        "",
        f"- Timestamp (UTC): `{payload['timestamp_utc']}`",
        f"- Command: `{payload['command']}`",
        f"- Platform: `{payload['platform']}`",
        f"- Python: `{payload['python_version']}`",
        "- Package versions:",
        f"  - `xlsrpt`: `{payload['packages']['xlsrpt']}`",
        f"  - `polars`: `{payload['packages']['polars']}`",
        "",
        "| scenario | mode | rows | cols | repeat | median_s | mean_s | rows_per_s | mean_size_mb |",
        "| --- | --- | ---: | ---: | ---: | ---: | ---: | ---: | ---: |",
    ]
    for item in payload["scenarios"]:
        cfg = item["scenario"]
        n_size_mb = float(item["output_size_bytes_mean"]) / (1024 * 1024)
        l_lines.append(
            f"| {cfg['name']} | {cfg['mode']} | {cfg['n_rows']} | {item['n_cols']} | "
            f"{item['repeats']} | {item['median_seconds']:.3f} | {item['mean_seconds']:.3f} | "
            f"{item['rows_per_second_median']:.0f} | {n_size_mb:.2f} |"
        )
    return "\n".join(l_lines) + "\n"


def main() -> int:
    args = parse_args()
    if args.repeat < 1:
        raise ValueError("--repeat must be >= 1")
    if args.warmup < 0:
        raise ValueError("--warmup must be >= 0")

    args.out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now(timezone.utc)
    c_timestamp_compact = ts.strftime("%Y%m%dT%H%M%SZ")

    with tempfile.TemporaryDirectory(prefix="xlsrpt_bench_") as c_dir_tmp:
        l_stats = [
            benchmark_scenario(
                scenario=cfg_scenario,
                repeat=args.repeat,
                warmup=args.warmup,
                path_dir_tmp=Path(c_dir_tmp),
            )
            for cfg_scenario in build_scenarios(args.profile)
        ]

    payload = {
        "timestamp_utc": ts.isoformat(),
        "command": " ".join(sys.argv),
        "platform": platform.platform(),
        "python_version": sys.version.split()[0],
        "packages": {"xlsrpt": detect_xlsrpt_version(), "polars": pl.__version__},
        "repeat": args.repeat,
        "warmup": args.warmup,
        "profile": args.profile,
        "scenarios": [asdict(item) for item in l_stats],
    }

    path_file_json = args.out_dir / f"report_{c_timestamp_compact}.json"
    path_file_md = args.out_dir / f"report_{c_timestamp_compact}.md"
    path_file_json.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
    )
    path_file_md.write_text(render_markdown_summary(payload), encoding="utf-8")

    print(path_file_json)
    print(path_file_md)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
