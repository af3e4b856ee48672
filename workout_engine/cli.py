from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_FTP_WATTS, get_config
from .io.telemetry_loader import TelemetryLoadError, load_samples
from .metrics.compute import compute_stats
from .models.types import CompileResult, WorkoutSegment
from .notation.assembler import compile_workout
from .storage.zwo import ZwoExportError, serialize_zwo, validate_zwo, write_zwo
from .summary.description import describe_workout, short_description
from .summary.naming import generate_workout_name

logger = logging.getLogger(__name__)


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _format_target(segment: WorkoutSegment) -> str:
    start = segment.target_range
    text = f"{start.low:.0f}W" if start.low == start.high else f"{start.low:.0f}-{start.high:.0f}W"
    if segment.ramp_to_range is not None:
        end = segment.ramp_to_range
        text += f" -> {end.high:.0f}W"
    return text


def _print_plan(result: CompileResult) -> None:
    plan = result.plan
    print(f"{plan.name} ({plan.subtitle})")
    for idx, seg in enumerate(plan.segments, start=1):
        label = f"  {seg.label}" if seg.label else ""
        print(f"{idx:3d}. {seg.phase.value:<9} {seg.duration_sec:>5d}s  {_format_target(seg):<16} {seg.kind.value}{label}")
    for diag in result.diagnostics:
        print(f"warning: {diag}")


def _compile(args: argparse.Namespace) -> CompileResult:
    result = compile_workout(_read_text(args.workout), args.ftp, name=args.name)
    plan = result.plan
    if not args.name and plan.work_segments:
        plan = plan.with_name(generate_workout_name(plan))
    return CompileResult(plan=plan, diagnostics=result.diagnostics)


def cmd_compile(args: argparse.Namespace) -> int:
    result = _compile(args)
    _print_plan(result)
    if result.plan.segments:
        print(short_description(result.plan))
    if args.strict and result.diagnostics:
        return 1
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    result = _compile(args)
    for diag in result.diagnostics:
        print(f"warning: {diag}")
    if not result.plan.segments:
        print("Nothing to export: workout has no valid segments.")
        return 1
    if args.output:
        out = write_zwo(result.plan, args.output)
        print(f"Wrote {out}")
    else:
        sys.stdout.write(serialize_zwo(result.plan))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    report = validate_zwo(_read_text(args.zwo))
    if report.valid:
        print(f"{args.zwo}: valid")
        return 0
    for err in report.errors:
        print(f"{args.zwo}: {err}")
    return 1


def cmd_analyze(args: argparse.Namespace) -> int:
    result = _compile(args)
    samples = load_samples(args.telemetry)
    stats = compute_stats(samples, args.ftp, plan=result.plan)
    print(result.plan.name)
    print(f"  Samples:        {len(samples)}")
    print(f"  Duration:       {stats.duration_sec:.0f}s")
    print(f"  Avg Power:      {stats.average_power:.1f}W")
    print(f"  Max Power:      {stats.max_power:.0f}W")
    print(f"  NP:             {stats.normalized_power:.1f}W")
    print(f"  IF:             {stats.intensity_factor:.2f}")
    print(f"  VI:             {stats.variability_index:.2f}")
    print(f"  TSS:            {stats.training_stress_score:.1f}")
    print(f"  Adherence:      {stats.adherence_pct:.1f}%")
    print(f"  Avg Cadence:    {stats.average_cadence:.0f}rpm")
    print(f"  Avg HR:         {stats.average_heart_rate:.0f}bpm")
    print(f"  Work:           {stats.work_kj:.1f}kJ")
    for zone, pct in stats.zone_distribution:
        print(f"    {zone}: {pct:5.1f}%")
    print(describe_workout(result.plan, stats))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Workout Engine CLI: compile workout notation, export ZWO, analyze rides")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def _workout_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("workout", help="Workout notation text file")
        p.add_argument("--ftp", type=float, default=DEFAULT_FTP_WATTS, help=f"Rider FTP in watts (default: {DEFAULT_FTP_WATTS:.0f})")
        p.add_argument("--name", help=f"Workout name (default: generated, or '{get_config().parser.default_name}')")

    p_compile = sub.add_parser("compile", help="Compile notation and print the segment plan")
    _workout_args(p_compile)
    p_compile.add_argument("--strict", action="store_true", help="Exit non-zero when any line produced a diagnostic")
    p_compile.set_defaults(func=cmd_compile)

    p_export = sub.add_parser("export", help="Compile notation and export a ZWO file")
    _workout_args(p_export)
    p_export.add_argument("--output", "-o", help="Output .zwo path (default: stdout)")
    p_export.set_defaults(func=cmd_export)

    p_validate = sub.add_parser("validate", help="Structurally validate a ZWO file")
    p_validate.add_argument("zwo", help="ZWO file to check")
    p_validate.set_defaults(func=cmd_validate)

    p_analyze = sub.add_parser("analyze", help="Compute ride metrics against a workout plan")
    _workout_args(p_analyze)
    p_analyze.add_argument("telemetry", help="Ride telemetry (.fit or .csv)")
    p_analyze.set_defaults(func=cmd_analyze)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (OSError, TelemetryLoadError, ZwoExportError) as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
