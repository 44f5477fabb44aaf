#!/usr/bin/env python3
"""
Drum Fit Calculator (CLI)

Asks for person and drum dimensions (cm), works out whether the people fit
and how much cement fills the rest of the drum, then prints a report and
saves a fill diagram.

Usage:
  python drum_fit.py --person-height 90 --person-width 30 \
      --drum-height 100 --drum-diameter 60 --count 1

Inputs come from (highest first): CLI flags → YAML config → interactive
prompt. With `--no-prompt` a missing dimension is an error and the count
defaults to 1.

Config YAML (default drum_fit.yaml, or $DRUM_FIT_CONFIG):
  drum:   { height_cm: 100, diameter_cm: 60 }
  person: { height_cm: 90, width_cm: 30, count: 1 }
  output: { dir: output }

Outputs to stdout the following sections:
  A) INPUTS
  B) RESULT (YAML)
  C) FILL DIAGRAM (SVG)
  D) SWEEP (only with --sweep N)
  E) TEXT SUMMARY

Saves (timestamped, in --output-dir):
  {ts}-drum_fit-{label}.yaml, .svg, .png and, with --sweep, {ts}-drum_fit-sweep-{label}.csv

Progress Reporting
------------------
- Flags: `--quiet`, `--verbose`, `--progress-json <path>`.
- Phases: read inputs → compute → sweep → render → export; emits final summary.
"""

from __future__ import annotations

import argparse
import json
import os
import re
import sys
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import yaml
from dotenv import load_dotenv

from drum_calculator import (
    MSG_DOES_NOT_FIT,
    MSG_OVERFILLED,
    DrumSpec,
    FitResult,
    InvalidInputError,
    PersonSpec,
    build_specs,
    compute,
    parse_count,
)
from drum_visualizer import render_png, render_svg


# ---------------- Progress utils (lightweight) ----------------
@dataclass
class Step:
    name: str
    status: str = "pending"  # pending | in_progress | completed | failed
    started_at: Optional[float] = None
    ended_at: Optional[float] = None
    items_total: Optional[int] = None
    items_done: int = 0


class ProgressReporter:
    def __init__(
        self,
        script: str,
        quiet: bool = False,
        verbose: bool = False,
        json_path: Optional[str] = None,
    ) -> None:
        self.script = script
        self.quiet = quiet
        self.verbose = verbose
        self.json_path = json_path
        self.t0 = time.time()
        self.steps: List[Step] = []
        self._isatty = sys.stdout.isatty()

    def start(self, name: str, total: Optional[int] = None) -> Step:
        st = Step(name=name, status="in_progress", started_at=time.time(), items_total=total)
        self.steps.append(st)
        if self.verbose and not self.quiet:
            print(f"→ {name}…")
        return st

    def update(self, st: Step, done: Optional[int] = None) -> None:
        if done is not None:
            st.items_done = done
        if self.verbose and not self.quiet:
            frac = ""
            if st.items_total:
                pct = int(100 * (st.items_done / max(1, st.items_total)))
                frac = f" {st.items_done}/{st.items_total} ({pct}%)"
            line = f"{st.name}:{frac}  elapsed {time.time() - (st.started_at or self.t0):.2f}s"
            end = "\r" if self._isatty else "\n"
            print(line, end=end, flush=True)

    def end(self, st: Step, status: str = "completed") -> None:
        st.status = status
        st.ended_at = time.time()
        if self.verbose and not self.quiet:
            elapsed = st.ended_at - (st.started_at or st.ended_at)
            print(f"✓ {st.name} in {elapsed:.2f}s")

    def finalize(self, totals: Dict[str, Any], errors: Optional[List[str]] = None) -> None:
        errors = errors or []
        elapsed = time.time() - self.t0
        if not self.quiet:
            print(
                f"[drum_fit] Summary: people={totals.get('people', 0)}, fit={totals.get('actual_count', 0)}, "
                f"percent_filled={totals.get('percent_filled', 0.0):.1f}, cement_l={totals.get('cement_liters', 0.0):.2f}, "
                f"files={totals.get('outputs', 0)} | elapsed={elapsed:.2f}s"
            )
            if errors:
                print(f"Warnings: {len(errors)}")
        if self.json_path:
            payload = {
                "script": self.script,
                "started_at": self.t0,
                "ended_at": time.time(),
                "elapsed_s": elapsed,
                "steps": [
                    {
                        "name": s.name,
                        "status": s.status,
                        "started_at": s.started_at,
                        "ended_at": s.ended_at,
                        "items_total": s.items_total,
                        "items_done": s.items_done,
                    }
                    for s in self.steps
                ],
                "totals": totals,
                "errors": errors,
            }
            Path(self.json_path).write_text(json.dumps(payload, indent=2), encoding="utf-8")


# ---------------- Config ----------------
DEFAULT_CONFIG = "drum_fit.yaml"
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_PERSON_COUNT = 1

# field name → (config section, config key, prompt text)
INPUT_FIELDS: Dict[str, tuple] = {
    "person_height": ("person", "height_cm", "Person height (cm): "),
    "person_width": ("person", "width_cm", "Person width (cm): "),
    "drum_height": ("drum", "height_cm", "Drum height (cm): "),
    "drum_diameter": ("drum", "diameter_cm", "Drum diameter (cm): "),
    "person_count": ("person", "count", f"People count [{DEFAULT_PERSON_COUNT}]: "),
}


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Read the YAML config into a flat {field: value} mapping.

    Missing file → {}. Unparsable file → warning, {}.
    Expected structure:
      drum:   { height_cm: 100, diameter_cm: 60 }
      person: { height_cm: 90, width_cm: 30, count: 1 }
      output: { dir: output }
    """
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        return {}
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        print(f"⚠️ Failed to parse {path}; using built-in defaults.")
        return {}
    if not isinstance(data, dict):
        print(f"⚠️ {path} is not a mapping; using built-in defaults.")
        return {}

    out: Dict[str, Any] = {}
    for name, (section, key, _) in INPUT_FIELDS.items():
        sec = data.get(section)
        if isinstance(sec, dict) and sec.get(key) is not None:
            out[name] = sec[key]
    output = data.get("output")
    if isinstance(output, dict) and isinstance(output.get("dir"), str):
        out["output_dir"] = output["dir"]
    return out


def resolve_inputs(
    args: argparse.Namespace,
    config: Dict[str, Any],
    prompt: Optional[Callable[[str], str]] = None,
) -> Dict[str, Any]:
    """Merge CLI flags over config values; ask `prompt` for anything still missing.

    Values are returned raw (numbers or strings); build_specs() checks them.
    """
    raw: Dict[str, Any] = {}
    for name, (_, _, question) in INPUT_FIELDS.items():
        value = getattr(args, name, None)
        if value is None:
            value = config.get(name)
        if value is None and prompt is not None:
            try:
                value = prompt(question).strip() or None
            except (EOFError, KeyboardInterrupt):
                value = None
        if value is None and name == "person_count":
            value = DEFAULT_PERSON_COUNT
        raw[name] = value
    return raw


# ---------------- Reporting ----------------
OUTCOMES = {MSG_DOES_NOT_FIT: "does_not_fit", MSG_OVERFILLED: "overflow"}


def outcome_of(result: FitResult) -> str:
    return OUTCOMES.get(result.message, "fit")


def summary_lines(result: FitResult) -> List[str]:
    lines = [result.message]
    if result.percent_filled > 100:
        lines.append("Cannot fit the human. Drum overflow detected!")
        lines.append("Drum Overflow! Reduce the number of people or adjust dimensions.")
        lines.append(f"People that fit by volume: {result.actual_count}")
    elif result.percent_filled == 100:
        lines.append("Drum is perfectly filled with the person included!")
    elif result.actual_count > 0:
        lines.append(f"Cement needed to fill the drum: {result.cement_liters:.2f} liters")
    return lines


def sweep_counts(drum: DrumSpec, person: PersonSpec, max_count: int) -> pd.DataFrame:
    """Evaluate the same drum and person size for 1..max_count people."""
    rows = []
    for n in range(1, max_count + 1):
        res = compute(drum, replace(person, count=n))
        rows.append({
            "count": n,
            "percent_filled": res.percent_filled,
            "actual_count": res.actual_count,
            "cement_volume_cm3": res.cement_volume,
            "cement_liters": res.cement_liters,
            "outcome": outcome_of(res),
        })
    return pd.DataFrame(rows, columns=["count", "percent_filled", "actual_count", "cement_volume_cm3", "cement_liters", "outcome"])


def make_label(label: Optional[str], drum: DrumSpec, person: PersonSpec) -> str:
    if not label:
        label = f"d{drum.diameter:g}x{drum.height:g}-p{person.width:g}x{person.height:g}-n{person.count}"
    return re.sub(r"[^A-Za-z0-9]+", "-", label).strip("-") or "drum"


# ---------------- Main ----------------
def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Cement needed to fill a drum with people inside; saves an SVG+PNG fill diagram.")
    ap.add_argument("--person-height", dest="person_height", default=None, help="Person height in cm")
    ap.add_argument("--person-width", dest="person_width", default=None, help="Person width (diameter) in cm")
    ap.add_argument("--drum-height", dest="drum_height", default=None, help="Drum height in cm")
    ap.add_argument("--drum-diameter", dest="drum_diameter", default=None, help="Drum diameter in cm")
    ap.add_argument("--count", dest="person_count", default=None, help=f"Number of people (default: {DEFAULT_PERSON_COUNT})")
    ap.add_argument(
        "--config",
        default=os.getenv("DRUM_FIT_CONFIG", DEFAULT_CONFIG),
        help="YAML file with drum/person defaults (default: $DRUM_FIT_CONFIG or drum_fit.yaml)",
    )
    ap.add_argument("--output-dir", default=None, help="Directory for outputs (default: config, $DRUM_FIT_OUTPUT_DIR or output)")
    ap.add_argument("--label", default=None, help="Optional label to include in filenames")
    ap.add_argument("--sweep", type=int, default=0, help="Also tabulate results for 1..N people and save a CSV")
    ap.add_argument("--no-diagram", action="store_true", help="Skip SVG/PNG diagram")
    ap.add_argument("--no-prompt", action="store_true", help="Never ask for missing values")
    ap.add_argument("--progress-json", default=None, help="Write progress JSON to this path")
    ap.add_argument("--quiet", action="store_true", help="Do not print the final summary line")
    ap.add_argument("--verbose", action="store_true", help="Print step-by-step logs")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.sweep < 0:
        ap.error("--sweep must be zero or a positive number of people")

    prog = ProgressReporter("drum_fit", quiet=args.quiet, verbose=args.verbose, json_path=args.progress_json)
    errors: List[str] = []

    st_in = prog.start("Read inputs")
    config = load_config(args.config)
    raw = resolve_inputs(args, config, prompt=None if args.no_prompt else input)
    try:
        drum, person = build_specs(**raw)
    except InvalidInputError as e:
        prog.end(st_in, status="failed")
        ap.error(str(e))
    prog.end(st_in)

    st_calc = prog.start("Compute fit")
    result = compute(drum, person)
    prog.end(st_calc)

    sweep_df: Optional[pd.DataFrame] = None
    if args.sweep:
        st_sweep = prog.start("Sweep people count", total=args.sweep)
        sweep_df = sweep_counts(drum, person, parse_count("sweep", args.sweep))
        prog.update(st_sweep, done=len(sweep_df))
        prog.end(st_sweep)

    ts = time.strftime("%Y%m%d-%H%M%S")
    label = make_label(args.label, drum, person)
    out_dir = Path(args.output_dir or config.get("output_dir") or os.getenv("DRUM_FIT_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR)

    print("A) INPUTS")
    print(f"Person: {person.height:g} cm tall, {person.width:g} cm wide  |  Count: {person.count}")
    print(f"Drum: {drum.height:g} cm tall, {drum.diameter:g} cm diameter")
    print(f"Volumes: person {person.volume:,.0f} cm³ (total {person.total_volume:,.0f} cm³)  |  drum {drum.volume:,.0f} cm³")

    payload = {
        "inputs": {
            "person": {"height_cm": person.height, "width_cm": person.width, "count": person.count},
            "drum": {"height_cm": drum.height, "diameter_cm": drum.diameter},
        },
        "result": {**result.to_dict(), "outcome": outcome_of(result)},
        "run": {"timestamp": ts, "command": " ".join(argv if argv is not None else sys.argv[1:]), "config": str(args.config)},
    }
    result_yaml = yaml.safe_dump(payload, sort_keys=False)
    print("\nB) RESULT (YAML)")
    print(result_yaml.strip())

    out_dir.mkdir(parents=True, exist_ok=True)
    outputs: List[str] = []

    def save_text(path: Path, text: str) -> None:
        try:
            path.write_text(text, encoding="utf-8")
            outputs.append(str(path))
            print(f"\n[Saved {path.name} in {out_dir}]")
        except OSError as e:
            errors.append(f"{path.name}: {e}")
            print(f"\n[Could not write {path.name}]")

    st_exp = prog.start("Export files")
    save_text(out_dir / f"{ts}-drum_fit-{label}.yaml", result_yaml)

    if not args.no_diagram:
        st_render = prog.start("Render diagram")
        title = f"Drum Fill | {label} | {ts}"
        svg_str = render_svg(result.percent_filled, drum.height, drum.diameter, title=title)
        print("\nC) FILL DIAGRAM (SVG)")
        print(svg_str)
        save_text(out_dir / f"{ts}-drum_fit-{label}.svg", svg_str)
        png_path = out_dir / f"{ts}-drum_fit-{label}.png"
        if render_png(result.percent_filled, str(png_path), drum.height, drum.diameter, title=title):
            outputs.append(str(png_path))
            print(f"\n[Saved {png_path.name} in {out_dir}]")
        else:
            errors.append(f"{png_path.name}: no PNG backend")
            print(f"\n[Could not write {png_path.name}; install cairosvg or Pillow]")
        prog.end(st_render)

    if sweep_df is not None:
        print("\nD) SWEEP")
        print(sweep_df.to_string(index=False, float_format=lambda v: f"{v:.2f}"))
        csv_path = out_dir / f"{ts}-drum_fit-sweep-{label}.csv"
        try:
            sweep_df.to_csv(csv_path, index=False)
            outputs.append(str(csv_path))
            print(f"\n[Saved {csv_path.name} in {out_dir}]")
        except OSError as e:
            errors.append(f"{csv_path.name}: {e}")
            print(f"\n[Could not write {csv_path.name}]")
    st_exp.items_done = st_exp.items_total = len(outputs)
    prog.end(st_exp)

    print("\nE) TEXT SUMMARY")
    print("\n".join(summary_lines(result)))

    prog.finalize(
        totals={
            "people": person.count,
            "actual_count": result.actual_count,
            "percent_filled": result.percent_filled,
            "cement_liters": result.cement_liters,
            "outcome": outcome_of(result),
            "outputs": len(outputs),
        },
        errors=errors,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
