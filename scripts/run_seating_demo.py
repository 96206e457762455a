"""Demo runner: draw a few seats by roulette, then batch-assign the rest.

Usage (PowerShell):
    python scripts\\run_seating_demo.py --draws 3 --seed 7

"""

from __future__ import annotations

from pathlib import Path
import argparse
import logging
import sys

# Ensure project root is on PYTHONPATH when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roulette import HighlightConfig
from seating import SeatingError, SeatingSession, SeatingSettings, load_seating_problem_from_json
from utils.seating_export import df_to_markdown, history_df, seating_grid_df


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seat roulette demo")
    parser.add_argument("--problem", default=str(ROOT / "data" / "sample_seating_problem.json"))
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--draws", type=int, default=3, help="number of roulette draws before the batch")
    parser.add_argument("--ticks", type=int, default=12, help="highlight ticks per draw")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    snapshot = load_seating_problem_from_json(args.problem)

    # Headless: the highlight is advanced by hand instead of a ticker thread.
    settings = SeatingSettings(
        highlight=HighlightConfig(seed=args.seed),
        run_highlight_thread=False,
    )

    with SeatingSession(snapshot, settings, seed=args.seed) as session:
        for _ in range(max(0, args.draws)):
            if session.is_complete:
                break
            try:
                target = session.start_draw()
            except SeatingError as e:
                print(f"Draw could not start: {e}")
                break
            for _ in range(max(0, args.ticks)):
                session.tick_highlight()
            try:
                entry = session.stop_draw()
            except SeatingError as e:
                # start_draw would pick the same student again
                print(f"Draw for {target} failed: {e}")
                break
            print(f"Roulette: {entry.student_id} -> {entry.seat_id}")

        if not session.is_complete:
            try:
                result = session.assign_all_remaining()
            except SeatingError as e:
                print(f"Batch failed: {e}")
            else:
                for msg in result.errors:
                    print(f"Batch: {msg}")

        assigned, total = session.progress
        print(f"\n=== Seating chart ({assigned}/{total} seated) ===")
        print(df_to_markdown(seating_grid_df(session.snapshot)))

        print("=== History ===")
        print(history_df(session.snapshot).to_string(index=False))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
