"""
Allocation Profiler - example driver for the lap recorder

Times loops that allocate empty lists, growing the loop size on every lap,
and prints the resulting table.

Usage:
    python -m laprecorder.profile_allocations --num_laps 10 --scale 100
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from laprecorder.recorder import Recorder


def allocate_lists(count: int) -> None:
    """Allocate `count` throwaway empty lists"""
    for _ in range(count):
        []


def profile_allocations(num_laps: int = 10,
                        scale: int = 100,
                        num_trials: int = 1,
                        recorder: Optional[Recorder] = None,
                        show_progress: bool = True) -> Recorder:
    """
    Record allocation loops of increasing size.

    Lap i of every trial allocates `scale * i` lists.

    Args:
        num_laps: Laps per trial
        scale: Allocations per lap index
        num_trials: Number of (auto-named) trials to record
        recorder: Recorder to use; a new one is created if omitted
        show_progress: Show a progress bar per trial

    Returns:
        Recorder holding the concluded trials
    """
    if recorder is None:
        recorder = Recorder()

    for _ in range(num_trials):
        trial = recorder.new_trial()

        laps = range(num_laps)
        if show_progress:
            laps = tqdm(laps, desc=f'Trial {trial.name}')

        for i in laps:
            recorder.start_lap()
            allocate_lists(scale * i)
            recorder.stop_lap()

        recorder.conclude_trial()

    return recorder


def main(argv=None):
    parser = argparse.ArgumentParser(description='Time list allocation loops')
    parser.add_argument('--num_laps', type=int,
                       default=10,
                       help='Number of laps per trial')
    parser.add_argument('--scale', type=int,
                       default=100,
                       help='Allocations per lap index')
    parser.add_argument('--trials', type=int,
                       default=1,
                       help='Number of trials to record')
    parser.add_argument('--output', type=str,
                       default=None,
                       help='Optional output path (.json for results, otherwise CSV)')
    parser.add_argument('--quiet', action='store_true',
                       help='Disable progress bars')

    args = parser.parse_args(argv)

    if args.num_laps < 0 or args.scale < 0 or args.trials < 0:
        print("Error: --num_laps, --scale and --trials must be non-negative")
        return 1

    recorder = profile_allocations(
        num_laps=args.num_laps,
        scale=args.scale,
        num_trials=args.trials,
        show_progress=not args.quiet,
    )

    print(recorder)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if output_path.suffix == '.json':
            recorder.save_results(str(output_path))
        else:
            recorder.save_csv(str(output_path))
        print(f"Results saved to {output_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
