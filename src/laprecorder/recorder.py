"""
Lap Recorder - a stopwatch for comparing algorithms

Each timing record is a "trial" holding any number of "laps". When comparing
algorithms, a trial usually stands for one algorithm and each lap for that
algorithm applied to one input size or use case.

    Trial = [lap_0, lap_1, ..., lap_n]     (integer nanoseconds)

Usage:
    recorder = Recorder()

    for algorithm in algorithms:
        recorder.new_trial(algorithm.__name__)

        for case in cases:
            recorder.start_lap()
            algorithm(case)
            recorder.stop_lap()

        recorder.conclude_trial()

    # CSV-like table, one row per trial
    print(recorder)
"""

import time
import json
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

import numpy as np


class StateError(RuntimeError):
    """Raised when recorder calls are made out of order"""


@dataclass(frozen=True)
class Trial:
    """Named sequence of lap durations"""
    name: str
    laps: Tuple[int, ...] = ()

    @property
    def length(self) -> int:
        """Number of recorded laps"""
        return len(self.laps)

    @property
    def total_ns(self) -> int:
        return sum(self.laps)

    def to_row(self) -> str:
        """Render as `name,lap0,lap1,...,` (every field comma-terminated)"""
        return f"{self.name}," + "".join(f"{lap}," for lap in self.laps)


# Trial slot
@dataclass(frozen=True)
class NoTrial:
    pass


@dataclass(frozen=True)
class OpenTrial:
    name: str
    laps: List[int] = field(default_factory=list)

    def snapshot(self) -> Trial:
        return Trial(name=self.name, laps=tuple(self.laps))


# Lap slot
@dataclass(frozen=True)
class LapIdle:
    pass


@dataclass(frozen=True)
class LapInFlight:
    start_ns: int


TrialState = Union[NoTrial, OpenTrial]
LapState = Union[LapIdle, LapInFlight]


class Recorder:
    """
    Records trials of lap timings and exports them as a table.

    Only one trial may be open and only one lap may be in flight at a time.
    Use one Recorder per concurrent timing stream. Trials handed out are
    immutable snapshots; laps are only added through start_lap/stop_lap.
    """

    def __init__(self, clock: Callable[[], int] = time.perf_counter_ns):
        """
        Args:
            clock: Monotonic clock returning integer nanoseconds
        """
        self.clock = clock

        self._records: List[Trial] = []
        self._trial_state: TrialState = NoTrial()
        self._lap_state: LapState = LapIdle()
        self._trial_number = 0
        self._longest_trial = 0

    @property
    def trials(self) -> Tuple[Trial, ...]:
        """Concluded trials in the order they were concluded"""
        return tuple(self._records)

    @property
    def current_trial(self) -> Optional[Trial]:
        """Snapshot of the open trial, or None"""
        if isinstance(self._trial_state, OpenTrial):
            return self._trial_state.snapshot()
        return None

    @property
    def lap_in_progress(self) -> bool:
        return isinstance(self._lap_state, LapInFlight)

    @property
    def longest_trial(self) -> int:
        """Largest lap count seen, which sets the export header width"""
        return self._longest_trial

    def new_trial(self, name: Optional[str] = None) -> Trial:
        """
        Start a new trial.

        Args:
            name: Trial label, converted with str(). If omitted the trial
                number is used.

        Returns:
            Snapshot of the newly opened (empty) trial
        """
        if isinstance(self._trial_state, OpenTrial):
            raise StateError(
                "Unconcluded trial in progress. "
                "Use conclude_trial() before calling new_trial()"
            )

        number = self._trial_number
        self._trial_number += 1

        self._trial_state = OpenTrial(name=str(number) if name is None else str(name))
        return self._trial_state.snapshot()

    def conclude_trial(self) -> Trial:
        """
        Conclude the open trial. Trials must be concluded to be exported
        or before a new trial is started.

        A lap still in flight is discarded.

        Returns:
            The concluded trial, whose laps can no longer change
        """
        if not isinstance(self._trial_state, OpenTrial):
            raise StateError("No trial is currently active.")

        trial = self._trial_state.snapshot()
        self._records.append(trial)
        self._trial_state = NoTrial()
        self._lap_state = LapIdle()
        return trial

    def start_lap(self) -> None:
        """Start timing a new lap in the open trial"""
        if not isinstance(self._trial_state, OpenTrial):
            raise StateError("No trial is currently active.")
        if isinstance(self._lap_state, LapInFlight):
            raise StateError("Lap already started. Use stop_lap() first.")

        self._lap_state = LapInFlight(self.clock())

    def stop_lap(self) -> int:
        """
        Stop timing the current lap and record it.

        Returns:
            Lap duration in nanoseconds
        """
        if not isinstance(self._lap_state, LapInFlight):
            raise StateError("No lap started.")
        if not isinstance(self._trial_state, OpenTrial):
            raise StateError("No trial is currently active.")

        stop = self.clock()
        lap_length = stop - self._lap_state.start_ns

        laps = self._trial_state.laps
        laps.append(lap_length)
        if len(laps) > self._longest_trial:
            self._longest_trial = len(laps)

        self._lap_state = LapIdle()
        return lap_length

    @contextmanager
    def lap(self) -> Iterator[None]:
        """Time the body of a `with` block as one lap"""
        self.start_lap()
        try:
            yield
        finally:
            self.stop_lap()

    @contextmanager
    def trial(self, name: Optional[str] = None) -> Iterator[str]:
        """
        Open a trial for the body of a `with` block and conclude it after.

        The trial is concluded even if the body raises, so the laps recorded
        before the error are kept and the recorder is ready for a new trial.

        Yields:
            Name of the open trial
        """
        trial = self.new_trial(name)
        try:
            yield trial.name
        finally:
            self.conclude_trial()

    def format(self, row_separator: str = "\n") -> str:
        """
        Convert all concluded trials to CSV format.

        Args:
            row_separator: Appended after each data row. The header always
                ends with a newline; pass "" to join data rows back-to-back.

        Returns:
            Header `Name,Time 0,...,Time {n-1},` followed by one row per trial
        """
        header = "Name," + "".join(f"Time {i}," for i in range(self._longest_trial))
        rows = [trial.to_row() + row_separator for trial in self._records]
        return header + "\n" + "".join(rows)

    def __str__(self) -> str:
        return self.format()

    def get_statistics(self) -> Dict[str, Dict[str, float]]:
        """
        Get lap statistics for every concluded trial.

        Returns:
            Mapping of trial name to mean, median, std, min, max (ms) and count
        """
        if not self._records:
            raise RuntimeError("No trials recorded yet")

        stats = {}
        for trial in self._records:
            if not trial.laps:
                stats[trial.name] = {'count': 0}
                continue

            laps_ms = np.asarray(trial.laps, dtype=np.float64) / 1e6
            stats[trial.name] = {
                'count': trial.length,
                'mean_ms': float(np.mean(laps_ms)),
                'median_ms': float(np.median(laps_ms)),
                'std_ms': float(np.std(laps_ms)),
                'min_ms': float(np.min(laps_ms)),
                'max_ms': float(np.max(laps_ms)),
            }

        return stats

    def save_csv(self, filepath: str) -> None:
        """Save the exported table to a CSV file"""
        with open(filepath, 'w') as f:
            f.write(self.format())

    def save_results(self, filepath: str) -> None:
        """Save trials, raw laps and statistics to a JSON file"""
        results = {
            'num_trials': len(self._records),
            'longest_trial': self._longest_trial,
            'trials': [
                {'name': trial.name, 'laps_ns': list(trial.laps)}
                for trial in self._records
            ],
            'statistics': self.get_statistics() if self._records else {},
        }

        with open(filepath, 'w') as f:
            json.dump(results, f, indent=2)

    def print_summary(self) -> None:
        """Print human-readable summary of recorded trials"""
        stats = self.get_statistics()

        print("=" * 70)
        print("Lap Recorder Results")
        print("=" * 70)
        print(f"\nTrials recorded: {len(self._records)}")
        print(f"Longest trial:   {self._longest_trial} laps")

        for name, trial_stats in stats.items():
            print(f"\nTrial '{name}' ({trial_stats['count']} laps):")
            if trial_stats['count'] == 0:
                continue
            print(f"  - Mean:   {trial_stats['mean_ms']:.4f} ms")
            print(f"  - Median: {trial_stats['median_ms']:.4f} ms")
            print(f"  - Std:    {trial_stats['std_ms']:.4f} ms")
            print(f"  - Range:  [{trial_stats['min_ms']:.4f}, {trial_stats['max_ms']:.4f}] ms")
        print("=" * 70)
