"""Lap recorder for timing trials of algorithms and exporting them as CSV"""

from .recorder import Recorder, StateError, Trial

__all__ = ['Recorder', 'StateError', 'Trial']
