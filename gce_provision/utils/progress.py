"""
GCE Provision - Progress Tracking

Step progress for create runs, drawn with tqdm on interactive runs and
silent otherwise.
"""

import sys

from tqdm import tqdm

BAR_FORMAT = '{desc}: {percentage:3.0f}%|{bar}| {n_fmt}/{total_fmt} [{elapsed}]'


class SimpleProgressTracker:
    """
    Counts steps without drawing anything.

    Used when progress is disabled (CI logs, tests).

    Example:
        tracker = create_progress_tracker(total_steps=5, desc="Create instance")
        tracker.start()

        tracker.update_step("Creating boot disk")
        # ... do work ...
        tracker.advance()

        tracker.finish()
    """

    def __init__(self, total_steps: int = 0, desc: str = "Operation"):
        self.total_steps = total_steps
        self.desc = desc
        self.current_step = 0
        self.current_step_name = ""

    def start(self):
        self.current_step = 0

    def update_step(self, step_name: str):
        self.current_step_name = step_name

    def advance(self, steps: int = 1):
        self.current_step += steps

    def finish(self):
        pass

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finish()
        return False


class ProgressTracker(SimpleProgressTracker):
    """Step tracker drawing a tqdm bar that names the current step."""

    def __init__(self, total_steps: int, desc: str = "Operation", stream=None):
        super().__init__(total_steps, desc)
        self.stream = stream or sys.stdout
        self.bar = None

    def start(self):
        super().start()
        self.bar = tqdm(
            total=self.total_steps,
            desc=self.desc,
            bar_format=BAR_FORMAT,
            ncols=80,
            file=self.stream
        )

    def update_step(self, step_name: str):
        super().update_step(step_name)
        if self.bar:
            self.bar.set_description(f"{self.desc} - {step_name}")

    def advance(self, steps: int = 1):
        super().advance(steps)
        if self.bar:
            self.bar.update(steps)

    def finish(self):
        # Safe to call twice; the orchestrator finishes in a finally block
        if self.bar:
            self.bar.close()
            self.bar = None


def create_progress_tracker(total_steps: int, desc: str = "Operation",
                            enabled: bool = True):
    """
    Progress tracker for a run.

    Args:
        total_steps: Total number of steps
        desc: Description of the run
        enabled: Draw a tqdm bar; otherwise count silently

    Returns:
        ProgressTracker or SimpleProgressTracker
    """
    if enabled:
        return ProgressTracker(total_steps, desc)
    return SimpleProgressTracker(total_steps, desc)
