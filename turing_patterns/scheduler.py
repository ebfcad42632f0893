"""
Step Scheduler

Drives the solver from the host's frame cadence. Two states:

  IDLE     no render loop attached; frame() does nothing
  RUNNING  each frame() runs one tick

A tick runs iterations_per_tick steps in order. Before each step the
parameter source is called with the tick index and its answer is
validated into StepParams; reset=True re-seeds right before that
step. After the last step the read buffer goes to the presentation
callback. A frame on a hidden surface is skipped entirely.
"""

import enum
import logging

from .config import coerce_step_params
from .stencil import gray_scott_step

logger = logging.getLogger(__name__)


class SchedulerState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


class StepScheduler:
    """Runs stencil steps over a BufferPair.

    Args:
        pair: BufferPair holding the state
        feed_mask: FeedMask consulted on every step
        parameters: Callable tick -> StepParams | mapping
        iterations_per_tick: Steps per visible frame
        reseed: Callable performing the seed loader's reset
        present: Callable receiving the read buffer after each tick
        is_visible: Callable returning False while the surface is hidden
    """

    def __init__(self, pair, feed_mask, parameters, iterations_per_tick,
                 reseed, present=None, is_visible=None):
        self.pair = pair
        self.feed_mask = feed_mask
        self.parameters = parameters
        self.iterations_per_tick = iterations_per_tick
        self._reseed = reseed
        self._present = present
        self._is_visible = is_visible or (lambda: True)
        self.state = SchedulerState.IDLE
        self.tick = 0
        self.steps = 0

    def start(self):
        if self.state is not SchedulerState.RUNNING:
            self.state = SchedulerState.RUNNING
            logger.info("scheduler running (%d iterations/tick)", self.iterations_per_tick)

    def stop(self):
        if self.state is not SchedulerState.IDLE:
            self.state = SchedulerState.IDLE
            logger.info("scheduler stopped at tick %d", self.tick)

    @property
    def running(self):
        return self.state is SchedulerState.RUNNING

    def frame(self):
        """Host frame callback. Returns the presented frame or None."""
        if self.state is SchedulerState.IDLE:
            return None
        if not self._is_visible():
            return None
        return self.run_tick()

    def run_tick(self):
        """Run one tick regardless of state and visibility."""
        tick = self.tick
        for _ in range(self.iterations_per_tick):
            params = coerce_step_params(self.parameters(tick))
            if params.reset:
                self._reseed()
            self.step(params)
        self.tick += 1
        if self._present is None:
            return None
        return self._present(self.pair.read())

    def step(self, params):
        """One stencil step: read -> write, then commit."""
        gray_scott_step(self.pair.read(), self.pair.write(),
                        self.feed_mask.values(), params, self.pair.backend)
        self.pair.commit()
        self.steps += 1
