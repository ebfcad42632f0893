"""
ReactionDiffusionDiagram - one simulation session

Owns the buffer pair, the feed mask and the seed surface, and wires
them to the scheduler and presenter. Outside code may only reset,
replace the feed mask, reload the initial bitmap, or supply per-step
parameters.

Usage:
    from turing_patterns.session import make_reaction_diffusion_diagram
    from turing_patterns.params import ControlledParameters
    from turing_patterns.imaging import ImageSource

    source = ImageSource(256, "portrait.jpg")

    diagram = make_reaction_diffusion_diagram(
        {"size": 256, "iterations_per_tick": 20,
         "initial_bitmap": source.bitmap(), "feed_mask": source.edges},
        ControlledParameters("coral"),
    )
    frame = diagram.advance(100)  # (256, 256, 3) uint8
"""

import logging

from .backends import get_backend
from .buffers import BufferPair
from .config import DiagramConfig
from .errors import ConfigurationError
from .mask import FeedMask
from .presentation import Presenter
from .scheduler import StepScheduler
from .seeding import SeedLoader, SeedSurface

logger = logging.getLogger(__name__)


class ReactionDiffusionDiagram:
    """Gray-Scott simulation seeded from an image.

    Args:
        config: DiagramConfig or a mapping of its fields
        parameters: Callable tick -> StepParams | mapping
    """

    def __init__(self, config, parameters):
        if not callable(parameters):
            raise ConfigurationError("parameters must be callable (tick -> StepParams)")
        self.config = DiagramConfig.coerce(config)
        self.size = self.config.size
        self.backend = get_backend(self.config.backend, self.config.device)

        self.pair = BufferPair(self.size, self.backend)
        self.feed_mask = FeedMask(self.size, self.backend, self.config.feed_mask)
        self.seed_loader = SeedLoader(self.pair)
        self.presenter = Presenter(self.config.colorize)

        self._initial_bitmap = self.config.initial_bitmap
        self.surface = self._paint_initial_bitmap()

        self.visible = True
        self.last_frame = None
        self.scheduler = StepScheduler(
            self.pair, self.feed_mask, parameters,
            self.config.iterations_per_tick,
            reseed=self.reset,
            present=self._present,
            is_visible=lambda: self.visible,
        )
        self.reset()
        logger.info("diagram %dx%d on %s backend, feed mask %s",
                    self.size, self.size, self.backend.name,
                    "present" if self.feed_mask.present else "uniform")

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def reset(self):
        """Re-seed from the current seed surface."""
        self.seed_loader.seed(self.surface)

    def update_feed_mask(self, field):
        """Replace the feed mask; buffer contents are untouched."""
        self.feed_mask.replace(field)

    def reload_initial_bitmap(self, initial_bitmap=None):
        """Repaint the seed surface without touching the live simulation.

        Passing a procedure swaps the one used from now on.
        """
        if initial_bitmap is not None:
            if not callable(initial_bitmap):
                raise ConfigurationError("initial_bitmap must be callable")
            self._initial_bitmap = initial_bitmap
        self.surface = self._paint_initial_bitmap()

    def start(self):
        self.scheduler.start()

    def stop(self):
        self.scheduler.stop()

    def frame(self):
        """Host frame callback; see StepScheduler.frame."""
        return self.scheduler.frame()

    def advance(self, ticks=1):
        """Run ``ticks`` ticks directly (headless use). Returns the last frame."""
        for _ in range(ticks):
            self.scheduler.run_tick()
        return self.last_frame

    def render(self):
        """Present the current state without stepping."""
        return self._present(self.pair.read())

    def snapshot(self):
        """Host copy of the current (read) state, shape (2, size, size)."""
        return self.pair.snapshot()

    @property
    def state(self):
        return self.scheduler.state

    @property
    def tick(self):
        return self.scheduler.tick

    @property
    def stats(self):
        field = self.snapshot()
        return {
            "tick": self.scheduler.tick,
            "steps": self.scheduler.steps,
            "mean_a": float(field[0].mean()),
            "mean_b": float(field[1].mean()),
            "max_b": float(field[1].max()),
        }

    # -----------------------------------------------------------------------

    def _paint_initial_bitmap(self):
        surface = SeedSurface(self.size)
        try:
            self._initial_bitmap(surface)
        except Exception as e:
            raise ConfigurationError(f"initial_bitmap procedure failed: {e}") from e
        return surface

    def _present(self, read_buffer):
        self.last_frame = self.presenter.render(self.backend.to_numpy(read_buffer))
        return self.last_frame


def make_reaction_diffusion_diagram(config, parameters):
    """Build and seed a diagram."""
    return ReactionDiffusionDiagram(config, parameters)
