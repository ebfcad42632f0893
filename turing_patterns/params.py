"""
Parameter Sources

A parameter source is any callable tick -> StepParams (or a mapping
with the same fields). ControlledParameters is the stateful one used by
the viewer and the CLI: it stands in for the feed/kill sliders and the
reset button.
"""

from .config import StepParams
from .errors import ConfigurationError
from .presets import (
    DEFAULT_DIFFUSION_RATE, DEFAULT_DIFFUSION_STEP, DEFAULT_PRESET, get_preset,
)


def constant_parameters(**values):
    """Parameter source returning the same StepParams every iteration."""
    params = StepParams(**values)

    def source(_tick):
        return params
    return source


class ControlledParameters:
    """Mutable control surface producing fresh StepParams per iteration.

    request_reset() arms a one-shot flag: the next iteration's params
    carry reset=True, later ones do not.
    """

    def __init__(self, preset=DEFAULT_PRESET, diffusion_rate=DEFAULT_DIFFUSION_RATE,
                 diffusion_step=DEFAULT_DIFFUSION_STEP):
        self.preset_key = None
        self.feed = 0.0
        self.kill = 0.0
        self.diffusion_rate = diffusion_rate
        self.diffusion_step = diffusion_step
        self._reset_pending = False
        self.apply_preset(preset)

    def apply_preset(self, key):
        preset = get_preset(key)
        if preset is None:
            raise ConfigurationError(f"Unknown preset: {key!r}")
        self.preset_key = key
        self.feed = preset["feed"]
        self.kill = preset["kill"]

    def set(self, feed=None, kill=None, diffusion_rate=None, diffusion_step=None):
        if feed is not None:
            self.feed = max(0.0, float(feed))
        if kill is not None:
            self.kill = max(0.0, float(kill))
        if diffusion_rate is not None:
            self.diffusion_rate = float(diffusion_rate)
        if diffusion_step is not None:
            self.diffusion_step = float(diffusion_step)

    def request_reset(self):
        self._reset_pending = True

    def get_params(self):
        return {
            "feed": self.feed,
            "kill": self.kill,
            "diffusion_rate": self.diffusion_rate,
            "diffusion_step": self.diffusion_step,
        }

    def __call__(self, tick):
        reset = self._reset_pending
        self._reset_pending = False
        return StepParams(reset=reset, **self.get_params())
