"""
Feed/Kill Presets

Each preset names a (feed, kill) pair known to settle into a
recognisable pattern family. Diffusion rate and step defaults are
shared by all presets. Values are for the unmasked rate; the edge mask scales feed
down wherever the source image is flat.
"""

DEFAULT_DIFFUSION_RATE = 0.7
DEFAULT_DIFFUSION_STEP = 1.0

PRESETS = {
    "spots": {
        "name": "Spots",
        "description": "Isolated dots along strong edges",
        "feed": 0.030, "kill": 0.062,
    },
    "coral": {
        "name": "Coral",
        "description": "Branching growth that fills edge regions",
        "feed": 0.0545, "kill": 0.062,
    },
    "mitosis": {
        "name": "Mitosis",
        "description": "Dividing cells",
        "feed": 0.0367, "kill": 0.0649,
    },
    "maze": {
        "name": "Maze",
        "description": "Labyrinthine stripes",
        "feed": 0.029, "kill": 0.057,
    },
    "fingerprint": {
        "name": "Fingerprint",
        "description": "Long parallel ridges",
        "feed": 0.037, "kill": 0.060,
    },
    "worms": {
        "name": "Worms",
        "description": "Short wandering segments",
        "feed": 0.078, "kill": 0.061,
    },
    "holes": {
        "name": "Holes",
        "description": "Negative spots in a filled field",
        "feed": 0.039, "kill": 0.058,
    },
    "waves": {
        "name": "Waves",
        "description": "Travelling fronts (Pearson alpha)",
        "feed": 0.014, "kill": 0.045,
    },
}

PRESET_ORDER = ["coral", "spots", "mitosis", "maze", "fingerprint",
                "worms", "holes", "waves"]

DEFAULT_PRESET = "coral"


def get_preset(key):
    """Return preset dict or None."""
    return PRESETS.get(key)


def list_presets():
    """Return [(key, name, description)] in display order."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"]) for k in PRESET_ORDER]
