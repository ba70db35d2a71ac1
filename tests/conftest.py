import numpy as np
import pytest
from PIL import Image

from diptych.models.diptych_model import SourceImage
from diptych.services.diptych_composer import DiptychComposer
from diptych.services.panel_renderer import PanelRenderer

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
BLACK = (0, 0, 0, 255)
CLEAR = (0, 0, 0, 0)


def solid(width, height, color=RED):
    """Synthetic single-colour source image."""
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[:, :] = color
    return SourceImage.from_pil(Image.fromarray(arr))


def split_lr(width, height, left=RED, right=BLUE):
    """Left half `left`, right half `right`."""
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[:, : width // 2] = left
    arr[:, width // 2:] = right
    return SourceImage.from_pil(Image.fromarray(arr))


@pytest.fixture
def composer():
    # nearest keeps edge pixels exact for the assertions below
    return DiptychComposer(PanelRenderer(resample="nearest"))


@pytest.fixture
def renderer():
    return PanelRenderer(resample="nearest")
