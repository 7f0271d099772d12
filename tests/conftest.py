import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from attention_heatmap.decoding import decode, encode


@pytest.fixture
def example_matrix():
    """Two tokens with scores [[0.5, 0.0], [0.2, 0.8]]."""
    return decode(encode(["A", "B"], np.array([[0.5, 0.0], [0.2, 0.8]], dtype=np.float32)))
