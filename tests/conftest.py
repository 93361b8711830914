import pytest
from PIL import Image

from systemclipboard import InMemoryClipboard, SystemClipboard


@pytest.fixture
def native():
    return InMemoryClipboard(name="Test")


@pytest.fixture
def board(native):
    return SystemClipboard(native)


@pytest.fixture
def image():
    return Image.new("RGB", (4, 3), (255, 0, 0))

