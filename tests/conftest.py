import logging
import os

import pytest

from plcstruct.layout import clear_layout_cache


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)


@pytest.fixture(autouse=True)
def empty_layout_cache():
    """Layouts are cached per shape for the life of the process, tests start from scratch."""
    clear_layout_cache()
    yield
    clear_layout_cache()
