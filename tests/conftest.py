import io

import pytest
from blessed import Terminal


@pytest.fixture
def term():
    # no styling, no tty: move/colour sequences become empty strings
    return Terminal(stream=io.StringIO(), force_styling=None)
