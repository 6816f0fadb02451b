import os
import pytest
from bgmodel.config import get_settings

def pytest_configure():
    os.environ.setdefault("BGM_LOG_LEVEL", "INFO")

@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # evita fuga de estado entre tests
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

@pytest.fixture
def rng():
    import numpy as np
    return np.random.default_rng(1234)

def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
