from collections.abc import Generator

import pytest

from kn_local.config import TARGET_ENV


@pytest.fixture(autouse=True)
def clear_target_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Ensure the target directory only comes from the command line."""
    monkeypatch.delenv(TARGET_ENV, raising=False)
    yield
