import os

import pytest
from dotenv import find_dotenv, load_dotenv

# Load .env as early as possible (before pytest_collection_modifyitems).
load_dotenv(find_dotenv(usecwd=True))

ENV_TEST_URL = "FETCH_EVENT_DATA_TEST_URL"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    url = os.getenv(ENV_TEST_URL)
    for item in items:
        if "integration" in item.keywords and not url:
            item.add_marker(pytest.mark.skip(reason=f"{ENV_TEST_URL} missing from environment/.env"))


@pytest.fixture
def stream_url() -> str:
    return os.environ[ENV_TEST_URL]
