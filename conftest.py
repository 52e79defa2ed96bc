import pytest

from channelsync.tests.fixtures import *  # noqa: F403


@pytest.fixture(autouse=True)
def enable_db_access_for_all_tests(db):
    pass
