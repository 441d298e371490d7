import pytest

from shiftboard.scheduling.board import ScheduleBoard
from shiftboard.scheduling.domain import WeekWindow

from factories import MON, ORG, UTC, FakeGateway


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def window():
    return WeekWindow.containing(MON)


@pytest.fixture
def load_board(gateway, window):
    """Build a board from whatever the gateway currently holds."""

    async def _load(tz=UTC):
        return await ScheduleBoard.load(gateway, ORG, window, tz)

    return _load
