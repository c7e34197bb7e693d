import pytest

from tidewater.base import Movie, ShowEpisode, SeasonRef, EpisodeRef

from helpers import Recorder


@pytest.fixture
def movie():
    return Movie(title="Hamilton", release_year=2020, tmdb_id="556574")


@pytest.fixture
def episode():
    return ShowEpisode(
        title="Arcane", release_year=2021, tmdb_id="94605",
        season=SeasonRef(number=1), episode=EpisodeRef(number=3),
    )


@pytest.fixture
def recorder():
    return Recorder()
