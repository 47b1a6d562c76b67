import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from main import app
from app.api.dependencies import get_database
from app.models import BestOf, Format, Match, MatchStatus, WinCondition
from app.utils.auth import create_access_token


def make_format(target=21, max_score=30, condition=WinCondition.TWO_POINT_MARGIN, best_of=BestOf.THREE) -> Format:
    return Format(
        id="format-1",
        group_target_score=target,
        group_max_score=max_score,
        group_win_condition=condition,
        group_best_of=best_of,
    )


def make_match(**overrides) -> Match:
    fields = {
        "id": "match-1",
        "format_id": "format-1",
        "group_id": "group-1",
        "team1_id": "team-a",
        "team2_id": "team-b",
    }
    fields.update(overrides)
    return Match(**fields)


def auth_headers(user_id: str, username: str = None) -> dict:
    token = create_access_token({"sub": username or user_id, "user_id": user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def exact_format():
    """Best of one, game ends exactly at 21"""
    return make_format(target=21, max_score=21, condition=WinCondition.EXACT, best_of=BestOf.ONE)


@pytest.fixture
def margin_format():
    """Best of three, win by two from 21, capped at 30"""
    return make_format()


@pytest.fixture
def pending_match():
    return make_match()


@pytest.fixture
def mock_db():
    return AsyncMongoMockClient()["rally_tournament_test"]


@pytest.fixture
def client(mock_db):
    async def override_get_database():
        return mock_db

    app.dependency_overrides[get_database] = override_get_database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def umpire_headers():
    return auth_headers("umpire-1", "umpire")


@pytest.fixture
def other_headers():
    return auth_headers("umpire-2", "latecomer")


@pytest.fixture
def sample_format_data():
    return {
        "group_target_score": 21,
        "group_max_score": 21,
        "group_win_condition": WinCondition.EXACT.value,
        "group_best_of": BestOf.ONE.value,
    }


@pytest.fixture
def created_group(client: TestClient, umpire_headers, sample_format_data):
    """A four team group [A, B, C, D] under a best-of-one, exact 21 format"""
    format_response = client.post("/api/v1/formats/", json=sample_format_data, headers=umpire_headers)
    assert format_response.status_code == 200
    format_id = format_response.json()["id"]

    group_data = {
        "format_id": format_id,
        "group_name": "Group A",
        "teams": [{"player1_name": name} for name in ["A", "B", "C", "D"]],
    }
    group_response = client.post("/api/v1/groups/", json=group_data, headers=umpire_headers)
    assert group_response.status_code == 200
    return group_response.json()


@pytest.fixture
def first_match(created_group):
    match = created_group["matches"][0]
    assert match["result"] == MatchStatus.PENDING
    return match
