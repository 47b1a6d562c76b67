from bson import ObjectId

from app.exceptions import ValidationError


def to_object_id(value: str, entity: str = "record") -> ObjectId:
    """Parse a string id, rejecting malformed ones"""
    if not value or not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {entity} ID format")
    return ObjectId(value)


def document_helper(document: dict) -> dict:
    """Convert a MongoDB document to the API shape: ``_id`` becomes a string ``id``"""
    return {
        "id": str(document["_id"]),
        **{k: v for k, v in document.items() if k != "_id"}
    }


def format_helper(format_doc: dict) -> dict:
    return document_helper(format_doc)


def team_helper(team: dict) -> dict:
    return {
        "id": str(team["_id"]),
        "group_id": str(team["group_id"]),
        "player1_name": team["player1_name"],
        "player2_name": team.get("player2_name"),
    }


def group_helper(group: dict) -> dict:
    return {
        "id": str(group["_id"]),
        "format_id": str(group["format_id"]),
        "group_name": group["group_name"],
        "team_count": group.get("team_count", 0),
    }


def match_helper(match: dict) -> dict:
    """Convert a match document to dict format, filling fields older documents lack"""
    return {
        "id": str(match["_id"]),
        "format_id": str(match["format_id"]),
        "group_id": str(match["group_id"]),
        "team1_id": str(match["team1_id"]),
        "team2_id": str(match["team2_id"]),
        "schedule_order": match.get("schedule_order", 0),
        "umpire_id": match.get("umpire_id"),
        "winner_id": match.get("winner_id"),
        "result": match.get("result", 0),
        "games": match.get("games", []),
        "version": match.get("version", 0),
    }
