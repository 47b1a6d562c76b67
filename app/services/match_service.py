import asyncio
import random
import weakref
from typing import Callable, List, Optional, Tuple, TypeVar

from app.config import settings
from app.exceptions import ConcurrentUpdateError, NotFoundError
from app.models import (
    Format,
    FormatCreate,
    GroupCreate,
    GroupWithTeams,
    Match,
    MatchDetails,
    MatchScoreUpdate,
    MatchWithFormat,
    Side,
    Team,
)
from app.services.match_state import MatchStateMachine
from app.utils.helpers import (
    format_helper,
    group_helper,
    match_helper,
    team_helper,
    to_object_id,
)
from app.utils.logging import get_logger
from app.utils.scheduling import build_group_schedule

logger = get_logger(__name__)

R = TypeVar("R")

# One lock per live match; entries disappear once no request holds them
_match_locks = weakref.WeakValueDictionary()


def _lock_for(match_id: str) -> asyncio.Lock:
    lock = _match_locks.get(match_id)
    if lock is None:
        lock = asyncio.Lock()
        _match_locks[match_id] = lock
    return lock


class MatchService:
    """
    Loads formats, groups and matches from MongoDB and runs umpire actions.

    Mutations of a match are serialized per match id in this process and
    written back only if nobody else bumped the document version meanwhile.
    """

    def __init__(self, db, shuffle_schedule: Optional[bool] = None, rng: Optional[random.Random] = None):
        self.db = db
        self.shuffle_schedule = settings.SHUFFLE_GROUP_SCHEDULE if shuffle_schedule is None else shuffle_schedule
        self.rng = rng

    # Formats

    async def create_format(self, format_create: FormatCreate) -> Format:
        new_format = await self.db.formats.insert_one(format_create.model_dump(mode="json"))
        created = await self.db.formats.find_one({"_id": new_format.inserted_id})
        return Format(**format_helper(created))

    async def get_format(self, format_id: str) -> Format:
        format_doc = await self.db.formats.find_one({"_id": to_object_id(format_id, "format")})
        if not format_doc:
            raise NotFoundError("Format", format_id)
        return Format(**format_helper(format_doc))

    # Groups and teams

    async def create_group(self, group_create: GroupCreate) -> Tuple[GroupWithTeams, List[Match]]:
        """Store a group with its teams and schedule its round-robin matches"""
        fmt = await self.get_format(group_create.format_id)

        new_group = await self.db.groups.insert_one({
            "format_id": fmt.id,
            "group_name": group_create.group_name,
            "team_count": group_create.team_count,
        })
        group_id = str(new_group.inserted_id)

        if group_create.teams:
            await self.db.teams.insert_many([
                {"group_id": group_id, "position": position, **team.model_dump()}
                for position, team in enumerate(group_create.teams)
            ])

        group = await self.get_group(group_id)
        shells = build_group_schedule(fmt, group, group.teams, shuffle=self.shuffle_schedule, rng=self.rng)
        if shells:
            await self.db.matches.insert_many([shell.model_dump(mode="json") for shell in shells])

        logger.info(f"Created group {group_id} with {len(group.teams)} teams and {len(shells)} matches")
        return group, await self.list_group_matches(group_id)

    async def get_group(self, group_id: str) -> GroupWithTeams:
        group_doc = await self.db.groups.find_one({"_id": to_object_id(group_id, "group")})
        if not group_doc:
            raise NotFoundError("Group", group_id)
        teams = await self.list_group_teams(group_id)
        return GroupWithTeams(**group_helper(group_doc), teams=teams)

    async def list_group_teams(self, group_id: str) -> List[Team]:
        teams = await self.db.teams.find({"group_id": group_id}, sort=[("position", 1)]).to_list(None)
        return [Team(**team_helper(team)) for team in teams]

    async def get_team(self, team_id: str) -> Team:
        team = await self.db.teams.find_one({"_id": to_object_id(team_id, "team")})
        if not team:
            raise NotFoundError("Team", team_id)
        return Team(**team_helper(team))

    # Matches

    async def list_group_matches(self, group_id: str) -> List[Match]:
        to_object_id(group_id, "group")
        matches = await self.db.matches.find({"group_id": group_id}, sort=[("schedule_order", 1)]).to_list(None)
        return [Match(**match_helper(match)) for match in matches]

    async def get_match(self, match_id: str) -> Match:
        match = await self.db.matches.find_one({"_id": to_object_id(match_id, "match")})
        if not match:
            raise NotFoundError("Match", match_id)
        return Match(**match_helper(match))

    async def get_match_with_format(self, match_id: str) -> MatchWithFormat:
        match = await self.get_match(match_id)
        fmt = await self.get_format(match.format_id)
        return MatchWithFormat(**match.model_dump(), format=fmt)

    async def get_match_details(self, match_id: str) -> MatchDetails:
        match = await self.get_match(match_id)
        team1, team2 = await asyncio.gather(self.get_team(match.team1_id), self.get_team(match.team2_id))
        return MatchDetails(match=match, team1=team1, team2=team2)

    async def assign_umpire(self, match_id: str, umpire_id: str) -> bool:
        claimed, _ = await self._apply(match_id, lambda machine: machine.assign_umpire(umpire_id))
        return claimed

    async def record_point(
        self,
        match_id: str,
        side: Side,
        caller_id: str,
        server: Optional[str] = None,
        receiver: Optional[str] = None,
    ) -> Match:
        _, match = await self._apply(
            match_id,
            lambda machine: machine.record_point(side, caller_id, server=server, receiver=receiver),
        )
        return match

    async def undo_last_point(self, match_id: str, caller_id: str) -> Match:
        _, match = await self._apply(match_id, lambda machine: machine.undo_last_point(caller_id))
        return match

    async def update_final_score(self, match_id: str, score: MatchScoreUpdate, caller_id: str) -> Match:
        _, match = await self._apply(
            match_id,
            lambda machine: machine.update_final_score(score.team1_score, score.team2_score, score.result, caller_id),
        )
        return match

    async def _apply(self, match_id: str, operation: Callable[[MatchStateMachine], R]) -> Tuple[R, Match]:
        async with _lock_for(match_id):
            match = await self.get_match(match_id)
            fmt = await self.get_format(match.format_id)
            loaded_version = match.version
            before = match.model_dump()

            outcome = operation(MatchStateMachine(match, fmt))

            if match.model_dump() != before:
                await self._save(match, loaded_version)
            return outcome, match

    async def _save(self, match: Match, expected_version: int):
        document = match.model_dump(mode="json", exclude={"id"})
        document["version"] = expected_version + 1

        version_filter = {"version": expected_version}
        if expected_version == 0:
            # Documents written before versioning have no version field
            version_filter = {"$or": [{"version": 0}, {"version": {"$exists": False}}]}

        update_result = await self.db.matches.update_one(
            {"_id": to_object_id(match.id, "match"), **version_filter},
            {"$set": document},
        )
        if update_result.matched_count == 0:
            raise ConcurrentUpdateError(match.id)
        match.version = expected_version + 1
