import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple, TypeVar

from app.models.format import Format
from app.models.group import Group, Team
from app.models.match import MatchShell
from app.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# A team may appear in at most this many pairings in a row
MAX_CONSECUTIVE_MATCHES = 2


@dataclass
class TeamScheduleStats:
    total_matches: int = 0
    consecutive_matches: int = 0
    opponents: Set[int] = field(default_factory=set)


class PairingGenerator:
    """
    Greedy round-robin scheduler.

    Every pair of teams meets exactly once. The schedule order spreads matches
    fairly: teams that have not played yet go first, the least-played pair is
    preferred, and no team plays more than two pairings in a row unless the
    constraint has to be relaxed to make progress.

    Ties are broken by input order, which keeps the output deterministic. Pass
    ``shuffle=True`` to randomize the final order for presentation.
    """

    def __init__(self, shuffle: bool = False, rng: Optional[random.Random] = None):
        self.shuffle = shuffle
        self.rng = rng or random.Random()
        self.relaxations = 0

    def generate(self, teams: Sequence[T]) -> List[Tuple[T, T]]:
        self.relaxations = 0
        team_count = len(teams)
        if team_count < 2:
            return []

        total_needed = team_count * (team_count - 1) // 2
        stats = [TeamScheduleStats() for _ in range(team_count)]
        pairings: List[Tuple[int, int]] = []

        # Each pass either schedules a pair or relaxes the fatigue constraint.
        # After a relaxation every unplayed pair is a candidate, so two passes
        # always schedule at least one pair and the loop is bounded.
        while len(pairings) < total_needed:
            candidates = self._available_pairs(stats)
            if not candidates:
                if not any(s.consecutive_matches for s in stats):
                    # Only the no-repeat constraint is left, nothing to relax
                    break
                for s in stats:
                    s.consecutive_matches = 0
                self.relaxations += 1
                continue

            fresh = [
                (i, j) for i, j in candidates
                if stats[i].total_matches == 0 and stats[j].total_matches == 0
            ]
            pool = fresh or candidates
            # min() keeps the first of equal pairs, i.e. input order
            i, j = min(pool, key=lambda pair: max(stats[pair[0]].total_matches, stats[pair[1]].total_matches))

            pairings.append((i, j))
            self._record_pair(stats, i, j)

        logger.info(
            f"Generated {len(pairings)} round-robin pairings for {team_count} teams "
            f"({self.relaxations} consecutive-match relaxations)"
        )

        ordered = [(teams[i], teams[j]) for i, j in pairings]
        if self.shuffle:
            self.rng.shuffle(ordered)
        return ordered

    @staticmethod
    def _available_pairs(stats: List[TeamScheduleStats]) -> List[Tuple[int, int]]:
        pairs = []
        for i in range(len(stats)):
            for j in range(i + 1, len(stats)):
                if j in stats[i].opponents:
                    continue
                if (
                    stats[i].consecutive_matches >= MAX_CONSECUTIVE_MATCHES
                    or stats[j].consecutive_matches >= MAX_CONSECUTIVE_MATCHES
                ):
                    continue
                pairs.append((i, j))
        return pairs

    @staticmethod
    def _record_pair(stats: List[TeamScheduleStats], i: int, j: int):
        stats[i].opponents.add(j)
        stats[j].opponents.add(i)
        for index, team_stats in enumerate(stats):
            if index in (i, j):
                team_stats.total_matches += 1
                team_stats.consecutive_matches += 1
            else:
                # Sitting out a pairing ends the streak
                team_stats.consecutive_matches = 0


def build_match_shell(fmt: Format, group: Group, pairing: Tuple[Team, Team], schedule_order: int = 0) -> MatchShell:
    """Map a pairing onto a pending match ready to be stored"""
    team1, team2 = pairing
    return MatchShell(
        format_id=fmt.id,
        group_id=group.id,
        team1_id=team1.id,
        team2_id=team2.id,
        schedule_order=schedule_order,
    )


def build_group_schedule(
    fmt: Format,
    group: Group,
    teams: Sequence[Team],
    shuffle: bool = False,
    rng: Optional[random.Random] = None,
) -> List[MatchShell]:
    """
    Generate the full round-robin schedule for a group.

    Args:
        fmt: The format the group's matches are played under
        group: The group being scheduled
        teams: The group's teams, in registration order
        shuffle: Randomize the final order instead of keeping the fairness order
        rng: Random source used when shuffling

    Returns:
        Pending match shells in schedule order
    """
    generator = PairingGenerator(shuffle=shuffle, rng=rng)
    pairings = generator.generate(teams)
    return [
        build_match_shell(fmt, group, pairing, schedule_order=order)
        for order, pairing in enumerate(pairings)
    ]
