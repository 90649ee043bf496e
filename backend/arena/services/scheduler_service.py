import logging
import random
import uuid

from arena.errors import InvalidBracketState, InvalidInput
from arena.models.tournament import TournamentMode
from arena.services.fixtures import AdvanceResult, CupResult, Fixture

logger = logging.getLogger(__name__)

WALKOVER_SCORE = 3
BYE_PREFIX = "bye-"
SECOND_LEG_SUFFIX = " (Cavab)"
THIRD_PLACE_STAGE = "Third Place"

_STAGE_NAMES = {
    2: "Final",
    4: "Semi-Final",
    8: "Quarter-Final",
    16: "Round-of-16",
}


# ── Round-Robin (League) ─────────────────────────────────────────────────────

def generate_league_schedule(teams, mode, rng=None, id_factory=None):
    """Generate a complete single or double round-robin fixture list.

    Circle method: seat 0 stays fixed, the other seats rotate one step per
    round and seat i plays seat n-1-i. For n teams (n even, a bye added when
    odd) that is n-1 rounds of n/2 fixtures; fixtures against the bye are
    dropped, so that team rests. Double mode mirrors every fixture with
    home/away swapped, offset by the single-mode round count.

    The roster is shuffled with ``rng`` first, so fixture order does not
    follow input order. Pass a seeded ``random.Random`` for reproducible draws.
    """
    mode = _coerce_mode(mode)
    rng = rng or random.SystemRandom()
    id_factory = id_factory or _new_id

    roster = _check_roster(teams)
    entrants = [team.id for team in roster]
    rng.shuffle(entrants)
    if len(entrants) % 2 != 0:
        entrants.append(None)

    n = len(entrants)
    num_rounds = n - 1

    matches = []
    for r in range(num_rounds):
        round_number = r + 1
        lineup = _circle_lineup(entrants, r)
        for i in range(n // 2):
            home, away = lineup[i], lineup[n - 1 - i]
            if home is None or away is None:
                continue
            matches.append(Fixture(
                id=id_factory(),
                round=round_number,
                home_team_id=home,
                away_team_id=away,
                stage_name=_matchday_label(round_number),
            ))

    if mode == TournamentMode.DOUBLE:
        return_legs = [
            m.swapped(
                id_factory(),
                stage_name=_matchday_label(m.round + num_rounds),
                round=m.round + num_rounds,
            )
            for m in matches
        ]
        matches.extend(return_legs)

    # Stable sort: generation order is kept inside a round
    matches.sort(key=lambda m: m.round)
    logger.info(
        "League schedule: %d teams, %s mode, %d rounds, %d matches",
        len(roster), mode.value, num_rounds * (2 if mode == TournamentMode.DOUBLE else 1),
        len(matches),
    )
    return matches


def _circle_lineup(entrants, round_index):
    """Seat order for one round; every seat but the first shifts right by one per round."""
    rotating = len(entrants) - 1
    return [entrants[0]] + [
        entrants[1 + (seat - round_index) % rotating] for seat in range(rotating)
    ]


def _matchday_label(round_number):
    return f"Matchday {round_number}"


# ── Cup Bracket ──────────────────────────────────────────────────────────────

def generate_cup_schedule(teams, mode, rng=None, id_factory=None):
    """Generate round 1 of a single-elimination bracket.

    The shuffled roster is padded with placeholder slots up to the next power
    of two and paired slot 2i vs slot 2i+1. A team drawn against a placeholder
    gets a walkover: one match, already played, 3-0. Real pairings get one
    match, plus a swapped "(Cavab)" second leg in double mode unless the
    bracket is only the final.
    """
    mode = _coerce_mode(mode)
    rng = rng or random.SystemRandom()
    id_factory = id_factory or _new_id

    entrants = [team.id for team in _check_roster(teams)]
    rng.shuffle(entrants)

    target_size = next_power_of_2(len(entrants))
    slots = _pad_bracket(entrants, target_size)
    stage = stage_name_for(target_size)
    two_legged = mode == TournamentMode.DOUBLE and target_size > 2

    matches = []
    walkovers = 0
    for i in range(target_size // 2):
        home, away = slots[2 * i], slots[2 * i + 1]

        if is_bye_slot(home) or is_bye_slot(away):
            walkovers += 1
            matches.append(Fixture(
                id=id_factory(),
                round=1,
                home_team_id=home,
                away_team_id=away,
                stage_name=stage,
                home_score=0 if is_bye_slot(home) else WALKOVER_SCORE,
                away_score=0 if is_bye_slot(away) else WALKOVER_SCORE,
                is_played=True,
                is_cup_match=True,
            ))
            continue

        first_leg = Fixture(
            id=id_factory(),
            round=1,
            home_team_id=home,
            away_team_id=away,
            stage_name=stage,
            is_cup_match=True,
        )
        matches.append(first_leg)
        if two_legged:
            matches.append(first_leg.swapped(id_factory(), stage_name=stage + SECOND_LEG_SUFFIX))

    logger.info(
        "Cup draw: %d teams, bracket of %d, %d walkover(s), %d matches",
        len(entrants), target_size, walkovers, len(matches),
    )
    return matches


def _pad_bracket(entrants, target_size):
    """Fill ``target_size`` slots so that no pair holds two placeholders.

    The first pairs are real vs real; each of the last ``byes`` pairs is a real
    team at home against a placeholder.
    """
    byes = target_size - len(entrants)
    full_pairs = target_size // 2 - byes

    slots = list(entrants[:2 * full_pairs])
    for team_id in entrants[2 * full_pairs:]:
        slots.append(team_id)
        slots.append(f"{BYE_PREFIX}{len(slots)}")
    return slots


# ── Cup Advancement ──────────────────────────────────────────────────────────

def advance_cup(matches, teams, mode, id_factory=None):
    """Advance a knockout bracket once its latest round is fully played.

    Pure function of the match history: the current round is the highest
    ``round`` present. Returns an ``AdvanceResult`` that either carries the
    next round's fixtures, or ``completed=True`` with the final standings, or
    nothing at all while the current round still has open matches.

    The caller must feed the new fixtures back before calling again; two calls
    on the same snapshot emit the same round twice.
    """
    mode = _coerce_mode(mode)
    id_factory = id_factory or _new_id

    matches = list(matches)
    if not matches:
        return AdvanceResult()

    current_round = max(m.round for m in matches)
    current = [m for m in matches if m.round == current_round]
    if not all(m.is_played for m in current):
        return AdvanceResult()

    for m in current:
        if m.home_score is None or m.away_score is None:
            raise InvalidBracketState(f"Match {m.id} is marked played without a score")

    third_place = next((m for m in current if is_third_place(m)), None)
    winners, losers = _resolve_ties([m for m in current if not is_third_place(m)])

    if len(winners) == 1 and len(current) <= 2:
        roster = {team.id: team for team in teams}
        result = CupResult(
            champion=_roster_team(roster, winners[0]),
            runner_up=_roster_team(roster, losers[0]),
            third_place=(
                _roster_team(roster, _single_leg_outcome(third_place)[0])
                if third_place is not None else None
            ),
        )
        logger.info("Cup decided in round %d: champion %s", current_round, winners[0])
        return AdvanceResult(completed=True, result=result)

    if len(winners) < 2 or len(winners) % 2 != 0:
        raise InvalidBracketState(
            f"Round {current_round} produced {len(winners)} winner(s), which cannot be paired"
        )

    next_round = current_round + 1
    stage = stage_name_for(len(winners))
    next_is_final = len(winners) == 2

    new_matches = []
    for home, away in zip(winners[0::2], winners[1::2]):
        first_leg = Fixture(
            id=id_factory(),
            round=next_round,
            home_team_id=home,
            away_team_id=away,
            stage_name=stage,
            is_cup_match=True,
        )
        new_matches.append(first_leg)
        # The final is always a single match
        if mode == TournamentMode.DOUBLE and not next_is_final:
            new_matches.append(first_leg.swapped(id_factory(), stage_name=stage + SECOND_LEG_SUFFIX))

    genuine_losers = [team_id for team_id in losers if not is_bye_slot(team_id)]
    if next_is_final and len(genuine_losers) == 2:
        new_matches.append(Fixture(
            id=id_factory(),
            round=next_round,
            home_team_id=genuine_losers[0],
            away_team_id=genuine_losers[1],
            stage_name=THIRD_PLACE_STAGE,
            is_cup_match=True,
        ))

    logger.info(
        "Cup round %d complete: %d winner(s) -> round %d (%s), %d new match(es)",
        current_round, len(winners), next_round, stage, len(new_matches),
    )
    return AdvanceResult(new_matches=new_matches)


def _resolve_ties(matches):
    """Group a round into one- or two-leg ties and decide each of them.

    Returns ``(winners, losers)`` in tie order; consecutive winners meet next.
    """
    winners, losers = [], []
    processed = set()

    for match in matches:
        if match.id in processed:
            continue
        processed.add(match.id)

        second_leg = next(
            (m for m in matches if m.id not in processed and _same_pairing(match, m)),
            None,
        )
        if second_leg is not None:
            processed.add(second_leg.id)
            winner, loser = _two_leg_outcome(match, second_leg)
        else:
            winner, loser = _single_leg_outcome(match)

        winners.append(winner)
        losers.append(loser)

    return winners, losers


def _same_pairing(a, b):
    return {a.home_team_id, a.away_team_id} == {b.home_team_id, b.away_team_id}


def _single_leg_outcome(match):
    """Return ``(winner_id, loser_id)``. A level score sends the away side through."""
    if match.home_score > match.away_score:
        return match.home_team_id, match.away_team_id
    return match.away_team_id, match.home_team_id


def _two_leg_outcome(first_leg, second_leg):
    """Return ``(winner_id, loser_id)`` on aggregate.

    Team A is the first-leg home side; a level aggregate sends team A through.
    """
    team_a = first_leg.home_team_id
    team_b = first_leg.away_team_id

    if second_leg.home_team_id == team_a:
        a_second, b_second = second_leg.home_score, second_leg.away_score
    else:
        a_second, b_second = second_leg.away_score, second_leg.home_score

    aggregate_a = first_leg.home_score + a_second
    aggregate_b = first_leg.away_score + b_second

    if aggregate_b > aggregate_a:
        return team_b, team_a
    return team_a, team_b


def _roster_team(roster, team_id):
    team = roster.get(team_id)
    if team is None:
        raise InvalidBracketState(f"Team {team_id} is not part of the roster")
    return team


# ── Helpers ──────────────────────────────────────────────────────────────────

def next_power_of_2(n):
    """Return the smallest power of 2 >= n."""
    return 1 << (n - 1).bit_length()


def stage_name_for(bracket_size):
    """Stage label for a round contested by ``bracket_size`` teams."""
    return _STAGE_NAMES.get(bracket_size, f"1/{bracket_size // 2} Final")


def is_bye_slot(team_id):
    return isinstance(team_id, str) and team_id.startswith(BYE_PREFIX)


def is_third_place(match):
    return match.stage_name == THIRD_PLACE_STAGE


def _check_roster(teams):
    teams = list(teams)
    if len(teams) < 2:
        raise InvalidInput("At least 2 teams are required")
    return teams


def _coerce_mode(mode):
    try:
        return TournamentMode(mode)
    except ValueError:
        raise InvalidInput(f"Unsupported tournament mode: {mode!r}") from None


def _new_id():
    return str(uuid.uuid4())
