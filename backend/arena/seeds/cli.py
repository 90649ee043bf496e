import random

import click
from flask.cli import AppGroup

from arena.extensions import db
from arena.models.team import Team
from arena.models.tournament import Tournament, TournamentStatus
from arena.seeds.data import TEAM_NAMES, DEMO_TOURNAMENT_NAMES
from arena.services.match_service import record_result
from arena.services.tournament_service import (
    add_team,
    create_tournament,
    get_matches,
    start_tournament,
)

seed_cli = AppGroup("seed", help="Seed demo tournaments.")


@seed_cli.command("demo")
@click.option("--type", "tournament_type", type=click.Choice(["league", "cup"]), default="league")
@click.option("--mode", type=click.Choice(["single", "double"]), default="single")
@click.option("--teams", "team_count", type=click.IntRange(2, len(TEAM_NAMES)), default=8)
@click.option("--start/--no-start", default=True, help="Generate fixtures right away.")
def seed_demo(tournament_type, mode, team_count, start):
    """Create a demo tournament with a sample roster."""
    tournament = create_tournament({
        "name": DEMO_TOURNAMENT_NAMES[tournament_type],
        "type": tournament_type,
        "mode": mode,
    })
    for name in TEAM_NAMES[:team_count]:
        _, error = add_team(tournament.id, {"name": name})
        if error:
            raise click.ClickException(error)

    click.echo(f"Created tournament {tournament.id} ({tournament_type}/{mode}) with {team_count} teams.")

    if start:
        matches, error = start_tournament(tournament.id)
        if error:
            raise click.ClickException(error)
        click.echo(f"Generated {len(matches)} fixture(s).")


@seed_cli.command("play")
@click.argument("tournament_id", type=int)
@click.option("--max-goals", type=click.IntRange(0, 10), default=4)
@click.option("--seed", type=int, default=None, help="Seed for the random scores.")
def seed_play(tournament_id, max_goals, seed):
    """Fill every open match with random scores until the tournament ends."""
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        raise click.ClickException("Tournament not found")
    if tournament.status == TournamentStatus.SETUP:
        raise click.ClickException("Start the tournament first")

    rng = random.Random(seed)
    played = 0
    while tournament.status != TournamentStatus.COMPLETED:
        open_matches = get_matches(tournament_id, played=False)
        if not open_matches:
            break
        for match in open_matches:
            _, error = record_result(
                match.id, rng.randint(0, max_goals), rng.randint(0, max_goals)
            )
            if error:
                raise click.ClickException(error)
            played += 1
        db.session.refresh(tournament)

    click.echo(f"Played {played} match(es); status: {tournament.status.value}.")
    if tournament.champion_id:
        champion = db.session.get(Team, tournament.champion_id)
        click.echo(f"Champion: {champion.name}")
