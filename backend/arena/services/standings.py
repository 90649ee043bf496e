"""League table and aggregated team statistics.

Both are derived on demand from the match list; nothing is stored. Matches
that reference ids outside the roster (bracket placeholders, stale ids) are
ignored.
"""

# Extended statistics summed per team. Keys in Match.stats are "home_<key>" and
# "away_<key>".
STAT_KEYS = (
    "shots",
    "shots_on_target",
    "fouls",
    "offsides",
    "corners",
    "free_kicks",
    "passes",
    "passes_completed",
    "crosses",
    "interceptions",
    "tackles",
    "saves",
)


def _standing_row(team):
    return {
        "team_id": team.id,
        "team_name": team.name,
        "team_logo": getattr(team, "logo_url", None),
        "played": 0,
        "won": 0,
        "drawn": 0,
        "lost": 0,
        "goals_for": 0,
        "goals_against": 0,
        "goal_difference": 0,
        "points": 0,
    }


def compute_standings(teams, matches):
    """Build the league table from played matches.

    Order:
      1. Points DESC
      2. Goal difference DESC
      3. Goals for DESC
    """
    rows = {team.id: _standing_row(team) for team in teams}

    for match in matches:
        if not match.is_played or match.home_score is None or match.away_score is None:
            continue
        home = rows.get(match.home_team_id)
        away = rows.get(match.away_team_id)
        if home is None or away is None:
            continue

        home["played"] += 1
        away["played"] += 1
        home["goals_for"] += match.home_score
        home["goals_against"] += match.away_score
        away["goals_for"] += match.away_score
        away["goals_against"] += match.home_score

        if match.home_score > match.away_score:
            home["won"] += 1
            away["lost"] += 1
        elif match.home_score < match.away_score:
            away["won"] += 1
            home["lost"] += 1
        else:
            home["drawn"] += 1
            away["drawn"] += 1

    for row in rows.values():
        row["goal_difference"] = row["goals_for"] - row["goals_against"]
        row["points"] = (row["won"] * 3) + row["drawn"]

    return sorted(
        rows.values(),
        key=lambda r: (r["points"], r["goal_difference"], r["goals_for"]),
        reverse=True,
    )


def compute_team_stats(teams, matches):
    """Sum extended match statistics per team.

    Only played matches carrying stats count. ``possession`` is the average
    over those matches (None when there are none). Rows are ordered by
    shots, most first, then by team name.
    """
    totals = {}
    for team in teams:
        row = {"team_id": team.id, "team_name": team.name, "matches": 0}
        row.update({key: 0 for key in STAT_KEYS})
        totals[team.id] = {"row": row, "possession": 0}

    for match in matches:
        if not match.is_played or not match.stats:
            continue
        for side, team_id in (("home", match.home_team_id), ("away", match.away_team_id)):
            entry = totals.get(team_id)
            if entry is None:
                continue
            entry["row"]["matches"] += 1
            entry["possession"] += match.stats.get(f"{side}_possession", 0)
            for key in STAT_KEYS:
                entry["row"][key] += match.stats.get(f"{side}_{key}", 0)

    result = []
    for entry in totals.values():
        row = entry["row"]
        played = row["matches"]
        row["possession"] = round(entry["possession"] / played, 1) if played else None
        result.append(row)

    result.sort(key=lambda r: (-r["shots"], r["team_name"].lower()))
    return result
