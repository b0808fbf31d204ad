"""
赛程报表模块
将排赛结果转换为表格、统计上场次数与实力差距，并保存为CSV
"""

import time
from pathlib import Path
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from courtmatch.core.models import Player, ScheduledMatch
from courtmatch.infra.matchmaking.rating_algorithms import DoublesEloRatingAlgorithm, team_rating
from courtmatch.infra.matchmaking.round_scheduler import assign_benched_players, benched_players
from courtmatch.utils.logger import get_logger

logger = get_logger(__name__)

SCHEDULE_COLUMNS = [
    'round', 'court',
    'team1_player1', 'team1_player2', 'team2_player1', 'team2_player2',
    'team1_rating', 'team2_rating', 'rating_gap', 'team1_win_probability', 'benched',
]


def schedule_to_dataframe(
    schedule: Sequence[ScheduledMatch],
    player_pool: Optional[Sequence[Player]] = None,
    rating_algorithm: Optional[DoublesEloRatingAlgorithm] = None
) -> pd.DataFrame:
    """赛程转为表格，每场比赛一行；提供球员池时附带分配到该场地的轮空球员"""
    rating_algorithm = rating_algorithm or DoublesEloRatingAlgorithm()
    bench_assignments = assign_benched_players(schedule, player_pool) if player_pool else {}

    records = []
    for match in schedule:
        team1_ratings = [player.skill_rating for player in match.team1.players]
        team2_ratings = [player.skill_rating for player in match.team2.players]
        team1 = rating_algorithm.get_team_rating(*team1_ratings)
        team2 = rating_algorithm.get_team_rating(*team2_ratings)
        benched = bench_assignments.get((match.round_number, match.court_number), [])
        records.append({
            'round': match.round_number,
            'court': match.court_number,
            'team1_player1': match.team1.first.display_name,
            'team1_player2': match.team1.second.display_name,
            'team2_player1': match.team2.first.display_name,
            'team2_player2': match.team2.second.display_name,
            'team1_rating': team1,
            'team2_rating': team2,
            'rating_gap': abs(team1 - team2),
            'team1_win_probability': rating_algorithm.get_win_probability(team1_ratings, team2_ratings),
            'benched': ', '.join(player.display_name for player in benched),
        })

    return pd.DataFrame(records, columns=SCHEDULE_COLUMNS)


def bench_to_dataframe(
    schedule: Sequence[ScheduledMatch],
    player_pool: Sequence[Player],
    rounds: int
) -> pd.DataFrame:
    """每轮轮空名单，每名轮空球员一行"""
    records = []
    for round_number in range(1, rounds + 1):
        for player in benched_players(schedule, player_pool, round_number):
            records.append({
                'round': round_number,
                'player_id': player.id,
                'display_name': player.display_name,
            })
    return pd.DataFrame(records, columns=['round', 'player_id', 'display_name'])


def summarize_schedule(
    schedule: Sequence[ScheduledMatch],
    player_pool: Sequence[Player]
) -> Dict:
    """统计赛程：总场次、每人上场次数、上场次数极差、平均/最大队伍评分差"""
    matches_played = {player.id: 0 for player in player_pool}
    for match in schedule:
        for player_id in match.player_ids:
            matches_played[player_id] = matches_played.get(player_id, 0) + 1

    counts = np.array(list(matches_played.values()), dtype=float)
    gaps = np.array([
        abs(
            team_rating(m.team1.first.skill_rating, m.team1.second.skill_rating) -
            team_rating(m.team2.first.skill_rating, m.team2.second.skill_rating)
        )
        for m in schedule
    ], dtype=float)

    return {
        'total_matches': len(schedule),
        'matches_played': matches_played,
        'play_count_spread': float(counts.max() - counts.min()) if counts.size else 0.0,
        'mean_rating_gap': float(np.mean(gaps)) if gaps.size else 0.0,
        'max_rating_gap': float(np.max(gaps)) if gaps.size else 0.0,
    }


def save_schedule(
    schedule: Sequence[ScheduledMatch],
    player_pool: Sequence[Player],
    session_name: str,
    output_dir: Optional[Path] = None,
    filename_template: Optional[str] = None,
    rating_algorithm: Optional[DoublesEloRatingAlgorithm] = None
) -> Path:
    """保存赛程CSV，返回文件路径"""
    if output_dir is None:
        day_tag = time.strftime('%Y_%m_%d', time.localtime())
        output_dir = Path("results") / day_tag

    output_dir.mkdir(parents=True, exist_ok=True)

    if filename_template is None:
        filename_template = "{session}_schedule_{timestamp}.csv"

    timestamp = time.strftime('%Y_%m_%d_%H_%M_%S', time.localtime())
    filename = filename_template.format(session=session_name, timestamp=timestamp)
    output_path = output_dir / filename

    schedule_to_dataframe(schedule, player_pool, rating_algorithm).to_csv(output_path, index=False)
    logger.info(f"已保存赛程: {output_path}")

    return output_path
