"""
比赛结果记录模块
比赛结束后计算评分变化、搭档/对手历史和球员战绩的更新，结果交由调用方持久化

所有函数均不修改输入，返回新的记录
"""

from dataclasses import replace
from datetime import datetime
from numbers import Real
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from courtmatch.core.exceptions import InvalidMatchResult
from courtmatch.core.models import (
    MatchResultUpdate,
    OppositionRecord,
    PartnershipRecord,
    PlayerStatistics,
    ScheduledMatch,
    make_pair_key,
)
from courtmatch.infra.matchmaking.rating_algorithms import (
    DoublesEloRatingAlgorithm,
    RatingAlgorithm,
)
from courtmatch.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_WINNING_SCORE = 21


def resolve_team1_won(
    team1_score: Optional[float] = None,
    team2_score: Optional[float] = None,
    winning_team: Optional[int] = None
) -> Tuple[bool, float, float]:
    """
    解析比赛结果，返回 (队伍1是否获胜, 队伍1比分, 队伍2比分)

    优先使用详细比分；只给出胜方（1 或 2）时按 21:0 记录比分。
    比分相同时抛出 InvalidMatchResult，不会默认判队伍2获胜
    """
    if team1_score is not None and team2_score is not None:
        for score in (team1_score, team2_score):
            if isinstance(score, bool) or not isinstance(score, Real) or score < 0:
                raise InvalidMatchResult(f"比分非法: {team1_score}:{team2_score}")
        if team1_score == team2_score:
            raise InvalidMatchResult(f"比分相同无法判定胜负: {team1_score}:{team2_score}")
        return team1_score > team2_score, team1_score, team2_score

    if winning_team == 1:
        return True, DEFAULT_WINNING_SCORE, 0
    if winning_team == 2:
        return False, 0, DEFAULT_WINNING_SCORE

    raise InvalidMatchResult("需要提供双方比分或指定胜方 (1 或 2)")


def update_partnership_history(
    history: Sequence[PartnershipRecord],
    player1_id: str,
    player2_id: str,
    partnered_at: datetime
) -> List[PartnershipRecord]:
    """搭档次数 +1：已有记录（不区分顺序）则累加，否则新建一条次数为 1 的记录"""
    key = make_pair_key(player1_id, player2_id)
    updated = list(history)
    for index, record in enumerate(updated):
        if record.pair_key == key:
            updated[index] = replace(
                record,
                times_partnered=record.times_partnered + 1,
                last_partnered_at=partnered_at,
            )
            return updated

    updated.append(PartnershipRecord(key[0], key[1], 1, partnered_at))
    return updated


def update_opposition_history(
    history: Sequence[OppositionRecord],
    player1_id: str,
    player2_id: str,
    opposed_at: datetime
) -> List[OppositionRecord]:
    """对手次数 +1：已有记录（不区分顺序）则累加，否则新建一条次数为 1 的记录"""
    key = make_pair_key(player1_id, player2_id)
    updated = list(history)
    for index, record in enumerate(updated):
        if record.pair_key == key:
            updated[index] = replace(
                record,
                times_opposed=record.times_opposed + 1,
                last_opposed_at=opposed_at,
            )
            return updated

    updated.append(OppositionRecord(key[0], key[1], 1, opposed_at))
    return updated


def update_player_statistics(
    stats: Optional[PlayerStatistics],
    player_id: str,
    won: bool
) -> PlayerStatistics:
    """累加一场胜负，更新胜率（百分比）、连胜/连败和最长连胜"""
    if stats is None:
        stats = PlayerStatistics(player_id=player_id)

    total_matches = stats.total_matches + 1
    wins = stats.wins + (1 if won else 0)
    losses = stats.losses + (0 if won else 1)

    if won:
        current_streak = stats.current_streak + 1 if stats.current_streak >= 0 else 1
    else:
        current_streak = stats.current_streak - 1 if stats.current_streak <= 0 else -1

    longest_win_streak = max(stats.longest_win_streak, current_streak if won else 0)

    return replace(
        stats,
        total_matches=total_matches,
        wins=wins,
        losses=losses,
        win_rate=wins / total_matches * 100,
        current_streak=current_streak,
        longest_win_streak=longest_win_streak,
    )


def record_match_result(
    match: ScheduledMatch,
    team1_won: bool,
    partnership_history: Sequence[PartnershipRecord] = (),
    opposition_history: Sequence[OppositionRecord] = (),
    statistics: Optional[Mapping[str, PlayerStatistics]] = None,
    recorded_at: Optional[datetime] = None,
    rating_algorithm: Optional[RatingAlgorithm] = None
) -> MatchResultUpdate:
    """根据一场比赛的胜负计算需要持久化的全部变更（评分、历史、战绩）"""
    rating_algorithm = rating_algorithm or DoublesEloRatingAlgorithm()
    recorded_at = recorded_at or datetime.now()
    statistics = statistics or {}

    rating_result = rating_algorithm.apply_match_result(
        [player.skill_rating for player in match.team1.players],
        [player.skill_rating for player in match.team2.players],
        team1_won,
    )

    new_ratings: Dict[str, float] = {}
    rating_changes: Dict[str, int] = {}
    for player, new_rating in zip(match.team1.players, rating_result.team1_new_ratings):
        new_ratings[player.id] = new_rating
        rating_changes[player.id] = rating_result.team1_delta
    for player, new_rating in zip(match.team2.players, rating_result.team2_new_ratings):
        new_ratings[player.id] = new_rating
        rating_changes[player.id] = rating_result.team2_delta

    partnerships = list(partnership_history)
    for team in (match.team1, match.team2):
        partnerships = update_partnership_history(partnerships, *team.ids, recorded_at)

    oppositions = list(opposition_history)
    for player1_id in match.team1.ids:
        for player2_id in match.team2.ids:
            oppositions = update_opposition_history(oppositions, player1_id, player2_id, recorded_at)

    new_statistics = dict(statistics)
    for player_id in match.team1.ids:
        new_statistics[player_id] = update_player_statistics(statistics.get(player_id), player_id, team1_won)
    for player_id in match.team2.ids:
        new_statistics[player_id] = update_player_statistics(statistics.get(player_id), player_id, not team1_won)

    logger.info(
        f"第 {match.round_number} 轮 {match.court_number} 号场地结果: "
        f"{'队伍1' if team1_won else '队伍2'}获胜, "
        f"评分变化 {rating_result.team1_delta:+d} / {rating_result.team2_delta:+d}"
    )

    return MatchResultUpdate(
        team1_won=team1_won,
        rating_result=rating_result,
        new_ratings=new_ratings,
        rating_changes=rating_changes,
        partnership_history=tuple(partnerships),
        opposition_history=tuple(oppositions),
        statistics=new_statistics,
    )
