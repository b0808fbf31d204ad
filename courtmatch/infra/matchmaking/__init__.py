"""
排赛引擎基础设施
提供评分算法、配对策略、比赛评分器、轮次排赛器和结果记录
"""

from .rating_algorithms import (
    RatingAlgorithm,
    DoublesEloRatingAlgorithm,
    apply_match_result,
    expected_score,
    team_rating,
)
from .pairing_strategies import (
    PairingStrategy,
    ExhaustiveDoublesPairingStrategy,
    generate_candidate_matches,
    generate_team_pairings,
)
from .match_scorer import (
    MatchScorer,
    NormalizationCaps,
    PairHistoryIndex,
    ScoringWeights,
    rest_penalty,
    score_candidate,
)
from .round_scheduler import (
    RoundScheduler,
    assign_benched_players,
    benched_players,
    generate_schedule,
)
from .result_recorder import (
    record_match_result,
    resolve_team1_won,
    update_opposition_history,
    update_partnership_history,
    update_player_statistics,
)

__all__ = [
    # 评分算法
    'RatingAlgorithm',
    'DoublesEloRatingAlgorithm',
    'apply_match_result',
    'expected_score',
    'team_rating',
    # 配对策略
    'PairingStrategy',
    'ExhaustiveDoublesPairingStrategy',
    'generate_candidate_matches',
    'generate_team_pairings',
    # 比赛评分
    'MatchScorer',
    'NormalizationCaps',
    'PairHistoryIndex',
    'ScoringWeights',
    'rest_penalty',
    'score_candidate',
    # 轮次排赛
    'RoundScheduler',
    'assign_benched_players',
    'benched_players',
    'generate_schedule',
    # 结果记录
    'record_match_result',
    'resolve_team1_won',
    'update_opposition_history',
    'update_partnership_history',
    'update_player_statistics',
]
