"""
核心模块
数据模型、异常定义和赛程报表
"""

from courtmatch.core.exceptions import (
    DuplicatePlayerId,
    InsufficientPlayers,
    InvalidMatchResult,
    InvalidTeamSize,
    MatchmakingError,
)
from courtmatch.core.models import (
    INITIAL_RATING,
    CandidateMatch,
    MatchRatingResult,
    MatchResultUpdate,
    OppositionRecord,
    PartnershipRecord,
    Player,
    PlayerStatistics,
    ScheduledMatch,
    ScoreBreakdown,
    Team,
)

__all__ = [
    'DuplicatePlayerId',
    'InsufficientPlayers',
    'InvalidMatchResult',
    'InvalidTeamSize',
    'MatchmakingError',
    'INITIAL_RATING',
    'CandidateMatch',
    'MatchRatingResult',
    'MatchResultUpdate',
    'OppositionRecord',
    'PartnershipRecord',
    'Player',
    'PlayerStatistics',
    'ScheduledMatch',
    'ScoreBreakdown',
    'Team',
]
