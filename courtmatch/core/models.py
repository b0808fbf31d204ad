"""
数据模型定义
排赛引擎读写的所有实体：球员、搭档/对手历史、队伍、候选比赛、已排比赛
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple


INITIAL_RATING = 1500.0

PairKey = Tuple[str, str]


def make_pair_key(player1_id: str, player2_id: str) -> PairKey:
    """无序球员对的规范键（按ID排序）"""
    if player1_id <= player2_id:
        return (player1_id, player2_id)
    return (player2_id, player1_id)


@dataclass(frozen=True)
class Player:
    """球员: 引擎只读取评分，从不持久化"""
    id: str
    display_name: str
    skill_rating: float = INITIAL_RATING


@dataclass(frozen=True)
class PartnershipRecord:
    """搭档历史: 两名球员作为队友同场的次数"""
    player1_id: str
    player2_id: str
    times_partnered: int = 0
    last_partnered_at: Optional[datetime] = None

    @property
    def pair_key(self) -> PairKey:
        return make_pair_key(self.player1_id, self.player2_id)


@dataclass(frozen=True)
class OppositionRecord:
    """对手历史: 两名球员作为对手同场的次数"""
    player1_id: str
    player2_id: str
    times_opposed: int = 0
    last_opposed_at: Optional[datetime] = None

    @property
    def pair_key(self) -> PairKey:
        return make_pair_key(self.player1_id, self.player2_id)


@dataclass(frozen=True)
class Team:
    """双打队伍: 固定两个位置，两名球员必须不同"""
    first: Player
    second: Player

    def __post_init__(self):
        if self.first.id == self.second.id:
            raise ValueError(f"队伍中的两名球员必须不同: {self.first.id}")

    @property
    def players(self) -> Tuple[Player, Player]:
        return (self.first, self.second)

    @property
    def ids(self) -> Tuple[str, str]:
        return (self.first.id, self.second.id)

    @property
    def pair_key(self) -> PairKey:
        return make_pair_key(self.first.id, self.second.id)

    def has_player(self, player_id: str) -> bool:
        return self.first.id == player_id or self.second.id == player_id

    def shares_player_with(self, other: 'Team') -> bool:
        return other.has_player(self.first.id) or other.has_player(self.second.id)


class _TwoTeamMatch:
    """两队对阵的公共校验与访问方法"""
    team1: Team
    team2: Team

    def __post_init__(self):
        if self.team1.shares_player_with(self.team2):
            raise ValueError(
                f"两支队伍存在重复球员: {self.team1.ids} vs {self.team2.ids}"
            )

    @property
    def players(self) -> Tuple[Player, Player, Player, Player]:
        return self.team1.players + self.team2.players

    @property
    def player_ids(self) -> Tuple[str, str, str, str]:
        return self.team1.ids + self.team2.ids

    def has_player(self, player_id: str) -> bool:
        return self.team1.has_player(player_id) or self.team2.has_player(player_id)


@dataclass(frozen=True)
class CandidateMatch(_TwoTeamMatch):
    """候选比赛: 两支没有共同球员的队伍，仅在排赛过程中临时存在"""
    team1: Team
    team2: Team


@dataclass(frozen=True)
class ScheduledMatch(_TwoTeamMatch):
    """已排比赛: 某轮某场地上的对阵，本轮未出现在任何比赛中的球员即轮空"""
    round_number: int
    court_number: int
    team1: Team
    team2: Team

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateMatch,
        round_number: int,
        court_number: int
    ) -> 'ScheduledMatch':
        return cls(
            round_number=round_number,
            court_number=court_number,
            team1=candidate.team1,
            team2=candidate.team2,
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """候选比赛评分明细（各分项归一化到[0,1]，越低越好）"""
    total: float
    level_fairness: float
    partnership_variety: float
    opposition_variety: float
    player_rest: float


@dataclass(frozen=True)
class MatchRatingResult:
    """一场双打比赛后的评分更新结果"""
    team1_new_ratings: Tuple[float, float]
    team2_new_ratings: Tuple[float, float]
    team1_delta: int
    team2_delta: int


@dataclass(frozen=True)
class PlayerStatistics:
    """球员战绩统计（current_streak 为正表示连胜，为负表示连败）"""
    player_id: str
    total_matches: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    current_streak: int = 0
    longest_win_streak: int = 0


@dataclass(frozen=True)
class MatchResultUpdate:
    """记录比赛结果后需要由调用方持久化的全部变更"""
    team1_won: bool
    rating_result: MatchRatingResult
    new_ratings: Dict[str, float]
    rating_changes: Dict[str, int]
    partnership_history: Tuple[PartnershipRecord, ...]
    opposition_history: Tuple[OppositionRecord, ...]
    statistics: Dict[str, PlayerStatistics]
