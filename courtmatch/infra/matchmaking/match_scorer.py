"""
比赛评分模块
对候选比赛按实力均衡、搭档多样性、对手多样性、球员休息四项加权打分（越低越好）

各分项均归一化到 [0, 1]:
- level_fairness: 两队平均评分之差 / 200
- partnership_variety: 两队搭档历史次数之和 / 20
- opposition_variety: 4 组跨队球员对的对手历史次数之和 / 40
- player_rest: 4 名球员中最近上场者的休息惩罚，k 场之前上场记 1/k
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Union

from courtmatch.core.models import (
    CandidateMatch,
    OppositionRecord,
    PairKey,
    PartnershipRecord,
    ScheduledMatch,
    ScoreBreakdown,
    make_pair_key,
)
from courtmatch.infra.matchmaking.rating_algorithms import team_rating

LEVEL_FAIRNESS_WEIGHT = 10
PARTNERSHIP_VARIETY_WEIGHT = 5
OPPOSITION_VARIETY_WEIGHT = 3
PLAYER_REST_WEIGHT = 8

LEVEL_GAP_CAP = 200
PARTNERSHIP_COUNT_CAP = 20
OPPOSITION_COUNT_CAP = 40


@dataclass(frozen=True)
class ScoringWeights:
    """四项评分的权重"""
    level_fairness: float = LEVEL_FAIRNESS_WEIGHT
    partnership_variety: float = PARTNERSHIP_VARIETY_WEIGHT
    opposition_variety: float = OPPOSITION_VARIETY_WEIGHT
    player_rest: float = PLAYER_REST_WEIGHT


@dataclass(frozen=True)
class NormalizationCaps:
    """归一化上限：达到上限即记为 1"""
    level_gap: float = LEVEL_GAP_CAP
    partnership_count: float = PARTNERSHIP_COUNT_CAP
    opposition_count: float = OPPOSITION_COUNT_CAP


class PairHistoryIndex:
    """无序球员对 -> 次数 的只读索引，同一球员对有多条记录时以第一条为准"""

    def __init__(self, counts: Optional[Dict[PairKey, int]] = None):
        self._counts: Dict[PairKey, int] = dict(counts or {})

    @classmethod
    def from_partnerships(cls, records: Iterable[PartnershipRecord]) -> 'PairHistoryIndex':
        counts: Dict[PairKey, int] = {}
        for record in records:
            counts.setdefault(record.pair_key, record.times_partnered)
        return cls(counts)

    @classmethod
    def from_oppositions(cls, records: Iterable[OppositionRecord]) -> 'PairHistoryIndex':
        counts: Dict[PairKey, int] = {}
        for record in records:
            counts.setdefault(record.pair_key, record.times_opposed)
        return cls(counts)

    def count(self, player1_id: str, player2_id: str) -> int:
        """没有记录的球员对计为 0"""
        return self._counts.get(make_pair_key(player1_id, player2_id), 0)

    def __len__(self) -> int:
        return len(self._counts)


PartnershipHistory = Union[PairHistoryIndex, Iterable[PartnershipRecord]]
OppositionHistory = Union[PairHistoryIndex, Iterable[OppositionRecord]]


def _as_partnership_index(history: PartnershipHistory) -> PairHistoryIndex:
    if isinstance(history, PairHistoryIndex):
        return history
    return PairHistoryIndex.from_partnerships(history)


def _as_opposition_index(history: OppositionHistory) -> PairHistoryIndex:
    if isinstance(history, PairHistoryIndex):
        return history
    return PairHistoryIndex.from_oppositions(history)


def rest_penalty(player_id: str, prior_matches: Sequence[ScheduledMatch]) -> float:
    """从最近一场往前找，球员出现在 k 场之前（k=1 为上一场）则惩罚为 1/k，未上场为 0"""
    total = len(prior_matches)
    for index in range(total - 1, -1, -1):
        if prior_matches[index].has_player(player_id):
            return 1 / (total - index)
    return 0.0


class MatchScorer:
    """候选比赛评分器: 纯函数式打分，不修改任何历史记录"""

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        caps: Optional[NormalizationCaps] = None
    ):
        self.weights = weights or ScoringWeights()
        self.caps = caps or NormalizationCaps()

    def level_fairness(self, candidate: CandidateMatch) -> float:
        team1 = team_rating(candidate.team1.first.skill_rating, candidate.team1.second.skill_rating)
        team2 = team_rating(candidate.team2.first.skill_rating, candidate.team2.second.skill_rating)
        return min(abs(team1 - team2) / self.caps.level_gap, 1)

    def partnership_variety(self, candidate: CandidateMatch, partnerships: PairHistoryIndex) -> float:
        times = (
            partnerships.count(*candidate.team1.ids) +
            partnerships.count(*candidate.team2.ids)
        )
        return min(times / self.caps.partnership_count, 1)

    def opposition_variety(self, candidate: CandidateMatch, oppositions: PairHistoryIndex) -> float:
        times = 0
        for player1_id in candidate.team1.ids:
            for player2_id in candidate.team2.ids:
                times += oppositions.count(player1_id, player2_id)
        return min(times / self.caps.opposition_count, 1)

    def player_rest(self, candidate: CandidateMatch, prior_matches: Sequence[ScheduledMatch]) -> float:
        return max(rest_penalty(player_id, prior_matches) for player_id in candidate.player_ids)

    def score(
        self,
        candidate: CandidateMatch,
        partnership_history: PartnershipHistory,
        opposition_history: OppositionHistory,
        prior_matches: Sequence[ScheduledMatch]
    ) -> ScoreBreakdown:
        """计算候选比赛的加权总分及各分项"""
        partnerships = _as_partnership_index(partnership_history)
        oppositions = _as_opposition_index(opposition_history)

        level_fairness = self.level_fairness(candidate)
        partnership_variety = self.partnership_variety(candidate, partnerships)
        opposition_variety = self.opposition_variety(candidate, oppositions)
        player_rest = self.player_rest(candidate, prior_matches)

        total = (
            level_fairness * self.weights.level_fairness +
            partnership_variety * self.weights.partnership_variety +
            opposition_variety * self.weights.opposition_variety +
            player_rest * self.weights.player_rest
        )

        return ScoreBreakdown(
            total=total,
            level_fairness=level_fairness,
            partnership_variety=partnership_variety,
            opposition_variety=opposition_variety,
            player_rest=player_rest,
        )


_default_scorer = MatchScorer()


def score_candidate(
    candidate: CandidateMatch,
    partnership_history: PartnershipHistory,
    opposition_history: OppositionHistory,
    prior_matches: Sequence[ScheduledMatch]
) -> ScoreBreakdown:
    """使用默认权重（10/5/3/8）和归一化上限（200/20/40）为候选比赛打分"""
    return _default_scorer.score(candidate, partnership_history, opposition_history, prior_matches)
