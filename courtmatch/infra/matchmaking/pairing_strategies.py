"""
配对策略模块
枚举所有两人队伍组合，并组合成互不重叠的2对2候选比赛

规模上限: 候选比赛数量与队伍组合数成平方关系，即与可用球员数成四次方关系
（20人约 1.4 万场候选，40人约 27 万场）。仅适用于几十人以内的球员池，
球员池规模需由调用方控制。
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from courtmatch.core.models import CandidateMatch, Player, Team


def generate_team_pairings(players: Sequence[Player]) -> List[Team]:
    """按输入顺序生成全部 (players[i], players[j]), i<j 的两人队伍，共 n*(n-1)/2 支"""
    pairings = []
    for i, player_a in enumerate(players):
        for player_b in players[i + 1:]:
            pairings.append(Team(player_a, player_b))
    return pairings


def generate_candidate_matches(team_pairings: Sequence[Team]) -> List[CandidateMatch]:
    """对所有 i<j 的队伍组合，保留球员不重叠的作为候选比赛，顺序与 (i, j) 枚举顺序一致"""
    candidates = []
    for i, team1 in enumerate(team_pairings):
        for team2 in team_pairings[i + 1:]:
            if team1.shares_player_with(team2):
                continue
            candidates.append(CandidateMatch(team1, team2))
    return candidates


class PairingStrategy(ABC):
    """配对策略基类: 定义候选比赛生成接口"""

    @abstractmethod
    def generate_candidates(self, players: Sequence[Player]) -> List[CandidateMatch]:
        """根据可用球员生成候选比赛（顺序决定评分相同时的选取结果）"""
        pass


class ExhaustiveDoublesPairingStrategy(PairingStrategy):
    """穷举双打配对策略: 枚举全部队伍组合，再枚举全部不重叠的对阵"""

    def generate_candidates(self, players: Sequence[Player]) -> List[CandidateMatch]:
        if len(players) < 4:
            return []
        return generate_candidate_matches(generate_team_pairings(players))
