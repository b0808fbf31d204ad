"""
轮次排赛器单元测试
"""

from collections import defaultdict

import pytest

from courtmatch.core.exceptions import DuplicatePlayerId, InsufficientPlayers
from courtmatch.core.models import OppositionRecord, PartnershipRecord, Player
from courtmatch.infra.matchmaking.match_scorer import MatchScorer, ScoringWeights, score_candidate
from courtmatch.infra.matchmaking.round_scheduler import (
    RoundScheduler,
    assign_benched_players,
    benched_players,
    generate_schedule,
)


def make_players(n, rating=1500):
    return [Player(id=f"p{i}", display_name=f"Player {i}", skill_rating=rating) for i in range(1, n + 1)]


def ids_of(team):
    return set(team.ids)


def test_four_equal_players_one_court_one_round():
    """测试4名同分球员、1块场地、1轮：恰好1场比赛，包含全部4人且均衡分为0"""
    players = [Player(name, name) for name in "ABCD"]
    schedule = generate_schedule(players, courts=1, rounds=1)

    assert len(schedule) == 1
    match = schedule[0]
    assert set(match.player_ids) == {'A', 'B', 'C', 'D'}
    assert (match.round_number, match.court_number) == (1, 1)
    assert score_candidate(match, [], [], []).level_fairness == 0


def test_prefers_balanced_split():
    """测试 A=1600,B=1400,C=1500,D=1500 时选择 (A,B) vs (C,D)"""
    players = [
        Player('A', 'A', 1600),
        Player('B', 'B', 1400),
        Player('C', 'C', 1500),
        Player('D', 'D', 1500),
    ]
    schedule = generate_schedule(players, courts=1, rounds=1)

    assert len(schedule) == 1
    assert ids_of(schedule[0].team1) == {'A', 'B'}
    assert ids_of(schedule[0].team2) == {'C', 'D'}


def test_insufficient_players():
    """测试不足4人时抛出 InsufficientPlayers"""
    for n in range(0, 4):
        with pytest.raises(InsufficientPlayers) as exc_info:
            generate_schedule(make_players(n), courts=2, rounds=3)
        assert exc_info.value.player_count == n


def test_insufficient_players_checked_before_courts_and_rounds():
    """测试球员数检查先于场地数/轮数"""
    with pytest.raises(InsufficientPlayers):
        generate_schedule(make_players(3), courts=0, rounds=0)


def test_duplicate_player_id_rejected():
    """测试球员池中有重复ID时报错"""
    players = make_players(4) + [Player('p2', 'Again')]
    with pytest.raises(DuplicatePlayerId) as exc_info:
        generate_schedule(players, courts=1, rounds=1)
    assert exc_info.value.player_id == 'p2'


def test_non_positive_courts_or_rounds_returns_empty():
    """测试场地数或轮数不为正时返回空赛程"""
    assert generate_schedule(make_players(4), courts=0, rounds=2) == []
    assert generate_schedule(make_players(4), courts=2, rounds=0) == []


@pytest.mark.parametrize("pool_size", [4, 5, 6, 7, 8, 9])
@pytest.mark.parametrize("courts", [1, 2, 3])
@pytest.mark.parametrize("rounds", [1, 2, 3])
def test_schedule_invariants(pool_size, courts, rounds):
    """测试每场4名不同球员，同一轮内球员不重复出场"""
    players = [
        Player(f"p{i}", f"Player {i}", 1300 + 37 * ((i * 7) % 11))
        for i in range(1, pool_size + 1)
    ]
    schedule = generate_schedule(players, courts=courts, rounds=rounds)

    seen_by_round = defaultdict(set)
    for match in schedule:
        assert len(set(match.player_ids)) == 4
        assert 1 <= match.round_number <= rounds
        assert 1 <= match.court_number <= courts
        for player_id in match.player_ids:
            assert player_id not in seen_by_round[match.round_number]
            seen_by_round[match.round_number].add(player_id)

    # 每轮场次 = min(场地数, 球员数 // 4)
    expected_per_round = min(courts, pool_size // 4)
    assert len(schedule) == expected_per_round * rounds


def test_schedule_order_round_then_court():
    """测试输出按轮次、场地顺序排列"""
    schedule = generate_schedule(make_players(9), courts=2, rounds=3)

    assert [(m.round_number, m.court_number) for m in schedule] == [
        (1, 1), (1, 2), (2, 1), (2, 2), (3, 1), (3, 2),
    ]


def test_unfillable_court_left_empty():
    """测试可用球员不足时该场地空置，不影响后续轮次"""
    schedule = generate_schedule(make_players(6), courts=3, rounds=2)

    assert [(m.round_number, m.court_number) for m in schedule] == [(1, 1), (2, 1)]


def test_second_court_avoids_just_played_players():
    """测试同一轮第二块场地使用剩余球员，且第一场的球员不会影响剩余球员的休息分"""
    players = make_players(8)
    schedule = generate_schedule(players, courts=2, rounds=1)

    assert ids_of(schedule[0].team1) == {'p1', 'p2'}
    assert ids_of(schedule[0].team2) == {'p3', 'p4'}
    assert ids_of(schedule[1].team1) == {'p5', 'p6'}
    assert ids_of(schedule[1].team2) == {'p7', 'p8'}


def test_tie_break_keeps_first_candidate():
    """测试同分时选择生成顺序中的第一个候选（同一组球员连续两轮也保持相同对阵）"""
    players = make_players(4)
    schedule = generate_schedule(players, courts=1, rounds=2)

    assert len(schedule) == 2
    for match in schedule:
        assert match.team1.ids == ('p1', 'p2')
        assert match.team2.ids == ('p3', 'p4')


def test_rest_penalty_across_rounds():
    """测试休息惩罚跨轮次生效：上一轮打过的球员在下一轮被优先轮空"""
    players = make_players(8)
    schedule = generate_schedule(players, courts=1, rounds=2)

    round1_ids = set(schedule[0].player_ids)
    round2_ids = set(schedule[1].player_ids)
    assert round1_ids == {'p1', 'p2', 'p3', 'p4'}
    assert round2_ids == {'p5', 'p6', 'p7', 'p8'}


def test_partnership_history_changes_split():
    """测试搭档历史影响选择：常搭档的一对被拆开"""
    players = make_players(4)
    history = [PartnershipRecord('p1', 'p2', times_partnered=20)]
    schedule = generate_schedule(players, courts=1, rounds=1, partnership_history=history)

    assert schedule[0].team1.ids == ('p1', 'p3')
    assert schedule[0].team2.ids == ('p2', 'p4')


def test_opposition_history_changes_split():
    """测试对手历史影响选择"""
    players = make_players(4)
    history = [
        OppositionRecord('p1', 'p3', times_opposed=20),
        OppositionRecord('p2', 'p4', times_opposed=20),
    ]
    schedule = generate_schedule(players, courts=1, rounds=1, opposition_history=history)

    # (p1,p2) vs (p3,p4) 和 (p1,p4) vs (p2,p3) 都包含上述对手对，选无历史的 (p1,p3) vs (p2,p4)
    assert schedule[0].team1.ids == ('p1', 'p3')
    assert schedule[0].team2.ids == ('p2', 'p4')


def test_schedule_does_not_mutate_history():
    """测试排赛不修改输入的历史记录"""
    partnerships = [PartnershipRecord('p1', 'p2', times_partnered=1)]
    oppositions = [OppositionRecord('p1', 'p3', times_opposed=1)]
    snapshot = (list(partnerships), list(oppositions))

    generate_schedule(make_players(8), courts=2, rounds=3,
                      partnership_history=partnerships, opposition_history=oppositions)

    assert (partnerships, oppositions) == snapshot


def test_schedule_is_deterministic():
    """测试相同输入生成相同赛程"""
    players = [Player(f"p{i}", f"P{i}", 1400 + 17 * i) for i in range(1, 11)]
    history = [PartnershipRecord('p1', 'p5', times_partnered=3)]

    first = generate_schedule(players, courts=2, rounds=4, partnership_history=history)
    second = generate_schedule(players, courts=2, rounds=4, partnership_history=history)

    assert first == second


def test_custom_scorer_injected():
    """测试注入自定义评分器：忽略实力均衡后按生成顺序选择"""
    players = [
        Player('A', 'A', 1600),
        Player('B', 'B', 1400),
        Player('C', 'C', 1500),
        Player('D', 'D', 1500),
    ]
    players = [players[0], players[2], players[1], players[3]]  # A, C, B, D
    scheduler = RoundScheduler(scorer=MatchScorer(weights=ScoringWeights(level_fairness=0)))
    schedule = scheduler.generate_schedule(players, courts=1, rounds=1)

    assert schedule[0].team1.ids == ('A', 'C')


def test_benched_players():
    """测试轮空球员 = 球员池 - 该轮上场球员，保持球员池顺序"""
    players = make_players(6)
    schedule = generate_schedule(players, courts=1, rounds=2)

    for round_number in (1, 2):
        benched = benched_players(schedule, players, round_number)
        assert len(benched) == 2
        played = {pid for m in schedule if m.round_number == round_number for pid in m.player_ids}
        assert {p.id for p in benched} == {p.id for p in players} - played

    # 第一轮 p1-p4 上场，p5/p6 轮空
    assert [p.id for p in benched_players(schedule, players, 1)] == ['p5', 'p6']


def test_assign_benched_players_by_level():
    """测试轮空球员分配到平均评分最接近的场地"""
    players = [
        Player('a1', 'a1', 1800), Player('a2', 'a2', 1800),
        Player('a3', 'a3', 1800), Player('a4', 'a4', 1800),
        Player('b1', 'b1', 1200), Player('b2', 'b2', 1200),
        Player('b3', 'b3', 1200), Player('b4', 'b4', 1200),
        Player('strong', 'strong', 1750),
        Player('weak', 'weak', 1250),
    ]
    schedule = generate_schedule(players, courts=2, rounds=1)
    assignments = assign_benched_players(schedule, players)

    court_avgs = {
        m.court_number: sum(p.skill_rating for p in m.players) / 4 for m in schedule
    }
    strong_court = min(court_avgs, key=lambda c: abs(court_avgs[c] - 1750))
    weak_court = min(court_avgs, key=lambda c: abs(court_avgs[c] - 1250))

    assert [p.id for p in assignments[(1, strong_court)]] == ['strong']
    assert [p.id for p in assignments[(1, weak_court)]] == ['weak']
