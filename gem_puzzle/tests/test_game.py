import random

import pytest

from gem_puzzle.board import Board, GemInstance
from gem_puzzle.game import GameStatus, PuzzleSession
from gem_puzzle.generator import GenerationFailure, SecretLayout, SecretLayoutGenerator
from gem_puzzle.geometry import orient


@pytest.fixture
def session(catalog) -> PuzzleSession:
    return PuzzleSession(catalog, "training")


def copy_layout_into_guess(session: PuzzleSession, instances) -> None:
    for placed in instances:
        gem = session.add_player_gem(placed.name, 0, 0)
        gem.rotation = placed.rotation
        gem.flipped = placed.flipped
        gem.pattern = placed.pattern
        session.move_player_gem(gem.id, placed.x, placed.y)


def test_start_generates_secret_layout(session):
    outcome = session.start(random.Random(11))

    assert isinstance(outcome, SecretLayout)
    assert session.status is GameStatus.PLAYING
    assert [gem.name for gem in session.secret_gems] == session.gem_names
    assert session.remaining_gems() == {
        "YELLOW": 1,
        "RED": 1,
        "BLUE": 1,
        "WHITE_DIAMOND": 1,
        "WHITE_TRIANGLE": 1,
    }


def test_start_reports_generation_failure(catalog):
    board = Board(width=2, height=2)
    generator = SecretLayoutGenerator(board, catalog, max_layout_attempts=2, max_gem_attempts=2)
    session = PuzzleSession(catalog, "TRAINING", board=board, generator=generator)

    outcome = session.start(random.Random(0))

    assert isinstance(outcome, GenerationFailure)
    assert session.status is GameStatus.NOT_STARTED
    with pytest.raises(RuntimeError):
        session.send_wave("T1")


def test_unknown_difficulty_is_rejected(catalog):
    with pytest.raises(KeyError):
        PuzzleSession(catalog, "EASY")


def test_add_player_gem_clamps_to_board(session):
    gem = session.add_player_gem("BLUE", 7, 9)

    assert (gem.x, gem.y) == (4, 8)
    assert "BLUE" not in session.remaining_gems()
    with pytest.raises(ValueError):
        session.add_player_gem("BLUE", 0, 0)


def test_overlapping_gems_are_marked_invalid_until_moved(session):
    red = session.add_player_gem("RED", 0, 0)
    yellow = session.add_player_gem("YELLOW", 1, 0)

    assert not red.valid
    assert not yellow.valid

    session.move_player_gem(yellow.id, 5, 5)

    assert red.valid
    assert yellow.valid


def test_rotate_turns_gem_about_its_centre(session, catalog):
    red = session.add_player_gem("RED", 2, 2)

    session.rotate_player_gem(red.id)

    assert red.rotation == 1
    assert red.pattern == orient(catalog.get("RED").pattern, 1)
    assert (red.x, red.y) == (3, 1)


def test_rotate_keeps_gem_on_board(session):
    red = session.add_player_gem("RED", 0, 0)

    session.rotate_player_gem(red.id)

    assert (red.x, red.y) == (1, 0)
    assert (red.width, red.height) == (1, 3)


def test_flip_only_changes_flippable_gems(session):
    diamond = session.add_player_gem("WHITE_DIAMOND", 0, 0)
    red = session.add_player_gem("RED", 4, 6)

    session.flip_player_gem(diamond.id)
    session.flip_player_gem(red.id)

    assert not diamond.flipped
    assert red.flipped
    assert red.pattern.to_tokens() == ["TR # BL"]


def test_remove_player_gem_returns_it_to_the_pool(session):
    gem = session.add_player_gem("YELLOW", 3, 3)

    session.remove_player_gem(gem.id)

    assert session.player_gems == []
    assert "YELLOW" in session.remaining_gems()
    with pytest.raises(KeyError):
        session.find_player_gem(gem.id)


def test_send_wave_logs_both_results(session):
    session.start(random.Random(4))

    entry = session.send_wave("t1")

    assert entry.emitter_id == "T1"
    assert entry.player_result.exit_id == "B1"
    assert session.wave_count == 1
    assert session.log == [entry]


def test_send_wave_requires_running_game(session):
    with pytest.raises(RuntimeError):
        session.send_wave("T1")


def test_copying_the_secret_wins_with_identical_layout(session):
    session.start(random.Random(9))
    for emitter_id in ("T1", "L3", "R7"):
        session.send_wave(emitter_id)
    copy_layout_into_guess(session, session.secret_gems)

    assert session.solution_ready()
    report = session.check_solution()

    assert report.won
    assert report.identical
    assert report.wave_count == 3
    assert report.rating == "Very good"
    assert session.status is GameStatus.GAME_OVER


def test_wrong_complete_guess_loses(session, catalog):
    session.start(random.Random(2))
    other = SecretLayoutGenerator(session.board, catalog).generate(session.gem_names, random.Random(3))
    assert {gem.layout_key() for gem in other.instances} != {gem.layout_key() for gem in session.secret_gems}
    copy_layout_into_guess(session, other.instances)

    report = session.check_solution()

    assert not report.won
    assert report.rating is None
    assert session.status is GameStatus.GAME_OVER


def test_check_solution_requires_running_game(session):
    with pytest.raises(RuntimeError):
        session.check_solution()


def test_check_solution_requires_every_gem_placed(session):
    session.start(random.Random(2))

    with pytest.raises(RuntimeError):
        session.check_solution()
    assert session.status is GameStatus.PLAYING


def test_check_solution_rejects_invalid_gems(session):
    session.start(random.Random(6))
    for name in session.gem_names:
        session.add_player_gem(name, 0, 0)

    assert len(session.player_gems) == len(session.gem_names)
    assert not session.solution_ready()
    with pytest.raises(RuntimeError):
        session.check_solution()


def test_check_solution_only_once(session):
    session.start(random.Random(9))
    copy_layout_into_guess(session, session.secret_gems)
    session.check_solution()

    with pytest.raises(RuntimeError):
        session.check_solution()


def test_give_up_ends_game(session):
    session.start(random.Random(2))

    report = session.give_up()

    assert not report.won
    assert session.status is GameStatus.GAME_OVER


def test_can_place_checks_candidate_against_player_gems(session, catalog):
    session.add_player_gem("RED", 0, 0)

    blocked = GemInstance.place("candidate", catalog.get("YELLOW"), 1, 0)
    free = GemInstance.place("candidate", catalog.get("YELLOW"), 5, 5)

    assert not session.can_place(blocked)
    assert session.can_place(free)
