import pytest

from gem_puzzle.board import Board, GemInstance, paint_grid
from gem_puzzle.geometry import Direction, is_flippable, orient
from gem_puzzle.catalog import ABSORBED_COLOR
from gem_puzzle.tracer import (
    ABSORBED_EXIT,
    LOOP_EXIT,
    all_emitters_match,
    emitter_ids,
    parse_emitter,
    trace,
    trace_all,
)


def test_emitter_ids_cover_every_edge(board):
    ids = emitter_ids(board)

    assert len(ids) == 2 * board.width + 2 * board.height
    assert len(set(ids)) == len(ids)
    assert {"T1", "B8", "L1", "R10"} <= set(ids)


@pytest.mark.parametrize(
    "emitter_id, start, direction",
    [
        ("T3", (2, -1), Direction.DOWN),
        ("B1", (0, 10), Direction.UP),
        ("L5", (-1, 4), Direction.RIGHT),
        ("R10", (8, 9), Direction.LEFT),
    ],
)
def test_parse_emitter(board, emitter_id, start, direction):
    assert parse_emitter(board, emitter_id) == (start, direction)


@pytest.mark.parametrize("emitter_id", ["X1", "T0", "T9", "L11", "T", ""])
def test_parse_emitter_rejects_invalid_ids(board, emitter_id):
    with pytest.raises(ValueError):
        parse_emitter(board, emitter_id)


def test_empty_board_rays_cross_to_opposite_edge(board):
    grid = paint_grid(board, [])
    opposite = {"T": "B", "B": "T", "L": "R", "R": "L"}

    for result in trace_all(grid):
        assert result.exit_id == opposite[result.emitter_id[0]] + result.emitter_id[1:]
        assert result.colors == ()
        assert result.mixed_color.name == "No color"


def test_block_reflects_ray_back_to_emitter(board, make_gem):
    grid = paint_grid(board, [make_gem(["#"], 3, 4, colors=())])

    result = trace(grid, "L5")

    assert result.exit_id == "L5"
    assert result.colors == ()
    assert result.path[0] == (0.0, 4.5)
    assert result.path[1] == (3.5, 4.5)
    assert result.path[-1] == (0.0, 4.5)


def test_absorber_stops_ray(board, make_gem):
    grid = paint_grid(board, [make_gem(["X"], 0, 0, absorbs=True)])

    result = trace(grid, "T1")

    assert result.exit_id == ABSORBED_EXIT
    assert result.absorbed
    assert result.colors == ()
    assert result.mixed_color == ABSORBED_COLOR
    assert result.path[-1] == (0.5, 0.5)


def test_absorber_discards_colors_collected_earlier(board, make_gem):
    gems = [
        make_gem(["BL"], 2, 0, name="YELLOW", colors={"YELLOW"}),
        make_gem(["X"], 5, 0, name="BLACK", absorbs=True),
    ]
    result = trace(paint_grid(board, gems), "T3")

    assert result.exit_id == ABSORBED_EXIT
    assert result.colors == ()


def test_gem_color_is_added_once_per_gem(board, make_gem):
    # Passes through the triangle, bounces off the block and turns down on the
    # way back, hitting the same gem three times.
    grid = paint_grid(board, [make_gem(["TL #"], 0, 0, name="RED", colors={"RED"})])

    result = trace(grid, "L1")

    assert result.exit_id == "B1"
    assert result.colors == ("RED",)
    assert result.path == (
        (0.0, 0.5),
        (0.5, 0.5),
        (1.5, 0.5),
        (0.5, 0.5),
        (0.5, 10.0),
    )


def test_colors_from_two_gems_mix(board, make_gem):
    gems = [
        make_gem(["BL"], 2, 0, name="YELLOW", colors={"YELLOW"}),
        make_gem(["#"], 5, 0, name="BLUE", colors={"BLUE"}),
    ]
    result = trace(paint_grid(board, gems), "T3")

    assert result.exit_id == "T3"
    assert result.colors == ("BLUE", "YELLOW")
    assert result.mixed_color.name == "Green"


def test_transparent_gem_adds_no_color(board, make_gem):
    grid = paint_grid(board, [make_gem(["#"], 3, 4, name="TRANSPARENT")])

    result = trace(grid, "L5")

    assert result.exit_id == "L5"
    assert result.mixed_color.name == "No color"


def test_closed_circuit_reports_loop_sentinel(board, make_gem):
    gems = [
        make_gem(["TL"], 0, 0, name="WHITE", colors={"WHITE"}),
        make_gem(["TR"], 1, 0, name="WHITE", colors={"WHITE"}),
        make_gem(["BL"], 0, 1, name="WHITE", colors={"WHITE"}),
        make_gem(["BR"], 1, 1, name="WHITE", colors={"WHITE"}),
    ]

    result = trace(paint_grid(board, gems), "T1")

    assert result.exit_id == LOOP_EXIT
    assert result.undetermined
    assert result.colors == ("WHITE",)


def test_step_budget_is_configurable(board):
    grid = paint_grid(board, [])

    assert trace(grid, "T1", max_steps=5).exit_id == LOOP_EXIT
    assert trace(grid, "T1", max_steps=11).exit_id == "B1"


def test_single_catalog_gems_never_loop(catalog):
    board = Board()
    for definition in catalog.gems.values():
        flips = (False, True) if is_flippable(definition.pattern) else (False,)
        for flipped in flips:
            for rotation in range(4):
                pattern = orient(definition.pattern, rotation, flipped)
                gem = GemInstance(
                    id="solo",
                    gem=definition,
                    x=(board.width - pattern.width) // 2,
                    y=(board.height - pattern.height) // 2,
                    pattern=pattern,
                    rotation=rotation,
                    flipped=flipped,
                )
                results = trace_all(paint_grid(board, [gem]))
                assert not any(result.undetermined for result in results), (
                    definition.name,
                    rotation,
                    flipped,
                )


def test_all_emitters_match_is_reflexive_and_symmetric(board, make_gem):
    first = paint_grid(board, [make_gem(["BR # TL"], 1, 1, name="RED", colors={"RED"})])
    same = paint_grid(board, [make_gem(["BR # TL"], 1, 1, name="RED", colors={"RED"}, gem_id="copy")])
    other = paint_grid(board, [make_gem(["BR # TL"], 3, 5, name="RED", colors={"RED"})])

    assert all_emitters_match(first, first)
    assert all_emitters_match(first, same)
    assert all_emitters_match(same, first)
    assert not all_emitters_match(first, other)
    assert not all_emitters_match(other, first)


def test_color_difference_alone_breaks_match(board, make_gem):
    red = paint_grid(board, [make_gem(["#"], 4, 4, name="RED", colors={"RED"})])
    blue = paint_grid(board, [make_gem(["#"], 4, 4, name="BLUE", colors={"BLUE"})])

    assert not all_emitters_match(red, blue)
