import unittest

from blockfall.game.engine import (
    Command,
    GameEngine,
    GameOver,
    KeyLatch,
    PieceLocked,
    PieceSpawned,
    RowsCleared,
)
from blockfall.game.pieces import PATTERNS_BY_NAME, PIECE_PATTERNS, PieceCatalog

GRAVITY_MS = 400


def only(name, seed=0):
    return PieceCatalog(patterns=[PATTERNS_BY_NAME[name]], seed=seed)


def fill_row(engine, y, skip=()):
    for x in range(engine.width):
        if x not in skip:
            engine.board.set(x, y, True)


def lowest_y(engine):
    return min(y for _, y in engine.piece.positions)


class SpawnTests(unittest.TestCase):
    def test_first_step_spawns_at_buffer_row(self):
        engine = GameEngine(catalog=only("T"))
        self.assertIsNone(engine.piece)

        result = engine.step(0)

        self.assertEqual(engine.spawn_pivot, (5, 18))
        self.assertEqual(engine.piece.positions, [(5, 18), (4, 18), (6, 18), (5, 19)])
        self.assertFalse(result.snapshot.game_over)
        self.assertIsInstance(result.events[0], PieceSpawned)
        self.assertEqual(result.snapshot.piece_name, "T")

    def test_no_game_over_on_fresh_board_for_any_pattern(self):
        for pattern in PIECE_PATTERNS:
            engine = GameEngine(catalog=PieceCatalog(patterns=[pattern], seed=0))
            result = engine.step(0)
            self.assertFalse(result.snapshot.game_over, pattern.name)
            self.assertIsNotNone(engine.piece, pattern.name)
            self.assertTrue(engine.spawn(), pattern.name)

    def test_spawn_only_once_per_request(self):
        engine = GameEngine(catalog=only("O"))
        engine.step(0)
        first = engine.piece
        engine.step(0)
        self.assertIs(engine.piece, first)


class GravityTests(unittest.TestCase):
    def test_falls_one_row_per_tick_then_locks_on_next_tick(self):
        engine = GameEngine(catalog=only("I"))
        engine.step(0)
        self.assertEqual(lowest_y(engine), 17)

        for expected in range(16, -1, -1):
            engine.step(GRAVITY_MS)
            self.assertEqual(lowest_y(engine), expected)

        self.assertEqual(engine.board.count(), 0)
        result = engine.step(GRAVITY_MS)

        self.assertIsNone(engine.piece)
        self.assertEqual(set(engine.board.occupied_cells()), {(5, 0), (5, 1), (5, 2), (5, 3)})
        self.assertTrue(any(isinstance(e, PieceLocked) for e in result.events))

        engine.step(0)
        self.assertIsNotNone(engine.piece)

    def test_no_fall_before_period_elapses(self):
        engine = GameEngine()
        engine.place_piece("O", (4, 10))
        engine.step(GRAVITY_MS - 1)
        self.assertEqual(lowest_y(engine), 10)
        engine.step(1)
        self.assertEqual(lowest_y(engine), 9)

    def test_rule_runs_once_even_if_timer_fired_twice(self):
        engine = GameEngine()
        engine.place_piece("O", (4, 10))
        engine.step(2 * GRAVITY_MS)
        self.assertEqual(lowest_y(engine), 9)

    def test_locks_on_occupied_cell_below(self):
        engine = GameEngine()
        engine.board.set(5, 4, True)
        engine.place_piece("O", (4, 5))
        self.assertTrue(engine.apply_gravity())
        self.assertEqual(engine.board.count(), 5)
        self.assertIsNone(engine.piece)

    def test_whole_piece_falls_together(self):
        engine = GameEngine()
        engine.place_piece("S", (4, 10))
        before = engine.piece.positions
        self.assertFalse(engine.apply_gravity())
        self.assertEqual(engine.piece.positions, [(x, y - 1) for x, y in before])


class RowClearTests(unittest.TestCase):
    def test_clear_row_three_shifts_cells_above(self):
        engine = GameEngine()
        fill_row(engine, 3)
        engine.board.set(0, 5, True)
        engine.board.set(7, 4, True)
        engine.board.set(1, 1, True)

        self.assertEqual(engine.clear_full_rows(), [3])

        self.assertEqual(set(engine.board.occupied_cells()), {(0, 4), (7, 3), (1, 1)})
        self.assertEqual(engine.rows_cleared, 1)

    def test_lock_then_clear_in_same_step(self):
        engine = GameEngine()
        fill_row(engine, 0, skip=(4, 5))
        fill_row(engine, 1, skip=(4, 5))
        engine.board.set(0, 2, True)
        engine.place_piece("O", (4, 0))

        result = engine.step(GRAVITY_MS)

        kinds = [type(e) for e in result.events]
        self.assertLess(kinds.index(PieceLocked), kinds.index(RowsCleared))
        cleared = next(e for e in result.events if isinstance(e, RowsCleared))
        self.assertEqual(cleared.rows, (0, 1))
        self.assertEqual(engine.board.occupied_cells(), [(0, 0)])

    def test_clear_waits_for_gravity_tick(self):
        engine = GameEngine()
        fill_row(engine, 0)
        engine.place_piece("O", (4, 10))
        engine.step(GRAVITY_MS - 1)
        self.assertEqual(engine.board.count(), 10)
        engine.step(1)
        self.assertEqual(engine.board.count(), 0)

    def test_no_full_rows(self):
        engine = GameEngine()
        fill_row(engine, 2, skip=(9,))
        self.assertEqual(engine.clear_full_rows(), [])
        self.assertEqual(engine.board.count(), 9)


class HorizontalMoveTests(unittest.TestCase):
    def test_blocked_by_locked_column_moves_nothing(self):
        engine = GameEngine()
        for y in range(1, 5):
            engine.board.set(3, y, True)
        engine.place_piece("O", (4, 0))
        before = engine.piece.positions

        self.assertFalse(engine.move_horizontal(-1))
        self.assertEqual(engine.piece.positions, before)

        self.assertTrue(engine.move_horizontal(1))
        self.assertEqual(engine.piece.positions, [(x + 1, y) for x, y in before])

    def test_walls(self):
        engine = GameEngine()
        engine.place_piece("O", (8, 5))
        self.assertFalse(engine.move_horizontal(1))
        engine.place_piece("O", (0, 5))
        self.assertFalse(engine.move_horizontal(-1))

    def test_cells_above_board_only_check_walls(self):
        engine = GameEngine()
        engine.board.set(4, 17, True)
        engine.place_piece("O", (5, 18))
        self.assertTrue(engine.move_horizontal(-1))
        self.assertEqual(engine.piece.positions, [(4, 18), (4, 19), (5, 18), (5, 19)])

    def test_visible_cell_checks_neighbour(self):
        engine = GameEngine()
        engine.board.set(4, 17, True)
        engine.place_piece("I", (5, 18))
        self.assertFalse(engine.move_horizontal(-1))

    def test_gated_by_input_timer(self):
        engine = GameEngine()
        engine.place_piece("O", (4, 5))
        engine.step(50, held={Command.MOVE_LEFT})
        self.assertEqual(engine.piece.positions[0], (4, 5))
        engine.step(50, held={Command.MOVE_LEFT})
        self.assertEqual(engine.piece.positions[0], (3, 5))

    def test_invalid_direction(self):
        engine = GameEngine()
        engine.place_piece("O", (4, 5))
        with self.assertRaises(ValueError):
            engine.move_horizontal(2)


class HardDropTests(unittest.TestCase):
    def test_drop_to_floor_keeps_piece_active(self):
        engine = GameEngine()
        engine.place_piece("I", (4, 10))
        self.assertEqual(engine.hard_drop(), 9)
        self.assertEqual(sorted(engine.piece.positions), [(4, 0), (4, 1), (4, 2), (4, 3)])
        self.assertEqual(engine.board.count(), 0)

    def test_drop_stops_above_occupied_cell(self):
        engine = GameEngine()
        engine.board.set(4, 2, True)
        engine.place_piece("O", (4, 10))
        self.assertEqual(engine.hard_drop(), 7)
        self.assertIn((4, 3), engine.piece.positions)
        self.assertEqual(lowest_y(engine), 3)

    def test_drop_from_spawn_row(self):
        engine = GameEngine(catalog=only("O"))
        engine.step(0)
        self.assertEqual(engine.hard_drop(), 18)
        self.assertEqual(lowest_y(engine), 0)

    def test_resting_piece_does_not_move(self):
        engine = GameEngine()
        engine.place_piece("O", (4, 0))
        self.assertEqual(engine.hard_drop(), 0)

    def test_edge_triggered_then_locked_by_gravity(self):
        engine = GameEngine()
        engine.place_piece("T", (4, 10))
        engine.step(0, pressed={Command.HARD_DROP})
        self.assertEqual(lowest_y(engine), 0)
        self.assertIsNotNone(engine.piece)

        engine.step(GRAVITY_MS)
        self.assertIsNone(engine.piece)
        self.assertEqual(engine.board.count(), 4)

    def test_held_drop_does_nothing(self):
        engine = GameEngine()
        engine.place_piece("T", (4, 10))
        engine.step(100, held={Command.HARD_DROP})
        self.assertEqual(lowest_y(engine), 10)


class RotateTests(unittest.TestCase):
    def test_i_piece_four_rotations_identity(self):
        engine = GameEngine()
        engine.place_piece("I", (4, 5))
        original = list(engine.piece.cells)
        seen = set()
        for _ in range(4):
            self.assertTrue(engine.rotate())
            seen.add(tuple(sorted(engine.piece.positions)))
        self.assertEqual(engine.piece.cells, original)
        self.assertEqual(len(seen), 4)

    def test_first_rotation_of_vertical_i_is_horizontal(self):
        engine = GameEngine()
        engine.place_piece("I", (4, 5))
        engine.rotate()
        self.assertEqual(sorted(engine.piece.positions), [(3, 5), (4, 5), (5, 5), (6, 5)])

    def test_out_of_bounds_rotation_is_noop(self):
        engine = GameEngine()
        engine.place_piece("I", (0, 5))
        before = list(engine.piece.cells)
        self.assertFalse(engine.rotate())
        self.assertEqual(engine.piece.cells, before)

    def test_occupied_rotation_is_noop(self):
        engine = GameEngine()
        engine.board.set(5, 5, True)
        engine.place_piece("I", (4, 5))
        before = list(engine.piece.cells)
        self.assertFalse(engine.rotate())
        self.assertEqual(engine.piece.cells, before)

    def test_no_rotation_above_visible_top(self):
        engine = GameEngine(catalog=only("I"))
        engine.step(0)
        self.assertFalse(engine.rotate())

    def test_edge_triggered(self):
        engine = GameEngine()
        engine.place_piece("T", (4, 10))
        latch = KeyLatch()
        engine.step(0, pressed=latch.update({Command.ROTATE_CW}))
        after_press = list(engine.piece.cells)
        engine.step(0, pressed=latch.update({Command.ROTATE_CW}))
        self.assertEqual(engine.piece.cells, after_press)


class GameOverTests(unittest.TestCase):
    def test_blocked_spawn_resets_game(self):
        engine = GameEngine(catalog=only("I"))
        for y in range(engine.height):
            engine.board.set(5, y, True)

        result = engine.step(0)

        self.assertTrue(result.snapshot.game_over)
        self.assertEqual(engine.board.count(), 0)
        self.assertIsNone(engine.piece)
        self.assertEqual(result.snapshot.occupied, ())
        self.assertEqual(result.snapshot.piece_cells, ())
        self.assertIn(GameOver("spawn blocked"), result.events)
        self.assertEqual(engine.games_played, 1)

        result = engine.step(0)
        self.assertFalse(result.snapshot.game_over)
        self.assertIsNotNone(engine.piece)

    def test_lock_above_top_resets_game(self):
        engine = GameEngine(catalog=only("I"))
        for y in range(engine.height - 1):
            engine.board.set(5, y, True)
        engine.step(0)
        self.assertIsNotNone(engine.piece)

        result = engine.step(GRAVITY_MS)

        self.assertTrue(result.snapshot.game_over)
        self.assertIn(GameOver("lock out"), result.events)
        self.assertEqual(engine.board.count(), 0)

    def test_game_over_flag_only_on_that_step(self):
        engine = GameEngine(catalog=only("I"))
        for y in range(engine.height):
            engine.board.set(5, y, True)
        self.assertTrue(engine.step(0).snapshot.game_over)
        self.assertFalse(engine.step(0).snapshot.game_over)


class EngineStateTests(unittest.TestCase):
    def test_from_config(self):
        engine = GameEngine.from_config(
            {"board_width": 8, "board_height": 12, "gravity_ms": 250, "palette": [[1, 2, 3]], "seed": 5}
        )
        self.assertEqual((engine.width, engine.height), (8, 12))
        self.assertEqual(engine.clock.gravity.period_ms, 250)
        self.assertEqual(engine.clock.input_repeat.period_ms, 100)
        self.assertEqual(engine.catalog.palette, [(1, 2, 3)])

    def test_from_empty_config_uses_defaults(self):
        engine = GameEngine.from_config({})
        self.assertEqual((engine.width, engine.height), (10, 18))
        self.assertEqual(engine.clock.gravity.period_ms, 400)

    def test_place_piece_rejects_overlap(self):
        engine = GameEngine()
        engine.board.set(4, 5, True)
        with self.assertRaises(ValueError):
            engine.place_piece("O", (4, 5))
        with self.assertRaises(ValueError):
            engine.place_piece("Q", (4, 5))

    def test_reset(self):
        engine = GameEngine(seed=1)
        engine.step(0)
        engine.board.set(0, 0, True)
        snapshot = engine.reset()
        self.assertEqual(snapshot.occupied, ())
        self.assertIsNone(engine.piece)
        self.assertEqual(engine.steps, 0)
        engine.step(0)
        self.assertIsNotNone(engine.piece)

    def test_snapshot_is_detached(self):
        engine = GameEngine()
        engine.place_piece("O", (4, 5))
        snapshot = engine.snapshot()
        engine.apply_gravity()
        self.assertEqual(snapshot.piece_cells, ((4, 5), (4, 6), (5, 5), (5, 6)))

    def test_events_drained_each_step(self):
        engine = GameEngine(seed=3)
        self.assertEqual(len(engine.step(0).events), 1)
        self.assertEqual(engine.step(0).events, ())


class KeyLatchTests(unittest.TestCase):
    def test_reports_press_once(self):
        latch = KeyLatch()
        self.assertEqual(latch.update({Command.ROTATE_CW}), {Command.ROTATE_CW})
        self.assertEqual(latch.update({Command.ROTATE_CW}), set())
        self.assertEqual(latch.update(set()), set())
        self.assertEqual(latch.update({Command.ROTATE_CW, Command.HARD_DROP}), {Command.ROTATE_CW, Command.HARD_DROP})


if __name__ == "__main__":
    unittest.main()
