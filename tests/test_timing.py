import random
import time

from falling_blocks.game import (
    DropTimer,
    FallingBlockGame,
    GameConfig,
    GameEvent,
    GravityClock,
    Phase,
    Position,
    ScoringRules,
    TetrominoType,
)

I, O = TetrominoType.I, TetrominoType.O


def test_gravity_clock_ticks_per_interval(make_game):
    game = make_game(I)
    clock = GravityClock(game)
    game.start()
    assert clock.update(999) == 0
    assert clock.update(1) == 1
    assert game.current_piece.position == Position(4, 1)
    assert clock.update(2500) == 2
    assert clock.elapsed_ms == 500
    assert game.current_piece.position == Position(4, 3)


def test_gravity_clock_idles_while_paused(make_game):
    game = make_game(I)
    clock = GravityClock(game)
    game.start()
    clock.update(600)
    game.pause()
    assert clock.update(5000) == 0
    assert game.current_piece.position == Position(4, 0)
    game.resume()
    assert clock.update(999) == 0
    assert clock.update(1) == 1


def test_gravity_clock_restarts_with_new_session(make_game):
    game = make_game(I)
    clock = GravityClock(game)
    game.start()
    clock.update(900)
    game.start()
    assert clock.update(200) == 0
    assert clock.elapsed_ms == 200


def test_gravity_clock_stops_on_game_over(make_game):
    game = make_game(O)
    clock = GravityClock(game)
    game.start()
    for _ in range(9):
        game.hard_drop()
    # The tenth piece locks on its first tick and the next spawn collides.
    clock.update(10_000)
    assert game.phase is Phase.GAME_OVER
    assert clock.update(10_000) == 0


def test_drop_timer_arms_on_start(make_game, timers):
    game = make_game(I)
    driver = DropTimer(game, timers)
    assert not driver.active
    game.start()
    assert len(timers.created) == 1
    first = timers.created[0]
    assert first.started and first.daemon
    assert first.interval == 1.0
    assert driver.armed_session_id == game.session_id


def test_drop_timer_fire_ticks_and_rearms(make_game, timers):
    game = make_game(I)
    DropTimer(game, timers)
    game.start()
    timers.created[0].fire()
    assert game.current_piece.position == Position(4, 1)
    assert len(timers.created) == 2
    assert timers.created[1].started


def test_drop_timer_cancelled_on_pause_and_rearmed_on_resume(make_game, timers):
    game = make_game(I)
    driver = DropTimer(game, timers)
    game.start()
    game.pause()
    assert timers.created[0].cancelled
    assert not driver.active

    timers.created[0].fire()
    assert game.current_piece.position == Position(4, 0)

    game.resume()
    assert driver.active
    assert len(timers.created) == 2


def test_stale_timer_after_restart_does_nothing(make_game, timers):
    game = make_game(I)
    driver = DropTimer(game, timers)
    game.start()
    old = timers.created[0]
    game.move_down()
    game.start()
    assert old.cancelled
    assert driver.armed_session_id == game.session_id
    old.fire()
    assert game.current_piece.position == Position(4, 0)
    assert len(timers.created) == 2


def test_drop_timer_cancelled_on_game_over(make_game, timers):
    game = make_game(O)
    driver = DropTimer(game, timers)
    game.start()
    for _ in range(10):
        game.hard_drop()
    assert game.phase is Phase.GAME_OVER
    assert not driver.active
    assert timers.created[-1].cancelled


def test_drop_timer_cancelled_on_teardown(make_game, timers):
    game = make_game(I)
    driver = DropTimer(game, timers)
    game.start()
    game.teardown()
    assert not driver.active
    timers.created[0].fire()
    assert len(timers.created) == 1


def test_drop_timer_rearms_on_level_up(make_game, timers, soft_drop):
    game = make_game(O, config=GameConfig(width=4, height=6))
    driver = DropTimer(game, timers)
    game.start()
    for _ in range(5):
        game.move_left()
        soft_drop(game)
        game.move_right()
        soft_drop(game)
    assert game.level == 2
    assert driver.armed_interval_ms == 950
    assert timers.created[-1].interval == 0.95
    assert all(t.cancelled for t in timers.created[:-1])


def test_drop_timer_close_unsubscribes(make_game, timers):
    game = make_game(I)
    driver = DropTimer(game, timers)
    game.start()
    driver.close()
    assert timers.created[0].cancelled
    game.pause()
    game.resume()
    assert len(timers.created) == 1


def test_pause_between_fire_and_rearm_leaves_timer_disarmed(make_game, timers):
    game = make_game(I)
    driver = DropTimer(game, timers)
    game.start()
    arm = driver._arm

    def pause_then_arm(*args, **kwargs):
        # The input thread pauses after the tick but before the re-arm.
        game.pause()
        arm(*args, **kwargs)

    driver._arm = pause_then_arm
    timers.created[0].fire()
    assert game.phase is Phase.PAUSED
    assert not driver.active
    assert len(timers.created) == 1


def test_rearm_after_fire_ignores_newer_session(make_game, timers):
    game = make_game(I)
    driver = DropTimer(game, timers)
    game.start()
    old_session = game.session_id
    game.start()
    created = len(timers.created)
    driver._arm(old_session)
    assert len(timers.created) == created
    assert driver.armed_session_id == game.session_id


def test_real_timer_serializes_with_input_commands():
    fast = ScoringRules(base_drop_interval_ms=2, drop_interval_step_ms=1, min_drop_interval_ms=1)
    game = FallingBlockGame(GameConfig(rules=fast), rng=random.Random(5))
    spawned = []
    game.events.subscribe(GameEvent.PIECE_SPAWNED, spawned.append)
    driver = DropTimer(game)
    rng = random.Random(9)
    game.start()

    session = game.session_id
    last_score = 0
    deadline = time.monotonic() + 5.0
    try:
        rounds = 0
        while len(spawned) < 4 and time.monotonic() < deadline:
            rounds += 1
            # Pausing cancels the pending fire, so keep it rare.
            if rounds % 50 == 0:
                game.pause()
            else:
                rng.choice([game.move_left, game.move_right, game.rotate])()
            if game.phase is Phase.PAUSED:
                game.resume()
            if game.phase is Phase.GAME_OVER:
                game.start()
            state = game.snapshot()
            if state.session_id != session:
                session = state.session_id
                last_score = 0
            assert state.score >= last_score
            assert state.level == state.lines_cleared // 10 + 1
            assert state.drop_interval_ms == fast.drop_interval_for_level(state.level)
            last_score = state.score
            time.sleep(0.0005)
    finally:
        driver.close()

    # Only the timer locks pieces here, so spawns prove it ticked.
    assert len(spawned) >= 4
    assert not driver.active
    # Let a fire that was already past its checks finish.
    time.sleep(0.02)
    settled = game.snapshot()
    time.sleep(0.05)
    after = game.snapshot()
    assert after.current_piece is settled.current_piece
    assert (after.grid == settled.grid).all()
