from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from falling_blocks.game import VARIANTS, Action, FallingBlockGame, GravityClock, Phase
from falling_blocks.highscores import HighScoreHook, InMemoryHighScoreStore
from .renderer import Renderer


KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_UP: Action.ROTATE,
    pygame.K_DOWN: Action.SOFT_DROP,
    pygame.K_SPACE: Action.HARD_DROP,
    pygame.K_p: Action.TOGGLE_PAUSE,
}


def _overlay_text(game: FallingBlockGame, hook: Optional[HighScoreHook], name: str) -> Optional[str]:
    if game.phase is not Phase.GAME_OVER:
        return None
    if hook is not None and hook.pending:
        return f"High score {game.score}! Name: {name}_ (Enter to save, Esc to skip)"
    return f"Game Over - score {game.score} - R to restart, ESC to quit"


def run(variant: str = "tetris") -> None:
    config = VARIANTS[variant]
    game = FallingBlockGame(config)
    # Only Line Destroyer keeps a leaderboard.
    hook = HighScoreHook(game, InMemoryHighScoreStore()) if variant == "lineDestroyer" else None

    pygame.init()
    try:
        clock = pygame.time.Clock()
        renderer = Renderer(cell_size=28)
        screen = pygame.display.set_mode(renderer.window_size(config.width, config.height))
        pygame.display.set_caption(f"Falling Blocks - {variant}")

        gravity = GravityClock(game)
        game.start()
        player_name = ""

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type != pygame.KEYDOWN:
                    continue
                elif hook is not None and hook.pending:
                    if event.key == pygame.K_RETURN:
                        if hook.submit(player_name):
                            player_name = ""
                    elif event.key == pygame.K_ESCAPE:
                        hook.skip()
                        player_name = ""
                    elif event.key == pygame.K_BACKSPACE:
                        player_name = player_name[:-1]
                    elif event.unicode and event.unicode.isprintable():
                        player_name += event.unicode
                elif event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_r and game.phase is Phase.GAME_OVER:
                    game.start()
                else:
                    action = KEY_TO_ACTION.get(event.key)
                    if action is not None:
                        game.step(action)

            gravity.update(clock.get_time())
            renderer.draw(screen, game.snapshot(), _overlay_text(game, hook, player_name))
            clock.tick(60)
    finally:
        game.teardown()
        if hook is not None:
            hook.close()
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--variant", choices=sorted(VARIANTS), default="tetris")
    p.add_argument("--verbose", action="store_true")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    run(args.variant)


if __name__ == "__main__":  # pragma: no cover
    main()
