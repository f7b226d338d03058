# game_main.py - Main Loop

import logging
import sys
from pathlib import Path

import pygame

from board_system import MoveKind, MoveResult
from config_io import load_game_config
from game_controller import GameController
from level_loader import SCRIPT_SUFFIX, load_level, neighbour_level, save_script
from map_parser import MalformedLevel
from presentation_model import ViewModelBuilder
from renderer import Renderer, window_size

logger = logging.getLogger(__name__)

MOVE_KEYS = {
    pygame.K_LEFT: MoveKind.LEFT, pygame.K_a: MoveKind.LEFT,
    pygame.K_RIGHT: MoveKind.RIGHT, pygame.K_d: MoveKind.RIGHT,
    pygame.K_UP: MoveKind.UP, pygame.K_w: MoveKind.UP,
    pygame.K_DOWN: MoveKind.DOWN, pygame.K_s: MoveKind.DOWN,
    pygame.K_SPACE: MoveKind.ACTION, pygame.K_x: MoveKind.ACTION,
}
SLOT_KEYS = {getattr(pygame, f"K_{n}"): n - 1 for n in range(1, 10)}


class LevelSession:
    """Keeps the controller and the currently loaded level together."""

    def __init__(self, cfg):
        self.cfg = cfg
        self.levels_dir: Path = cfg["levels_dir"]
        level = load_level(cfg["start_level"], self.levels_dir)
        self.title = level['name']
        self.controller = GameController(level['source'], level['id'])

    def switch(self, name: str) -> bool:
        """Load another level; on failure the current one stays."""
        try:
            level = load_level(name, self.levels_dir)
        except (FileNotFoundError, MalformedLevel) as e:
            logger.warning("cannot load level %s: %s", name, e)
            return False
        self.title = level['name']
        self.controller.load(level['source'], level['id'])
        return True

    def step_level(self, offset: int) -> bool:
        name = neighbour_level(self.controller.level_id, self.levels_dir, offset)
        return name is not None and self.switch(name)

    def save_history(self):
        path = self.cfg["scripts_dir"] / f"{self.controller.level_id}{SCRIPT_SUFFIX}"
        save_script(path, self.controller.history)


def run_game(cfg):
    pygame.init()
    session = LevelSession(cfg)
    cell_size = cfg["cell_size"]

    def open_window():
        state = session.controller.state
        screen = pygame.display.set_mode(window_size(state.width, state.height, cell_size))
        return screen, Renderer(screen, cell_size)

    pygame.display.set_caption("Men, Boxes and Moving Floors")
    screen, renderer = open_window()

    clock = pygame.time.Clock()
    animation_frame = 0
    last_replay_tick = 0

    running = True
    while running:
        clock.tick(60)
        animation_frame += 1
        controller = session.controller

        # Event handling
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            if event.type != pygame.KEYDOWN:
                continue

            shifted = bool(event.mod & pygame.KMOD_SHIFT)
            if event.key == pygame.K_ESCAPE:
                if controller.replay_queue:
                    controller.stop_replay()
                else:
                    running = False
            elif controller.replay_queue:
                continue  # keys other than Esc are ignored while replaying
            elif event.key in (pygame.K_F5, pygame.K_r):
                controller.reset()
            elif event.key == pygame.K_z:
                controller.undo()
            elif event.key in (pygame.K_n, pygame.K_p):
                if session.step_level(1 if event.key == pygame.K_n else -1):
                    screen, renderer = open_window()
            elif event.key == pygame.K_RETURN:
                if controller.start_replay():
                    last_replay_tick = pygame.time.get_ticks()
            elif event.key == pygame.K_F2:
                session.save_history()
            elif event.key == pygame.K_TAB:
                controller.select(shift=-1 if shifted else 1)
            elif event.key in SLOT_KEYS:
                controller.select(index=SLOT_KEYS[event.key])
            elif event.key in MOVE_KEYS:
                controller.handle_move(MOVE_KEYS[event.key])

        # Timed playback
        if controller.replay_queue:
            now = pygame.time.get_ticks()
            if now - last_replay_tick >= cfg["playback_delay_ms"]:
                last_replay_tick = now
                if controller.replay_step() != MoveResult.OK:
                    logger.info("replay ended early")

        frame_spec = ViewModelBuilder.build(controller, animation_frame, session.title)
        renderer.draw_frame(frame_spec)

        pygame.display.flip()

    pygame.quit()


def main() -> None:
    """Entrypoint for running the game from the command line."""
    cfg_path = Path(sys.argv[1]) if len(sys.argv) >= 2 else Path("config.json")
    cfg = load_game_config(cfg_path)
    logging.basicConfig(
        level=getattr(logging, str(cfg["log_level"]).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_game(cfg)
    sys.exit()


if __name__ == "__main__":
    main()
