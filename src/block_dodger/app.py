"""
Block Dodger pygame application.

This is the only module that talks to pygame's window, clock, event queue
and timers; everything it learns is handed to ``DodgeGame``.
"""

from __future__ import annotations

import asyncio

import pygame

from block_dodger.config import GameSettings
from block_dodger.leaderboard import (
    LeaderboardService,
    RunReporter,
    build_leaderboard_backend,
)
from block_dodger.lifecycle import DodgeGame, GamePhase
from block_dodger.modes import Mode
from block_dodger.profile_store import PLAYER_NAME_KEY, ProfileStore
from block_dodger.render import (
    BACKGROUND,
    MODE_KEYS,
    draw_game_over,
    draw_menu,
    draw_world,
)
from block_dodger.scenes.dodge import DodgeIntent
from block_dodger.utils import configure_logging, logger

SHUTDOWN_TIMEOUT = 5.0


class PygameTimer:
    """
    Repeating timer posted on the pygame event queue.
    """

    def __init__(self, name: str, event_type: int, interval_ms: int, callback):
        self.name = name
        self.event_type = event_type
        self.callback = callback
        self._active = True
        pygame.time.set_timer(event_type, int(interval_ms))

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self):
        if not self._active:
            return
        self._active = False
        pygame.time.set_timer(self.event_type, 0)
        logger.debug(f"Timer {self.name} cancelled")


class PygameTimerScheduler:
    """
    Same contract as ``TimerScheduler``, fired through pygame events.
    """

    def __init__(self):
        self._timers: dict[int, PygameTimer] = {}
        self._event_types: dict[str, int] = {}

    def every(self, name: str, interval_ms: float, callback) -> PygameTimer:
        if name not in self._event_types:
            self._event_types[name] = pygame.event.custom_type()
        event_type = self._event_types[name]

        previous = self._timers.get(event_type)
        if previous is not None:
            previous.cancel()

        timer = PygameTimer(name, event_type, int(interval_ms), callback)
        self._timers[event_type] = timer
        return timer

    def dispatch(self, event: pygame.event.Event) -> bool:
        """Run the callback for a timer event. Returns whether it was one."""
        timer = self._timers.get(event.type)
        if timer is None:
            return False
        if timer.active:
            timer.callback()
        return True

    def cancel_all(self):
        for timer in self._timers.values():
            timer.cancel()


async def claim_player_name(
    service: LeaderboardService, profile: ProfileStore, wanted: str | None
) -> str:
    """
    Register a name on the leaderboard and keep it in the profile.

    The name is stripped first; a blank one counts as no name at all. When
    somebody else already holds it the stored name is left alone.

    :param service: Leaderboard the name is claimed on
    :type service: LeaderboardService
    :param profile: Local profile keeping the name
    :type profile: ProfileStore
    :param wanted: Name asked for on the command line, if any
    :type wanted: str | None
    :return: The name the player ends up playing as
    :rtype: str
    """
    wanted = (wanted or "").strip()
    if not wanted:
        if not profile.has_player_name:
            logger.info(f"No name set, playing as {profile.player_name}")
        return profile.player_name

    if wanted == profile.get(PLAYER_NAME_KEY):
        return wanted

    if await service.register_name(wanted):
        profile.player_name = wanted
    else:
        logger.warning(
            f'The name "{wanted}" is already in use, '
            f"playing as {profile.player_name}"
        )
    return profile.player_name


class BlockDodger:  # pylint: disable=too-many-instance-attributes
    """
    Block Dodger window: menu, run and game over screens.
    """

    def __init__(self, settings: GameSettings):
        """
        :param settings: Game settings
        :type settings: GameSettings
        """
        logger.debug(f"Initializing {settings.title}")
        self.settings = settings
        self._carry_on = True
        self._target_x: float | None = None

        self.profile = ProfileStore(settings.profile_path)
        self.service = LeaderboardService(build_leaderboard_backend(settings))
        self.reporter = RunReporter(self.service, self.profile)
        self._boards: dict[Mode, list | None] = {}
        self._boards_task: asyncio.Task | None = None

        pygame.init()
        self._screen = self._set_screen(*settings.viewport)
        self._clock = pygame.time.Clock()
        self._fonts = {
            "title": pygame.font.Font(None, 48),
            "body": pygame.font.Font(None, 32),
            "small": pygame.font.Font(None, 22),
        }

        self.scheduler = PygameTimerScheduler()
        self.game = DodgeGame(
            viewport=settings.viewport,
            scheduler=self.scheduler,
            on_run_ended=self.reporter,
            player_name=self.profile.player_name,
        )

    def _set_screen(self, width: int, height: int) -> pygame.Surface:
        logger.debug("Setting screen")
        screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption(self.settings.title)
        return screen

    async def choose_player_name(self):
        """
        Claim the name given in the settings, keeping the stored one when the
        name is already taken on the leaderboard.
        """
        self.game.player_name = await claim_player_name(
            self.service, self.profile, self.settings.player_name
        )

    def refresh_leaderboards(self):
        """Fetch every mode's leaderboard in the background."""
        if self._boards_task is not None and not self._boards_task.done():
            self._boards_task.cancel()

        self._boards = {mode: None for _, mode in MODE_KEYS}
        self._boards_task = asyncio.get_running_loop().create_task(
            self._load_leaderboards()
        )

    async def _load_leaderboards(self):
        for _, mode in MODE_KEYS:
            self._boards[mode] = await self.service.fetch_top_scores(
                mode, self.settings.leaderboard_limit
            )

    def _cycle_skin(self):
        self.profile.skin = self.profile.next_skin()

    def handle_events(self):
        """
        Handle the events
        """
        for event in pygame.event.get():
            if self.scheduler.dispatch(event):
                continue

            if event.type == pygame.QUIT:
                logger.debug("Quitting the game")
                self._carry_on = False
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event)
            elif event.type == pygame.MOUSEBUTTONDOWN:
                self._target_x = float(event.pos[0])
            elif event.type == pygame.MOUSEMOTION and any(event.buttons):
                self._target_x = float(event.pos[0])
            elif event.type == pygame.MOUSEBUTTONUP:
                self._target_x = None

    def _handle_key(self, event: pygame.event.Event):
        phase = self.game.phase

        if event.key == pygame.K_ESCAPE:
            self._carry_on = False
        elif phase is GamePhase.IDLE:
            for key, mode in MODE_KEYS:
                if event.unicode == key:
                    self._target_x = None
                    self.game.select_mode(mode)
                    return
            if event.key == pygame.K_s:
                self._cycle_skin()
        elif phase is GamePhase.GAME_OVER and event.key in (
            pygame.K_r,
            pygame.K_RETURN,
        ):
            self.game.restart()
            self.refresh_leaderboards()

    def _intent(self) -> DodgeIntent:
        keys = pygame.key.get_pressed()
        return DodgeIntent(
            move_left=1.0 if keys[pygame.K_LEFT] else 0.0,
            move_right=1.0 if keys[pygame.K_RIGHT] else 0.0,
            target_x=self._target_x,
        )

    def handle_game_logic(self, elapsed_ms: int):
        """
        Handle the game logic
        """
        self.game.on_tick(elapsed_ms, self._intent())

    def draw_stuff(self):
        """
        Draw the stuff
        """
        self._screen.fill(BACKGROUND)
        phase = self.game.phase

        if phase is GamePhase.IDLE:
            draw_menu(
                self._screen,
                self._fonts,
                self.game.player_name,
                self.profile.skin,
                self.profile.unlocked_skins,
                {mode: self.profile.high_score(mode) for _, mode in MODE_KEYS},
                self._boards,
            )
        elif self.game.world is not None:
            draw_world(
                self._screen, self._fonts["body"], self.game.world, self.profile.skin
            )
            if phase is GamePhase.GAME_OVER:
                draw_game_over(self._screen, self._fonts, self.game.world.run.score)

        pygame.display.flip()

    async def run(self):
        """
        Run the game
        """
        logger.debug("Running the game")
        await self.choose_player_name()
        self.refresh_leaderboards()

        try:
            while self._carry_on:
                elapsed_ms = self._clock.tick(self.settings.fps)
                self.handle_events()
                self.handle_game_logic(elapsed_ms)
                self.draw_stuff()
                await asyncio.sleep(0)
        finally:
            self.scheduler.cancel_all()
            if self._boards_task is not None:
                self._boards_task.cancel()
            try:
                await asyncio.wait_for(self.reporter.drain(), SHUTDOWN_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Gave up waiting for score submissions")
            pygame.quit()


def run(argv: list[str] | None = None):
    """
    Main entry point for Block Dodger.
    """
    settings = GameSettings.from_args(argv)
    configure_logging(settings.log_level)
    logger.info("Starting Block Dodger...")
    logger.info(settings.to_dict())
    asyncio.run(BlockDodger(settings).run())


if __name__ == "__main__":
    run()
