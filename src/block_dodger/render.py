"""
Drawing helpers for the pygame window.
"""

from __future__ import annotations

import pygame

from block_dodger.constants import SKINS
from block_dodger.leaderboard import format_leaderboard
from block_dodger.modes import Mode
from block_dodger.scenes.dodge import DodgeWorld

BACKGROUND = (30, 30, 30)
WHITE = (255, 255, 255)
GREY = (160, 160, 160)
HAZARD_COLOR = (220, 60, 60)
BONUS_COLOR = (250, 210, 60)
PROJECTILE_COLOR = (140, 255, 140)
LOCKED_COLOR = (85, 85, 85)
SKIN_COLORS = {
    "1": (80, 160, 255),
    "2": (200, 100, 255),
    "3": (80, 220, 160),
}

MODE_KEYS = (("1", Mode.NORMAL), ("2", Mode.ASIAN), ("3", Mode.SHOOTING))


def draw_text(
    screen: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: tuple[int, int],
    color=WHITE,
    center: bool = False,
):
    """Draw one or more lines of text starting at pos."""
    x, y = pos
    for line in text.split("\n"):
        surface = font.render(line, True, color)
        rect = surface.get_rect()
        if center:
            rect.midtop = (x, y)
        else:
            rect.topleft = (x, y)
        screen.blit(surface, rect)
        y += rect.height + 2


def draw_world(
    screen: pygame.Surface, font: pygame.font.Font, world: DodgeWorld, skin: str
):
    for o in world.obstacles:
        if not o.alive:
            continue
        color = BONUS_COLOR if o.is_bonus else HAZARD_COLOR
        if o.is_bonus:
            pygame.draw.ellipse(screen, color, o.collider)
        else:
            pygame.draw.rect(screen, color, o.collider)

    for p in world.projectiles:
        if p.alive:
            pygame.draw.rect(screen, PROJECTILE_COLOR, p.collider)

    pygame.draw.rect(screen, SKIN_COLORS.get(skin, WHITE), world.player.collider)
    draw_text(screen, font, f"Score: {world.run.score}", (10, 10))


def draw_menu(
    screen: pygame.Surface,
    fonts: dict,
    player_name: str,
    skin: str,
    unlocked_skins: tuple,
    high_scores: dict,
    boards: dict,
):  # pylint: disable=too-many-arguments
    """
    Mode selection screen.

    Locked skins are drawn greyed out. ``boards`` maps a mode to its rows,
    or None while still loading.
    """
    vw, _ = screen.get_size()
    draw_text(screen, fonts["title"], "Block Dodger", (vw // 2, 30), center=True)
    draw_text(
        screen, fonts["body"], f"Player: {player_name}", (vw // 2, 90), center=True
    )

    draw_text(
        screen,
        fonts["body"],
        "\n".join(f"[{key}] {mode.value.title()}" for key, mode in MODE_KEYS),
        (vw // 2, 130),
        center=True,
    )
    draw_text(screen, fonts["small"], "[S] Skin", (vw // 2, 210), center=True)
    for i, name in enumerate(SKINS):
        swatch = pygame.Rect(0, 0, 24, 24)
        swatch.center = (vw // 2 + (i - 1) * 40, 245)
        color = SKIN_COLORS.get(name, WHITE) if name in unlocked_skins else LOCKED_COLOR
        pygame.draw.rect(screen, color, swatch)
        if name == skin:
            pygame.draw.rect(screen, WHITE, swatch.inflate(8, 8), 2)

    bests = "   ".join(
        f"{mode.value.title()}: {high_scores.get(mode, 0)}" for _, mode in MODE_KEYS
    )
    draw_text(screen, fonts["small"], f"Best  {bests}", (vw // 2, 270), GREY, True)

    column = vw // len(MODE_KEYS)
    for i, (_, mode) in enumerate(MODE_KEYS):
        rows = boards.get(mode)
        text = "Loading..." if rows is None else format_leaderboard(rows)
        draw_text(
            screen,
            fonts["small"],
            f"{mode.value.title()}:\n{text}",
            (column * i + 20, 300),
        )


def draw_game_over(screen: pygame.Surface, fonts: dict, score: int):
    vw, vh = screen.get_size()
    panel = pygame.Rect(0, 0, 300, 200)
    panel.center = (vw // 2, vh // 2)

    overlay = pygame.Surface(panel.size)
    overlay.set_alpha(220)
    overlay.fill((0, 0, 0))
    screen.blit(overlay, panel)

    cx, top = panel.centerx, panel.top
    draw_text(screen, fonts["title"], "Game Over!", (cx, top + 25), center=True)
    draw_text(screen, fonts["body"], f"Score: {score}", (cx, top + 90), center=True)
    draw_text(screen, fonts["small"], "[R] Restart", (cx, top + 150), GREY, True)
