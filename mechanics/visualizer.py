"""Pygame drawing helpers for a workspace viewport and its readouts."""
from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional, Sequence, Tuple

try:  # pragma: no cover - pygame import is environment specific
    import pygame
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "Pygame is required to use the mechanics.visualizer module."
    ) from exc

from .constraints import Constraint
from .entities import Component, ComponentKind, ComponentState
from .world import Point2D

Color = Tuple[int, int, int]

KIND_COLORS = {
    ComponentKind.ACTUATOR: (74, 85, 104),
    ComponentKind.RETENTION: (46, 204, 113),
    ComponentKind.STOP: (127, 140, 141),
    ComponentKind.SPRING: (243, 156, 18),
    ComponentKind.PIVOT: (52, 73, 94),
}
STATE_OUTLINES = {
    ComponentState.AT_REST: (90, 90, 90),
    ComponentState.PRELOADED: (230, 200, 80),
    ComponentState.ENGAGED: (80, 200, 80),
    ComponentState.BLOCKED: (220, 70, 70),
    ComponentState.RELEASED: (70, 120, 220),
}
SEVERITY_COLORS = {
    "CRITICAL": (231, 76, 60),
    "HIGH": (243, 156, 18),
    "MEDIUM": (52, 152, 219),
    "LOW": (46, 204, 113),
}
HIGHLIGHT = (52, 152, 219)
ENGAGEMENT_COLOR = (255, 255, 0)
CONSTRAINT_COLOR = (255, 95, 95)
TEXT_COLOR = (220, 220, 220)


def kind_color(kind: ComponentKind) -> Color:
    return KIND_COLORS.get(ComponentKind.coerce(kind), (180, 180, 180))


def state_outline(state: ComponentState) -> Color:
    return STATE_OUTLINES.get(ComponentState(state), (90, 90, 90))


def severity_color(severity: str) -> Color:
    return SEVERITY_COLORS.get(str(severity).upper(), TEXT_COLOR)


def bar_width(value: float, full_width: int) -> int:
    """Pixel width of a 0..100 stress bar."""
    value = max(0.0, min(100.0, float(value)))
    return int(round(full_width * value / 100.0))


class WorkspaceRenderer:
    """Draws parts in canvas coordinates (y grows downwards) into a viewport."""

    def __init__(self, viewport: pygame.Rect, font: Optional[pygame.font.Font] = None) -> None:
        self.viewport = pygame.Rect(viewport)
        self.font = font

    def canvas_to_screen(self, point: Point2D) -> Tuple[int, int]:
        return (int(self.viewport.x + point[0]), int(self.viewport.y + point[1]))

    def screen_to_canvas(self, pos: Tuple[int, int]) -> Point2D:
        return (float(pos[0] - self.viewport.x), float(pos[1] - self.viewport.y))

    def draw(
        self,
        surface: pygame.Surface,
        components: Sequence[Component],
        *,
        engagements: Iterable[Tuple[str, str]] = (),
        constraints: Iterable[Constraint] = (),
        selected: Optional[str] = None,
    ) -> None:
        pygame.draw.rect(surface, (10, 14, 20), self.viewport)
        pygame.draw.rect(surface, (80, 80, 80), self.viewport, 1)
        by_id = {c.id: c for c in components}
        for constraint in constraints:
            a, b = (by_id.get(i) for i in constraint.ids)
            if a is None or b is None:
                continue
            pygame.draw.line(
                surface, CONSTRAINT_COLOR, self.canvas_to_screen(a.position), self.canvas_to_screen(b.position), 1
            )
        for component in components:
            self._draw_component(surface, component, highlighted=component.id == selected)
        for from_id, to_id in engagements:
            a, b = by_id.get(from_id), by_id.get(to_id)
            if a is None or b is None:
                continue
            pygame.draw.line(
                surface, ENGAGEMENT_COLOR, self.canvas_to_screen(a.position), self.canvas_to_screen(b.position), 3
            )

    def _draw_component(self, surface: pygame.Surface, component: Component, *, highlighted: bool) -> None:
        center = self.canvas_to_screen(component.position)
        radius = max(2, int(component.footprint.radius))
        pygame.draw.circle(surface, kind_color(component.kind), center, radius, 0)
        outline = HIGHLIGHT if highlighted else state_outline(component.state)
        pygame.draw.circle(surface, outline, center, radius, 3 if highlighted else 2)
        if highlighted:
            box = component.bounding_box()
            top_left = self.canvas_to_screen((box.min_x, box.min_y))
            bottom_right = self.canvas_to_screen((box.max_x, box.max_y))
            pygame.draw.rect(
                surface,
                HIGHLIGHT,
                pygame.Rect(top_left, (bottom_right[0] - top_left[0], bottom_right[1] - top_left[1])),
                1,
            )
        # Heading line shows the animated rotation.
        tip = (
            component.position[0] + math.cos(component.rotation) * radius,
            component.position[1] - math.sin(component.rotation) * radius,
        )
        pygame.draw.line(surface, (255, 255, 255), center, self.canvas_to_screen(tip), 2)
        if self.font is not None:
            label = self.font.render(f"{component.id} [{component.state.value}]", True, TEXT_COLOR)
            surface.blit(label, (center[0] - label.get_width() // 2, center[1] + radius + 2))

    def draw_stress_bars(
        self,
        surface: pygame.Surface,
        metrics: Mapping[str, float],
        origin: Tuple[int, int],
        *,
        width: int = 160,
    ) -> int:
        """Draw one labelled bar per metric; returns the y below the last bar."""
        x, y = origin
        for name, value in metrics.items():
            if self.font is not None:
                text = self.font.render(f"{name.replace('_', ' ')}: {value:.0f}%", True, TEXT_COLOR)
                surface.blit(text, (x, y))
                y += text.get_height() + 2
            pygame.draw.rect(surface, (40, 40, 40), (x, y, width, 8))
            filled = bar_width(value, width)
            if filled:
                colour = SEVERITY_COLORS["CRITICAL"] if value >= 75 else SEVERITY_COLORS["LOW"]
                pygame.draw.rect(surface, colour, (x, y, filled, 8))
            y += 14
        return y

    def draw_failures(
        self,
        surface: pygame.Surface,
        failures: Sequence[Mapping[str, object]],
        origin: Tuple[int, int],
    ) -> int:
        x, y = origin
        if self.font is None:
            return y
        if not failures:
            text = self.font.render("No critical failures detected", True, SEVERITY_COLORS["LOW"])
            surface.blit(text, (x, y))
            return y + text.get_height() + 4
        for failure in failures:
            severity = str(failure.get("severity", ""))
            line = f"{severity} {failure.get('component')}: {failure.get('reason')}"
            text = self.font.render(line, True, severity_color(severity))
            surface.blit(text, (x, y))
            y += text.get_height() + 4
        return y


__all__ = [
    "KIND_COLORS",
    "SEVERITY_COLORS",
    "STATE_OUTLINES",
    "WorkspaceRenderer",
    "bar_width",
    "kind_color",
    "severity_color",
    "state_outline",
]
