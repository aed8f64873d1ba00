"""Interactive mechanism workbench (pygame + pygame_gui)."""
from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Tuple

import pygame
import pygame_gui

from interaction.config import EngineConfig
from interaction.engine import MechanismEngine
from interaction.logging_config import get_logger
from mechanics.entities import Component, ComponentKind
from mechanics.visualizer import WorkspaceRenderer

log = get_logger("workbench")

NUDGE_RADIANS = math.radians(15.0)


def selected_info_lines(component: Optional[Component]) -> List[str]:
    """Side panel readout for the selected part."""
    if component is None:
        return ["Selected: -"]
    x, y = component.position
    return [
        f"Selected: {component.id}",
        f"  Position: ({x:.0f}, {y:.0f})",
        f"  Rotation: {math.degrees(component.rotation):.1f} deg",
        f"  Mass: {component.mass:.3f} kg",
    ]


class WorkbenchApp:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        pygame.init()
        pygame.display.set_caption("Mechanism Workbench")
        self.window_size = (1200, 760)
        self.window_surface = pygame.display.set_mode(self.window_size)
        self.manager = pygame_gui.UIManager(self.window_size)
        self.clock = pygame.time.Clock()
        self.running = True

        self._clear_armed = False
        self.engine = MechanismEngine(
            config,
            clock=lambda: float(pygame.time.get_ticks()),
            confirm_clear=self._confirm_clear,
        )
        self.font = pygame.font.Font(pygame.font.get_default_font(), 14)
        self.viewport_rect = pygame.Rect(20, 110, self.window_size[0] - 380, self.window_size[1] - 130)
        self.renderer = WorkspaceRenderer(self.viewport_rect, self.font)
        self.selected_id: Optional[str] = None
        self.pending_dialog: Optional[pygame_gui.windows.UIConfirmationDialog] = None
        self._pending_action: Optional[Callable[[], object]] = None
        self._drag_offset: Tuple[float, float] = (0.0, 0.0)

        self._build_ui()

    def _build_ui(self) -> None:
        self.kind_buttons: Dict[pygame_gui.elements.UIButton, ComponentKind] = {}
        x = 20
        for kind in ComponentKind:
            btn = pygame_gui.elements.UIButton(
                relative_rect=pygame.Rect((x, 20), (110, 30)), text=f"+ {kind.value}", manager=self.manager
            )
            self.kind_buttons[btn] = kind
            x += 120
        self.btn_apply = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect((20, 60), (110, 30)), text="Apply", manager=self.manager
        )
        self.btn_release = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect((140, 60), (110, 30)), text="Release", manager=self.manager
        )
        self.btn_analyze = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect((260, 60), (110, 30)), text="Analyze", manager=self.manager
        )
        self.btn_reset = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect((380, 60), (110, 30)), text="Reset", manager=self.manager
        )
        self.btn_example = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect((500, 60), (110, 30)), text="Load example", manager=self.manager
        )
        self.btn_clear = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect((620, 60), (110, 30)), text="Clear", manager=self.manager
        )

    def run(self) -> None:
        while self.running:
            dt = self.clock.tick(60) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN:
                    self._handle_key(event)
                elif event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP, pygame.MOUSEMOTION):
                    self._handle_mouse(event)
                self._handle_ui_event(event)
                self.manager.process_events(event)
            self.manager.update(dt)
            self.engine.tick()
            self._draw()
        pygame.quit()

    # --- Input -------------------------------------------------------------

    def _handle_key(self, event: pygame.event.Event) -> None:
        if event.key == pygame.K_ESCAPE:
            self.running = False
        elif event.key == pygame.K_DELETE and self.selected_id:
            self.engine.remove_component(self.selected_id)
            self.selected_id = None
        elif event.key == pygame.K_SPACE:
            self.engine.apply_input()
        elif event.key == pygame.K_r:
            self.engine.release_input()

    def _handle_mouse(self, event: pygame.event.Event) -> None:
        if self.pending_dialog is not None:
            return
        if event.type == pygame.MOUSEBUTTONDOWN:
            if not self.viewport_rect.collidepoint(event.pos):
                return
            point = self.renderer.screen_to_canvas(event.pos)
            hit = self.engine.component_at(point)
            self.selected_id = hit.id if hit else None
            if hit is None:
                return
            if event.button == 1 and self.engine.begin_drag(hit.id):
                self._drag_offset = (hit.position[0] - point[0], hit.position[1] - point[1])
            elif event.button == 3:
                self.engine.rotate_component(hit.id, NUDGE_RADIANS)
        elif event.type == pygame.MOUSEMOTION and self.engine.dragging:
            point = self.renderer.screen_to_canvas(event.pos)
            self.engine.drag_to((point[0] + self._drag_offset[0], point[1] + self._drag_offset[1]))
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.engine.end_drag()

    def _handle_ui_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame_gui.UI_CONFIRMATION_DIALOG_CONFIRMED and event.ui_element == self.pending_dialog:
            action, self._pending_action = self._pending_action, None
            self.pending_dialog = None
            if action is not None:
                self._clear_armed = True
                action()
                self.selected_id = None
            return
        if event.type == pygame_gui.UI_WINDOW_CLOSE and event.ui_element == self.pending_dialog:
            self.pending_dialog = None
            self._pending_action = None
            return
        if event.type != pygame_gui.UI_BUTTON_PRESSED:
            return
        if event.ui_element in self.kind_buttons:
            self._add_part(self.kind_buttons[event.ui_element])
        elif event.ui_element == self.btn_apply:
            self.engine.apply_input()
        elif event.ui_element == self.btn_release:
            self.engine.release_input()
        elif event.ui_element == self.btn_analyze:
            self.engine.run_analysis()
        elif event.ui_element == self.btn_reset:
            self.engine.reset_states()
        elif event.ui_element == self.btn_example:
            if self.engine.list_components():
                self._ask_before(self.engine.load_example, "Load example")
            else:
                self.engine.load_example()
        elif event.ui_element == self.btn_clear:
            self._ask_before(self.engine.clear_all, "Clear")

    def _ask_before(self, action: Callable[[], object], short_name: str) -> None:
        """Open the discard dialog; ``action`` runs only once it is confirmed."""
        if self.pending_dialog is not None:
            return
        self._pending_action = action
        self.pending_dialog = pygame_gui.windows.UIConfirmationDialog(
            rect=pygame.Rect((self.window_size[0] // 2 - 180, self.window_size[1] // 2 - 70), (360, 140)),
            manager=self.manager,
            window_title="Clear workspace?",
            action_long_desc="Clear all components?",
            action_short_name=short_name,
            blocking=True,
        )

    def _confirm_clear(self, _message: str) -> bool:
        armed, self._clear_armed = self._clear_armed, False
        return armed

    def _add_part(self, kind: ComponentKind) -> None:
        rng = self.engine.workspace.rng
        position = (
            self.viewport_rect.width * (0.3 + 0.4 * rng.random()),
            self.viewport_rect.height * (0.3 + 0.4 * rng.random()),
        )
        self.selected_id = self.engine.add_component(kind, position)

    # --- Drawing -----------------------------------------------------------

    def _draw(self) -> None:
        self.window_surface.fill((18, 18, 18))
        engine = self.engine
        self.renderer.draw(
            self.window_surface,
            engine.list_components(),
            engagements=[(e.from_id, e.to_id) for e in engine.list_engagements()],
            constraints=engine.list_constraints(),
            selected=self.selected_id,
        )
        self._draw_side_panel()
        self.manager.draw_ui(self.window_surface)
        pygame.display.update()

    def _draw_side_panel(self) -> None:
        engine = self.engine
        x = self.window_size[0] - 340
        y = 110
        status = engine.current_status()
        lines = [
            f"System: {engine.current_system_state().value}",
            f"Components: {len(engine.list_components())}",
            f"Constraints: {len(engine.list_constraints())}",
            f"Status: {status.message if status else '-'}",
        ]
        if engine.analysis_running:
            lines.append("Analysis: running")
        selected = engine.get_component(self.selected_id) if self.selected_id else None
        lines.extend(selected_info_lines(selected))
        for line in lines:
            colour = (231, 76, 60) if status and status.is_error and line.startswith("Status") else (220, 220, 220)
            self.window_surface.blit(self.font.render(line, True, colour), (x, y))
            y += 20
        y = self.renderer.draw_stress_bars(self.window_surface, engine.current_metrics().as_dict(), (x, y + 10))
        forces = engine.current_forces()
        for label, value in (
            ("Spring force", f"{forces.spring_force:.1f} N"),
            ("Velocity", f"{forces.velocity:.2f} m/s"),
            ("Impact energy", f"{forces.impact_energy:.3f} J"),
            ("Contact force", f"{forces.contact_force:.1f} N"),
        ):
            self.window_surface.blit(self.font.render(f"{label}: {value}", True, (200, 200, 200)), (x, y))
            y += 18
        self.renderer.draw_failures(
            self.window_surface, [f.as_dict() for f in engine.current_failure_report()], (x, y + 10)
        )


def main(config: Optional[EngineConfig] = None) -> None:
    app = WorkbenchApp(config)
    log.info("Workbench started")
    app.run()


if __name__ == "__main__":
    main()
