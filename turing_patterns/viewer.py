"""
Interactive Pygame Viewer

Hosts the diagram's frame cadence: each display frame calls
diagram.frame(), which runs one tick while the scheduler is running
and the window is active. A minimised or unfocused window counts as a
hidden surface, so no steps run.

Controls:
  SPACE       Start / Stop the simulation
  R           Reset from the seed image
  UP / DOWN   Feed +/- 0.001
  LEFT/RIGHT  Kill -/+ 0.001
  1-8         Feed/kill presets
  S           Save screenshot
  H           Toggle HUD overlay
  Q / ESC     Quit
  Drop file   Load a new image (mask, seed and reset)
"""

import os
import time
import numpy as np
import pygame
from PIL import UnidentifiedImageError

from .presets import PRESET_ORDER, get_preset

FEED_STEP = 0.001
KILL_STEP = 0.001


class Viewer:
    """Pygame window around a ReactionDiffusionDiagram.

    Args:
        diagram: ReactionDiffusionDiagram to drive
        controls: ControlledParameters feeding the diagram
        image_source: Optional ImageSource; dropped files are loaded into it
        width, height: Window size in pixels
    """

    def __init__(self, diagram, controls, image_source=None, width=768, height=768):
        self.diagram = diagram
        self.controls = controls
        self.image_source = image_source
        self.width = width
        self.height = height
        self.running = True
        self.show_hud = True
        self.fps_history = []
        self._surface = None

    def load_image(self, path):
        """Mirror of the upload handler: new mask, new seed, reset."""
        if self.image_source is None:
            print(f"No image source attached; ignoring {path}")
            return
        try:
            self.image_source.load(path)
        except (UnidentifiedImageError, OSError) as e:
            print(f"Could not load {path}: {e}")
            return
        self.diagram.update_feed_mask(self.image_source.edges)
        self.diagram.reload_initial_bitmap(self.image_source.bitmap())
        self.diagram.reset()
        self._refresh_if_stopped()
        print(f"Loaded image: {path}")

    def _refresh_if_stopped(self):
        """frame() draws nothing while stopped, so redraw explicitly."""
        if not self.diagram.scheduler.running:
            self.diagram.render()

    def _blit_frame(self, screen, rgb):
        self._surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
        scaled = pygame.transform.smoothscale(self._surface, (self.width, self.height))
        screen.blit(scaled, (0, 0))

    def _draw_hud(self, screen, font, fps):
        if not self.show_hud:
            return
        c = self.controls
        line = (f"{c.preset_key or 'custom'}  |  feed {c.feed:.4f}  kill {c.kill:.4f}  |  "
                f"tick {self.diagram.tick:,}  |  {self.diagram.size}x{self.diagram.size}  |  "
                f"FPS: {fps:.0f}")
        if not self.diagram.scheduler.running:
            line = "[STOPPED]  " + line
        bg = pygame.Surface((self.width, 24), pygame.SRCALPHA)
        bg.fill((0, 0, 0, 140))
        screen.blit(bg, (0, 0))
        screen.blit(font.render(line, True, (210, 215, 225)), (10, 6))

    def _save_screenshot(self):
        if self.diagram.last_frame is None:
            return
        from PIL import Image
        screenshots_dir = os.path.join(os.getcwd(), "screenshots")
        os.makedirs(screenshots_dir, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        path = os.path.join(screenshots_dir, f"turing_{timestamp}.png")
        Image.fromarray(self.diagram.last_frame).save(path)
        print(f"Screenshot saved: {path}")

    def _handle_keydown(self, key):
        c = self.controls
        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False
        elif key == pygame.K_SPACE:
            if self.diagram.scheduler.running:
                self.diagram.stop()
            else:
                self.diagram.start()
        elif key == pygame.K_r:
            self.diagram.reset()
            self._refresh_if_stopped()
        elif key == pygame.K_h:
            self.show_hud = not self.show_hud
        elif key == pygame.K_s:
            self._save_screenshot()
        elif key == pygame.K_UP:
            c.set(feed=c.feed + FEED_STEP)
            c.preset_key = None
        elif key == pygame.K_DOWN:
            c.set(feed=c.feed - FEED_STEP)
            c.preset_key = None
        elif key == pygame.K_RIGHT:
            c.set(kill=c.kill + KILL_STEP)
            c.preset_key = None
        elif key == pygame.K_LEFT:
            c.set(kill=c.kill - KILL_STEP)
            c.preset_key = None
        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            if idx < len(PRESET_ORDER) and get_preset(PRESET_ORDER[idx]):
                c.apply_preset(PRESET_ORDER[idx])

    def run(self):
        """Main loop at 60 fps."""
        pygame.init()
        screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("Turing Patterns")
        clock = pygame.time.Clock()
        font = pygame.font.SysFont("menlo", 13)

        self.diagram.start()
        if self.diagram.last_frame is None:
            self.diagram.render()

        while self.running:
            frame_start = time.time()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN:
                    self._handle_keydown(event.key)
                elif event.type == pygame.DROPFILE:
                    self.load_image(event.file)

            self.diagram.visible = bool(pygame.display.get_active())
            rgb = self.diagram.frame()
            if rgb is None:
                rgb = self.diagram.last_frame
            self._blit_frame(screen, rgb)

            self.fps_history.append(time.time() - frame_start)
            if len(self.fps_history) > 30:
                self.fps_history.pop(0)
            fps = 1.0 / max(np.mean(self.fps_history), 0.001)
            self._draw_hud(screen, font, fps)

            pygame.display.flip()
            clock.tick(60)

        self.diagram.stop()
        pygame.quit()
