"""Vispy-based real-time visualization of colliding galaxies."""

import time
import numpy as np

# Set Vispy backend
# Use glfw on macOS for better OpenGL compatibility, pyglet elsewhere
import platform
import vispy

if platform.system() == 'Darwin':
    vispy.use('glfw', gl='gl2')
else:
    vispy.use('pyglet')

from vispy import app, scene
from vispy.scene import visuals
from typing import Optional

from ..config import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    COUPLING,
    HELP_CONTENT,
    MAX_GALAXY_COUNT,
    MAX_LIFETIME,
    MIN_DISTANCE,
    MIN_GALAXY_COUNT,
)
from ..initialization.generators import create_universe
from ..physics.engine import step
from ..physics.integrator import compute_total_momentum, count_nonfinite
from ..state.universe import Universe
from .colors import compute_star_colors
from .projection import project_to_screen


class GalaxyCollisionVisualizer:
    """Draws the universe once per frame and advances it by one step."""

    def __init__(
        self,
        universe: Universe,
        rng: Optional[np.random.Generator] = None,
        coupling: float = COUPLING,
        min_distance: float = MIN_DISTANCE,
        max_lifetime: int = MAX_LIFETIME,
    ):
        """
        Initialize the visualizer.

        Args:
            universe: Initial simulation state
            rng: Random source for regenerated universes
            coupling: Empirical coupling constant passed to the engine
            min_distance: Distance clamp passed to the engine
            max_lifetime: Steps before the engine regenerates the universe
        """
        self.universe = universe
        self.rng = rng if rng is not None else np.random.default_rng()
        self.coupling = coupling
        self.min_distance = min_distance
        self.max_lifetime = max_lifetime

        self._paused = False
        self._generation = 1
        self._nonfinite_reported = False
        self._last_frame_time = time.time()
        self._fps = 0.0

        self.canvas = scene.SceneCanvas(
            keys='interactive',
            title='Galaxy Collision',
            size=(CANVAS_WIDTH, CANVAS_HEIGHT),
            show=True,
            bgcolor='black',
            vsync=True,
        )

        # Stars are projected by hand and drawn in pixel coordinates
        self.stars = visuals.Markers(parent=self.canvas.scene)
        self._update_colors()

        dpi_scale = self.canvas.dpi / 96.0

        self.stats_text = scene.visuals.Text(
            text='',
            color='white',
            anchor_x='left',
            anchor_y='bottom',
            font_size=12,
            parent=self.canvas.scene,
        )
        self.stats_text.pos = (10, 10)

        help_width = int(360 * dpi_scale)
        help_height = int(220 * dpi_scale)
        canvas_center_x = self.canvas.size[0] / 2
        canvas_center_y = self.canvas.size[1] / 2
        text_offset_x = int(160 * dpi_scale)

        self.help_bg = scene.visuals.Rectangle(
            center=(canvas_center_x, canvas_center_y),
            width=help_width,
            height=help_height,
            color=(0, 0, 0, 0.9),
            parent=self.canvas.scene,
        )
        self.help_bg.visible = False
        self.help_text = scene.visuals.Text(
            text=HELP_CONTENT,
            color='white',
            anchor_x='left',
            anchor_y='center',
            font_size=14,
            parent=self.canvas.scene,
        )
        self.help_text.pos = (canvas_center_x - text_offset_x, canvas_center_y)
        self._help_visible = False
        self.help_text.visible = False

        self._update_stars()
        self._update_stats()

        # interval=0 runs as fast as vsync allows, one step per frame
        self.timer = app.Timer(interval=0, connect=self._on_timer, start=True)
        self.canvas.events.key_press.connect(self._on_key_press)

    def _update_colors(self):
        """Recompute star colors after the galaxy count changed."""
        self._star_colors = compute_star_colors(
            self.universe.galaxy_count, self.universe.stars_per_galaxy
        )

    def _update_stars(self):
        """Project star positions and upload them to the markers visual."""
        positions = self.universe.star_positions.reshape(-1, 3)
        sizes = self.universe.star_sizes.reshape(-1)
        width, height = self.canvas.size

        pixels, point_sizes, visible = project_to_screen(positions, sizes, width, height)
        if len(pixels) == 0:
            self.stars.visible = False
            return

        self.stars.set_data(
            pixels,
            symbol='square',
            size=point_sizes,
            edge_width=0,
            face_color=self._star_colors[visible],
        )
        self.stars.visible = True

    def _update_stats(self):
        """Update the stats text overlay."""
        status = "PAUSED" if self._paused else "RUNNING"
        momentum = np.asarray(
            compute_total_momentum(
                self.universe.galaxy_velocities, self.universe.galaxy_masses
            )
        )
        stats = (
            f"Galaxies: {self.universe.galaxy_count}  |  "
            f"Step: {self.universe.step_count}/{self.max_lifetime}  |  {status}\n"
            f"Universe #{self._generation}  |  FPS: {self._fps:.0f}  |  "
            f"Momentum: ({momentum[0]:+.2f}, {momentum[1]:+.2f}, {momentum[2]:+.2f})"
        )
        self.stats_text.text = stats

    def _check_nonfinite(self):
        """Report the first numerical blow-up of a universe."""
        if self._nonfinite_reported:
            return
        lost = int(
            count_nonfinite(self.universe.star_positions, self.universe.star_velocities)
        )
        if lost > 0:
            print(f"Warning: {lost} stars have non-finite state (near-zero separation)")
            self._nonfinite_reported = True

    def _regenerate(self, galaxy_count: Optional[int] = None):
        """Replace the universe, optionally with a different galaxy count."""
        if galaxy_count is None:
            galaxy_count = self.universe.galaxy_count
        self.universe = create_universe(
            galaxy_count,
            rng=self.rng,
            num_stars=self.universe.stars_per_galaxy,
            deltat=self.universe.deltat,
            hit_iterations=self.universe.hit_iterations,
        )
        self._on_new_universe()

    def _on_new_universe(self):
        self._generation += 1
        self._nonfinite_reported = False
        self._update_colors()
        print(f"Universe #{self._generation}: {self.universe.galaxy_count} galaxies")

    def _on_timer(self, event):
        """Timer callback: advance one step, then redraw."""
        if not self._paused:
            previous = self.universe
            self.universe = step(
                self.universe,
                self.rng,
                coupling=self.coupling,
                min_distance=self.min_distance,
                max_lifetime=self.max_lifetime,
            )
            if self.universe.step_count == 0 and previous.step_count != 0:
                self._on_new_universe()
            self._check_nonfinite()

        now = time.time()
        elapsed = now - self._last_frame_time
        if elapsed > 0:
            self._fps = 0.9 * self._fps + 0.1 / elapsed
        self._last_frame_time = now

        self._update_stars()
        self._update_stats()
        self.canvas.update()

    def _on_key_press(self, event):
        """Handle keyboard input."""
        if event.text and event.text in '34567890':
            galaxy_count = int(event.text) or 10
            print(f"Galaxy count: {galaxy_count}")
            self._regenerate(galaxy_count)

        elif event.text in ('+', '='):
            galaxy_count = min(self.universe.galaxy_count + 1, MAX_GALAXY_COUNT)
            self._regenerate(galaxy_count)

        elif event.text == '-':
            galaxy_count = max(self.universe.galaxy_count - 1, MIN_GALAXY_COUNT)
            self._regenerate(galaxy_count)

        elif event.key == 'Q':
            print("Quit requested...")
            self.close()

        elif event.key == 'P':
            self._paused = not self._paused
            status = "PAUSED" if self._paused else "RUNNING"
            print(f"Physics: {status}")

        elif event.key == 'R':
            self._regenerate()

        elif event.key == 'H':
            self._help_visible = not self._help_visible
            self.help_bg.visible = self._help_visible
            self.help_text.visible = self._help_visible

    def close(self):
        """Close the visualizer."""
        self.timer.stop()
        self.canvas.close()
        app.quit()

    def run(self):
        """Run the visualization event loop."""
        app.run()


def run_visualization(
    universe: Universe,
    rng: Optional[np.random.Generator] = None,
    coupling: float = COUPLING,
    min_distance: float = MIN_DISTANCE,
    max_lifetime: int = MAX_LIFETIME,
):
    """
    Run the visualization (main entry point).

    Args:
        universe: Initial simulation state
        rng: Random source for regenerated universes
        coupling: Empirical coupling constant
        min_distance: Distance clamp
        max_lifetime: Steps before regeneration
    """
    visualizer = GalaxyCollisionVisualizer(
        universe, rng, coupling, min_distance, max_lifetime
    )
    visualizer.run()
