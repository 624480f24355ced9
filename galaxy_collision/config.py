"""Configuration constants for the galaxy collision simulation."""

# Galaxy parameters
MAX_STARS = 700  # Stars per galaxy; also the mass of every galaxy
MIN_SIZE = 0.1  # Smallest galaxy radius
RANGE_SIZE = 0.1  # Galaxy radius is uniform in [MIN_SIZE, MIN_SIZE + RANGE_SIZE)
Z_OFFSET = 1.5  # Pushes every galaxy in front of the camera
MAX_STAR_SIZE = 7  # Star size class is uniform in [0, MAX_STAR_SIZE)

# Star orbit parameters
ORBIT_SCALE = 0.001  # Empirical scale in v = sqrt(mass * ORBIT_SCALE / r)
MIN_ORBIT_RADIUS = 1e-6  # Used instead of r when a star is sampled at the center

# Simulation parameters
DELTAT = 0.005  # Integration timestep
HIT_ITERATIONS = 100  # Steps galaxies are back-extrapolated at creation
COUPLING = 5e-6  # Stands in for the gravitational constant (visual pacing)
MIN_DISTANCE = 0.0  # Distance clamp for the force law; 0.0 disables it
MAX_LIFETIME = 800  # Steps before the universe is regenerated
PRECISION = 64  # Floating point precision: 64 or 32 bits

# Galaxy count (the engine accepts any positive count, the UI offers 3-12)
GALAXY_COUNT = 3
MIN_GALAXY_COUNT = 3
MAX_GALAXY_COUNT = 12

# Visualization parameters
CANVAS_WIDTH = 1024
CANVAS_HEIGHT = 768
FOCAL_LENGTH = 150.0  # Pixels per unit at depth 1
MAX_POINT_SIZE = 10  # Largest star square in pixels
GALAXY_COLORS = (
    '#ffffcc',
    '#ccffff',
    '#ffccff',
    '#ccffcc',
    '#ccccff',
    '#ffcccc',
    '#80ffbf',
    '#bf80ff',
    '#ffbf80',
    '#bfff80',
    '#80bfff',
    '#ff80bf',
)

# Help text (used in both CLI --help and in-app H key overlay)
HELP_CONTENT = (
    "--- Controls ---\n"
    "3-9, 0: Regenerate with 3-9 or 10 galaxies\n"
    "+ / -: One galaxy more / less (3-12)\n"
    "R: Regenerate universe\n"
    "P: Pause/Resume physics\n"
    "H: Toggle this help\n"
    "Q: Quit"
)
