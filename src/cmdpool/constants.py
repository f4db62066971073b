"""Constants for cmdpool."""

# Scheduling defaults
DEFAULT_LIMIT = 5
POLL_INTERVAL = 0.001  # seconds between poll ticks

# Configuration
CONFIG_FILE = ".cmdpool.toml"

# Host process exit codes
EXIT_PROCESS_FAILED = 1
EXIT_USAGE = 2
EXIT_EXECUTABLE_NOT_FOUND = 3
EXIT_LOCK_HELD = 4
