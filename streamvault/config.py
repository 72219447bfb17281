"""
Centralized configuration for StreamVault.
All magic numbers and thresholds are defined here.
"""
import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

# === Metadata Catalog (TMDB) ===

TMDB_API_KEY = os.environ.get("TMDB_API_KEY", "")
TMDB_BASE_URL = os.environ.get("TMDB_BASE_URL", "https://api.themoviedb.org/3")
TMDB_LANGUAGE = os.environ.get("TMDB_LANGUAGE", "en-US")
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/"
TMDB_POSTER_SIZE = "w500"
TMDB_BACKDROP_SIZE = "w1280"

# Region used for watch-provider discovery
WATCH_REGION = "US"

# === Fetch Strategies ===

# The direct request is expected to fail fast when blocked, relays get longer
DIRECT_TIMEOUT_SECONDS = 10
RELAY_TIMEOUT_SECONDS = 20

# === Playback Surface ===

PLAYER_BASE_URL = os.environ.get("PLAYER_BASE_URL", "https://player.videasy.net")
DEFAULT_ACCENT_COLOR = "#E50914"

# === Playback Session Thresholds ===

# Minimum wall-clock seconds between two progress writes while playing
PROGRESS_PERSIST_INTERVAL_SECONDS = 5.0

# Without exact intro data, "Skip Intro" is offered during the first N seconds
MANUAL_INTRO_WINDOW_SECONDS = 300.0

# Fixed jump used by "Skip Intro" when no exact interval is active
MANUAL_INTRO_JUMP_SECONDS = 85.0

# Without exact outro data, "Next Episode" is offered in the last N seconds
NEXT_EPISODE_WINDOW_SECONDS = 120.0

# === Catalog Display ===

# Number of cards shown in the "Continue Watching" row
CONTINUE_WATCHING_LIMIT = 20

# Number of episodes listed before "Show more" on the details page
EPISODES_PAGE_SIZE = 6
