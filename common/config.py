# Shared configuration for the PlayZone games and the leaderboard server.
# Every value can be overridden through an environment variable.

import os

# Leaderboard server
LEADERBOARD_HOST = os.environ.get('PLAYZONE_LEADERBOARD_HOST', '127.0.0.1')
LEADERBOARD_PORT = int(os.environ.get('PLAYZONE_LEADERBOARD_PORT', '12000'))

# Seconds to wait on the leaderboard server before giving up
SYNC_TIMEOUT_SECONDS = float(os.environ.get('PLAYZONE_SYNC_TIMEOUT', '3.0'))

# Server-side storage directory (leaderboard.json lives here)
STORAGE_DIR = os.environ.get('PLAYZONE_STORAGE_DIR', 'storage')

# Player-side key-value store (high scores, stats, profile)
LOCAL_STORE_FILE = os.environ.get(
    'PLAYZONE_LOCAL_STORE',
    os.path.join(os.path.expanduser('~'), '.playzone', 'local_store.json')
)
