# Message type constants and validation
# Defines the requests understood by the leaderboard server

# Collections
COLLECTION_LEADERBOARD = "Leaderboard"

# Leaderboard actions
ACTION_UPSERT = "upsert"
ACTION_QUERY = "query"

# Response statuses
STATUS_OK = "ok"
STATUS_ERROR = "error"

# Fields a leaderboard query may sort on (always descending)
SORTABLE_FIELDS = ("totalScore", "gamesPlayed", "bestStreak")
DEFAULT_SORT_FIELD = "totalScore"

# Fields stored for each leaderboard row
LEADERBOARD_FIELDS = (
    "id", "username", "avatar", "favoriteGame",
    "totalScore", "gamesPlayed", "bestStreak",
)


def validate_request(request: dict) -> tuple[bool, str]:
    """
    Validate a request message structure.

    Args:
        request: Dictionary containing the request

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(request, dict):
        return False, "Request must be a dictionary"

    for field in ('collection', 'action'):
        if field not in request:
            return False, f"Request must contain '{field}' field"
        if not isinstance(request[field], str):
            return False, f"'{field}' must be a string"

    data = request.get('data', {})
    if not isinstance(data, dict):
        return False, "'data' must be a dictionary"

    action = request['action']
    if action == ACTION_UPSERT:
        if not data.get('id'):
            return False, "Action 'upsert' requires 'id' in data"

    if action == ACTION_QUERY:
        sort_by = data.get('sort_by', DEFAULT_SORT_FIELD)
        if sort_by not in SORTABLE_FIELDS:
            return False, f"Cannot sort by '{sort_by}'"
        limit = data.get('limit')
        if limit is not None and (not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0):
            return False, "'limit' must be a positive integer"

    return True, ""
