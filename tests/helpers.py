"""Stand-ins for Motor cursors and pymongo results."""
from unittest.mock import MagicMock, AsyncMock


def make_cursor(documents):
    """Build a Motor-like cursor whose chained calls return itself."""
    cursor = MagicMock()
    cursor.sort = MagicMock(return_value=cursor)
    cursor.skip = MagicMock(return_value=cursor)
    cursor.limit = MagicMock(return_value=cursor)
    cursor.to_list = AsyncMock(return_value=documents)
    return cursor


def update_result(upserted_id=None):
    """Build a pymongo UpdateResult stand-in."""
    result = MagicMock()
    result.upserted_id = upserted_id
    return result
