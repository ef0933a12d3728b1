from stats_server.models.api_key import APIKey
from stats_server.models.submission import Submission

__all__ = ["APIKey", "Submission"]
