"""Services layer"""

from .access_service import AccessService
from .failover import FailoverController, FailoverSession, PlaybackSurface
from .log_service import LogService
from .populate_service import PopulateService
from .preference_store import PreferenceStore
from .providers import DEFAULT_PROVIDERS, PlaybackRequest, ProviderEntry, ProviderTable
from .retry import RetryPolicy, retry_async
from .tmdb_service import TMDBService

__all__ = [
    "AccessService",
    "FailoverController",
    "FailoverSession",
    "PlaybackSurface",
    "LogService",
    "PopulateService",
    "PreferenceStore",
    "DEFAULT_PROVIDERS",
    "PlaybackRequest",
    "ProviderEntry",
    "ProviderTable",
    "RetryPolicy",
    "retry_async",
    "TMDBService",
]
