"""Tidewater: waterfall stream lookup over pluggable source/embed providers."""
from .base import (
    Caption, EmbedContext, EmbedRef, EmbedResult, EpisodeRef, FileStream, HlsStream,
    Movie, RunOutput, SeasonRef, ShowEpisode, SourceContext, SourceResult, Stream, StreamFile,
)
from .builder import BuilderOptions, ProviderBuilder, build_providers, make_providers
from .catalogue import get_builtin_embeds, get_builtin_sources
from .engine import ProviderEngine
from .errors import ConfigurationError, NotFoundError
from .fetcher import AiohttpTransport, Fetcher, make_standard_fetcher
from .flags import FeatureSet, Flag, Target, flags_allowed_in_features, get_target_features
from .providers import Embed, Sourcerer
from .proxy import make_simple_proxy_fetcher
from .runner import RunnerEvents, UpdateEvent, UpdateStatus

__version__ = "0.1.0"
