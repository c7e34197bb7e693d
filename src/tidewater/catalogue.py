"""Built-in providers shipped with the package."""
from __future__ import annotations

from .providers import Embed, Sourcerer


def gather_all_sources() -> list[Sourcerer]:
    from .sources.remotestream import remotestream     # rank 55
    from .sources.autoembed import autoembed_source    # rank 90
    return [remotestream, autoembed_source]


def gather_all_embeds() -> list[Embed]:
    from .embeds.mixdrop import mixdrop                # rank 198
    from .embeds.voe import voe                        # rank 180
    from .embeds.dood import dood                      # rank 173
    from .embeds.autoembed import autoembed            # rank 10
    return [mixdrop, voe, dood, autoembed]


def get_builtin_sources() -> list[Sourcerer]:
    return [s for s in gather_all_sources() if not s.disabled]


def get_builtin_embeds() -> list[Embed]:
    return [e for e in gather_all_embeds() if not e.disabled]
