"""
Plugin Layer - Site plugins and the strategies they are composed from.

Every module directly inside this package (except the framework modules)
may define site plugins; the registry discovers them automatically.
"""

from mangaweave.plugins.base import SitePlugin
from mangaweave.plugins.composition import DecorationChain, Strategy, compose, provides

__all__ = [
    "SitePlugin",
    "Strategy",
    "DecorationChain",
    "compose",
    "provides",
]
