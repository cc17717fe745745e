"""Queue management package for crawling operations."""

from .frontier_queue import Frontier, FrontierStats

__all__ = [
    'Frontier',
    'FrontierStats',
]
