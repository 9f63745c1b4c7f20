# routes/__init__.py

from .workers import router as workers_router
from .pickings import router as pickings_router

__all__ = [
    'workers_router',
    'pickings_router'
]
