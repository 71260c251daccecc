"""
API Routes package
"""
from . import generation, sets, study

__all__ = ['generation', 'sets', 'study']
