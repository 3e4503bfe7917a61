"""
Core module - Database, configuration, gateways and data models
"""

from .database import create_supabase_client
from .config import Config

__all__ = ['create_supabase_client', 'Config']
