"""
Database client factory

Clients are created explicitly and handed to repositories; nothing here
caches a process-wide client.
"""

from typing import Optional
from supabase import create_client, Client
from .config import Config


def create_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    """
    Create a Supabase client.

    Args:
        url: Supabase project URL (defaults to Config.SUPABASE_URL)
        key: Service role key (defaults to Config.SUPABASE_SERVICE_KEY)

    Returns:
        Supabase client instance
    """
    if url is None and key is None:
        Config.validate()

    url = url or Config.SUPABASE_URL
    key = key or Config.SUPABASE_SERVICE_KEY

    if not url or not key:
        raise ValueError("Missing required configuration: SUPABASE_URL, SUPABASE_SERVICE_KEY")

    return create_client(url, key)
