"""
Repositories - one narrow, typed interface per table.
"""

from .model_repository import ModelRepository
from .corpus_repository import CorpusRepository
from .script_repository import ScriptRepository, HookRepository
from .batch_repository import BatchRepository

__all__ = [
    'ModelRepository',
    'CorpusRepository',
    'ScriptRepository',
    'HookRepository',
    'BatchRepository',
]
