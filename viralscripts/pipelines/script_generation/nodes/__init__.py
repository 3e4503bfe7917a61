"""
Script generation nodes, in graph order.
"""

from .initialize import InitializeNode
from .retrieve_corpus import RetrieveCorpusNode
from .generate_hooks import GenerateHooksNode
from .score_shareability import ScoreShareabilityNode
from .expand_scripts import ExpandScriptsNode
from .transform_voice import TransformVoiceNode
from .validate_scripts import ValidateScriptsNode
from .revise_scripts import ReviseScriptsNode
from .finalize import FinalizeNode

__all__ = [
    "InitializeNode",
    "RetrieveCorpusNode",
    "GenerateHooksNode",
    "ScoreShareabilityNode",
    "ExpandScriptsNode",
    "TransformVoiceNode",
    "ValidateScriptsNode",
    "ReviseScriptsNode",
    "FinalizeNode",
]
