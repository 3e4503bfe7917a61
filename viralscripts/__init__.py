"""
ViralScripts - Voice-matched short-form script generation

Retrieves viral exemplars from a scored corpus, generates hooks, expands
them into scripts, rewrites them in a creator's voice and validates the
result before anything is saved.
"""

__version__ = "0.1.0"
__author__ = "ViralScripts Team"
