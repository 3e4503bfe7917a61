"""
Pipelines - pydantic-graph workflows.

Available pipelines:
- script_generation: corpus-grounded hooks expanded into voice-matched scripts
"""
