"""
Prompt builders and the constant tables they draw on.

Constant modules (hook_types, pcm, cta, share_triggers) have no package
imports so pydantic models can use them for validation.
"""
