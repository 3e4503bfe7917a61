"""
Command-line interface for ViralScripts
"""
