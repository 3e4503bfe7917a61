"""
Main CLI entry point for ViralScripts
"""

import logging

import click

from ..core.observability import setup_logfire
from .batches import batches_group
from .corpus import corpus_group
from .generate import generate_command, stages_command
from .profile import profile_group


@click.group()
@click.version_option(version='0.1.0')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """
    ViralScripts - Voice-matched short-form script generation

    Generate hooks from a viral corpus, expand them into scripts, rewrite
    them in a creator's voice and validate them before saving.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    setup_logfire()


# Register command groups
cli.add_command(generate_command)
cli.add_command(stages_command)
cli.add_command(corpus_group)
cli.add_command(batches_group)
cli.add_command(profile_group)


if __name__ == '__main__':
    cli()
