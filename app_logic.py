"""
Facade Module for Application Logic.

This module collects and exposes the business logic the command line needs
from the `logic` subpackage, so that `main` does not depend on the internal
structure of the package.
"""

# From logic.orchestrator
from logic.orchestrator import Environment, Orchestrator

# From logic.hosted_network
from logic.hosted_network import HotspotConfig

# From logic.roles
from logic.roles import RetryPrompt, validate_index

# Explicitly define the public API of this facade module.
__all__ = [
    # orchestrator
    'Environment',
    'Orchestrator',
    # hosted_network
    'HotspotConfig',
    # roles
    'RetryPrompt',
    'validate_index',
]
