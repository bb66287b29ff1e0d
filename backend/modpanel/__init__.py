"""Moderation Panel Engine.

Derives the live state of player punishments from their modification logs
and classifies each player's moderation risk per category.

Modules:
    - core: Configuration and structured logging
    - modules.punishment: Punishment lifecycle and moderation-status engine
"""

__version__ = "0.1.0"
