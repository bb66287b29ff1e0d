"""Application modules.

This package contains the feature modules of the moderation panel engine:
- punishment: Modification replay, activity classification, status scoring
"""
