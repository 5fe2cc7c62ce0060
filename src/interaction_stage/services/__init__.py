# src/interaction_stage/services/__init__.py
"""Business logic services for the Interaction Stage application."""

from .aggregates import AggregateRecomputer, VoteCounters
from .identity import AuthenticationError, IdentityResolver, create_access_token
from .interaction_service import InteractionService
from .reconciler import InteractionReconciler, Mutation, ReportMutation, VoteMutation

__all__ = [
    "AggregateRecomputer",
    "AuthenticationError",
    "IdentityResolver",
    "InteractionReconciler",
    "InteractionService",
    "Mutation",
    "ReportMutation",
    "VoteCounters",
    "VoteMutation",
    "create_access_token",
]
