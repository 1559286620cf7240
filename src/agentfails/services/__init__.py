# src/agentfails/services/__init__.py
"""Business logic services for the Agent Fails application."""

from .chain import ChainClient
from .membership import MembershipResolver
from .payments import PaymentVerifier
from .policy import AccessPolicy
from .replay import ReplayGuard

__all__ = [
    "AccessPolicy",
    "ChainClient",
    "MembershipResolver",
    "PaymentVerifier",
    "ReplayGuard",
]
