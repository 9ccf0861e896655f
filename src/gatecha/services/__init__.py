# src/gatecha/services/__init__.py
"""Business logic services for the GateCHA gateway."""

from .challenge import ChallengeIssuer
from .credentials import CredentialManager
from .keys import KeyPatch, KeyRegistry
from .reaper import Reaper
from .replay import ReplayLedger
from .settings_store import SettingsStore
from .stats import UsageAccountant
from .verification import VerificationGate, VerificationOutcome

__all__ = [
    "ChallengeIssuer",
    "CredentialManager",
    "KeyPatch",
    "KeyRegistry",
    "Reaper",
    "ReplayLedger",
    "SettingsStore",
    "UsageAccountant",
    "VerificationGate",
    "VerificationOutcome",
]
