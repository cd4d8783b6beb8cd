"""Kernel services."""

from ledger_kernel.services.access_service import AccessService

__all__ = ["AccessService"]
