"""
Ledger Kernel

Shared foundation for the statement engine:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock for deterministic report timestamps
- SQLAlchemy persistence and read-only selectors over monthly GL balances
"""

__version__ = "0.1.0"
