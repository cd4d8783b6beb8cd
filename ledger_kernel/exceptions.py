"""
Typed Exception Hierarchy for the statement engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Report requests fail for a handful of well-defined reasons: a bad date range,
a missing scope identifier, an actor without access, an unknown entity.  The
HTTP layer (or any other caller) must map each one to a response without
parsing message strings, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        report = service.generate(request, actor_id=user_id)
    except InvalidPeriodRangeError as e:
        return api_error(400, code=e.code, start=e.start_period)
    except AccessDeniedError as e:
        return api_error(403, code=e.code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerStatementsError (base)
    |
    +-- ReportRequestError                 (client input, HTTP 400)
    |   +-- InvalidPeriodRangeError
    |   +-- InvalidScopeError
    |   +-- MissingScopeIdentifierError
    |   +-- InvalidRequestParameterError
    |
    +-- AccessError                        (HTTP 401 / 403)
    |   +-- AccessDeniedError
    |
    +-- LookupFailedError                  (HTTP 404)
    |   +-- EntityNotFoundError
    |   +-- OrganizationNotFoundError
    |   +-- StatementLineNotFoundError
    |
    +-- ConfigurationError
        +-- InvalidLayoutError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Request         | INVALID_PERIOD_RANGE        | start > end, or range yields no buckets
                | INVALID_SCOPE               | scope not entity / organization
                | MISSING_SCOPE_ID            | entityId / organizationId not supplied
                | INVALID_REQUEST_PARAMETER   | non-numeric year, unknown granularity
----------------|-----------------------------|-----------------------------------------
Access          | ACCESS_DENIED               | no actor, or actor not a member
----------------|-----------------------------|-----------------------------------------
Lookup          | ENTITY_NOT_FOUND            | entity id does not exist
                | ORGANIZATION_NOT_FOUND      | organization id does not exist
                | STATEMENT_LINE_NOT_FOUND    | drill-down line or period not in the statement
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_LAYOUT              | layout references an unknown section
----------------|-----------------------------|-----------------------------------------
"""


class LedgerStatementsError(Exception):
    """
    Base exception for all statement engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_STATEMENTS_ERROR"


# Request validation


class ReportRequestError(LedgerStatementsError):
    """Base exception for invalid report requests (client input)."""

    code: str = "REPORT_REQUEST_ERROR"


class InvalidPeriodRangeError(ReportRequestError):
    """The requested range produces no period buckets."""

    code: str = "INVALID_PERIOD_RANGE"

    def __init__(
        self,
        start_year: int,
        start_month: int,
        end_year: int,
        end_month: int,
    ):
        self.start_period = f"{start_year}-{start_month}"
        self.end_period = f"{end_year}-{end_month}"
        super().__init__(
            f"No periods in the specified range: "
            f"{self.start_period} to {self.end_period}"
        )


class InvalidScopeError(ReportRequestError):
    """Scope is neither 'entity' nor 'organization'."""

    code: str = "INVALID_SCOPE"

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(f"Invalid scope: {scope}")


class MissingScopeIdentifierError(ReportRequestError):
    """The identifier required by the scope was not supplied."""

    code: str = "MISSING_SCOPE_ID"

    def __init__(self, scope: str, parameter: str):
        self.scope = scope
        self.parameter = parameter
        super().__init__(f"{parameter} is required for {scope} scope")


class InvalidRequestParameterError(ReportRequestError):
    """A request parameter could not be parsed."""

    code: str = "INVALID_REQUEST_PARAMETER"

    def __init__(self, parameter: str, value: object):
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid value for {parameter}: {value!r}")


# Access


class AccessError(LedgerStatementsError):
    """Base exception for authorization failures."""

    code: str = "ACCESS_ERROR"


class AccessDeniedError(AccessError):
    """Actor is missing or has no membership in the organization."""

    code: str = "ACCESS_DENIED"

    def __init__(self, actor_id: str | None, organization_id: str | None):
        self.actor_id = actor_id
        self.organization_id = organization_id
        if actor_id is None:
            super().__init__("Access denied: no authenticated actor")
        else:
            super().__init__(
                f"Access denied: actor {actor_id} is not a member of "
                f"organization {organization_id}"
            )


# Lookups


class LookupFailedError(LedgerStatementsError):
    """Base exception for missing reference data."""

    code: str = "LOOKUP_FAILED"


class EntityNotFoundError(LookupFailedError):
    """Entity with given ID was not found."""

    code: str = "ENTITY_NOT_FOUND"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"Entity not found: {entity_id}")


class OrganizationNotFoundError(LookupFailedError):
    """Organization with given ID was not found."""

    code: str = "ORGANIZATION_NOT_FOUND"

    def __init__(self, organization_id: str):
        self.organization_id = organization_id
        super().__init__(f"Organization not found: {organization_id}")


class StatementLineNotFoundError(LookupFailedError):
    """A drill-down names a line or period the statement does not have."""

    code: str = "STATEMENT_LINE_NOT_FOUND"

    def __init__(self, statement_id: str, line_id: str, period_key: str | None = None):
        self.statement_id = statement_id
        self.line_id = line_id
        self.period_key = period_key
        where = f" for period {period_key}" if period_key else ""
        super().__init__(f"No line {line_id} in {statement_id}{where}")


# Configuration


class ConfigurationError(LedgerStatementsError):
    """Base exception for invalid statement configuration."""

    code: str = "CONFIGURATION_ERROR"


class InvalidLayoutError(ConfigurationError, ValueError):
    """A statement layout references a section it does not define."""

    code: str = "INVALID_LAYOUT"

    def __init__(self, layout_id: str, reason: str):
        self.layout_id = layout_id
        self.reason = reason
        super().__init__(f"Invalid statement layout {layout_id}: {reason}")
