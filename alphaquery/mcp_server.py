from fastmcp import FastMCP

from alphaquery.exceptions import (
    AuthenticationError,
    DecodeError,
    IntegrationError,
    PrimaryTextError,
    RateLimitError,
)
from alphaquery.services import wolfram as wolfram_service
from alphaquery.services.wolfram import UnitSystem

mcp = FastMCP("Alphaquery")

_HANDLED = (AuthenticationError, IntegrationError, RateLimitError, DecodeError, PrimaryTextError)


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, AuthenticationError):
        return {"error": "auth_error", "message": str(e), "action": "Ask user to set WOLFRAM_APP_ID in .env"}
    if isinstance(e, RateLimitError):
        return {"error": "rate_limit", "message": str(e), "action": "Wait a moment and retry"}
    if isinstance(e, PrimaryTextError):
        return {"error": "no_answer", "message": str(e), "action": "Use wolfram_query to inspect all pods"}
    if isinstance(e, DecodeError):
        return {"error": "decode_error", "message": str(e)}
    if isinstance(e, IntegrationError):
        return {"error": "integration_error", "message": str(e)}
    return {"error": "unknown_error", "message": str(e)}


def _invalid_units(units: str) -> dict:
    allowed = ", ".join(u.value for u in UnitSystem)
    return {"error": "invalid_units", "message": f"Unknown units '{units}'", "action": f"Use one of: {allowed}"}


def _parse_units(units: str) -> UnitSystem | None:
    try:
        return UnitSystem(units)
    except ValueError:
        return None


@mcp.tool
def wolfram_query(input: str, units: str = "location") -> dict:
    """Run a full Wolfram Alpha query. Returns every result pod with its subpods (plaintext, images),
    plus assumptions, suggestions and tips. units: nonmetric, metric or location."""
    unit_system = _parse_units(units)
    if unit_system is None:
        return _invalid_units(units)
    try:
        result = wolfram_service.query(input, unit_system)
        return {"result": result.model_dump(), "pod_count": len(result.usable_pods())}
    except _HANDLED as e:
        return _handle_mcp_error(e)


@mcp.tool
def wolfram_validate(input: str) -> dict:
    """Check whether Wolfram Alpha understands a query without computing it.
    Returns success/error flags, assumptions and timing."""
    try:
        result = wolfram_service.validate(input)
        return {"result": result.model_dump(), "succeeded": result.succeeded}
    except _HANDLED as e:
        return _handle_mcp_error(e)


@mcp.tool
def wolfram_ask(input: str, units: str = "location") -> dict:
    """Quick one-line answer: the plaintext of the primary result pod."""
    unit_system = _parse_units(units)
    if unit_system is None:
        return _invalid_units(units)
    try:
        return {"query": input, "answer": wolfram_service.ask(input, unit_system)}
    except _HANDLED as e:
        return _handle_mcp_error(e)
