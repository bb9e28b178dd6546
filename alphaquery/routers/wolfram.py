from fastapi import APIRouter

from alphaquery.models.common import ShortAnswer
from alphaquery.models.result import Result
from alphaquery.services import wolfram as wolfram_service
from alphaquery.services.wolfram import UnitSystem

router = APIRouter(prefix="/api/wolfram", tags=["wolfram"])


@router.get("/query")
def query(input: str, units: UnitSystem = UnitSystem.LOCATION) -> Result:
    return wolfram_service.query(input, units)


@router.get("/validate")
def validate(input: str) -> Result:
    return wolfram_service.validate(input)


@router.get("/ask")
def ask(input: str, units: UnitSystem = UnitSystem.LOCATION) -> ShortAnswer:
    return ShortAnswer(query=input, answer=wolfram_service.ask(input, units))
