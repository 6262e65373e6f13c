import structlog
from fastapi import APIRouter, HTTPException, Request

from autodiag.data.diagnostics import DIAGNOSES, VehicleZone
from autodiag.services.normalize import match_diagnosis_key, matching_keys

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["symptoms"])


@router.post("/symptoms/analyze")
async def analyze_symptom(request: Request):
    """
    Map a free-text symptom to a canned diagnosis. A non-match is a normal
    result (matched=false), never an error.
    """
    try:
        body = await request.json()
    except ValueError:
        body = {}
    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str):
        text = ""

    key = match_diagnosis_key(text)
    record = DIAGNOSES[key] if key else None
    logger.info("symptom_matched" if key else "symptom_unmatched", diagnosis_key=key, text_length=len(text))

    return {
        "matched": record is not None,
        "diagnosisKey": key,
        "zone": (record.zone if record else VehicleZone.NONE).value,
        "candidates": matching_keys(text),
        "diagnosis": record.model_dump(mode="json") if record else None,
    }


@router.get("/diagnoses")
async def list_diagnoses():
    return {key: rec.model_dump(mode="json") for key, rec in DIAGNOSES.items()}


@router.get("/diagnoses/{key}")
async def get_diagnosis(key: str):
    record = DIAGNOSES.get(key)
    if record is None:
        raise HTTPException(status_code=404, detail="Diagnosis not found")
    return record.model_dump(mode="json")
