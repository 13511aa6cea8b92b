"""FastAPI surface for roast batches, persona analysis and video status."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from config import get_settings
from core import BatchOptions, ProfileRecord
from orchestrator.service import RoastOrchestrator
from persona import PersonaClassifier
from render.manager import VideoRenderManager
from utils.exceptions import AcquisitionError, ConfigurationError, RoastPipelineError, ValidationError
from webapp.runtime import get_classifier, get_orchestrator, get_render_manager


logger = logging.getLogger(__name__)


class RoastPipelinePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    identifiers: List[str] = Field(validation_alias=AliasChoices("identifiers", "linkedinUrls"))
    generate_video: Optional[bool] = Field(default=None, validation_alias=AliasChoices("generateVideo", "generate_video"))
    callback_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("callbackUrl", "callback_url"))


class AnalyzePersonaPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile: ProfileRecord = Field(validation_alias=AliasChoices("profile", "profileData"))


def _error(status_code: int, message: str, details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    body: Dict[str, Any] = {"success": False, "error": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


app = FastAPI(title="Persona Roast Pipeline API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, "invalid request body", {"errors": jsonable_errors(exc)})


@app.exception_handler(ValidationError)
async def _validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, exc.message, exc.details)


@app.exception_handler(AcquisitionError)
async def _acquisition_handler(request: Request, exc: AcquisitionError) -> JSONResponse:
    logger.error("batch_acquisition_failed error=%s", exc)
    return _error(502, exc.message, exc.details)


@app.exception_handler(ConfigurationError)
async def _configuration_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("configuration_error error=%s", exc)
    return _error(500, exc.message)


@app.exception_handler(RoastPipelineError)
async def _pipeline_handler(request: Request, exc: RoastPipelineError) -> JSONResponse:
    return _error(502, exc.message, exc.details)


def jsonable_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in exc.errors()
    ]


@app.get("/api/health")
async def health() -> Dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat(timespec="seconds")}


@app.post("/api/roast-pipeline")
async def roast_pipeline(
    payload: RoastPipelinePayload,
    orchestrator: RoastOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    generate_video = payload.generate_video
    if generate_video is None:
        generate_video = get_settings().pipeline.generate_video
    options = BatchOptions(generate_video=generate_video, callback_url=payload.callback_url)
    result = await orchestrator.run_batch(payload.identifiers, options)
    return result.to_payload()


@app.post("/api/analyze-persona")
async def analyze_persona(
    payload: AnalyzePersonaPayload,
    classifier: PersonaClassifier = Depends(get_classifier),
) -> Dict[str, Any]:
    analysis = classifier.classify(payload.profile)
    return {
        "success": True,
        "analysis": {
            "persona": analysis.persona.value,
            "confidence": analysis.confidence,
            "reasoning": analysis.reasoning,
            "contentSuggestions": analysis.content_suggestions,
            "rule": analysis.rule,
            "signals": [signal.model_dump() for signal in analysis.signals],
        },
    }


@app.get("/api/videos/{talk_id}")
async def video_status(
    talk_id: str,
    renderer: VideoRenderManager = Depends(get_render_manager),
) -> Dict[str, Any]:
    job = await renderer.lookup(talk_id)
    return {
        "success": job.result_url is not None,
        "talkId": job.job_id,
        "status": job.state.value,
        "videoUrl": job.result_url,
        "error": job.error,
        "attempts": job.attempts,
        "processingTime": f"{int(job.waited_s)} seconds",
    }
