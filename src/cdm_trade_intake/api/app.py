"""Minimal FastAPI application for the CDM Trade Intake System.

This module exposes a thin HTTP API around TradeIntakePipeline without
changing its internal logic. Request bodies are already-parsed JSON
documents; nothing is stored.

Usage (from project root, after installing the api extra):

    uvicorn cdm_trade_intake.api.app:app --reload
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, HTTPException

from .. import __version__
from ..parsers.serialization import RecordSerializer
from ..pipeline import PipelineConfig, PipelineResult, TradeIntakePipeline


app = FastAPI(title="CDM Trade Intake API", version=__version__)


@lru_cache(maxsize=1)
def get_pipeline() -> TradeIntakePipeline:
    """Shared pipeline configured from the environment.

    CDM_INTAKE_CONFIG_DIR points at a directory holding derivation.json.
    """
    config = PipelineConfig(
        config_dir=os.getenv("CDM_INTAKE_CONFIG_DIR"),
        render_reports=True,
    )
    return TradeIntakePipeline(config=config)


def _extraction_payload(result: PipelineResult) -> Dict[str, Any]:
    """Build the response body for a successful extraction."""
    extraction = result.extraction
    return {
        "document_id": result.document_id,
        "kind": result.kind.value,
        "strategy": extraction.strategy.value,
        "source_path": extraction.source_path,
        "rejections": [r.describe() for r in extraction.rejections],
        "record": RecordSerializer.record_to_dict(result.record),
        "repair_status": result.repair.status.value,
        "derived": result.derived.to_dict(),
        "warnings": result.warnings,
    }


@app.get("/api/health")
async def health() -> Dict[str, str]:
    """Liveness check."""
    return {"status": "ok", "version": __version__}


@app.post("/api/classify")
async def classify_document(
    document: Any = Body(..., description="Parsed CDM JSON document"),
    pipeline: TradeIntakePipeline = Depends(get_pipeline),
) -> Dict[str, str]:
    """Return the envelope kind of a document."""
    return {"kind": pipeline.classify(document).value}


@app.post("/api/extract")
async def extract_trade(
    document: Any = Body(..., description="Parsed CDM JSON document"),
    pipeline: TradeIntakePipeline = Depends(get_pipeline),
) -> Dict[str, Any]:
    """Extract, repair and derive a canonical trade record.

    Responds 422 with the per-strategy rejection reasons when no
    strategy produced a record.
    """
    result = pipeline.process(document)
    if not result.success:
        raise HTTPException(
            status_code=422,
            detail={
                "message": "No extraction strategy matched",
                "kind": result.kind.value,
                "reasons": result.extraction.reasons,
            },
        )
    return _extraction_payload(result)


@app.post("/api/diagnose")
async def diagnose_document(
    document: Any = Body(..., description="Parsed CDM JSON document"),
    pipeline: TradeIntakePipeline = Depends(get_pipeline),
) -> Dict[str, Any]:
    """Run the full intake and return the diagnostic report."""
    result = pipeline.process(document)
    return {
        "success": result.success,
        "report": result.report.to_dict(),
        "text": result.report_text or pipeline.render(result.report),
    }
