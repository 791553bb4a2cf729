"""API endpoints for profiling and charting tabular files directly."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...core.exceptions import SourceNotFoundError
from ...orchestration.tools import infer_series_keys
from ...schemas.chart import ChartPayload, ChartRequest
from ...schemas.profile import TableProfile
from ...services.chart_compiler import ChartDataService
from ...services.profiler import profile_file
from ..dependencies import get_chart_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["Files"])


class ProfileRequest(BaseModel):
    file_path: str = Field(..., min_length=1, description="Path of the tabular file to profile")


@router.post("/profile", response_model=TableProfile)
async def profile(request: ProfileRequest):
    """Infer column types and statistics for a CSV or Excel file."""
    try:
        return await asyncio.to_thread(profile_file, request.file_path)
    except SourceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Profiling failed for %s: %s", request.file_path, e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/chart", response_model=ChartPayload)
async def chart(
    request: ChartRequest,
    chart_service: ChartDataService = Depends(get_chart_service),
):
    """Compile chart data without going through the agent."""
    try:
        data = await chart_service.get_chart_data(request)
    except SourceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Chart compilation failed for %s: %s", request.file_path, e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return ChartPayload(
        type=request.chart_type,
        data=data,
        x_key=request.x_column,
        series_keys=infer_series_keys(request.series_columns, data),
        title=request.title,
        description=request.description,
    )
