"""
roi.py — ROI Calculation API Endpoints

Purpose:
- Expose the calculation engine to the dashboard.
- Callers post fully materialized indicator/project payloads; nothing is
  fetched or stored here.

Notes:
- Infinite ROI/payback values are returned as the string "Infinity".
- Endpoints are plain `def` (run in the threadpool); the work is CPU-only.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from roi_app.core.logging import get_logger
from roi_app.services.roi import (
    CATEGORY_NAMES,
    ProjectCosts,
    build_calculated_result,
    compute_indicator_metrics,
    compute_project_metrics,
    get_category_calculator,
    summarize_categories,
    to_json_safe,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/roi",
    tags=["roi"]
)


# -----------------------------------------------------------------------------
# Request Models
# -----------------------------------------------------------------------------

class IndicatorRequest(BaseModel):
    """Request to compute metrics for one indicator record"""
    indicator: Optional[Dict[str, Any]] = Field(
        ..., description="Indicator record (normalized or legacy shape); null yields no metrics"
    )
    include_calculated_result: bool = Field(
        False, description="Also return the monthly calculated-result record"
    )


class ProjectCostsModel(BaseModel):
    """Project-level costs"""
    model_config = ConfigDict(populate_by_name=True)

    implementation_cost: float = Field(0.0, ge=0, alias="implementationCost")
    monthly_maintenance_cost: float = Field(0.0, ge=0, alias="monthlyMaintenanceCost")


class ProjectRequest(BaseModel):
    """Request to aggregate metrics across a project's indicators"""
    model_config = ConfigDict(populate_by_name=True)

    project_id: Union[str, int] = Field(..., alias="projectId")
    project: Optional[ProjectCostsModel] = None
    indicators: List[Dict[str, Any]] = Field(default_factory=list)
    include_details: bool = True
    include_categories: bool = False


class CategoryRequest(BaseModel):
    """Request to run one category calculator"""
    model_config = ConfigDict(populate_by_name=True)

    category: str
    baseline: Dict[str, Any] = Field(default_factory=dict)
    post_change: Dict[str, Any] = Field(default_factory=dict, alias="postChange")


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------

@router.get("/categories")
def list_categories():
    """Registered indicator categories with their display names."""
    return {"categories": [
        {"value": value, "name": name} for value, name in CATEGORY_NAMES.items()
    ]}


@router.post("/indicator")
def indicator_metrics(request: IndicatorRequest):
    """
    Compute annualized ROI metrics for one indicator.

    Returns `metrics: null` when the indicator is null.
    """
    try:
        if request.indicator is None:
            return {"indicator_id": None, "metrics": None}

        indicator_id = request.indicator.get("id")
        metrics = compute_indicator_metrics(request.indicator)
        logger.info(f"Computed metrics for indicator {indicator_id}")

        response: Dict[str, Any] = {
            "indicator_id": indicator_id,
            "metrics": metrics.to_dict(),
        }
        if request.include_calculated_result:
            response["calculated_result"] = build_calculated_result(indicator_id, metrics)
        return to_json_safe(response)

    except Exception as e:
        logger.exception(f"Failed to compute indicator metrics: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to compute indicator metrics: {str(e)}")


@router.post("/project")
def project_metrics(request: ProjectRequest):
    """
    Aggregate metrics across every indicator of a project.

    Indicators of other projects in the payload are ignored.
    """
    try:
        costs = None
        if request.project is not None:
            costs = ProjectCosts(
                implementation_cost=request.project.implementation_cost,
                monthly_maintenance_cost=request.project.monthly_maintenance_cost,
            )

        metrics = compute_project_metrics(request.project_id, request.indicators, costs)
        logger.info(
            f"Computed project {request.project_id} metrics over {metrics.total_indicators} indicators"
        )

        response: Dict[str, Any] = {
            "project_id": request.project_id,
            "metrics": metrics.to_dict(include_details=request.include_details),
        }
        if request.include_categories:
            response["categories"] = summarize_categories(
                request.indicators, project_id=request.project_id
            )
        return to_json_safe(response)

    except Exception as e:
        logger.exception(f"Failed to compute project metrics: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to compute project metrics: {str(e)}")


@router.post("/category")
def category_fields(request: CategoryRequest):
    """Run the calculator registered for `category` over the two payloads."""
    try:
        calculator = get_category_calculator(request.category)
        if calculator is None:
            raise HTTPException(status_code=404, detail=f"No calculator for category '{request.category}'")

        fields = calculator.calculate(request.baseline, request.post_change)
        return to_json_safe({
            "category": calculator.category.value,
            "fields": fields,
        })

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to compute category fields: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to compute category fields: {str(e)}")
