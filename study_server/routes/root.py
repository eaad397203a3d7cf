"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Reading Study API",
        "version": "1.0.0",
        "data_source": state.config.data_source,
        "study": {
            "condition_order": [c.value for c in state.study_config.condition_order],
            "washout_days": state.study_config.washout_days,
            "block_size": state.study_config.block_size,
        },
        "endpoints": {
            "facilities": ["/api/facilities", "/api/facilities/{facility_id}", "/api/facilities/by-slug/{slug}"],
            "readers": ["/api/readers/register", "/api/readers/{email}", "/api/readers/{email}/tasks"],
            "sessions": ["/api/sessions/start", "/api/sessions/{session_id}", "/api/sessions/{session_id}/results"],
            "cases": ["/api/cases"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    return {
        "status": "healthy",
        "data_source": state.config.data_source,
        "store": type(state.store).__name__,
    }
