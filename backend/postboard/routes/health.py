"""Liveness probe backed by a trivial database query."""

import logging
import time
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..database import get_engine, ping

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get('/health')
def health_check(request: Request, engine: Annotated[Engine, Depends(get_engine)]):
    """Return 200 when the database answers `SELECT 1`, 503 otherwise."""
    try:
        ping(engine)
    except SQLAlchemyError as exc:
        logger.warning("health.unhealthy error=%s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                'success': False,
                'message': 'Server is unhealthy',
                'error': {'message': type(exc).__name__ + ': database unreachable'},
            },
        )
    state = request.app.state
    return {
        'success': True,
        'message': 'Server is healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'uptime': round(time.monotonic() - state.started_at, 3),
        'environment': state.settings.NODE_ENV,
    }
