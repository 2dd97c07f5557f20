"""Counter REST API router.

Endpoints:
    POST /count/inc - Increment the counter
    POST /count/dec - Decrement the counter (409 at zero)
    GET  /count/    - Current value
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from .service import CounterService, CounterUnderflowError

router = APIRouter(prefix="/count", tags=["count"])


def get_counter(request: Request) -> CounterService:
    return request.app.state.counter


@router.post("/inc", response_class=PlainTextResponse)
async def increment(counter: CounterService = Depends(get_counter)) -> str:
    counter.increment()
    return "incremented"


@router.post("/dec", response_class=PlainTextResponse)
async def decrement(counter: CounterService = Depends(get_counter)) -> str:
    try:
        counter.decrement()
    except CounterUnderflowError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return "decremented"


@router.get("/", response_class=PlainTextResponse)
async def current_value(counter: CounterService = Depends(get_counter)) -> str:
    return str(counter.value)
