"""
Engine routes: model status, start/stop, import and deletion.
"""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends

from ..config import state, get_engine
from ..engine import EngineController
from ..exceptions import bad_request
from ..schemas import DownloadStateResponse, EngineStatusResponse, ImportModelRequest

router = APIRouter(prefix="/engine", tags=["engine"])


def _status(engine: EngineController) -> EngineStatusResponse:
    backend = engine.summarizer.backend
    return EngineStatusResponse(
        is_model_installed=engine.is_model_installed.value,
        is_model_ready=engine.is_model_ready.value,
        is_summarizing=state.worker.is_summarizing.value if state.worker else False,
        backend=backend.value if backend else None,
        model_size=engine.model_size_string(),
        download_state=DownloadStateResponse.from_state(engine.download_state.value),
    )


@router.get("")
async def get_status(
    engine: Annotated[EngineController, Depends(get_engine)]
) -> EngineStatusResponse:
    """Current model and engine state."""
    return _status(engine)


@router.post("/check")
async def check_model(
    engine: Annotated[EngineController, Depends(get_engine)]
) -> EngineStatusResponse:
    """Re-check the installed model without loading it."""
    engine.check_model_status()
    return _status(engine)


@router.post("/start")
async def start_engine(
    engine: Annotated[EngineController, Depends(get_engine)]
) -> EngineStatusResponse:
    """Load the installed model (GPU first, CPU as fallback)."""
    await engine.initialize_engine()
    return _status(engine)


@router.post("/stop")
async def stop_engine(
    engine: Annotated[EngineController, Depends(get_engine)]
) -> EngineStatusResponse:
    """Release the model."""
    engine.stop_engine()
    return _status(engine)


@router.post("/import")
async def import_model(
    request: ImportModelRequest,
    engine: Annotated[EngineController, Depends(get_engine)]
) -> EngineStatusResponse:
    """Import a model file or .tar.gz archive from a local path."""
    source = Path(request.path).expanduser()
    if not source.is_file():
        raise bad_request(f"File not found: {request.path}")

    await engine.import_model(source, request.file_name)
    return _status(engine)


@router.delete("/model")
async def delete_model(
    engine: Annotated[EngineController, Depends(get_engine)]
) -> EngineStatusResponse:
    """Release and delete every installed model file."""
    engine.delete_model()
    return _status(engine)
