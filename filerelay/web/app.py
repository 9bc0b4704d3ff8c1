import logging
from pathlib import Path
from typing import List

from fastapi import FastAPI
from fastapi.responses import FileResponse, JSONResponse

from filerelay import __version__
from filerelay.core.schemas import FileRecordSchema
from filerelay.store.models import all_files

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def create_app() -> FastAPI:
    """Vista web de solo lectura sobre el índice de archivos."""
    app = FastAPI(title="filerelay", version=__version__)

    @app.get("/api/files", response_model=List[FileRecordSchema])
    def list_files():
        try:
            return [record.to_schema() for record in all_files()]
        except Exception as e:
            logger.error(f"Error obteniendo archivos: {e}")
            return JSONResponse(status_code=500, content={"message": "Internal Server Error"})

    @app.get("/", include_in_schema=False)
    def index():
        return FileResponse(STATIC_DIR / "index.html")

    return app
