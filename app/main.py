"""
Application FastAPI : passerelle OCR de tickets de caisse via un modèle multimodal (Mistral).
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.middleware import ApiKeyMiddleware, BodySizeLimitMiddleware
from app.api.routes import router
from app.core.config import get_settings
from app.core.exceptions import ReceiptOCRError
from app.models.constants import INVALID_BODY_MESSAGE, MISSING_SCAN_MESSAGE

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Chargement et validation de la config au démarrage ; échec bloquant."""
    try:
        settings = get_settings()
    except Exception as e:
        logger.error("Configuration invalide au démarrage: %s", e)
        raise
    logging.getLogger().setLevel(settings.log_level)
    logger.info(
        "Configuration chargée (modèle %s, bucket %s).",
        settings.llm_model,
        settings.bucket_path,
    )
    yield


app = FastAPI(
    title="Ticket OCR Gateway",
    description="Extraction des articles et prix unitaires de tickets de caisse via un modèle multimodal.",
    version="0.1.0",
    lifespan=lifespan,
)

# Le dernier middleware ajouté est le plus externe : CORS, puis clé API, puis taille du corps
app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(ApiKeyMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(ReceiptOCRError)
async def handle_receipt_error(request: Request, exc: ReceiptOCRError):
    """Erreurs applicatives : code HTTP et message portés par l'exception."""
    if exc.status_code >= 500:
        logger.error("Erreur de traitement %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("Requête refusée (%d): %s", exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    """Corps absent ou mal formé : 400 plutôt que le 422 par défaut de FastAPI."""
    errors = exc.errors()
    if errors and all(error.get("type") == "missing" for error in errors):
        return JSONResponse(status_code=400, content={"error": MISSING_SCAN_MESSAGE})
    return JSONResponse(
        status_code=400,
        content={
            "error": INVALID_BODY_MESSAGE,
            "details": jsonable_encoder(
                [{key: error[key] for key in ("type", "loc", "msg") if key in error} for error in errors]
            ),
        },
    )


@app.get("/health")
def health():
    """Endpoint de santé pour vérifier que le service répond."""
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
