"""
Routes API pour l'extraction des articles d'un ticket de caisse.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from app.core.config import Settings, get_settings
from app.core.exceptions import InternalError, MissingInputError, ReceiptOCRError
from app.models.schemas import ErrorResponse, TicketArticles, TicketRequest
from app.services.ocr_pipeline import run_ticket_pipeline
from app.services.storage import ImageBucket

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ticket"])


def get_image_bucket(settings: Settings = Depends(get_settings)) -> ImageBucket:
    return ImageBucket(settings.bucket_path)


@router.post(
    "/ticket-mistral-ocr",
    response_model=TicketArticles,
    summary="Extraire les articles d'un ticket de caisse",
    description="Accepte un scan JPEG en base64, renvoie la liste des articles et leur prix unitaire.",
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def ticket_ocr(
    body: TicketRequest,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    bucket: ImageBucket = Depends(get_image_bucket),
) -> TicketArticles:
    """
    Envoie le scan au modèle, renvoie les articles extraits et planifie la sauvegarde
    du scan dans le bucket. La sauvegarde s'exécute après l'envoi de la réponse.
    """
    if not body.base64_image:
        logger.info("base64_image absent du corps de la requête")
        raise MissingInputError()

    try:
        result = await run_ticket_pipeline(body.base64_image, settings=settings)
    except ReceiptOCRError:
        raise
    except Exception as e:
        logger.exception("Erreur inattendue pendant l'extraction")
        raise InternalError(str(e) or e.__class__.__name__) from e

    background_tasks.add_task(bucket.save_in_background, body.base64_image)
    return result

