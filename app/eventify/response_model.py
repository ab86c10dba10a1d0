import logging

logger = logging.getLogger(__name__)


def ResponseModel(data, message):
    return {
        "data": data,
        "code": 200,
        "message": message,
    }


def ErrorResponseModel(error, code, message):
    return {"error": error, "code": code, "message": message}


def DomainErrorResponse(response, exc):
    """Envelope for an EventifyError, with the HTTP status it carries."""
    response.status_code = exc.status_code
    return ErrorResponseModel(exc.error, exc.status_code, exc.message)


def ServerErrorResponse(response, db, exc, message):
    db.rollback()
    logger.exception("%s: %s", message, exc)
    response.status_code = 500
    return ErrorResponseModel("An unexpected error occurred", 500, message)
