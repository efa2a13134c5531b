from functools import wraps
from http import HTTPStatus
import logging
from django.conf import settings
from django.core.exceptions import SuspiciousOperation
from django.http import Http404, HttpResponse
from reposerve.apkrepo.util import (AuthorizationException, IngestException, StorageException,
                                    WebhookException)
from reposerve.apkrepo.views import get_config, run_blocking
from reposerve.apkrepo.views.auth import is_authorized


def _text_response(message, status):
    return HttpResponse(message, content_type='text/plain', status=status)


def handle_exception(request_handler_func):
    """
    Decorator function for handling exceptions and converting them
    to the appropriate response for the client
    """
    @wraps(request_handler_func)
    async def wrapper_handler(*args, **kwargs):
        logger = logging.getLogger(settings.DEFAULT_LOGGER)

        try:
            return await request_handler_func(*args, **kwargs)
        except AuthorizationException as e:
            logger.info(e)
            return _text_response(str(e), HTTPStatus.UNAUTHORIZED)
        except WebhookException as e:
            logger.info(e)
            return _text_response(str(e), HTTPStatus.NOT_FOUND)
        except StorageException as e:
            logger.error(e)
            return _text_response(str(e), HTTPStatus.INTERNAL_SERVER_ERROR)
        except IngestException as e:
            logger.warning(e)
            return _text_response(str(e), HTTPStatus.BAD_REQUEST)
        except Http404 as e:
            logger.debug(e)
            return _text_response('Not found', HTTPStatus.NOT_FOUND)
        except SuspiciousOperation as e:
            logger.warning(e)
            return _text_response(str(e), HTTPStatus.BAD_REQUEST)
        except Exception as e:
            logger.exception(e)
            if settings.DEBUG:
                raise
            return _text_response(str(e), HTTPStatus.INTERNAL_SERVER_ERROR)

    return wrapper_handler


def require_authorization(request_handler_func):
    """
    Decorator rejecting requests that no configured authorizer accepts
    """
    @wraps(request_handler_func)
    async def wrapper_handler(request, *args, **kwargs):
        if not await run_blocking(is_authorized, request, get_config()):
            raise AuthorizationException()
        return await request_handler_func(request, *args, **kwargs)

    return wrapper_handler
