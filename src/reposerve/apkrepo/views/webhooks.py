from django.http import HttpResponse
from django.views.decorators.http import require_http_methods
from reposerve.apkrepo.views import get_webhook_dispatcher, run_blocking
from reposerve.apkrepo.views.decorators import handle_exception, require_authorization


@handle_exception
@require_http_methods(['POST'])
@require_authorization
async def webhook(request, name):
    """
    Runs the script registered for a webhook and returns its output
    """
    dispatcher = get_webhook_dispatcher()
    output = await run_blocking(dispatcher.dispatch, name)
    return HttpResponse(output, content_type='text/plain')
