from django.http import HttpResponse
from django.views.decorators.http import require_http_methods
from reposerve.apkrepo.views import get_repository_controller, run_blocking
from reposerve.apkrepo.views.decorators import handle_exception, require_authorization


@handle_exception
@require_http_methods(['POST'])
@require_authorization
async def upload(request):
    """
    Stores the archives of a multipart upload and refreshes their index
    """
    repository = get_repository_controller()
    result = await run_blocking(repository.ingest, request)

    summary = ['Stored {0} file(s) in {1}'.format(len(result.files), result.coordinate.relative_path())]
    summary.extend(result.files)
    if not result.indexed:
        summary.append('warning: index was not rebuilt')
    elif not result.signed:
        summary.append('warning: index was not signed')

    return HttpResponse('\n'.join(summary) + '\n', content_type='text/plain')
