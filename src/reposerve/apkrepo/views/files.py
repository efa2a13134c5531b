import os
from django.core.exceptions import SuspiciousFileOperation
from django.http import Http404, HttpResponse
from django.utils._os import safe_join
from django.views.decorators.http import require_http_methods
from django.views.static import serve
from reposerve.apkrepo.listing import is_visible, render_directory_listing
from reposerve.apkrepo.views import get_config, run_blocking
from reposerve.apkrepo.views.decorators import handle_exception


@handle_exception
@require_http_methods(['GET', 'HEAD'])
async def browse(request, path=''):
    """
    Serves a file of the repository tree, or the listing of a directory
    """
    root = get_config().dir
    if not all(is_visible(segment) for segment in path.split('/') if segment):
        raise Http404(path)

    try:
        fullpath = safe_join(root, path)
    except SuspiciousFileOperation:
        raise Http404(path)

    if await run_blocking(os.path.isdir, fullpath):
        html = await run_blocking(render_directory_listing, fullpath, root, request.path)
        return HttpResponse(html, content_type='text/html; charset=utf-8')

    return await run_blocking(serve, request, path, document_root=root)
