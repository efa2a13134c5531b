from django.urls import path, re_path
from reposerve.apkrepo.views.files import browse
from reposerve.apkrepo.views.upload import upload
from reposerve.apkrepo.views.webhooks import webhook

urlpatterns = [
    path('upload', upload, name='upload'),
    path('webhook/<str:name>', webhook, name='webhook'),

    # everything else is served from the repository tree
    re_path(r'^(?P<path>.*)$', browse, name='browse'),
]
