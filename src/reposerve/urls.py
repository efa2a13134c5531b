from django.urls import include, path

# Top-level URLs
urlpatterns = [
    path('', include('reposerve.apkrepo.urls')),
]
