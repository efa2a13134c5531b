"""
ASGI entry point of the repository daemon
"""
import os
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'reposerve.settings')

application = get_asgi_application()
