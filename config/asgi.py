"""
ASGI entry point. Also exposes a Mangum adapter for API Gateway.
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

from django.core.asgi import get_asgi_application

application = get_asgi_application()

_mangum = None


def lambda_handler(event, context):
    """API Gateway event -> Django. The adapter is built on the first call."""
    global _mangum
    if _mangum is None:
        from mangum import Mangum
        _mangum = Mangum(application, lifespan="off")
    return _mangum(event, context)
