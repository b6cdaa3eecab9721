"""
URL configuration for CCMS project.
"""
from django.contrib import admin
from django.urls import path
from django.conf import settings
from django.conf.urls.static import static
from ninja import NinjaAPI

api = NinjaAPI(
    title="CCMS API",
    version="1.0.0",
    description="Career Coaching Management System API",
    docs_url="/docs",
)

from apps.identity.api import router as identity_router
from apps.audit.api import router as audit_router
from apps.mentoring.api import router as mentoring_router
from apps.tracker.api import router as tracker_router
from apps.courses.api import router as courses_router
from apps.documents.api import router as documents_router
from apps.messaging.api import router as messaging_router
from apps.notifications.api import router as notifications_router
from apps.todos.api import router as todos_router
from apps.scheduling.api import router as scheduling_router
from apps.recommendations.api import router as recommendations_router
from apps.community.api import router as community_router
from apps.core.api import router as dashboard_router

api.add_router("/identity/", identity_router)
api.add_router("/audit/", audit_router)
api.add_router("/mentoring/", mentoring_router)
api.add_router("/tracker/", tracker_router)
api.add_router("/courses/", courses_router)
api.add_router("/documents/", documents_router)
api.add_router("/messaging/", messaging_router)
api.add_router("/notifications/", notifications_router)
api.add_router("/todos/", todos_router)
api.add_router("/scheduling/", scheduling_router)
api.add_router("/recommendations/", recommendations_router)
api.add_router("/community/", community_router)
api.add_router("/dashboard/", dashboard_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]

# Serve uploaded files in development
if settings.DEBUG:
    urlpatterns += static(
        getattr(settings, 'MEDIA_URL', '/media/'),
        document_root=getattr(settings, 'MEDIA_ROOT', settings.BASE_DIR / 'media')
    )
