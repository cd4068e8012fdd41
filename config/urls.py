"""URL configuration for the Fleet Coordinator project.

Routes the Django admin, the OpenAPI schema and every app router under
the versioned API prefix.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/fleet/', include('apps.fleet.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/rentals/', include('apps.rentals.urls')),
    path('api/v1/tours/', include('apps.tours.urls')),
    path('api/v1/providers/', include('apps.providers.urls')),
    path('api/v1/finances/', include('apps.finances.urls')),
    path('api/v1/notifications/', include('apps.notifications.urls')),
]
