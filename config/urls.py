"""
URL configuration for the Rate Manager project.
"""

from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Rate Manager Admin"
admin.site.site_title = "Admin Portal"
admin.site.index_title = "Welcome to the Rate Manager"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('rate_manager.urls')),
]
