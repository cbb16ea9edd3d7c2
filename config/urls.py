"""
URL configuration for config project.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Result processing API, marksheets, transcripts
    path("results/", include("results.urls")),

    # Admin (also serves the login page)
    path("admin/", admin.site.urls),
]
