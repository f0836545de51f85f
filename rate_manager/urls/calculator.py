"""Calculator URL patterns: config and rate preview."""

from django.urls import path
from rate_manager.views import (
    CalculatorConfigView,
    CalculatorPreviewView,
)

urlpatterns = [
    path('org/<slug:org_code>/<slug:prop_code>/api/calculator/config/',
         CalculatorConfigView.as_view(), name='calculator_config'),
    path('org/<slug:org_code>/<slug:prop_code>/api/calculator/preview/',
         CalculatorPreviewView.as_view(), name='calculator_preview'),
]
