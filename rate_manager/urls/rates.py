"""Rate calendar URL patterns: calendar, overrides, submission, PDF."""

from django.urls import path
from rate_manager.views import (
    RateCalendarView,
    RateOverrideView,
    ClearOverrideView,
    SubmitOverridesView,
    RateCalendarPDFView,
)

urlpatterns = [
    path('org/<slug:org_code>/<slug:prop_code>/api/rates/calendar/',
         RateCalendarView.as_view(), name='rate_calendar'),
    path('org/<slug:org_code>/<slug:prop_code>/api/rates/overrides/',
         RateOverrideView.as_view(), name='rate_override'),
    path('org/<slug:org_code>/<slug:prop_code>/api/rates/overrides/clear/',
         ClearOverrideView.as_view(), name='rate_override_clear'),
    path('org/<slug:org_code>/<slug:prop_code>/api/rates/submit/',
         SubmitOverridesView.as_view(), name='rate_submit'),

    path('org/<slug:org_code>/<slug:prop_code>/rates/calendar/pdf/',
         RateCalendarPDFView.as_view(), name='rate_calendar_pdf'),
]
