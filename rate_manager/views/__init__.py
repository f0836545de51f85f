"""
Views package.

Re-exports all views so URL imports stay short:
    from rate_manager.views import RateCalendarView, etc.
"""

# Mixins
from .mixins import RateManagerMixin

# Calculator views
from .calculator import (
    CalculatorConfigView,
    CalculatorPreviewView,
)

# Rate calendar views
from .rates import (
    RateCalendarView,
    RateOverrideView,
    ClearOverrideView,
    SubmitOverridesView,
    RateCalendarPDFView,
)

__all__ = [
    'RateManagerMixin',
    'CalculatorConfigView', 'CalculatorPreviewView',
    'RateCalendarView', 'RateOverrideView', 'ClearOverrideView',
    'SubmitOverridesView', 'RateCalendarPDFView',
]
