"""
URL configuration package.

Combines the calculator and rate calendar URL patterns into a single
urlpatterns list under the 'rate_manager' namespace.
"""

from .calculator import urlpatterns as calculator_urls
from .rates import urlpatterns as rates_urls

app_name = 'rate_manager'

urlpatterns = (
    calculator_urls
    + rates_urls
)
