"""Model registry for the academics app.

Models live in the domain_* modules; importing them here lets Django
discover them and keeps `from .models import X` working everywhere.
"""
from .domain_catalog import *  # noqa: F401,F403
from .domain_fees import *  # noqa: F401,F403
from .domain_enrollment import *  # noqa: F401,F403
from .domain_timetable import *  # noqa: F401,F403
from .domain_notifications import *  # noqa: F401,F403
from .domain_logs import *  # noqa: F401,F403
