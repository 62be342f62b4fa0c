# Django only discovers models from the app's top-level models module.
from .data.models import ItemSchedule  # noqa: F401
