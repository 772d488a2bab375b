import logging

from .models import Tracker

logger = logging.getLogger(__name__)


def current_tracker(environment, site_name):
    """
    Активный трекер для окружения, принадлежащий магазину с именем site_name.
    None — аналитика не настроена (не ошибка).
    """
    trackers = Tracker.objects.active_for(environment).select_related('tenant')
    for tracker in trackers:
        if tracker.tenant.name == site_name:
            return tracker
    logger.debug('No active tracker for site %r in %s', site_name, environment)
    return None
