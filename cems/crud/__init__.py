# cems/crud/__init__.py

from .crud_event import event
from .crud_notification import notification
from .crud_registration import registration
from .crud_system_setting import system_setting
from .crud_user import user
from .crud_venue import venue
