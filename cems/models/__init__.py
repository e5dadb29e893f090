# cems/models/__init__.py
# Import all models so Base.metadata knows every table before create_all.

from cems.db.base_class import Base
from cems.models.user import User
from cems.models.venue import Venue
from cems.models.event import Event
from cems.models.registration import EventRegistration
from cems.models.notification import Notification
from cems.models.system_setting import SystemSetting
