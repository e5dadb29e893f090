# cems/constants/settings_keys.py
"""Keys and defaults of the admin-editable system settings table."""

MAX_REGISTRATION_PER_STUDENT = "max_registration_per_student"
REGISTRATION_DEADLINE_HOURS = "registration_deadline_hours"
EMAIL_NOTIFICATIONS_ENABLED = "email_notifications_enabled"
ALLOW_EVENT_SELF_REGISTRATION = "allow_event_self_registration"

# key -> (default value, description)
DEFAULT_SETTINGS: dict[str, tuple[str, str]] = {
    MAX_REGISTRATION_PER_STUDENT: (
        "0",
        "Maximum number of event registrations a student may hold (0 = unlimited)",
    ),
    REGISTRATION_DEADLINE_HOURS: (
        "0",
        "Hours before the start of an event at which registration closes when no explicit deadline is set (0 = none)",
    ),
    EMAIL_NOTIFICATIONS_ENABLED: (
        "true",
        "Send registration passes by email",
    ),
    ALLOW_EVENT_SELF_REGISTRATION: (
        "true",
        "Allow students to register for events",
    ),
}
