"""Constants for Medication Scheduler."""

# Integration domain must match the folder name under custom_components
DOMAIN = "medication_scheduler"

# Storage constants
STORAGE_KEY = "medication_scheduler"
STORAGE_VERSION = 1

# Options
CONF_NOTIFY_SERVICES = "notify_services"

# Common attribute keys
ATTR_MEDICATION_ID = "medication_id"
ATTR_NAME = "name"
ATTR_DOSAGE = "dosage"
ATTR_FREQUENCY = "frequency"
ATTR_START_DATE = "start_date"
ATTR_START_TIME = "start_time"
ATTR_SCHEDULED_FOR = "scheduled_for"
ATTR_NEXT_FIRE = "next_fire"
ATTR_LAST_FIRED = "last_fired"
ATTR_PERIODIC = "periodic"

# One-time schedules use this frequency
FREQUENCY_ONCE = "00:00:00"

# States
STATE_ARMED = "Armed"
STATE_UNSCHEDULED = "Unscheduled"

# Services
SERVICE_ADD_MEDICATION = "add_medication"
SERVICE_UPDATE_MEDICATION = "update_medication"
SERVICE_REMOVE_MEDICATION = "remove_medication"

# Bus event fired for every delivered reminder
EVENT_MEDICATION_DUE = f"{DOMAIN}_due"

# Dispatcher signals
SIGNAL_MEDICATION_ADDED = f"{DOMAIN}_medication_added"
SIGNAL_MEDICATION_REMOVED = f"{DOMAIN}_medication_removed"
SIGNAL_SCHEDULE_UPDATED = f"{DOMAIN}_schedule_updated"
