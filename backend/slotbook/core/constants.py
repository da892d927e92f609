"""
Centralized constants for reservations, reminders and the scheduler.

Change job IDs, slot length or channel lead times here instead of scattering literals.
"""

# Every reservation is one fixed-length call
SLOT_MINUTES = 15
SLOT_MINUTE_MARKS = (0, 15, 30, 45)
# Lead window width: must equal the dispatch tick period so each boundary is seen once
LEAD_WINDOW_MINUTES = 1

# Reservation status values (stored as strings)
STATUS_QUEUED = "queued"
STATUS_SUCCESSFUL = "successful"
STATUS_CANCELLED = "cancelled"
STATUS_REJECTED = "rejected"
ALL_STATUSES = (STATUS_QUEUED, STATUS_SUCCESSFUL, STATUS_CANCELLED, STATUS_REJECTED)

# Reminder channels
CHANNEL_EMAIL = "email"
CHANNEL_SMS = "sms"
CHANNEL_PUSH = "push"
CHANNELS = (CHANNEL_EMAIL, CHANNEL_SMS, CHANNEL_PUSH)

# Gateway pattern keys
PATTERN_EMAIL = "send.email"
PATTERN_SMS = "send.sms"
PATTERN_PUSH = "send.push"
PATTERN_ADMIN = "send.admin"
PATTERN_BATCH = "send.batch"

# channel -> (lead minutes, pattern key); fixed, not configurable per reservation
CHANNEL_LEAD_MINUTES = {
    CHANNEL_EMAIL: 10,
    CHANNEL_SMS: 5,
    CHANNEL_PUSH: 1,
}
CHANNEL_PATTERNS = {
    CHANNEL_EMAIL: PATTERN_EMAIL,
    CHANNEL_SMS: PATTERN_SMS,
    CHANNEL_PUSH: PATTERN_PUSH,
}

# Scheduler job IDs (must match ids used in main.py add_job)
REMINDER_JOB_ID = "reservation_reminders"

NO_REASON_PROVIDED = "No reason provided"
