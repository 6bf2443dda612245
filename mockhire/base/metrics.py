from prometheus_client import Counter, Histogram


# === API Metrics ===

api_exception_counter = Counter(
    "api_exception_count", "Total API exceptions by type",
    ["type"]
)


# === Domain Metrics ===

match_requests = Counter(
    "interviewer_match_requests_total", "Interviewer matching requests by outcome",
    ["outcome"]  # matched, no_eligible, no_suitable
)

match_score = Histogram(
    "interviewer_match_score", "Score of the selected interviewer",
    buckets=(20, 30, 40, 50, 60, 70, 80, 90, 100)
)

reservation_events = Counter(
    "temporary_reservation_events_total", "Temporary reservation lifecycle events",
    ["event"]  # created, conflict, promoted, promote_failed, released, expired
)

webhook_events = Counter(
    "payment_webhook_events_total", "Payment webhooks received by type",
    ["type"]
)

booking_outcomes = Counter(
    "auto_booking_outcomes_total", "Auto-booking results",
    ["outcome"]  # booked, already_booked, no_slot, failed
)

emails_sent = Counter(
    "notification_emails_total", "Transactional emails by template and result",
    ["template", "result"]
)
