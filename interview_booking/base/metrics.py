from prometheus_client import Counter, Gauge


# === Global Metrics ===

api_exception_counter = Counter(
    "api_exception_count", "Total API exceptions by type",
    ["type"]
)

booking_submissions_total = Counter(
    "booking_submissions_total", "Candidate submissions by outcome",
    ["outcome"]
)

slots_booked_total = Counter(
    "slots_booked_total", "Time slots booked by successful submissions"
)

available_slots_gauge = Gauge(
    "available_slots", "Time slots still free, as of the last write"
)
