"""
Pydantic schema definitions for API payloads and stored entities.

Each domain (users, vendors, services, bookings, reviews) defines its
own models.  The storage repository accepts the ``*Create`` and
``*Update`` models and returns the read models, so endpoints and the
repository share one vocabulary.
"""
