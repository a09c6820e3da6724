"""
Service layer.

Each service encapsulates the business rules of one domain (accounts,
vendors, service listings, bookings, reviews) on top of the storage
repository.  Services receive the ``Storage`` instance explicitly and
raise ``ValueError``/``PermissionError``/``LookupError``; the API
handlers translate those into HTTP responses.
"""
