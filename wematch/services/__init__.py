"""
Service layer package.

Each service module encapsulates one domain of business logic.
Services are the only layer that interacts with models; routes
never access the database directly.  Every service call that depends
on the caller receives an explicit ``AccessContext``.

Import services in route modules as needed::

    from wematch.services import opportunity_service
"""
