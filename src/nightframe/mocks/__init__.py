"""Mock responses for end-to-end test runs.

When ``e2e_testing_mode`` is on, test harnesses register canned
responses through ``POST /mocks/api`` and matching requests are served
from the :class:`~nightframe.mocks.store.MockStore` instead of the real
controllers.
"""
