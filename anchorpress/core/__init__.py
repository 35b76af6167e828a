"""anchorpress core — publication pipeline, verifier and local capability adapters.

The Publisher and Verifier depend only on the ContentStore, PinningService
and Ledger protocols in ``capabilities``. ``content_store``, ``pinning`` and
``anchor_ledger`` provide filesystem/SQLite implementations of those
protocols for local use and tests.
"""
