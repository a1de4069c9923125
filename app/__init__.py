"""Supplier notification service: store, live feeds, browser delivery and order emails."""
