"""Notification delivery for harvest notices."""
