"""Intention reminders: scope resolution and reminder scheduling."""
