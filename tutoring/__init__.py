"""Booking, payment and scheduling of tutoring sessions"""

__version__ = "1.0.0"
