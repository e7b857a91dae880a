"""
Private Booking - bookable listings shared between invited users.
"""

__version__ = "0.1.0"
