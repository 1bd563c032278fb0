"""
HotelPMS - property-management backend.
Booking / Room / Invoice settlement engine behind a permissioned REST API.
"""
__version__ = "1.0.0"
