# API Routers
from hotelpms.routers import auth, rooms, guests, bookings, invoices, employees, pos

__all__ = ['auth', 'rooms', 'guests', 'bookings', 'invoices', 'employees', 'pos']
