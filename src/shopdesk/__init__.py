"""shopdesk - multi-tenant shop management backend.

Shops track clients, orders, editing projects, worker and transporter
assignments and the salary ledger that those assignments produce.
"""

__version__ = "0.1.0"
