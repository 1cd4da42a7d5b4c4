"""
Service Desk Package

Backend for an automotive service shop:
- Appointment, spare-parts, feedback and contact form intake
- JSON file backed collections
- Unified customer records list for the admin view
- SMS notifications to customers and the shop admin
"""

__version__ = "1.0.0"
__author__ = "Service Desk Team"
