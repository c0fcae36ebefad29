"""
Rakshak - accident detection decision service.

Turns a single sensor reading (impact, speed, tilt, location) into a
severity verdict and, for genuine accidents, alerts an emergency contact.
"""

__version__ = "1.0.0"
