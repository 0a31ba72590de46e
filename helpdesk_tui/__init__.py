"""Terminal client for GLPI-style helpdesk ticketing."""

__version__ = "0.1.0"
