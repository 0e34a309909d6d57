"""Privileged account administration service for the rental CRM."""
