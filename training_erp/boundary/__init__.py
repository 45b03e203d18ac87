"""
Boundary layer for external system integrations.

Handles all interactions with the relational store backing deals,
resources and deal sessions.
"""
