"""Locale package for i18n JSON resources.

Holds the JSON message catalogs (en.json) read through importlib.resources,
so they resolve both from a checkout and from an installed wheel.
"""
