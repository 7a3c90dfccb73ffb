"""Presence API package.

An attendance (check-in/check-out) backend organized by feature modules
(users, attendance) with a thin Flask controller layer on top of
service/repository layers.
"""
