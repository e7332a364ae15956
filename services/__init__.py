"""
Workflow services and the per-application container that wires them.

Collaborators are built once by the application factory and kept in
``app.extensions["portal"]``; routes read them through ``get_services()``.
"""
from flask import current_app

EXTENSION_KEY = "portal"


class PortalServices:
    def __init__(self, hasher, breach_checker, captcha, notifier, templates, store, otp,
                 registration, password_reset, questions):
        self.hasher = hasher
        self.breach_checker = breach_checker
        self.captcha = captcha
        self.notifier = notifier
        self.templates = templates
        self.store = store
        self.otp = otp
        self.registration = registration
        self.password_reset = password_reset
        self.questions = questions


def get_services():
    return current_app.extensions[EXTENSION_KEY]
